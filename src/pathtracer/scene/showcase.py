"""Showcase scene configuration.

This module provides a factory for the reference scene of the renderer: a
closed room lit by an emissive ceiling, holding a glass sphere, a small red
emissive sphere, a mirror sphere and optionally a mesh.

The room consists of:
- Floor: diffuse, checkerboard texture (procedural or loaded from a file)
- Ceiling: white emitter
- Left, right, back and front walls: white diffuse
- Glass sphere (index 1.5), red emissive sphere, mirror sphere
- Optional green diffuse mesh standing on the floor

Planes are single sided, so each wall's normal points away from the room
interior: the camera ray must travel along the plane normal to hit it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.showcase import create_showcase_scene
    >>> from pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, settings = create_showcase_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene, camera and settings
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from pathtracer.camera.pinhole import PinholeCamera
from pathtracer.core.settings import RenderSettings
from pathtracer.core.transform import Matrix4, scale_linear, translate
from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Showcase Parameters
# =============================================================================


@dataclass
class ShowcaseParams:
    """Parameters for configuring the showcase scene.

    Attributes:
        ceiling_intensity: Intensity of the white emissive ceiling.
        light_sphere_intensity: Intensity of the red emissive sphere.
        glass_index: Refractive index of the glass sphere.
        floor_texture: Image file for the floor. None uses a procedural
            checkerboard.
        mesh_path: OBJ file placed on the floor. None leaves it out.
        mesh_scale: Uniform scale applied to the mesh.

    Example:
        >>> params = ShowcaseParams()
        >>> params.ceiling_intensity
        200.0
        >>> custom = ShowcaseParams(mesh_path="teapot.obj", glass_index=1.33)
    """

    ceiling_intensity: float = 200.0
    light_sphere_intensity: float = 200.0
    glass_index: float = 1.5
    floor_texture: str | Path | None = None
    mesh_path: str | Path | None = None
    mesh_scale: float = 1.0


# =============================================================================
# Showcase Constants
# =============================================================================

WALL_ALBEDO = 0.18
WALL_COLOR = (1.0, 1.0, 1.0)
MESH_COLOR = (0.4, 1.0, 0.4)
LIGHT_SPHERE_EMISSION = (1.0, 0.0, 0.0)

FLOOR_HEIGHT = -3.0

# Local height the mesh is scaled about; at scale 1 local y = 0 rests on the floor
MESH_BASE_OFFSET = 1.575

IMAGE_WIDTH = 1280
IMAGE_HEIGHT = 720
CAMERA_FOV = 90.0

# The showcase divides each pixel sum by samples * this factor
NORMALIZATION_FACTOR = 128


def mesh_transform(scale: float = 1.0) -> Matrix4:
    """Object-to-world transform that stands the mesh on the floor at z = -5."""
    return (
        translate(0.0, FLOOR_HEIGHT + MESH_BASE_OFFSET, -5.0)
        @ scale_linear(scale)
        @ translate(1.0, -MESH_BASE_OFFSET, 0.0)
    )


# =============================================================================
# Showcase Factory
# =============================================================================


def create_showcase_scene(
    params: ShowcaseParams | None = None,
    samples_per_pixel: int = 16,
    seed: int = 0,
) -> tuple[SceneManager, PinholeCamera, RenderSettings]:
    """Create the showcase scene.

    Args:
        params: Optional ShowcaseParams. If None, uses ShowcaseParams().
        samples_per_pixel: Samples per pixel for the returned settings.
        seed: Seed for the returned settings.

    Returns:
        A tuple of (SceneManager, PinholeCamera, RenderSettings). The
        settings render 1280x720 and divide pixel sums by
        samples_per_pixel * NORMALIZATION_FACTOR.

    Raises:
        TextureLoadError: If params.floor_texture cannot be loaded.
        MeshLoadError: If params.mesh_path cannot be loaded.

    Example:
        >>> scene, camera, settings = create_showcase_scene()
        >>> scene.get_plane_count(), scene.get_sphere_count()
        (6, 3)
    """
    if params is None:
        params = ShowcaseParams()

    scene = SceneManager()

    # =========================================================================
    # Materials
    # =========================================================================

    if params.floor_texture is None:
        floor_texture = scene.add_checkerboard_texture()
    else:
        floor_texture = scene.load_texture(params.floor_texture)

    floor_mat = scene.add_diffuse_material(albedo=WALL_ALBEDO, texture_id=floor_texture)
    ceiling_mat = scene.add_emissive_material(
        emission=(1.0, 1.0, 1.0), intensity=params.ceiling_intensity
    )
    wall_mat = scene.add_diffuse_material(albedo=WALL_ALBEDO, color=WALL_COLOR)
    glass_mat = scene.add_refractive_material(index=params.glass_index)
    light_mat = scene.add_emissive_material(
        emission=LIGHT_SPHERE_EMISSION, intensity=params.light_sphere_intensity
    )
    mirror_mat = scene.add_reflective_material()

    # =========================================================================
    # Room (6 single-sided planes)
    # =========================================================================

    scene.add_plane((0.0, FLOOR_HEIGHT, -5.0), (0.0, -1.0, 0.0), floor_mat)
    scene.add_plane((0.0, 5.0, 5.0), (0.0, 1.0, 0.0), ceiling_mat)
    scene.add_plane((5.0, 0.0, 5.0), (1.0, 0.0, 0.0), wall_mat)  # Right
    scene.add_plane((-5.0, 0.0, 5.0), (-1.0, 0.0, 0.0), wall_mat)  # Left
    scene.add_plane((0.0, 0.0, -10.0), (0.0, 0.0, -1.0), wall_mat)  # Back
    scene.add_plane((0.0, 0.0, 10.0), (0.0, 0.0, 1.0), wall_mat)  # Front

    # =========================================================================
    # Spheres
    # =========================================================================

    scene.add_sphere((-3.0, 1.0, -6.0), 2.0, glass_mat)
    scene.add_sphere((-2.0, -2.0, -6.0), 1.0, light_mat)
    scene.add_sphere((3.0, 0.0, -10.0), 2.0, mirror_mat)

    # =========================================================================
    # Mesh
    # =========================================================================

    if params.mesh_path is not None:
        mesh_mat = scene.add_diffuse_material(albedo=WALL_ALBEDO, color=MESH_COLOR)
        scene.load_mesh(params.mesh_path, mesh_mat, mesh_transform(params.mesh_scale))

    logger.info(
        "Showcase scene: %d elements, %d materials",
        scene.get_element_count(),
        scene.get_material_count(),
    )

    camera = PinholeCamera(fov=CAMERA_FOV)
    settings = RenderSettings(
        width=IMAGE_WIDTH,
        height=IMAGE_HEIGHT,
        samples_per_pixel=samples_per_pixel,
        normalization=float(samples_per_pixel * NORMALIZATION_FACTOR),
        seed=seed,
    )
    return scene, camera, settings
