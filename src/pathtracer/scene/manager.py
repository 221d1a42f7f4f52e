"""Unified scene manager for coordinating elements, materials and textures.

This module provides a high-level scene building API on top of the
per-kind element storage and the per-type material registries. It assigns
unified material IDs and records, in Taichi fields, which material type and
type-local index each ID maps to, so the integrator can dispatch on it.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- Python-side records of every element for serialization
- Dictionary configuration support (``to_dict`` / ``from_dict``)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> grey = scene.add_diffuse_material(albedo=0.18)
    >>> light = scene.add_emissive_material(emission=(1.0, 1.0, 1.0), intensity=200.0)
    >>> scene.add_sphere(center=(0.0, 0.0, -5.0), radius=1.0, material_id=grey)
    0
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

import numpy.typing as npt
import taichi as ti

from pathtracer.core.transform import Matrix4
from pathtracer.geometry.mesh import MeshData, load_obj, mesh_to_triangles
from pathtracer.materials.diffuse import (
    NO_TEXTURE,
    add_diffuse_material,
    clear_diffuse_materials,
)
from pathtracer.materials.emissive import add_emissive_material, clear_emissive_materials
from pathtracer.materials.reflective import add_reflective_material, clear_reflective_materials
from pathtracer.materials.refractive import add_refractive_material, clear_refractive_materials
from pathtracer.materials.texture import (
    add_texture,
    clear_textures,
    load_texture,
    make_checkerboard,
)
from pathtracer.scene.intersection import (
    MAX_ELEMENTS,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    add_plane,
    add_sphere,
    add_triangle,
    add_triangles,
    clear_scene,
    get_element_count,
    nondegenerate_mask,
)

logger = logging.getLogger(__name__)

Vec3Tuple = tuple[float, float, float]


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator.
    """

    DIFFUSE = 0
    REFLECTIVE = 1
    REFRACTIVE = 2
    EMISSIVE = 3


# Maximum number of materials across all types
MAX_MATERIALS = 1024

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the index into the type-specific registry for a material ID.

    Returns:
        The type-local index, or -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific registry.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class TextureInfo:
    """Information about a registered texture.

    Attributes:
        texture_id: The texture ID.
        source: How the texture was created (``{"path": ...}`` or
            ``{"checkerboard": {...}}``); None for raw in-memory images.
    """

    texture_id: int
    source: dict[str, Any] | None


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    element_id: int
    center: Vec3Tuple
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a plane in the scene."""

    element_id: int
    origin: Vec3Tuple
    normal: Vec3Tuple
    material_id: int


@dataclass
class PolygonInfo:
    """Information about a triangle in the scene."""

    element_id: int
    vertices: tuple[Vec3Tuple, Vec3Tuple, Vec3Tuple]
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        textures: List of texture configurations.
        materials: List of material configurations.
        elements: Element configurations in element ID order. Each entry has
            a "kind" ("sphere", "plane" or "polygon") and that kind's
            parameters.
    """

    textures: list[dict[str, Any]] = field(default_factory=list)
    materials: list[dict[str, Any]] = field(default_factory=list)
    elements: list[dict[str, Any]] = field(default_factory=list)


def _vec3(values: Any) -> Vec3Tuple:
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Unified scene manager coordinating elements, materials and textures.

    Element IDs are assigned in insertion order across all element kinds,
    and that order decides ties between equally distant hits.

    Attributes:
        materials: MaterialInfo for all registered materials.
        textures: TextureInfo for all registered textures.
        spheres: SphereInfo for all spheres in the scene.
        planes: PlaneInfo for all planes in the scene.
        polygons: PolygonInfo for all triangles in the scene.

    Example:
        >>> scene = SceneManager()
        >>> checker = scene.add_checkerboard_texture(size=256, squares=8)
        >>> floor = scene.add_diffuse_material(albedo=0.18, texture_id=checker)
        >>> glass = scene.add_refractive_material(index=1.5)
        >>> scene.add_plane((0.0, -3.0, -5.0), (0.0, -1.0, 0.0), floor)
        0
        >>> scene.add_sphere((-3.0, 1.0, -6.0), 2.0, glass)
        1
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.textures: list[TextureInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.polygons: list[PolygonInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_diffuse_materials()
        clear_reflective_materials()
        clear_refractive_materials()
        clear_emissive_materials()
        clear_textures()
        _clear_material_tracking()
        self.materials.clear()
        self.textures.clear()
        self.spheres.clear()
        self.planes.clear()
        self.polygons.clear()

    def clear(self) -> None:
        """Clear the entire scene (elements, materials and textures)."""
        self._clear_all()

    # =========================================================================
    # Textures
    # =========================================================================

    def add_texture(self, pixels: npt.ArrayLike) -> int:
        """Register an in-memory (H, W, 3|4) uint8 image as a texture.

        Textures added this way cannot be exported by to_dict().
        """
        texture_id = add_texture(pixels)
        self.textures.append(TextureInfo(texture_id=texture_id, source=None))
        return texture_id

    def load_texture(self, path: str | Path) -> int:
        """Load an image file as a texture.

        Raises:
            TextureLoadError: If the file cannot be opened or decoded.
        """
        texture_id = load_texture(path)
        self.textures.append(TextureInfo(texture_id=texture_id, source={"path": str(path)}))
        return texture_id

    def add_checkerboard_texture(
        self,
        size: int = 256,
        squares: int = 8,
        color_a: tuple[int, int, int] = (255, 255, 255),
        color_b: tuple[int, int, int] = (40, 40, 40),
    ) -> int:
        """Register a procedural checkerboard texture (see make_checkerboard)."""
        texture_id = add_texture(make_checkerboard(size, squares, color_a, color_b))
        params = {
            "size": size,
            "squares": squares,
            "color_a": list(color_a),
            "color_b": list(color_b),
        }
        self.textures.append(TextureInfo(texture_id=texture_id, source={"checkerboard": params}))
        return texture_id

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Material %d: %s %s", material_id, material_type.name.lower(), params)
        return material_id

    def add_diffuse_material(
        self,
        albedo: float,
        color: Vec3Tuple = (1.0, 1.0, 1.0),
        texture_id: int = NO_TEXTURE,
    ) -> int:
        """Add a diffuse material to the scene.

        Args:
            albedo: Reflected fraction; must be non-negative.
            color: Constant linear color, used without a texture.
            texture_id: Texture to sample instead of the constant color.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If a parameter is invalid.
        """
        type_index = add_diffuse_material(albedo, color, texture_id)
        params: dict[str, Any] = {"albedo": albedo, "color": list(color)}
        if texture_id != NO_TEXTURE:
            params["texture_id"] = texture_id
        return self._register_material(MaterialType.DIFFUSE, type_index, params)

    def add_reflective_material(self) -> int:
        """Add a perfect mirror material to the scene.

        Returns:
            The unified material ID for this material.
        """
        type_index = add_reflective_material()
        return self._register_material(MaterialType.REFLECTIVE, type_index, {})

    def add_refractive_material(self, index: float = 1.5) -> int:
        """Add a refractive (glass-like) material to the scene.

        Args:
            index: Refractive index, greater than 1. Default is 1.5 (glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the index is not greater than 1.
        """
        type_index = add_refractive_material(index)
        return self._register_material(MaterialType.REFRACTIVE, type_index, {"index": index})

    def add_emissive_material(self, emission: Vec3Tuple, intensity: float = 1.0) -> int:
        """Add an emissive (light source) material to the scene.

        Args:
            emission: Emitted color as (R, G, B).
            intensity: Brightness multiplier.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If emission or intensity is negative.
        """
        type_index = add_emissive_material(emission, intensity)
        params = {"emission": list(emission), "intensity": intensity}
        return self._register_material(MaterialType.EMISSIVE, type_index, params)

    def get_material_count(self) -> int:
        """Get the total number of materials."""
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material, or None if it does not exist."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the type of a material from Python, or None if it does not exist."""
        info = self.get_material_info(material_id)
        return info.material_type if info is not None else None

    def _check_material_id(self, material_id: int) -> None:
        if not 0 <= material_id < len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Element Management
    # =========================================================================

    def add_sphere(self, center: Vec3Tuple, radius: float, material_id: int) -> int:
        """Add a sphere with the given material.

        Returns:
            The element ID of the sphere.

        Raises:
            ValueError: If material_id is invalid or the radius is not positive.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        self._check_material_id(material_id)
        element_id = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                element_id=element_id,
                center=_vec3(center),
                radius=float(radius),
                material_id=material_id,
            )
        )
        return element_id

    def add_plane(self, origin: Vec3Tuple, normal: Vec3Tuple, material_id: int) -> int:
        """Add a single-sided plane with the given material.

        Rays hit the plane only while travelling along ``normal``.

        Returns:
            The element ID of the plane.

        Raises:
            ValueError: If material_id is invalid or the normal is zero.
            RuntimeError: If the maximum number of planes is exceeded.
        """
        self._check_material_id(material_id)
        element_id = add_plane(origin, normal, material_id)
        self.planes.append(
            PlaneInfo(
                element_id=element_id,
                origin=_vec3(origin),
                normal=_vec3(normal),
                material_id=material_id,
            )
        )
        return element_id

    def add_polygon(
        self,
        v0: Vec3Tuple,
        v1: Vec3Tuple,
        v2: Vec3Tuple,
        material_id: int,
    ) -> int:
        """Add a triangle with the given material.

        Returns:
            The element ID of the triangle.

        Raises:
            ValueError: If material_id is invalid or the triangle is degenerate.
            RuntimeError: If the maximum number of triangles is exceeded.
        """
        self._check_material_id(material_id)
        element_id = add_triangle(v0, v1, v2, material_id)
        self.polygons.append(
            PolygonInfo(
                element_id=element_id,
                vertices=(_vec3(v0), _vec3(v1), _vec3(v2)),
                material_id=material_id,
            )
        )
        return element_id

    def add_mesh(
        self,
        mesh: MeshData,
        material_id: int,
        transform: Matrix4 | None = None,
    ) -> list[int]:
        """Triangulate a mesh and add every triangle with one material.

        Args:
            mesh: Vertex positions and polygonal faces.
            material_id: Material for all triangles.
            transform: Optional 4x4 object-to-world transform.

        Returns:
            The element IDs of the added triangles. Degenerate triangles are
            skipped.

        Raises:
            ValueError: If material_id is invalid or a face index is out of range.
            RuntimeError: If the maximum number of triangles is exceeded.
        """
        self._check_material_id(material_id)
        triangles = mesh_to_triangles(mesh, transform)
        added = add_triangles(triangles, material_id)
        if added:
            kept = triangles[nondegenerate_mask(triangles)]
            for element_id, tri in zip(added, kept):
                self.polygons.append(
                    PolygonInfo(
                        element_id=element_id,
                        vertices=(_vec3(tri[0]), _vec3(tri[1]), _vec3(tri[2])),
                        material_id=material_id,
                    )
                )
        logger.debug("Mesh added: %d of %d triangles", len(added), len(triangles))
        return added

    def load_mesh(
        self,
        path: str | Path,
        material_id: int,
        transform: Matrix4 | None = None,
    ) -> list[int]:
        """Load an OBJ file and add it as a mesh.

        Raises:
            MeshLoadError: If the file cannot be read or parsed.
        """
        return self.add_mesh(load_obj(path), material_id, transform)

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.spheres)

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return len(self.planes)

    def get_polygon_count(self) -> int:
        """Get the number of triangles in the scene."""
        return len(self.polygons)

    def get_element_count(self) -> int:
        """Get the total number of elements in the scene."""
        return get_element_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Elements are exported in element ID order, so rebuilding the scene
        from the result assigns the same IDs and keeps the same tie winners.

        Raises:
            ValueError: If the scene uses a texture added from raw pixels.
        """
        config = SceneConfig()

        for tex in self.textures:
            if tex.source is None:
                raise ValueError(
                    f"Texture {tex.texture_id} was added from memory and cannot be exported"
                )
            config.textures.append(dict(tex.source))

        for mat in self.materials:
            config.materials.append({"type": mat.material_type.name.lower(), **mat.params})

        elements: list[tuple[int, dict[str, Any]]] = []
        for sphere in self.spheres:
            elements.append(
                (
                    sphere.element_id,
                    {
                        "kind": "sphere",
                        "center": list(sphere.center),
                        "radius": sphere.radius,
                        "material_id": sphere.material_id,
                    },
                )
            )
        for plane in self.planes:
            elements.append(
                (
                    plane.element_id,
                    {
                        "kind": "plane",
                        "origin": list(plane.origin),
                        "normal": list(plane.normal),
                        "material_id": plane.material_id,
                    },
                )
            )
        for poly in self.polygons:
            elements.append(
                (
                    poly.element_id,
                    {
                        "kind": "polygon",
                        "vertices": [list(v) for v in poly.vertices],
                        "material_id": poly.material_id,
                    },
                )
            )

        elements.sort(key=lambda entry: entry[0])
        config.elements = [element for _, element in elements]
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Textures come
        first, then materials, then elements in list order.

        Raises:
            ValueError: If the configuration contains invalid data.
            TextureLoadError: If a texture file cannot be loaded.
        """
        self.clear()

        for tex_config in config.textures:
            if "path" in tex_config:
                self.load_texture(tex_config["path"])
            elif "checkerboard" in tex_config:
                params = tex_config["checkerboard"]
                self.add_checkerboard_texture(
                    size=params.get("size", 256),
                    squares=params.get("squares", 8),
                    color_a=tuple(params.get("color_a", (255, 255, 255))),
                    color_b=tuple(params.get("color_b", (40, 40, 40))),
                )
            else:
                raise ValueError(f"Unknown texture source: {tex_config}")

        for mat_config in config.materials:
            mat_type = mat_config.get("type", "").lower()
            if mat_type == "diffuse":
                self.add_diffuse_material(
                    albedo=mat_config.get("albedo", 0.18),
                    color=_vec3(mat_config.get("color", (1.0, 1.0, 1.0))),
                    texture_id=mat_config.get("texture_id", NO_TEXTURE),
                )
            elif mat_type == "reflective":
                self.add_reflective_material()
            elif mat_type == "refractive":
                self.add_refractive_material(mat_config.get("index", 1.5))
            elif mat_type == "emissive":
                self.add_emissive_material(
                    emission=_vec3(mat_config.get("emission", (1.0, 1.0, 1.0))),
                    intensity=mat_config.get("intensity", 1.0),
                )
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for element in config.elements:
            kind = element.get("kind", "").lower()
            material_id = element.get("material_id", 0)
            if kind == "sphere":
                self.add_sphere(
                    _vec3(element.get("center", (0.0, 0.0, 0.0))),
                    element.get("radius", 1.0),
                    material_id,
                )
            elif kind == "plane":
                self.add_plane(
                    _vec3(element.get("origin", (0.0, 0.0, 0.0))),
                    _vec3(element.get("normal", (0.0, -1.0, 0.0))),
                    material_id,
                )
            elif kind == "polygon":
                vertices = element["vertices"]
                self.add_polygon(
                    _vec3(vertices[0]), _vec3(vertices[1]), _vec3(vertices[2]), material_id
                )
            else:
                raise ValueError(f"Unknown element kind: {kind}")

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "textures": config.textures,
            "materials": config.materials,
            "elements": config.elements,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with optional 'textures', 'materials' and
                'elements' keys.
        """
        config = SceneConfig(
            textures=data.get("textures", []),
            materials=data.get("materials", []),
            elements=data.get("elements", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    @staticmethod
    def get_max_polygons() -> int:
        """Get the maximum number of triangles supported."""
        return MAX_TRIANGLES

    @staticmethod
    def get_max_elements() -> int:
        """Get the maximum number of elements supported."""
        return MAX_ELEMENTS

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

