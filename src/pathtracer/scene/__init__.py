"""Scene module for element storage, materials and scene building.

Components:
    intersection: Element arena and nearest-hit query
    manager: SceneManager with unified material IDs and dict configuration
    showcase: The reference room scene
    scene_file: JSON files holding a scene, camera and settings

Scene data is organized for parallel access:
    - Structure-of-Arrays layout per element kind
    - One arena of element IDs in insertion order
    - Unified material IDs mapped to per-type registries

Importing this package declares Taichi fields, so call ti.init() first.
"""

from .intersection import (
    MAX_ELEMENTS,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    ElementType,
    Intersection,
    clear_scene,
    element_surface_normal,
    element_texture_coords,
    get_element_material,
    trace_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    PlaneInfo,
    PolygonInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    TextureInfo,
)
from .scene_file import load_scene_file, save_scene_file
from .showcase import ShowcaseParams, create_showcase_scene, mesh_transform

__all__ = [
    # Intersection
    "MAX_SPHERES",
    "MAX_PLANES",
    "MAX_TRIANGLES",
    "MAX_ELEMENTS",
    "ElementType",
    "Intersection",
    "clear_scene",
    "trace_scene",
    "element_surface_normal",
    "element_texture_coords",
    "get_element_material",
    # Manager
    "MAX_MATERIALS",
    "MaterialType",
    "MaterialInfo",
    "TextureInfo",
    "SphereInfo",
    "PlaneInfo",
    "PolygonInfo",
    "SceneConfig",
    "SceneManager",
    # Showcase
    "ShowcaseParams",
    "create_showcase_scene",
    "mesh_transform",
    # Scene files
    "load_scene_file",
    "save_scene_file",
]
