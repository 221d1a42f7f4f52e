"""Geometry module for shape primitives and mesh input.

Components:
    sphere: Sphere primitive and the shared HitRecord
    plane: Infinite single-sided plane
    triangle: Triangle primitive used for polygon meshes
    mesh: OBJ reading and fan triangulation

Every primitive provides an intersection routine returning a HitRecord
(hit flag and distance), a surface normal and texture coordinates, all as
Taichi functions.
"""

from .mesh import MeshData, MeshLoadError, load_obj, mesh_to_triangles, triangulate_faces
from .plane import Plane, intersect_plane, plane_surface_normal, plane_texture_coords
from .sphere import (
    HitRecord,
    Sphere,
    intersect_sphere,
    sphere_surface_normal,
    sphere_texture_coords,
)
from .triangle import Triangle, intersect_triangle, triangle_normal, triangle_texture_coords

__all__ = [
    "HitRecord",
    "Sphere",
    "intersect_sphere",
    "sphere_surface_normal",
    "sphere_texture_coords",
    "Plane",
    "intersect_plane",
    "plane_surface_normal",
    "plane_texture_coords",
    "Triangle",
    "intersect_triangle",
    "triangle_normal",
    "triangle_texture_coords",
    "MeshData",
    "MeshLoadError",
    "load_obj",
    "mesh_to_triangles",
    "triangulate_faces",
]
