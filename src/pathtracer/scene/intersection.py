"""Scene-level primitive storage and nearest-hit queries.

Primitives live in per-kind Structure-of-Arrays fields. An element arena
gives every primitive a stable element ID that records its kind, its slot
in the per-kind storage and its material ID. Intersections refer to the
hit primitive by element ID, so normals, texture coordinates and materials
are looked up afterwards from the arena.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene, trace_scene
    >>> clear_scene()
    >>> element_id = add_sphere((0.0, 0.0, -5.0), 1.0, material_id=0)
    >>> # Use trace_scene within a Taichi kernel
"""

import logging
import math
from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.geometry.plane import (
    Plane,
    intersect_plane,
    plane_surface_normal,
    plane_texture_coords,
)
from pathtracer.geometry.sphere import (
    HitRecord,
    Sphere,
    intersect_sphere,
    sphere_surface_normal,
    sphere_texture_coords,
)
from pathtracer.geometry.triangle import (
    Triangle,
    intersect_triangle,
    triangle_normal,
    triangle_texture_coords,
)

logger = logging.getLogger(__name__)

vec2 = tm.vec2
vec3 = tm.vec3


class ElementType(IntEnum):
    """Kinds of scene elements."""

    SPHERE = 0
    PLANE = 1
    POLYGON = 2


@ti.dataclass
class Intersection:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if any element was hit, 0 otherwise.
        distance: Distance along the ray to the nearest hit.
        element_id: Element ID of the nearest hit, -1 on a miss.
    """

    hit: ti.i32
    distance: ti.f32
    element_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 1024
MAX_TRIANGLES = 65536
MAX_ELEMENTS = MAX_SPHERES + MAX_PLANES + MAX_TRIANGLES

# Upper bound on hit distances
NO_HIT_DISTANCE = 1e30

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Triangle storage
triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# Element arena, in insertion order
element_kinds = ti.field(dtype=ti.i32, shape=MAX_ELEMENTS)
element_slots = ti.field(dtype=ti.i32, shape=MAX_ELEMENTS)
element_material_ids = ti.field(dtype=ti.i32, shape=MAX_ELEMENTS)
num_elements = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all elements. Field data is overwritten by later additions."""
    num_spheres[None] = 0
    num_planes[None] = 0
    num_triangles[None] = 0
    num_elements[None] = 0


def _register_element(kind: ElementType, slot: int, material_id: int) -> int:
    idx = num_elements[None]
    element_kinds[idx] = int(kind)
    element_slots[idx] = slot
    element_material_ids[idx] = material_id
    num_elements[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere; must be positive.
        material_id: The material ID to associate with this sphere.

    Returns:
        The element ID of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    slot = num_spheres[None]
    if slot >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[slot] = vec3(center[0], center[1], center[2])
    sphere_radii[slot] = radius
    num_spheres[None] = slot + 1
    return _register_element(ElementType.SPHERE, slot, material_id)


def add_plane(
    origin: tuple[float, float, float],
    normal: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add a single-sided plane to the scene.

    Rays hit the plane only while travelling along ``normal``; the normal is
    normalized on insertion.

    Args:
        origin: Any point on the plane.
        normal: The facing direction of the plane.
        material_id: The material ID to associate with this plane.

    Returns:
        The element ID of the added plane.

    Raises:
        ValueError: If the normal has zero length.
        RuntimeError: If the maximum number of planes is exceeded.
    """
    length = math.sqrt(normal[0] ** 2 + normal[1] ** 2 + normal[2] ** 2)
    if length < 1e-12:
        raise ValueError(f"Plane normal must be non-zero, got {normal}")
    slot = num_planes[None]
    if slot >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_origins[slot] = vec3(origin[0], origin[1], origin[2])
    plane_normals[slot] = vec3(normal[0] / length, normal[1] / length, normal[2] / length)
    num_planes[None] = slot + 1
    return _register_element(ElementType.PLANE, slot, material_id)


def add_triangle(
    v0: tuple[float, float, float],
    v1: tuple[float, float, float],
    v2: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add a triangle to the scene.

    Args:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex; the winding v0 -> v1 -> v2 defines the normal.
        material_id: The material ID to associate with this triangle.

    Returns:
        The element ID of the added triangle.

    Raises:
        ValueError: If the triangle is degenerate.
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    normal = triangle_normal(v0, v1, v2)
    slot = num_triangles[None]
    if slot >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v0[slot] = vec3(v0[0], v0[1], v0[2])
    triangle_v1[slot] = vec3(v1[0], v1[1], v1[2])
    triangle_v2[slot] = vec3(v2[0], v2[1], v2[2])
    triangle_normals[slot] = vec3(normal[0], normal[1], normal[2])
    num_triangles[None] = slot + 1
    return _register_element(ElementType.POLYGON, slot, material_id)


def nondegenerate_mask(vertices: npt.NDArray[np.float64]) -> npt.NDArray[np.bool_]:
    """Return which triangles of an (N, 3, 3) array have non-zero area."""
    normals = np.cross(vertices[:, 1] - vertices[:, 0], vertices[:, 2] - vertices[:, 0])
    return np.linalg.norm(normals, axis=1) > 1e-12


@ti.kernel
def _upload_triangles(
    vertices: ti.types.ndarray(),
    normals: ti.types.ndarray(),
    slot_offset: ti.i32,
    element_offset: ti.i32,
    count: ti.i32,
    material_id: ti.i32,
):
    for k in range(count):
        slot = slot_offset + k
        for c in ti.static(range(3)):
            triangle_v0[slot][c] = vertices[k, 0, c]
            triangle_v1[slot][c] = vertices[k, 1, c]
            triangle_v2[slot][c] = vertices[k, 2, c]
            triangle_normals[slot][c] = normals[k, c]
        element = element_offset + k
        element_kinds[element] = int(ElementType.POLYGON)
        element_slots[element] = slot
        element_material_ids[element] = material_id


def add_triangles(vertices: npt.ArrayLike, material_id: int = 0) -> list[int]:
    """Add many triangles sharing one material in a single upload.

    Degenerate (zero-area) triangles are skipped.

    Args:
        vertices: An (N, 3, 3) array of triangle vertices.
        material_id: The material ID to associate with every triangle.

    Returns:
        The element IDs of the added triangles, in input order.

    Raises:
        ValueError: If the array does not have shape (N, 3, 3).
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    tris = np.asarray(vertices, dtype=np.float64)
    if tris.ndim != 3 or tris.shape[1:] != (3, 3):
        raise ValueError(f"Triangles must have shape (N, 3, 3), got {tris.shape}")

    keep = nondegenerate_mask(tris)
    if not keep.all():
        logger.debug("Skipping %d degenerate triangles", int((~keep).sum()))
    tris = tris[keep]
    normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    normals /= np.linalg.norm(normals, axis=1, keepdims=True)

    count = len(tris)
    slot_offset = num_triangles[None]
    element_offset = num_elements[None]
    if slot_offset + count > MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    if count == 0:
        return []

    _upload_triangles(
        np.ascontiguousarray(tris, dtype=np.float32),
        np.ascontiguousarray(normals, dtype=np.float32),
        slot_offset,
        element_offset,
        count,
        material_id,
    )
    num_triangles[None] = slot_offset + count
    num_elements[None] = element_offset + count
    return list(range(element_offset, element_offset + count))


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


def get_element_count() -> int:
    """Get the total number of elements in the scene."""
    return int(num_elements[None])


# =============================================================================
# Element Queries (Taichi functions)
# =============================================================================


@ti.func
def _intersect_element(ray_origin: vec3, ray_direction: vec3, element_id: ti.i32) -> HitRecord:
    kind = element_kinds[element_id]
    slot = element_slots[element_id]
    rec = HitRecord(hit=0, distance=0.0)
    if kind == int(ElementType.SPHERE):
        sphere = Sphere(center=sphere_centers[slot], radius=sphere_radii[slot])
        rec = intersect_sphere(ray_origin, ray_direction, sphere)
    elif kind == int(ElementType.PLANE):
        plane = Plane(origin=plane_origins[slot], normal=plane_normals[slot])
        rec = intersect_plane(ray_origin, ray_direction, plane)
    else:
        tri = Triangle(
            v0=triangle_v0[slot],
            v1=triangle_v1[slot],
            v2=triangle_v2[slot],
            normal=triangle_normals[slot],
        )
        rec = intersect_triangle(ray_origin, ray_direction, tri)
    return rec


@ti.func
def trace_scene(ray_origin: vec3, ray_direction: vec3) -> Intersection:
    """Find the nearest element hit by a ray.

    Tests every element in insertion order and keeps a hit only if it is
    strictly closer, so the first inserted element wins exact ties.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        An Intersection; hit == 0 and element_id == -1 on a miss.
    """
    result = Intersection(hit=0, distance=0.0, element_id=-1)
    closest = NO_HIT_DISTANCE
    for e in range(num_elements[None]):
        rec = _intersect_element(ray_origin, ray_direction, e)
        if rec.hit == 1 and rec.distance < closest:
            closest = rec.distance
            result = Intersection(hit=1, distance=rec.distance, element_id=e)
    return result


@ti.func
def element_surface_normal(element_id: ti.i32, hit_point: vec3) -> vec3:
    """Surface normal of an element at a point on it."""
    kind = element_kinds[element_id]
    slot = element_slots[element_id]
    normal = vec3(0.0, 0.0, 0.0)
    if kind == int(ElementType.SPHERE):
        sphere = Sphere(center=sphere_centers[slot], radius=sphere_radii[slot])
        normal = sphere_surface_normal(sphere, hit_point)
    elif kind == int(ElementType.PLANE):
        plane = Plane(origin=plane_origins[slot], normal=plane_normals[slot])
        normal = plane_surface_normal(plane)
    else:
        normal = triangle_normals[slot]
    return normal


@ti.func
def element_texture_coords(element_id: ti.i32, hit_point: vec3) -> vec2:
    """Texture coordinates of an element at a point on it."""
    kind = element_kinds[element_id]
    slot = element_slots[element_id]
    uv = vec2(0.0, 0.0)
    if kind == int(ElementType.SPHERE):
        sphere = Sphere(center=sphere_centers[slot], radius=sphere_radii[slot])
        uv = sphere_texture_coords(sphere, hit_point)
    elif kind == int(ElementType.PLANE):
        plane = Plane(origin=plane_origins[slot], normal=plane_normals[slot])
        uv = plane_texture_coords(plane, hit_point)
    else:
        uv = triangle_texture_coords()
    return uv


@ti.func
def get_element_material(element_id: ti.i32) -> ti.i32:
    """Material ID of an element."""
    return element_material_ids[element_id]
