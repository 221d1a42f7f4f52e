"""Infinite single-sided plane primitive.

A plane is stored as a point on it and a unit normal. Only rays travelling
along the stored normal hit it, so a floor whose normal points down is
visible from above. The shading normal is the stored normal flipped back
toward the incoming ray.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.geometry.sphere import HitRecord

vec3 = tm.vec3
vec2 = tm.vec2

# Rays closer to parallel than this are rejected
PLANE_PARALLEL_EPSILON = 1e-6

# Below this length the first texture axis candidate is degenerate
_AXIS_EPSILON = 1e-6


@ti.dataclass
class Plane:
    """A plane through ``origin`` facing along ``normal``.

    Attributes:
        origin: Any point on the plane (vec3).
        normal: Unit normal; the side rays must travel toward to hit.
    """

    origin: vec3
    normal: vec3


@ti.func
def intersect_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane: The plane to test against.

    Returns:
        A HitRecord; a miss when the ray is parallel to the plane, travels
        against its normal, or the plane lies behind the origin.
    """
    denom = tm.dot(plane.normal, ray_direction)

    did_hit = 0
    distance = 0.0
    if denom > PLANE_PARALLEL_EPSILON:
        t = tm.dot(plane.origin - ray_origin, plane.normal) / denom
        if t >= 0.0:
            did_hit = 1
            distance = t

    return HitRecord(hit=did_hit, distance=distance)


@ti.func
def plane_surface_normal(plane: Plane) -> vec3:
    """Shading normal of the plane, facing the side rays come from."""
    return -plane.normal


@ti.func
def plane_texture_coords(plane: Plane, hit_point: vec3) -> vec2:
    """Project the hit point onto two in-plane axes.

    The first axis is normal x (0, 0, 1), or normal x (0, 1, 0) when the
    normal is parallel to z. Coordinates are in world units and unbounded;
    texture lookups wrap them.
    """
    x_axis = tm.cross(plane.normal, vec3(0.0, 0.0, 1.0))
    if tm.length(x_axis) < _AXIS_EPSILON:
        x_axis = tm.cross(plane.normal, vec3(0.0, 1.0, 0.0))
    x_axis = tm.normalize(x_axis)
    y_axis = tm.cross(plane.normal, x_axis)
    offset = hit_point - plane.origin
    return vec2(tm.dot(offset, x_axis), tm.dot(offset, y_axis))
