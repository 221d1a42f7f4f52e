"""Triangle primitive used for polygon meshes.

Triangles are single polygons with a precomputed face normal. The hit test
intersects the supporting plane and then checks that the point lies on the
inner side of all three edges.
"""

import math

import taichi as ti
import taichi.math as tm

from pathtracer.geometry.sphere import HitRecord

vec3 = tm.vec3
vec2 = tm.vec2

# Rays closer to parallel than this are rejected
TRIANGLE_PARALLEL_EPSILON = 1e-5


@ti.dataclass
class Triangle:
    """A triangle with counter-clockwise vertices and its unit face normal.

    Attributes:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        normal: normalize((v1 - v0) x (v2 - v0)).
    """

    v0: vec3
    v1: vec3
    v2: vec3
    normal: vec3


@ti.func
def intersect_triangle(ray_origin: vec3, ray_direction: vec3, tri: Triangle) -> HitRecord:
    """Test for ray-triangle intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        tri: The triangle to test against.

    Returns:
        A HitRecord; a miss when the ray is nearly parallel to the triangle,
        the supporting plane lies behind the origin, or the plane hit falls
        outside any edge.
    """
    n_dot_d = tm.dot(tri.normal, ray_direction)

    did_hit = 0
    distance = 0.0
    if ti.abs(n_dot_d) >= TRIANGLE_PARALLEL_EPSILON:
        t = (tm.dot(tri.normal, tri.v0) - tm.dot(tri.normal, ray_origin)) / n_dot_d
        if t >= 0.0:
            p = ray_origin + t * ray_direction
            inside = 1
            if tm.dot(tri.normal, tm.cross(tri.v1 - tri.v0, p - tri.v0)) < 0.0:
                inside = 0
            if tm.dot(tri.normal, tm.cross(tri.v2 - tri.v1, p - tri.v1)) < 0.0:
                inside = 0
            if tm.dot(tri.normal, tm.cross(tri.v0 - tri.v2, p - tri.v2)) < 0.0:
                inside = 0
            if inside == 1:
                did_hit = 1
                distance = t

    return HitRecord(hit=did_hit, distance=distance)


@ti.func
def triangle_texture_coords() -> vec2:
    """Triangles carry no parameterization; every point maps to (0, 0)."""
    return vec2(0.0, 0.0)


def triangle_normal(
    v0: tuple[float, float, float],
    v1: tuple[float, float, float],
    v2: tuple[float, float, float],
) -> tuple[float, float, float]:
    """Compute the unit face normal of a triangle on the Python side.

    Raises:
        ValueError: If the triangle is degenerate (zero area).
    """
    e1 = (v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2])
    e2 = (v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2])
    nx = e1[1] * e2[2] - e1[2] * e2[1]
    ny = e1[2] * e2[0] - e1[0] * e2[2]
    nz = e1[0] * e2[1] - e1[1] * e2[0]
    length = math.sqrt(nx * nx + ny * ny + nz * nz)
    if length < 1e-12:
        raise ValueError(f"Degenerate triangle: {v0}, {v1}, {v2}")
    return (nx / length, ny / length, nz / length)
