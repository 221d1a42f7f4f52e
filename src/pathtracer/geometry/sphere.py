"""Sphere primitive: intersection, surface normal and texture coordinates.

The intersection uses the geometric construction: project the vector to the
center onto the ray, compare the squared perpendicular distance with the
squared radius, then step back along the ray by the half chord.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -5), radius=1.0)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
vec2 = tm.vec2


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of intersecting a ray with a single primitive.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 otherwise.
        distance: Distance along the ray to the intersection.
            Only valid if hit == 1.
    """

    hit: ti.i32
    distance: ti.f32


@ti.func
def intersect_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Returns the nearest non-negative root. A ray starting inside the sphere
    hits the far side.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test against.

    Returns:
        A HitRecord. A miss is reported when the ray passes farther from the
        center than the radius or when both roots lie behind the origin.
    """
    to_center = sphere.center - ray_origin
    adjacent = tm.dot(to_center, ray_direction)
    d2 = tm.dot(to_center, to_center) - adjacent * adjacent
    radius2 = sphere.radius * sphere.radius

    did_hit = 0
    distance = 0.0
    if d2 <= radius2:
        half_chord = ti.sqrt(radius2 - d2)
        t0 = adjacent - half_chord
        t1 = adjacent + half_chord
        if t0 >= 0.0:
            did_hit = 1
            distance = t0
        elif t1 >= 0.0:
            did_hit = 1
            distance = t1

    return HitRecord(hit=did_hit, distance=distance)


@ti.func
def sphere_surface_normal(sphere: Sphere, hit_point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere."""
    return tm.normalize(hit_point - sphere.center)


@ti.func
def sphere_texture_coords(sphere: Sphere, hit_point: vec3) -> vec2:
    """Spherical (longitude, latitude) texture coordinates in [0, 1].

    Args:
        sphere: The sphere that was hit.
        hit_point: A point on the sphere surface.

    Returns:
        vec2(u, v) with u from the azimuth around y and v from the polar angle.
    """
    local = hit_point - sphere.center
    u = (1.0 + ti.atan2(local.z, local.x) / tm.pi) * 0.5
    v = ti.acos(tm.clamp(local.y / sphere.radius, -1.0, 1.0)) / tm.pi
    return vec2(u, v)

