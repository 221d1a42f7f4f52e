"""Ray data structure and the vector math used by the light transport.

This module provides the Ray dataclass together with the direction
constructions needed by the integrator: mirror reflection, unpolarised
Fresnel reflectance, the transmitted ray through a refractive boundary and
cosine-weighted hemisphere sampling around a surface normal.

All functions are Taichi functions and must be called from inside kernels.
Random numbers are passed in explicitly so callers control the generator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Smallest cosine used when weighting hemisphere samples
MIN_COSINE = 1e-6


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Expected to be unit
            length; callers are responsible for normalizing it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Specular Directions
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The mirrored direction incident - 2 * dot(incident, normal) * normal.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def fresnel(incident: vec3, normal: vec3, index: ti.f32) -> ti.f32:
    """Compute the unpolarised Fresnel reflectance at a dielectric boundary.

    The outside medium has index 1. When the incident direction points along
    the normal the ray is leaving the object and the indices are swapped.

    Args:
        incident: The incoming direction (normalized).
        normal: The outward surface normal (normalized).
        index: Refractive index of the object (greater than 1).

    Returns:
        The fraction of light reflected, in [0, 1]. Exactly 1.0 under total
        internal reflection.
    """
    cos_i = tm.clamp(tm.dot(incident, normal), -1.0, 1.0)
    eta_i = 1.0
    eta_t = index
    if cos_i > 0.0:
        eta_i = index
        eta_t = 1.0

    sin_t = eta_i / eta_t * ti.sqrt(ti.max(0.0, 1.0 - cos_i * cos_i))

    result = 1.0
    if sin_t <= 1.0:
        cos_t = ti.sqrt(ti.max(0.0, 1.0 - sin_t * sin_t))
        cos_i_abs = ti.abs(cos_i)
        r_s = (eta_t * cos_i_abs - eta_i * cos_t) / (eta_t * cos_i_abs + eta_i * cos_t)
        r_p = (eta_i * cos_i_abs - eta_t * cos_t) / (eta_i * cos_i_abs + eta_t * cos_t)
        result = (r_s * r_s + r_p * r_p) / 2.0
    return result


@ti.func
def create_transmission(
    normal: vec3,
    incident: vec3,
    hit_point: vec3,
    bias: ti.f32,
    index: ti.f32,
):
    """Build the ray transmitted through a refractive boundary (Snell's law).

    The origin is pushed below the surface by ``bias`` along the side the
    ray continues on, so the new ray does not hit the same surface again.

    Args:
        normal: The outward surface normal (normalized).
        incident: The incoming direction (normalized).
        hit_point: The exact intersection point.
        bias: Distance to offset the origin by.
        index: Refractive index of the object.

    Returns:
        A tuple (ok, origin, direction). ok is 0 under total internal
        reflection, in which case origin and direction are zero vectors.
    """
    ref_n = normal
    eta_i = 1.0
    eta_t = index
    i_dot_n = tm.dot(incident, normal)
    if i_dot_n < 0.0:
        # Entering the object
        i_dot_n = -i_dot_n
    else:
        ref_n = -normal
        eta_i = index
        eta_t = 1.0

    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - i_dot_n * i_dot_n)

    ok = 0
    origin = vec3(0.0, 0.0, 0.0)
    direction = vec3(0.0, 0.0, 0.0)
    if k >= 0.0:
        ok = 1
        origin = hit_point - ref_n * bias
        direction = tm.normalize((incident + i_dot_n * ref_n) * eta - ref_n * ti.sqrt(k))
    return ok, origin, direction


# =============================================================================
# Hemisphere Sampling
# =============================================================================


@ti.func
def create_coordinate_system(normal: vec3):
    """Build two tangent vectors completing an orthonormal frame.

    Args:
        normal: The surface normal (should be normalized).

    Returns:
        A tuple (tangent, bitangent) with bitangent = normal x tangent.
    """
    tangent = vec3(0.0, 0.0, 0.0)
    if ti.abs(normal.x) > ti.abs(normal.y):
        tangent = tm.normalize(vec3(normal.z, 0.0, -normal.x))
    else:
        tangent = tm.normalize(vec3(0.0, -normal.z, normal.y))
    bitangent = tm.cross(normal, tangent)
    return tangent, bitangent


@ti.func
def sample_hemisphere(normal: vec3, r1: ti.f32, r2: ti.f32):
    """Map two uniform numbers to a direction on the hemisphere around normal.

    The first number is used directly as the cosine of the elevation and the
    second as the fraction of a full turn in azimuth.

    Args:
        normal: The surface normal (should be normalized).
        r1: Uniform random number in [0, 1).
        r2: Uniform random number in [0, 1).

    Returns:
        A tuple (direction, weight) where weight = 1 / dot(direction, normal).
        The cosine is floored at MIN_COSINE so the weight stays finite.
    """
    y = r1
    azimuth = 2.0 * tm.pi * r2
    sin_elevation = ti.sqrt(ti.max(0.0, 1.0 - y * y))
    x = sin_elevation * ti.cos(azimuth)
    z = sin_elevation * ti.sin(azimuth)

    tangent, bitangent = create_coordinate_system(normal)
    direction = x * bitangent + y * normal + z * tangent
    weight = 1.0 / ti.max(tm.dot(direction, normal), MIN_COSINE)
    return direction, weight
