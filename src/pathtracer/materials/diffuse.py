"""Diffuse material: hemisphere scattering with a color or texture.

A diffuse surface sends the path along a cosine-weighted hemisphere sample
around the normal and multiplies the path mask by

    color(u, v) * cos(theta) * albedo * pi * weight

where weight = 1 / cos(theta) comes from the hemisphere sampler.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.diffuse import add_diffuse_material
    >>> grey = add_diffuse_material(albedo=0.18, color=(1.0, 1.0, 1.0))
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import sample_hemisphere
from pathtracer.materials.texture import get_texture_count, sample_texture

vec2 = tm.vec2
vec3 = tm.vec3

# Texture ID meaning "use the constant color"
NO_TEXTURE = -1


@ti.func
def scatter_diffuse(color: vec3, albedo: ti.f32, normal: vec3, r1: ti.f32, r2: ti.f32):
    """Sample a diffuse bounce.

    Args:
        color: Surface color at the hit point (linear RGB).
        albedo: Reflected fraction.
        normal: Surface normal at the hit point.
        r1: Uniform random number in [0, 1).
        r2: Uniform random number in [0, 1).

    Returns:
        A tuple (direction, attenuation) to multiply into the path mask.
    """
    direction, weight = sample_hemisphere(normal, r1, r2)
    cosine = tm.dot(direction, normal)
    attenuation = color * (cosine * albedo * tm.pi * weight)
    return direction, attenuation


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_DIFFUSE_MATERIALS = 256

diffuse_albedos = ti.field(dtype=ti.f32, shape=MAX_DIFFUSE_MATERIALS)
diffuse_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIFFUSE_MATERIALS)
diffuse_texture_ids = ti.field(dtype=ti.i32, shape=MAX_DIFFUSE_MATERIALS)
num_diffuse_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_materials() -> None:
    """Clear all diffuse materials."""
    num_diffuse_materials[None] = 0


def add_diffuse_material(
    albedo: float,
    color: tuple[float, float, float] = (1.0, 1.0, 1.0),
    texture_id: int = NO_TEXTURE,
) -> int:
    """Add a diffuse material to the registry.

    Args:
        albedo: Reflected fraction; must be non-negative.
        color: Constant linear color, used when texture_id is NO_TEXTURE.
        texture_id: Registered texture to sample instead of the color.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If albedo or a color component is negative, or the
            texture is not registered.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    if albedo < 0.0:
        raise ValueError(f"Albedo must be non-negative, got {albedo}")
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"Color component {i} = {component} is negative")
    if texture_id != NO_TEXTURE and not 0 <= texture_id < get_texture_count():
        raise ValueError(f"Invalid texture_id: {texture_id}")

    idx = num_diffuse_materials[None]
    if idx >= MAX_DIFFUSE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of diffuse materials ({MAX_DIFFUSE_MATERIALS}) exceeded"
        )

    diffuse_albedos[idx] = albedo
    diffuse_colors[idx] = vec3(color[0], color[1], color[2])
    diffuse_texture_ids[idx] = texture_id
    num_diffuse_materials[None] = idx + 1
    return idx


def get_diffuse_material_count() -> int:
    """Get the number of diffuse materials in the registry."""
    return int(num_diffuse_materials[None])


@ti.func
def get_diffuse_albedo(material_idx: ti.i32) -> ti.f32:
    """Get the albedo of a diffuse material by index."""
    return diffuse_albedos[material_idx]


@ti.func
def get_diffuse_color(material_idx: ti.i32, uv: vec2) -> vec3:
    """Evaluate a diffuse material's color at texture coordinates uv."""
    color = diffuse_colors[material_idx]
    texture_id = diffuse_texture_ids[material_idx]
    if texture_id != NO_TEXTURE:
        color = sample_texture(texture_id, uv)
    return color
