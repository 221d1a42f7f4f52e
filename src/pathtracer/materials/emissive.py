"""Emissive (light source) material.

Hitting an emissive surface adds emission * intensity * mask to the sample's
radiance. The path then keeps bouncing off the emitter in a new hemisphere
direction with its mask unchanged.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import sample_hemisphere

vec3 = tm.vec3


@ti.func
def scatter_emissive(
    emission: vec3,
    intensity: ti.f32,
    mask: vec3,
    normal: vec3,
    r1: ti.f32,
    r2: ti.f32,
):
    """Evaluate an emissive hit.

    Returns:
        A tuple (emitted, direction): the radiance picked up through the
        current mask and the direction the path continues in.
    """
    emitted = emission * mask * intensity
    direction, _ = sample_hemisphere(normal, r1, r2)
    return emitted, direction


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_EMISSIVE_MATERIALS = 256

emissive_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_EMISSIVE_MATERIALS)
emissive_intensities = ti.field(dtype=ti.f32, shape=MAX_EMISSIVE_MATERIALS)
num_emissive_materials = ti.field(dtype=ti.i32, shape=())


def clear_emissive_materials() -> None:
    """Clear all emissive materials."""
    num_emissive_materials[None] = 0


def add_emissive_material(
    emission: tuple[float, float, float],
    intensity: float = 1.0,
) -> int:
    """Add an emissive material to the registry.

    Args:
        emission: Emitted color as (R, G, B). Values may exceed 1.
        intensity: Brightness multiplier.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If an emission component or the intensity is negative.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    for i, component in enumerate(emission):
        if component < 0.0:
            raise ValueError(f"Emission component {i} = {component} is negative")
    if intensity < 0.0:
        raise ValueError(f"Intensity = {intensity} is negative")

    idx = num_emissive_materials[None]
    if idx >= MAX_EMISSIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of emissive materials ({MAX_EMISSIVE_MATERIALS}) exceeded"
        )

    emissive_emissions[idx] = vec3(emission[0], emission[1], emission[2])
    emissive_intensities[idx] = intensity
    num_emissive_materials[None] = idx + 1
    return idx


def get_emissive_material_count() -> int:
    """Get the number of emissive materials in the registry."""
    return int(num_emissive_materials[None])


@ti.func
def get_emissive_emission(material_idx: ti.i32) -> vec3:
    """Get the emission color of a material by index."""
    return emissive_emissions[material_idx]


@ti.func
def get_emissive_intensity(material_idx: ti.i32) -> ti.f32:
    """Get the intensity of a material by index."""
    return emissive_intensities[material_idx]
