"""Refractive (glass-like) material.

A refractive hit splits the path. The path itself continues along the
mirror direction with its mask scaled by the Fresnel reflectance kr. When
kr < 1 the transmitted part, scaled by 1 - kr, becomes a new sub-path
along the refracted direction, as long as the sample's work list has room.
The integrator owns the work list, so this module only computes both
candidate rays.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.refractive import add_refractive_material
    >>> glass = add_refractive_material(index=1.5)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import create_transmission, fresnel, reflect

vec3 = tm.vec3


@ti.func
def scatter_refractive(
    incident: vec3,
    normal: vec3,
    hit_point: vec3,
    bias: ti.f32,
    index: ti.f32,
):
    """Compute the reflected and transmitted continuations of a hit.

    Args:
        incident: The incoming direction (normalized).
        normal: The outward surface normal (normalized).
        hit_point: The exact intersection point.
        bias: Distance the transmitted origin is pushed below the surface.
        index: Refractive index of the material.

    Returns:
        A tuple (kr, reflected, can_transmit, t_origin, t_direction):
        - kr: Fresnel reflectance in [0, 1].
        - reflected: The mirror direction.
        - can_transmit: 1 if a transmitted ray exists and carries energy.
        - t_origin, t_direction: The transmitted ray.
    """
    kr = fresnel(incident, normal, index)
    reflected = reflect(incident, normal)
    ok, t_origin, t_direction = create_transmission(normal, incident, hit_point, bias, index)
    can_transmit = 0
    if kr < 1.0 and ok == 1:
        can_transmit = 1
    return kr, reflected, can_transmit, t_origin, t_direction


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_REFRACTIVE_MATERIALS = 256

refractive_indices = ti.field(dtype=ti.f32, shape=MAX_REFRACTIVE_MATERIALS)
num_refractive_materials = ti.field(dtype=ti.i32, shape=())


def clear_refractive_materials() -> None:
    """Clear all refractive materials."""
    num_refractive_materials[None] = 0


def add_refractive_material(index: float = 1.5) -> int:
    """Add a refractive material to the registry.

    Args:
        index: Refractive index. Common values: water 1.33, glass 1.5,
            diamond 2.4.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If the index is not greater than 1.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    if index <= 1.0:
        raise ValueError(f"Refractive index must be greater than 1, got {index}")

    idx = num_refractive_materials[None]
    if idx >= MAX_REFRACTIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of refractive materials ({MAX_REFRACTIVE_MATERIALS}) exceeded"
        )

    refractive_indices[idx] = index
    num_refractive_materials[None] = idx + 1
    return idx


def get_refractive_material_count() -> int:
    """Get the number of refractive materials in the registry."""
    return int(num_refractive_materials[None])


@ti.func
def get_refractive_index(material_idx: ti.i32) -> ti.f32:
    """Get the refractive index of a material by index."""
    return refractive_indices[material_idx]
