"""Perfect mirror material.

A reflective surface mirrors the incoming direction about the normal and
leaves the path mask unchanged. Reflective materials have no parameters, so
the registry only counts them.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import reflect

vec3 = tm.vec3

MAX_REFLECTIVE_MATERIALS = 256

num_reflective_materials = ti.field(dtype=ti.i32, shape=())


@ti.func
def scatter_reflective(incident: vec3, normal: vec3) -> vec3:
    """Return the mirrored direction of a reflective bounce."""
    return reflect(incident, normal)


def clear_reflective_materials() -> None:
    """Clear all reflective materials."""
    num_reflective_materials[None] = 0


def add_reflective_material() -> int:
    """Add a reflective material to the registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_reflective_materials[None]
    if idx >= MAX_REFLECTIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of reflective materials ({MAX_REFLECTIVE_MATERIALS}) exceeded"
        )
    num_reflective_materials[None] = idx + 1
    return idx


def get_reflective_material_count() -> int:
    """Get the number of reflective materials in the registry."""
    return int(num_reflective_materials[None])
