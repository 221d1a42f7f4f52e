"""Core rendering module.

Components:
    ray: Ray data structure, reflection, Fresnel, transmission, hemisphere sampling
    random: Seedable per-pixel xorshift generator
    color: Gamma encoding and texel decoding
    transform: 4x4 affine transforms for meshes
    settings: RenderSettings
    integrator: Forking path integrator and frame kernels
    renderer: FrameRenderer driving a full frame

All compute-intensive operations use Taichi kernels.
"""

from .color import GAMMA, clamp_color, decode_texel, gamma_decode, gamma_encode, quantize_channel
from .random import seed_state, state_to_float, wang_hash, xorshift32
from .ray import (
    Ray,
    create_coordinate_system,
    create_transmission,
    fresnel,
    make_ray,
    ray_at,
    reflect,
    sample_hemisphere,
    vec3,
)
from .settings import MAX_PATH_CAPACITY, RenderSettings

# Note: integrator and renderer declare Taichi fields and are NOT imported here.
# Import them from pathtracer.core.integrator / pathtracer.core.renderer after ti.init().

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "reflect",
    "fresnel",
    "create_transmission",
    "create_coordinate_system",
    "sample_hemisphere",
    "wang_hash",
    "seed_state",
    "xorshift32",
    "state_to_float",
    "GAMMA",
    "clamp_color",
    "gamma_encode",
    "gamma_decode",
    "quantize_channel",
    "decode_texel",
    "MAX_PATH_CAPACITY",
    "RenderSettings",
]
