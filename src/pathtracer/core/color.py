"""Linear RGB color helpers.

Colors are linear RGB vec3 values while light is being accumulated. They are
only clamped to [0, 1] and gamma encoded when a frame is written out, and
8-bit texels are gamma decoded back to linear when they are sampled.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Display gamma used for encoding output and decoding texels
GAMMA = 2.2


@ti.func
def clamp_color(color: vec3) -> vec3:
    """Clamp every channel to [0, 1]."""
    return tm.clamp(color, 0.0, 1.0)


@ti.func
def gamma_encode(linear: ti.f32) -> ti.f32:
    """Convert a linear channel value to display space."""
    return ti.pow(linear, 1.0 / GAMMA)


@ti.func
def gamma_decode(encoded: ti.f32) -> ti.f32:
    """Convert a display-space channel value back to linear."""
    return ti.pow(encoded, GAMMA)


@ti.func
def quantize_channel(linear: ti.f32) -> ti.u8:
    """Gamma encode a channel in [0, 1] and truncate it to 8 bits."""
    return ti.cast(gamma_encode(linear) * 255.0, ti.u8)


@ti.func
def decode_texel(r: ti.u8, g: ti.u8, b: ti.u8) -> vec3:
    """Convert an 8-bit sRGB texel to a linear color."""
    return vec3(
        gamma_decode(ti.cast(r, ti.f32) / 255.0),
        gamma_decode(ti.cast(g, ti.f32) / 255.0),
        gamma_decode(ti.cast(b, ti.f32) / 255.0),
    )
