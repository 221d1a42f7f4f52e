"""Explicit, seedable random number generation for the path tracer.

Every pixel owns a 32-bit xorshift state seeded from a hash of the frame
seed and the pixel position. Random draws never depend on thread
scheduling, so a fixed seed reproduces a frame bit for bit.

These are pure Taichi functions on ``ti.u32`` values. The integrator keeps
the per-pixel states in a field and threads them through these helpers.
"""

import taichi as ti

# 2^24, the resolution of the float conversion
_FLOAT_SCALE = 16777216.0


@ti.func
def wang_hash(value: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang's integer hash)."""
    x = value
    x = (x ^ ti.u32(61)) ^ ti.bit_shr(x, 16)
    x = x * ti.u32(9)
    x = x ^ ti.bit_shr(x, 4)
    x = x * ti.u32(0x27D4EB2D)
    x = x ^ ti.bit_shr(x, 15)
    return x


@ti.func
def seed_state(seed: ti.u32, px: ti.i32, py: ti.i32) -> ti.u32:
    """Derive the initial generator state of pixel (px, py).

    Args:
        seed: The frame seed.
        px: Pixel column.
        py: Pixel row.

    Returns:
        A non-zero state (zero is a fixed point of xorshift).
    """
    h = wang_hash(ti.cast(py, ti.u32))
    h = wang_hash(ti.cast(px, ti.u32) ^ h)
    state = wang_hash(seed ^ h)
    if state == ti.u32(0):
        state = ti.u32(0x2545F491)
    return state


@ti.func
def xorshift32(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    x = state
    x ^= x << 13
    x ^= ti.bit_shr(x, 17)
    x ^= x << 5
    return x


@ti.func
def state_to_float(state: ti.u32) -> ti.f32:
    """Map the low 24 bits of a state to a float in [0, 1)."""
    return ti.cast(state & ti.u32(0xFFFFFF), ti.f32) / _FLOAT_SCALE
