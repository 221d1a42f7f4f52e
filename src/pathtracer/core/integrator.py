"""Forking path integrator for Monte Carlo light transport.

Each sample of a pixel starts with a single path along the prime ray, with
a white mask. A path is advanced bounce by bounce: it is traced against the
scene, its mask is multiplied by the material response, and radiance is
collected whenever it hits an emitter. A refractive hit may fork a new path
carrying the transmitted energy, so a sample is a small work list of paths
with a hard capacity.

Work lists live in tile-sized Taichi fields. The image is rendered one tile
at a time; inside a tile every pixel is processed in parallel and owns its
path slots and its random generator state, so no two threads write the same
memory and a fixed seed reproduces the frame exactly.

Key features:
    - Material dispatch (diffuse, reflective, refractive, emissive)
    - Bounded forking at refractive surfaces
    - Explicit per-pixel xorshift generators seeded from (seed, x, y)
    - Summed radiance buffer plus an RGBA8 frame buffer

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import render_frame, get_frame_rgba
    >>> from pathtracer.core.settings import RenderSettings
    >>> from pathtracer.scene.showcase import create_showcase_scene
    >>> from pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, settings = create_showcase_scene()
    >>> setup_camera(camera)
    >>> render_frame(settings)
    >>> image = get_frame_rgba()  # (720, 1280, 4) uint8
"""

import logging
from collections.abc import Iterator

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import get_prime_ray
from pathtracer.core.color import clamp_color, quantize_channel
from pathtracer.core.random import seed_state, state_to_float, xorshift32
from pathtracer.core.settings import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    MAX_PATH_CAPACITY,
    RenderSettings,
)
from pathtracer.materials.diffuse import get_diffuse_albedo, get_diffuse_color, scatter_diffuse
from pathtracer.materials.emissive import (
    get_emissive_emission,
    get_emissive_intensity,
    scatter_emissive,
)
from pathtracer.materials.reflective import scatter_reflective
from pathtracer.materials.refractive import get_refractive_index, scatter_refractive
from pathtracer.scene.intersection import (
    element_surface_normal,
    element_texture_coords,
    get_element_material,
    trace_scene,
)
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Path State (one tile of work lists)
# =============================================================================

# Edge length of a square render tile in pixels
TILE_SIZE = 128

_path_origins = ti.Vector.field(3, dtype=ti.f32, shape=(TILE_SIZE, TILE_SIZE, MAX_PATH_CAPACITY))
_path_directions = ti.Vector.field(
    3, dtype=ti.f32, shape=(TILE_SIZE, TILE_SIZE, MAX_PATH_CAPACITY)
)
_path_masks = ti.Vector.field(3, dtype=ti.f32, shape=(TILE_SIZE, TILE_SIZE, MAX_PATH_CAPACITY))
_path_alive = ti.field(dtype=ti.i32, shape=(TILE_SIZE, TILE_SIZE, MAX_PATH_CAPACITY))
_path_counts = ti.field(dtype=ti.i32, shape=(TILE_SIZE, TILE_SIZE))

# Per-pixel generator state
_rng_state = ti.field(dtype=ti.u32, shape=(TILE_SIZE, TILE_SIZE))

# =============================================================================
# Render Target
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Summed radiance per pixel, indexed [x, y] (preallocated to max size)
_radiance_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Encoded frame, indexed [row, column] so it matches the output array layout
_frame_rgba = ti.Vector.field(4, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffers.

    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so
    changing the size does not recompile kernels.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the radiance and frame buffers to zero."""
    _radiance_sum.fill(0.0)
    _frame_rgba.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def _next_random(i: ti.i32, j: ti.i32) -> ti.f32:
    """Advance the generator of tile pixel (i, j) and return a float in [0, 1)."""
    state = xorshift32(_rng_state[i, j])
    _rng_state[i, j] = state
    return state_to_float(state)


@ti.func
def _advance_path(i: ti.i32, j: ti.i32, k: ti.i32, max_paths: ti.i32, bias: ti.f32) -> vec3:
    """Advance path k of tile pixel (i, j) by one bounce.

    On a miss the path's mask becomes black and the path is retired. On a
    hit the path continues from the hit point pushed off the surface by
    ``bias`` along the surface normal, in the direction the material picks.

    Args:
        i: Tile-local pixel column.
        j: Tile-local pixel row.
        k: Index of the path in the pixel's work list.
        max_paths: Capacity of the work list for forked paths.
        bias: Offset applied to new ray origins.

    Returns:
        Radiance collected by this bounce (non-zero only on emitters).
    """
    emitted = vec3(0.0, 0.0, 0.0)
    origin = _path_origins[i, j, k]
    direction = _path_directions[i, j, k]
    mask = _path_masks[i, j, k]

    isect = trace_scene(origin, direction)

    if isect.hit == 0:
        _path_masks[i, j, k] = vec3(0.0, 0.0, 0.0)
        _path_alive[i, j, k] = 0
    else:
        hit_point = origin + direction * isect.distance
        normal = element_surface_normal(isect.element_id, hit_point)
        new_origin = hit_point + normal * bias
        new_direction = direction

        material_id = get_element_material(isect.element_id)
        mat_type = get_material_type(material_id)
        type_index = get_material_type_index(material_id)

        if mat_type == int(MaterialType.DIFFUSE):
            uv = element_texture_coords(isect.element_id, hit_point)
            color = get_diffuse_color(type_index, uv)
            r1 = _next_random(i, j)
            r2 = _next_random(i, j)
            scattered, attenuation = scatter_diffuse(
                color, get_diffuse_albedo(type_index), normal, r1, r2
            )
            new_direction = scattered
            mask = mask * attenuation

        elif mat_type == int(MaterialType.EMISSIVE):
            r1 = _next_random(i, j)
            r2 = _next_random(i, j)
            contribution, scattered = scatter_emissive(
                get_emissive_emission(type_index),
                get_emissive_intensity(type_index),
                mask,
                normal,
                r1,
                r2,
            )
            emitted = contribution
            new_direction = scattered

        elif mat_type == int(MaterialType.REFLECTIVE):
            new_direction = scatter_reflective(direction, normal)

        elif mat_type == int(MaterialType.REFRACTIVE):
            kr, reflected, can_transmit, t_origin, t_direction = scatter_refractive(
                direction, normal, hit_point, bias, get_refractive_index(type_index)
            )
            count = _path_counts[i, j]
            if can_transmit == 1 and count < max_paths:
                _path_origins[i, j, count] = t_origin
                _path_directions[i, j, count] = t_direction
                _path_masks[i, j, count] = mask * (1.0 - kr)
                _path_alive[i, j, count] = 1
                _path_counts[i, j] = count + 1
            new_direction = reflected
            mask = mask * kr

        else:
            # Unknown material absorbs everything
            mask = vec3(0.0, 0.0, 0.0)
            _path_alive[i, j, k] = 0

        _path_origins[i, j, k] = new_origin
        _path_directions[i, j, k] = new_direction
        _path_masks[i, j, k] = mask

    return emitted


@ti.func
def trace_sample(
    i: ti.i32,
    j: ti.i32,
    px: ti.i32,
    py: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_bounces: ti.i32,
    max_paths: ti.i32,
    bias: ti.f32,
) -> vec3:
    """Estimate the radiance through pixel (px, py) with one sample.

    The work list starts with the prime ray. Each round advances every live
    path that existed when the round began, in index order, so paths forked
    during a round wait for the next one.

    Args:
        i: Tile-local pixel column (selects the work list).
        j: Tile-local pixel row.
        px: Image pixel column.
        py: Image pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        max_bounces: Number of rounds.
        max_paths: Work list capacity.
        bias: Offset applied to new ray origins.

    Returns:
        The radiance collected by all paths of this sample.
    """
    ray = get_prime_ray(px, py, width, height)
    _path_origins[i, j, 0] = ray.origin
    _path_directions[i, j, 0] = ray.direction
    _path_masks[i, j, 0] = vec3(1.0, 1.0, 1.0)
    _path_alive[i, j, 0] = 1
    _path_counts[i, j] = 1

    radiance = vec3(0.0, 0.0, 0.0)
    for _ in range(max_bounces):
        active = _path_counts[i, j]
        for k in range(active):
            if _path_alive[i, j, k] == 1:
                radiance += _advance_path(i, j, k, max_paths, bias)

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_tile(
    x0: ti.i32,
    y0: ti.i32,
    tile_w: ti.i32,
    tile_h: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    max_bounces: ti.i32,
    max_paths: ti.i32,
    bias: ti.f32,
    seed: ti.u32,
):
    """Sum ``samples`` radiance estimates for every pixel of one tile."""
    for i, j in ti.ndrange(tile_w, tile_h):
        px = x0 + i
        py = y0 + j
        _rng_state[i, j] = seed_state(seed, px, py)
        total = vec3(0.0, 0.0, 0.0)
        for _ in range(samples):
            total += trace_sample(i, j, px, py, width, height, max_bounces, max_paths, bias)
        _radiance_sum[px, py] = total


@ti.kernel
def _encode_frame(width: ti.i32, height: ti.i32, normalization: ti.f32):
    """Average, clamp, gamma encode and quantize every pixel to RGBA8."""
    for x, y in ti.ndrange(width, height):
        color = clamp_color(_radiance_sum[x, y] / normalization)
        _frame_rgba[y, x][0] = quantize_channel(color.x)
        _frame_rgba[y, x][1] = quantize_channel(color.y)
        _frame_rgba[y, x][2] = quantize_channel(color.z)
        _frame_rgba[y, x][3] = ti.u8(255)


# =============================================================================
# Public Rendering API
# =============================================================================


def iter_tiles(width: int, height: int, tile_size: int = TILE_SIZE) -> Iterator[tuple[int, int, int, int]]:
    """Yield (x0, y0, tile_width, tile_height) covering the image row by row."""
    for y0 in range(0, height, tile_size):
        for x0 in range(0, width, tile_size):
            yield x0, y0, min(tile_size, width - x0), min(tile_size, height - y0)


def render_tile(x0: int, y0: int, tile_w: int, tile_h: int, settings: RenderSettings) -> None:
    """Render one tile into the radiance buffer.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the tile is larger than TILE_SIZE or leaves the image.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    if not (0 < tile_w <= TILE_SIZE and 0 < tile_h <= TILE_SIZE):
        raise ValueError(f"Tile size {tile_w}x{tile_h} must be within 1..{TILE_SIZE}")
    if x0 < 0 or y0 < 0 or x0 + tile_w > width or y0 + tile_h > height:
        raise ValueError(f"Tile at ({x0}, {y0}) size {tile_w}x{tile_h} leaves the image")

    _render_tile(
        x0,
        y0,
        tile_w,
        tile_h,
        width,
        height,
        settings.samples_per_pixel,
        settings.max_bounces,
        settings.max_paths,
        settings.bias,
        settings.seed,
    )


def encode_frame(normalization: float) -> None:
    """Convert the radiance buffer into the RGBA8 frame buffer.

    Args:
        normalization: Divisor applied to every pixel's summed radiance.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If normalization is not positive.
    """
    _check_render_target_initialized()
    if normalization <= 0.0:
        raise ValueError(f"normalization must be positive, got {normalization}")
    width, height = get_image_dimensions()
    _encode_frame(width, height, normalization)


def render_frame(settings: RenderSettings) -> None:
    """Render a complete frame and encode it.

    The scene and camera must already be set up. Afterwards the frame is
    available from get_frame_rgba().

    Args:
        settings: Image size, sampling and path parameters.
    """
    setup_render_target(settings.width, settings.height)
    tiles = list(iter_tiles(settings.width, settings.height))
    logger.debug(
        "Rendering %dx%d in %d tiles (%d spp, %d bounces)",
        settings.width,
        settings.height,
        len(tiles),
        settings.samples_per_pixel,
        settings.max_bounces,
    )
    for x0, y0, tile_w, tile_h in tiles:
        render_tile(x0, y0, tile_w, tile_h, settings)
    encode_frame(settings.divisor)


def get_frame_rgba() -> npt.NDArray[np.uint8]:
    """Get the encoded frame as a (height, width, 4) uint8 array, top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return _frame_rgba.to_numpy()[:height, :width].copy()


def get_radiance_numpy() -> npt.NDArray[np.float32]:
    """Get the summed radiance as a (height, width, 3) float32 array, top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    full = _radiance_sum.to_numpy()
    return np.transpose(full[:width, :height, :], (1, 0, 2)).astype(np.float32)


def get_path_counts_numpy() -> npt.NDArray[np.int32]:
    """Get the work list sizes left by the last sample of the last tile.

    The array is indexed [tile-local column, tile-local row].
    """
    return _path_counts.to_numpy()
