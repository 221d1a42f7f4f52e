"""Image textures for diffuse materials.

Textures are decoded to 8-bit RGBA on the Python side (Pillow for files,
NumPy for in-memory images) and packed into one flat texel field. Each
texture records its offset, width and height. Lookups scale texture
coordinates by the image size, wrap them onto the image and gamma-decode
the texel to linear RGB.

Row 0 of a texture is the top row of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.texture import add_texture, make_checkerboard
    >>> texture_id = add_texture(make_checkerboard(64, 8))
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from PIL import Image as PILImage

from pathtracer.core.color import decode_texel

logger = logging.getLogger(__name__)

vec2 = tm.vec2
vec3 = tm.vec3


class TextureLoadError(RuntimeError):
    """Raised when a texture file cannot be opened or decoded."""


# =============================================================================
# Texture Field Storage
# =============================================================================

MAX_TEXTURES = 64
MAX_TEXELS = 1 << 22

texture_texels = ti.Vector.field(4, dtype=ti.u8, shape=MAX_TEXELS)
texture_offsets = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())
num_texels = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _upload_texels(texels: ti.types.ndarray(), offset: ti.i32, count: ti.i32):
    for k in range(count):
        for c in ti.static(range(4)):
            texture_texels[offset + k][c] = texels[k, c]


def clear_textures() -> None:
    """Forget all textures. Texel data is overwritten by later uploads."""
    num_textures[None] = 0
    num_texels[None] = 0


def add_texture(pixels: npt.ArrayLike) -> int:
    """Register an in-memory image as a texture.

    Args:
        pixels: A (height, width, 4) RGBA or (height, width, 3) RGB array of
            uint8 values in sRGB.

    Returns:
        The texture ID.

    Raises:
        ValueError: If the array does not have a supported shape.
        RuntimeError: If the texture or texel capacity is exceeded.
    """
    image = np.asarray(pixels)
    if image.ndim != 3 or image.shape[2] not in (3, 4) or image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Texture must have shape (H, W, 3) or (H, W, 4), got {image.shape}")
    image = image.astype(np.uint8)
    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image, alpha], axis=2)

    height, width = image.shape[:2]
    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")
    offset = num_texels[None]
    count = width * height
    if offset + count > MAX_TEXELS:
        raise RuntimeError(
            f"Texture of {width}x{height} does not fit: {MAX_TEXELS - offset} texels left"
        )

    _upload_texels(np.ascontiguousarray(image.reshape(count, 4)), offset, count)
    texture_offsets[idx] = offset
    texture_widths[idx] = width
    texture_heights[idx] = height
    num_texels[None] = offset + count
    num_textures[None] = idx + 1
    logger.debug("Added texture %d (%dx%d)", idx, width, height)
    return idx


def load_texture(path: str | Path) -> int:
    """Decode an image file with Pillow and register it as a texture.

    Args:
        path: Path to any image format Pillow can read.

    Returns:
        The texture ID.

    Raises:
        TextureLoadError: If the file cannot be opened or decoded.
    """
    try:
        with PILImage.open(path) as img:
            pixels = np.array(img.convert("RGBA"))
    except OSError as e:
        raise TextureLoadError(f"Unable to open texture file {path}: {e}") from e
    logger.info("Loaded texture %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return add_texture(pixels)


def get_texture_count() -> int:
    """Get the number of registered textures."""
    return int(num_textures[None])


def get_texture_size(texture_id: int) -> tuple[int, int]:
    """Get (width, height) of a registered texture.

    Raises:
        ValueError: If the texture ID is not registered.
    """
    if not 0 <= texture_id < num_textures[None]:
        raise ValueError(f"Invalid texture_id: {texture_id}")
    return int(texture_widths[texture_id]), int(texture_heights[texture_id])


def make_checkerboard(
    size: int = 256,
    squares: int = 8,
    color_a: tuple[int, int, int] = (255, 255, 255),
    color_b: tuple[int, int, int] = (40, 40, 40),
) -> npt.NDArray[np.uint8]:
    """Build a square checkerboard image.

    Args:
        size: Width and height in pixels.
        squares: Number of squares along each side.
        color_a: sRGB color of the square at the top-left corner.
        color_b: sRGB color of the other squares.

    Returns:
        A (size, size, 4) uint8 RGBA array.
    """
    if size <= 0 or squares <= 0:
        raise ValueError(f"size and squares must be positive, got {size} and {squares}")
    cell = np.arange(size) * squares // size
    mask = (cell[:, None] + cell[None, :]) % 2 == 0
    image = np.empty((size, size, 4), dtype=np.uint8)
    image[mask, :3] = color_a
    image[~mask, :3] = color_b
    image[..., 3] = 255
    return image


# =============================================================================
# Texture Lookup (Taichi functions)
# =============================================================================


@ti.func
def wrap_coord(value: ti.f32, bound: ti.i32) -> ti.i32:
    """Map a texture coordinate onto [0, bound) by truncation and modulo."""
    index = ti.raw_mod(ti.cast(value * ti.cast(bound, ti.f32), ti.i32), bound)
    if index < 0:
        index += bound
    return index


@ti.func
def sample_texture(texture_id: ti.i32, uv: vec2) -> vec3:
    """Look up the linear color of a texture at wrapped coordinates.

    Args:
        texture_id: The texture to sample.
        uv: Texture coordinates; 1.0 spans the whole image.

    Returns:
        The gamma-decoded texel color.
    """
    width = texture_widths[texture_id]
    height = texture_heights[texture_id]
    x = wrap_coord(uv.x, width)
    y = wrap_coord(uv.y, height)
    texel = texture_texels[texture_offsets[texture_id] + y * width + x]
    return decode_texel(texel[0], texel[1], texel[2])
