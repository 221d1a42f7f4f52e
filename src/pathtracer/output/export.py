"""Image export utilities for rendered frames.

Supported formats:
    - PNG (8-bit RGBA or RGB via Pillow)

Example:
    >>> from pathtracer.output.export import save_png
    >>> from pathtracer.core.renderer import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(settings)
    >>> image = renderer.render()
    >>> save_png(image, "output.png")
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image as a PNG file.

    Args:
        image: Array of shape (H, W, 4) (RGBA) or (H, W, 3) (RGB) with
            dtype uint8, top row first.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array does not have a supported shape or dtype.
        OSError: If the file cannot be written.
    """
    if image.dtype != np.uint8:
        raise ValueError(f"Image must be uint8, got {image.dtype}")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Image must have shape (H, W, 3) or (H, W, 4), got {image.shape}")

    # Pillow infers RGBA or RGB from the channel count
    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(str(filepath), format="PNG")


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8 bits.

    Values are clamped to [0, 1], gamma encoded and truncated, the same way
    the frame encoder does it.

    Args:
        image: Linear image array of shape (H, W, C).
        gamma: Gamma correction value (default 2.2).

    Returns:
        8-bit image array with the same shape and dtype uint8.
    """
    clamped = np.clip(image.astype(np.float64), 0.0, 1.0)
    return (np.power(clamped, 1.0 / gamma) * 255.0).astype(np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
