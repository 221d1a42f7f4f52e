"""Frame renderer driving the integrator over a whole image.

The FrameRenderer wraps the module-level integrator buffers (Taichi fields)
with an object holding the render settings. It renders the image tile by
tile, reports progress through an optional callback and gives access to
the encoded frame and the averaged radiance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import FrameRenderer
    >>> from pathtracer.scene.showcase import create_showcase_scene
    >>> from pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, settings = create_showcase_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = FrameRenderer(settings)
    >>> renderer.render(callback=lambda done, total: print(f"{done}/{total}"))
    >>> renderer.save_image("output.png")
"""

import logging
import time
from collections.abc import Callable
from pathlib import Path

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    encode_frame,
    get_frame_rgba,
    get_radiance_numpy,
    iter_tiles,
    render_tile,
    setup_render_target,
)
from pathtracer.core.settings import RenderSettings
from pathtracer.output.export import save_png

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (tiles_done, tiles_total)
ProgressCallback = Callable[[int, int], None]


class FrameRenderer:
    """Renders single frames with fixed settings.

    The render target is shared module state, so only the most recently
    rendered frame of any FrameRenderer is available.

    Attributes:
        settings: The settings used for every frame.
    """

    def __init__(self, settings: RenderSettings) -> None:
        self.settings = settings
        self._rendered = False
        self._render_seconds = 0.0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def render_seconds(self) -> float:
        """Wall time of the last render in seconds."""
        return self._render_seconds

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.uint8]:
        """Render a frame with the current scene and camera.

        Args:
            callback: Optional callback called after each tile with
                (tiles_done, tiles_total).

        Returns:
            The frame as a (height, width, 4) uint8 RGBA array.
        """
        settings = self.settings
        tiles = list(iter_tiles(settings.width, settings.height))
        logger.info(
            "Rendering %dx%d, %d spp, %d bounces, %d tiles",
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.max_bounces,
            len(tiles),
        )

        start = time.perf_counter()
        setup_render_target(settings.width, settings.height)
        for done, (x0, y0, tile_w, tile_h) in enumerate(tiles, start=1):
            render_tile(x0, y0, tile_w, tile_h, settings)
            if callback is not None:
                callback(done, len(tiles))
        encode_frame(settings.divisor)

        self._render_seconds = time.perf_counter() - start
        self._rendered = True
        logger.info("Frame rendered in %.2f s", self._render_seconds)
        return get_frame_rgba()

    def _check_rendered(self) -> None:
        if not self._rendered:
            raise RuntimeError("No frame rendered yet. Call render() first.")

    def get_image_rgba(self) -> npt.NDArray[np.uint8]:
        """Get the last frame as a (height, width, 4) uint8 array.

        Raises:
            RuntimeError: If render() has not been called.
        """
        self._check_rendered()
        return get_frame_rgba()

    def get_radiance(self) -> npt.NDArray[np.float32]:
        """Get the last frame's averaged linear radiance, shape (height, width, 3).

        Values are divided by the normalization but not clamped.

        Raises:
            RuntimeError: If render() has not been called.
        """
        self._check_rendered()
        return (get_radiance_numpy() / self.settings.divisor).astype(np.float32)

    def save_image(self, filepath: str | Path) -> None:
        """Save the last frame as a PNG file.

        Raises:
            RuntimeError: If render() has not been called.
        """
        save_png(self.get_image_rgba(), filepath)
        logger.info("Saved %s", filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"samples={self.settings.samples_per_pixel}, rendered={self._rendered})"
        )
