"""Tests for the FrameRenderer.

Tests cover:
- Rendering a frame and the returned image layout
- Progress callbacks per tile
- Access before rendering
- Averaged radiance and PNG output
"""

import numpy as np
import pytest
from PIL import Image as PILImage


@pytest.fixture
def lit_scene(fresh_scene, default_camera):
    """A white emitter filling the view in front of the camera."""
    light = fresh_scene.add_emissive_material(emission=(1.0, 1.0, 1.0), intensity=0.5)
    fresh_scene.add_plane((0.0, 0.0, -2.0), (0.0, 0.0, -1.0), light)
    return fresh_scene


class TestFrameRenderer:
    """Tests for FrameRenderer."""

    def test_render_returns_rgba(self, lit_scene):
        """Test that render() returns a (height, width, 4) uint8 frame."""
        from pathtracer.core.renderer import FrameRenderer
        from pathtracer.core.settings import RenderSettings

        renderer = FrameRenderer(RenderSettings(width=12, height=6, samples_per_pixel=1))
        image = renderer.render()

        assert image.shape == (6, 12, 4)
        assert image.dtype == np.uint8
        assert renderer.render_seconds > 0.0
        np.testing.assert_array_equal(renderer.get_image_rgba(), image)

    def test_callback_called_per_tile(self, lit_scene):
        """Test that progress is reported once per tile."""
        from pathtracer.core.integrator import TILE_SIZE
        from pathtracer.core.renderer import FrameRenderer
        from pathtracer.core.settings import RenderSettings

        calls = []
        renderer = FrameRenderer(
            RenderSettings(width=TILE_SIZE + 1, height=2, samples_per_pixel=1, max_bounces=1)
        )
        renderer.render(callback=lambda done, total: calls.append((done, total)))

        assert calls == [(1, 2), (2, 2)]

    def test_access_before_render(self):
        """Test that results are unavailable before the first render."""
        from pathtracer.core.renderer import FrameRenderer
        from pathtracer.core.settings import RenderSettings

        renderer = FrameRenderer(RenderSettings(width=4, height=4))
        with pytest.raises(RuntimeError, match="No frame rendered"):
            renderer.get_image_rgba()
        with pytest.raises(RuntimeError):
            renderer.get_radiance()

    def test_radiance_is_averaged(self, lit_scene):
        """Test that get_radiance divides the sums by the normalization."""
        from pathtracer.core.renderer import FrameRenderer
        from pathtracer.core.settings import RenderSettings

        renderer = FrameRenderer(
            RenderSettings(width=4, height=4, samples_per_pixel=4, max_bounces=1)
        )
        renderer.render()

        np.testing.assert_allclose(renderer.get_radiance(), 0.5, rtol=1e-5)

    def test_save_image(self, lit_scene, tmp_path):
        """Test that save_image writes a readable RGBA PNG."""
        from pathtracer.core.renderer import FrameRenderer
        from pathtracer.core.settings import RenderSettings

        renderer = FrameRenderer(RenderSettings(width=5, height=3, samples_per_pixel=1))
        image = renderer.render()
        path = tmp_path / "frame.png"
        renderer.save_image(path)

        with PILImage.open(path) as loaded:
            assert loaded.mode == "RGBA"
            assert loaded.size == (5, 3)
            np.testing.assert_array_equal(np.asarray(loaded), image)

    def test_repr(self):
        """Test the string representation."""
        from pathtracer.core.renderer import FrameRenderer
        from pathtracer.core.settings import RenderSettings

        renderer = FrameRenderer(RenderSettings(width=8, height=4, samples_per_pixel=2))
        assert repr(renderer) == "FrameRenderer(width=8, height=4, samples=2, rendered=False)"
