"""Tests for image export utilities."""

import numpy as np
import pytest
from PIL import Image as PILImage

from pathtracer.output.export import compute_rmse, image_to_uint8, save_png


class TestSavePng:
    """Tests for PNG writing."""

    @pytest.mark.parametrize("channels, mode", [(4, "RGBA"), (3, "RGB")])
    def test_round_trip(self, tmp_path, channels, mode):
        """Test that pixels survive a write and read through Pillow."""
        rng = np.random.default_rng(0)
        image = rng.integers(0, 256, size=(7, 9, channels), dtype=np.uint8)
        path = tmp_path / "out.png"

        save_png(image, path)

        with PILImage.open(path) as loaded:
            assert loaded.mode == mode
            np.testing.assert_array_equal(np.asarray(loaded), image)

    def test_wrong_dtype(self, tmp_path):
        """Test that float images are rejected."""
        with pytest.raises(ValueError, match="uint8"):
            save_png(np.zeros((2, 2, 4), dtype=np.float32), tmp_path / "out.png")

    @pytest.mark.parametrize("shape", [(2, 2), (2, 2, 2), (2, 2, 5)])
    def test_wrong_shape(self, tmp_path, shape):
        """Test that arrays that are not RGB or RGBA images are rejected."""
        with pytest.raises(ValueError, match="shape"):
            save_png(np.zeros(shape, dtype=np.uint8), tmp_path / "out.png")


class TestConversion:
    """Tests for float to 8-bit conversion and image comparison."""

    def test_image_to_uint8(self):
        """Test clamping, gamma encoding and truncation."""
        image = np.array([[[-1.0, 0.0, 1.0], [2.0, 0.5, 0.25]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result[0, 0].tolist() == [0, 0, 255]
        assert result[0, 1, 0] == 255
        assert result[0, 1, 1] == int(0.5 ** (1.0 / 2.2) * 255.0)

    def test_rmse(self):
        """Test RMSE of identical and differing images."""
        a = np.zeros((2, 2, 3), dtype=np.uint8)
        b = np.full((2, 2, 3), 3, dtype=np.uint8)

        assert compute_rmse(a, a) == 0.0
        assert compute_rmse(a, b) == pytest.approx(3.0)

    def test_rmse_shape_mismatch(self):
        """Test that images of different shapes cannot be compared."""
        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))
