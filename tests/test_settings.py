"""Tests for render settings validation and serialization."""

import pytest

from pathtracer.core.settings import MAX_PATH_CAPACITY, RenderSettings


class TestRenderSettings:
    """Tests for RenderSettings."""

    def test_defaults(self):
        """Test the default frame parameters."""
        settings = RenderSettings()
        assert (settings.width, settings.height) == (1280, 720)
        assert settings.samples_per_pixel == 16
        assert settings.max_bounces == 8
        assert settings.max_paths == 16
        assert settings.bias == 0.01
        assert settings.aspect_ratio == pytest.approx(16 / 9)

    def test_divisor(self):
        """Test that the divisor falls back to the sample count."""
        assert RenderSettings(samples_per_pixel=4).divisor == 4.0
        assert RenderSettings(samples_per_pixel=4, normalization=512.0).divisor == 512.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": 4096},
            {"samples_per_pixel": 0},
            {"max_bounces": -1},
            {"bias": -0.1},
            {"max_paths": 0},
            {"max_paths": MAX_PATH_CAPACITY + 1},
            {"normalization": 0.0},
            {"seed": -1},
            {"seed": 2**32},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Test that out-of-range parameters are rejected."""
        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_dict_round_trip(self):
        """Test serialization, ignoring unknown keys."""
        settings = RenderSettings(width=64, height=32, normalization=2048.0, seed=3)
        data = settings.to_dict()
        data["unused"] = True

        assert RenderSettings.from_dict(data) == settings
        assert RenderSettings.from_dict({}) == RenderSettings()
