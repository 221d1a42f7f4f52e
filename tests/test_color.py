"""Unit tests for color helpers.

Tests cover:
- Clamping
- Gamma encode/decode round trip
- 8-bit quantization
- Texel decoding
"""

import pytest
import taichi as ti


class TestGamma:
    """Tests for gamma encoding and decoding."""

    @pytest.mark.parametrize("value", [0.0, 0.05, 0.18, 0.5, 0.9, 1.0])
    def test_round_trip(self, value):
        """Test that decode(encode(x)) returns x."""
        from pathtracer.core.color import gamma_decode, gamma_encode

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(x: ti.f32):
            result[None] = gamma_decode(gamma_encode(x))

        test_kernel(value)
        assert abs(result[None] - value) < 1e-5

    def test_encode_brightens_midtones(self):
        """Test that encoding lifts values below 1."""
        from pathtracer.core.color import gamma_encode

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = gamma_encode(0.18)

        test_kernel()
        assert abs(result[None] - 0.18 ** (1.0 / 2.2)) < 1e-5


class TestQuantization:
    """Tests for clamping and 8-bit conversion."""

    def test_clamp_color(self):
        """Test that channels are clamped to [0, 1]."""
        from pathtracer.core.color import clamp_color
        from pathtracer.core.ray import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = clamp_color(vec3(-0.5, 0.25, 7.0))

        test_kernel()
        c = result[None]
        assert c[0] == 0.0
        assert abs(c[1] - 0.25) < 1e-6
        assert c[2] == 1.0

    def test_quantize_extremes(self):
        """Test that 0 maps to 0 and 1 maps to 255."""
        from pathtracer.core.color import quantize_channel

        result = ti.field(dtype=ti.u8, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = quantize_channel(0.0)
            result[1] = quantize_channel(1.0)

        test_kernel()
        assert result[0] == 0
        assert result[1] == 255

    def test_quantize_truncates(self):
        """Test that quantization truncates instead of rounding."""
        from pathtracer.core.color import quantize_channel

        result = ti.field(dtype=ti.u8, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = quantize_channel(0.5)

        test_kernel()
        # 0.5^(1/2.2) * 255 = 186.1
        assert result[None] == 186


class TestTexelDecode:
    """Tests for decoding 8-bit texels."""

    def test_decode_white_and_black(self):
        """Test that 255 decodes to 1 and 0 decodes to 0."""
        from pathtracer.core.color import decode_texel

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = decode_texel(ti.u8(255), ti.u8(0), ti.u8(255))

        test_kernel()
        c = result[None]
        assert abs(c[0] - 1.0) < 1e-6
        assert abs(c[1]) < 1e-6
        assert abs(c[2] - 1.0) < 1e-6
