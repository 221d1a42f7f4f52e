"""Unit tests for the material registries and scatter rules.

Tests cover:
- Parameter validation of every material type
- Diffuse attenuation (color * albedo * pi with the cosine weight cancelled)
- Diffuse texture lookup
- Mirror reflection
- Refractive split into reflected and transmitted rays
- Emissive contribution through the path mask
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestRegistries:
    """Tests for adding materials to the per-type registries."""

    def test_diffuse_indices(self):
        """Test that diffuse materials get sequential indices."""
        from pathtracer.materials.diffuse import add_diffuse_material, get_diffuse_material_count

        assert add_diffuse_material(0.18) == 0
        assert add_diffuse_material(0.5, color=(1.0, 0.0, 0.0)) == 1
        assert get_diffuse_material_count() == 2

    @pytest.mark.parametrize(
        "kwargs",
        [{"albedo": -0.1}, {"albedo": 0.5, "color": (1.0, -1.0, 0.0)}, {"albedo": 0.5, "texture_id": 3}],
    )
    def test_diffuse_validation(self, kwargs):
        """Test that invalid diffuse parameters are rejected."""
        from pathtracer.materials.diffuse import add_diffuse_material

        with pytest.raises(ValueError):
            add_diffuse_material(**kwargs)

    def test_reflective_count(self):
        """Test the reflective registry count."""
        from pathtracer.materials.reflective import (
            add_reflective_material,
            get_reflective_material_count,
        )

        add_reflective_material()
        add_reflective_material()
        assert get_reflective_material_count() == 2

    def test_refractive_and_emissive_counts(self):
        """Test that each registry counts only its own materials."""
        from pathtracer.materials.emissive import (
            add_emissive_material,
            get_emissive_material_count,
        )
        from pathtracer.materials.refractive import (
            add_refractive_material,
            get_refractive_material_count,
        )

        assert add_refractive_material(1.5) == 0
        assert add_emissive_material((1.0, 1.0, 1.0), 200.0) == 0
        assert add_refractive_material(2.4) == 1
        assert get_refractive_material_count() == 2
        assert get_emissive_material_count() == 1

    @pytest.mark.parametrize("index", [1.0, 0.5, -1.5])
    def test_refractive_validation(self, index):
        """Test that indices not above 1 are rejected."""
        from pathtracer.materials.refractive import add_refractive_material

        with pytest.raises(ValueError, match="greater than 1"):
            add_refractive_material(index)

    @pytest.mark.parametrize(
        "emission, intensity",
        [((1.0, -0.1, 0.0), 1.0), ((1.0, 1.0, 1.0), -2.0)],
    )
    def test_emissive_validation(self, emission, intensity):
        """Test that negative emission or intensity is rejected."""
        from pathtracer.materials.emissive import add_emissive_material

        with pytest.raises(ValueError, match="negative"):
            add_emissive_material(emission, intensity)


class TestDiffuse:
    """Tests for diffuse scattering."""

    def test_attenuation_is_color_albedo_pi(self):
        """Test that the cosine and the sampler weight cancel."""
        from pathtracer.materials.diffuse import scatter_diffuse, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        cosine = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            d, attenuation = scatter_diffuse(vec3(1.0, 0.5, 0.25), 0.18, n, 0.4, 0.7)
            result[None] = attenuation
            cosine[None] = ti.math.dot(d, n)

        test_kernel()
        a = result[None]
        scale = 0.18 * math.pi
        assert abs(a[0] - scale) < 1e-4
        assert abs(a[1] - 0.5 * scale) < 1e-4
        assert abs(a[2] - 0.25 * scale) < 1e-4
        assert cosine[None] > 0.0

    def test_textured_color(self):
        """Test that a textured material reads its color from the texture."""
        from pathtracer.materials.diffuse import add_diffuse_material, get_diffuse_color
        from pathtracer.materials.texture import add_texture

        image = np.zeros((1, 1, 3), dtype=np.uint8)
        image[0, 0] = (255, 0, 0)
        tex_id = add_texture(image)
        plain = add_diffuse_material(0.18, color=(0.0, 0.0, 1.0))
        textured = add_diffuse_material(0.18, texture_id=tex_id)

        result = ti.field(dtype=ti.math.vec3, shape=2)

        @ti.kernel
        def test_kernel():
            uv = ti.math.vec2(3.3, -7.1)
            result[0] = get_diffuse_color(plain, uv)
            result[1] = get_diffuse_color(textured, uv)

        test_kernel()
        np.testing.assert_allclose(result[0].to_numpy(), [0.0, 0.0, 1.0], atol=1e-6)
        np.testing.assert_allclose(result[1].to_numpy(), [1.0, 0.0, 0.0], atol=1e-6)


class TestSpecular:
    """Tests for reflective and refractive scattering."""

    def test_mirror(self):
        """Test that a mirror reflects about the normal."""
        from pathtracer.materials.reflective import scatter_reflective, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = scatter_reflective(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [0.0, 0.0, 1.0], atol=1e-6)

    def test_refractive_head_on(self):
        """Test the split of a head-on ray entering glass."""
        from pathtracer.materials.refractive import scatter_refractive, vec3

        kr = ti.field(dtype=ti.f32, shape=())
        can_transmit = ti.field(dtype=ti.i32, shape=())
        reflected = ti.field(dtype=ti.math.vec3, shape=())
        t_direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            k, r, ok, _, t_dir = scatter_refractive(
                vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 0.0), 0.01, 1.5
            )
            kr[None] = k
            reflected[None] = r
            can_transmit[None] = ok
            t_direction[None] = t_dir

        test_kernel()
        assert abs(kr[None] - 0.04) < 1e-4
        assert can_transmit[None] == 1
        np.testing.assert_allclose(reflected[None].to_numpy(), [0.0, 0.0, 1.0], atol=1e-6)
        np.testing.assert_allclose(t_direction[None].to_numpy(), [0.0, 0.0, -1.0], atol=1e-5)

    def test_refractive_total_internal_reflection(self):
        """Test that nothing is transmitted beyond the critical angle."""
        from pathtracer.materials.refractive import scatter_refractive, vec3

        kr = ti.field(dtype=ti.f32, shape=())
        can_transmit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d = ti.math.normalize(vec3(1.0, 0.0, 0.5))
            k, _, ok, _, _ = scatter_refractive(d, vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 0.0), 0.01, 1.5)
            kr[None] = k
            can_transmit[None] = ok

        test_kernel()
        assert kr[None] == 1.0
        assert can_transmit[None] == 0


class TestEmissive:
    """Tests for emissive hits."""

    def test_emission_through_mask(self):
        """Test that emitted radiance is emission * mask * intensity."""
        from pathtracer.materials.emissive import scatter_emissive, vec3

        emitted = ti.field(dtype=ti.math.vec3, shape=())
        cosine = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, -1.0, 0.0)
            e, d = scatter_emissive(vec3(1.0, 0.5, 0.0), 200.0, vec3(0.5, 0.5, 0.25), n, 0.3, 0.2)
            emitted[None] = e
            cosine[None] = ti.math.dot(d, n)

        test_kernel()
        np.testing.assert_allclose(emitted[None].to_numpy(), [100.0, 50.0, 0.0], rtol=1e-6)
        assert cosine[None] > 0.0
