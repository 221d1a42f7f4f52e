"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere (perpendicular distance greater than radius)
- Ray starting inside sphere (far side hit)
- Sphere behind the ray origin
- Surface normal and texture coordinates
"""

import math

import pytest
import taichi as ti


def _intersect(origin, direction, center, radius):
    from pathtracer.geometry.sphere import Sphere, intersect_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        cx: ti.f32, cy: ti.f32, cz: ti.f32, r: ti.f32,
    ):
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        record = intersect_sphere(vec3(ox, oy, oz), ti.math.normalize(vec3(dx, dy, dz)), sphere)
        hit[None] = record.hit
        distance[None] = record.distance

    test_kernel(*origin, *direction, *center, radius)
    return hit[None], distance[None]


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_camera_ray_hits_front(self):
        """Test a ray from the origin hitting a sphere at (0, 0, -5) at distance 4."""
        hit, distance = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 1
        assert distance == 4.0

    def test_ray_misses(self):
        """Test a ray passing beside the sphere."""
        hit, _ = _intersect((2.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 0

    @pytest.mark.parametrize(
        "offset, expected",
        [(0.0, 1), (0.5, 1), (0.99, 1), (1.01, 0), (1.5, 0), (3.0, 0)],
    )
    def test_hit_iff_within_radius(self, offset, expected):
        """Test that a ray hits exactly when it passes within the radius."""
        hit, _ = _intersect((offset, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == expected

    def test_ray_from_inside_hits_far_side(self):
        """Test a ray starting at the center hits the shell at the radius."""
        hit, distance = _intersect((0.0, 0.0, -5.0), (1.0, 0.0, 0.0), (0.0, 0.0, -5.0), 2.0)
        assert hit == 1
        assert abs(distance - 2.0) < 1e-5

    def test_sphere_behind_origin(self):
        """Test that a sphere entirely behind the ray is not hit."""
        hit, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 0

    def test_oblique_hit_distance(self):
        """Test the distance of an off-center hit."""
        # Ray along -z at x = 0.6 hits the unit sphere at z = -5 + 0.8
        hit, distance = _intersect((0.6, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 1
        assert abs(distance - 4.2) < 1e-4


class TestSphereShading:
    """Tests for sphere normals and texture coordinates."""

    def test_surface_normal_points_outward(self):
        """Test the normal at the top of the sphere."""
        from pathtracer.geometry.sphere import Sphere, sphere_surface_normal, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(1.0, 1.0, 1.0), radius=2.0)
            result[None] = sphere_surface_normal(sphere, vec3(1.0, 3.0, 1.0))

        test_kernel()
        n = result[None]
        assert abs(n[0]) < 1e-6
        assert abs(n[1] - 1.0) < 1e-6
        assert abs(n[2]) < 1e-6

    def test_texture_coords_poles_and_equator(self):
        """Test spherical coordinates at the north pole and on the equator."""
        from pathtracer.geometry.sphere import Sphere, sphere_texture_coords, vec3

        result = ti.field(dtype=ti.math.vec2, shape=2)

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=2.0)
            result[0] = sphere_texture_coords(sphere, vec3(0.0, 2.0, 0.0))
            result[1] = sphere_texture_coords(sphere, vec3(2.0, 0.0, 0.0))

        test_kernel()
        north = result[0]
        equator = result[1]
        assert abs(north[1]) < 1e-5
        assert abs(equator[0] - 0.5) < 1e-5
        assert abs(equator[1] - 0.5) < 1e-5
        assert 0.0 <= north[0] <= 1.0
        assert not math.isnan(north[0])
