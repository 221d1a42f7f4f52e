"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before fields are declared
    from pathtracer.core.integrator import clear_render_target
    from pathtracer.materials.diffuse import clear_diffuse_materials
    from pathtracer.materials.emissive import clear_emissive_materials
    from pathtracer.materials.reflective import clear_reflective_materials
    from pathtracer.materials.refractive import clear_refractive_materials
    from pathtracer.materials.texture import clear_textures
    from pathtracer.scene.intersection import clear_scene
    from pathtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_diffuse_materials()
        clear_reflective_materials()
        clear_refractive_materials()
        clear_emissive_materials()
        clear_textures()
        _clear_material_tracking()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from pathtracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


@pytest.fixture
def default_camera():
    """Set up the default camera at the origin looking down -z."""
    from pathtracer.camera.pinhole import PinholeCamera, setup_camera

    camera = PinholeCamera(fov=90.0)
    setup_camera(camera)
    return camera
