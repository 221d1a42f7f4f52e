"""Tests for JSON scene files."""

import json

import pytest


class TestSceneFile:
    """Tests for save_scene_file and load_scene_file."""

    def test_round_trip(self, tmp_path):
        """Test that the showcase survives a write and read."""
        from pathtracer.scene.scene_file import load_scene_file, save_scene_file
        from pathtracer.scene.showcase import create_showcase_scene

        scene, camera, settings = create_showcase_scene(samples_per_pixel=2, seed=5)
        expected = scene.to_dict()
        path = tmp_path / "showcase.json"

        save_scene_file(path, scene, camera, settings)
        loaded_scene, loaded_camera, loaded_settings = load_scene_file(path)

        assert loaded_scene.to_dict() == expected
        assert loaded_camera == camera
        assert loaded_settings == settings
        assert loaded_settings.divisor == 256.0

    def test_defaults_for_missing_sections(self, tmp_path):
        """Test that camera and settings sections are optional."""
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.settings import RenderSettings
        from pathtracer.scene.scene_file import load_scene_file

        path = tmp_path / "minimal.json"
        path.write_text(
            json.dumps(
                {
                    "scene": {
                        "materials": [{"type": "reflective"}],
                        "elements": [
                            {"kind": "sphere", "center": [0, 0, -5], "radius": 1.0, "material_id": 0}
                        ],
                    }
                }
            )
        )

        scene, camera, settings = load_scene_file(path)
        assert scene.get_sphere_count() == 1
        assert camera == PinholeCamera()
        assert settings == RenderSettings()

    def test_invalid_json(self, tmp_path):
        """Test that a broken file raises ValueError."""
        from pathtracer.scene.scene_file import load_scene_file

        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="invalid scene file"):
            load_scene_file(path)

    def test_not_an_object(self, tmp_path):
        """Test that a top-level list is rejected."""
        from pathtracer.scene.scene_file import load_scene_file

        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="JSON object"):
            load_scene_file(path)

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises OSError."""
        from pathtracer.scene.scene_file import load_scene_file

        with pytest.raises(OSError):
            load_scene_file(tmp_path / "missing.json")
