"""JSON scene files.

A scene file holds everything needed for one frame::

    {
        "scene": {...},     # SceneManager.to_dict()
        "camera": {...},    # PinholeCamera.to_dict()
        "settings": {...}   # RenderSettings.to_dict()
    }

Missing "camera" or "settings" sections fall back to their defaults.
"""

import json
import logging
from pathlib import Path

from pathtracer.camera.pinhole import PinholeCamera
from pathtracer.core.settings import RenderSettings
from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)


def save_scene_file(
    path: str | Path,
    scene: SceneManager,
    camera: PinholeCamera,
    settings: RenderSettings,
) -> None:
    """Write a scene, camera and settings to a JSON file.

    Raises:
        ValueError: If the scene uses a texture that cannot be exported.
        OSError: If the file cannot be written.
    """
    data = {
        "scene": scene.to_dict(),
        "camera": camera.to_dict(),
        "settings": settings.to_dict(),
    }
    Path(path).write_text(json.dumps(data, indent=2))
    logger.debug("Scene written to %s", path)


def load_scene_file(path: str | Path) -> tuple[SceneManager, PinholeCamera, RenderSettings]:
    """Read a JSON scene file into a new scene.

    Returns:
        A tuple of (SceneManager, PinholeCamera, RenderSettings).

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or holds invalid values.
        MeshLoadError, TextureLoadError: If a referenced file cannot be loaded.
    """
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: invalid scene file: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"{path}: scene file must contain a JSON object")

    scene = SceneManager()
    scene.from_dict(data.get("scene", {}))
    camera = PinholeCamera.from_dict(data.get("camera", {}))
    settings = RenderSettings.from_dict(data.get("settings", {}))

    logger.info(
        "Loaded %s: %d elements, %d materials",
        path,
        scene.get_element_count(),
        scene.get_material_count(),
    )
    return scene, camera, settings
