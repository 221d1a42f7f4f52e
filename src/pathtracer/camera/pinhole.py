"""Pinhole camera model for prime ray generation.

The default camera sits at the origin looking down -z with +y up, which is
the frame the renderer assumes for scenes built in camera space. The camera
can also be placed with look-at vectors; the prime ray directions are then
rotated into the camera's orthonormal basis (u, v, w):
- u: points right in the image plane
- v: points up in the image plane
- w: points from lookat toward lookfrom (opposite the view direction)

Each pixel gets exactly one ray through its center:

    sensor_x = ((x + 0.5) / width * 2 - 1) * aspect * tan(fov / 2)
    sensor_y = (1 - (y + 0.5) / height * 2) * tan(fov / 2)
    direction = normalize(sensor_x * u + sensor_y * v - w)

Row y = 0 is the top of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.pinhole import PinholeCamera, setup_camera, get_prime_ray
    >>> setup_camera(PinholeCamera(fov=90.0))
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_prime_ray(0, 0, 1280, 720)  # Ray through the top-left pixel
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, make_ray

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        fov: Vertical field of view in degrees.
        lookfrom: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Up direction used to orient the camera.
    """

    fov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        if not 0.0 < self.fov < 180.0:
            raise ValueError(f"fov must be in (0, 180) degrees, got {self.fov}")

    def to_dict(self) -> dict[str, object]:
        """Export the camera to a dictionary (for JSON serialization)."""
        return {
            "fov": self.fov,
            "lookfrom": list(self.lookfrom),
            "lookat": list(self.lookat),
            "vup": list(self.vup),
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "PinholeCamera":
        """Create a camera from a dictionary; missing keys use the defaults."""
        defaults = cls()
        return cls(
            fov=float(data.get("fov", defaults.fov)),
            lookfrom=tuple(data.get("lookfrom", defaults.lookfrom)),
            lookat=tuple(data.get("lookat", defaults.lookat)),
            vup=tuple(data.get("vup", defaults.vup)),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# tan(fov / 2)
_fov_adjustment = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If lookfrom equals lookat or vup is parallel to the
            view direction.
    """
    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_len = np.linalg.norm(w)
    if w_len < 1e-12:
        raise ValueError("Camera lookfrom and lookat must differ")
    w = w / w_len

    u = np.cross(vup, w)
    u_len = np.linalg.norm(u)
    if u_len < 1e-12:
        raise ValueError("Camera vup must not be parallel to the view direction")
    u = u / u_len

    v = np.cross(w, u)

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _fov_adjustment[None] = math.tan(math.radians(camera.fov) / 2.0)


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_prime_ray(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the ray through the center of pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera position with a unit direction.
    """
    fw = ti.cast(width, ti.f32)
    fh = ti.cast(height, ti.f32)
    aspect = fw / fh
    fov_adjustment = _fov_adjustment[None]
    sensor_x = ((ti.cast(x, ti.f32) + 0.5) / fw * 2.0 - 1.0) * aspect * fov_adjustment
    sensor_y = (1.0 - (ti.cast(y, ti.f32) + 0.5) / fh * 2.0) * fov_adjustment

    direction = tm.normalize(
        sensor_x * _camera_u[None] + sensor_y * _camera_v[None] - _camera_w[None]
    )
    return make_ray(_camera_origin[None], direction)


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w and fov_adjustment.
    """

    def _tuple(field_value) -> tuple[float, float, float]:
        return (float(field_value[0]), float(field_value[1]), float(field_value[2]))

    return {
        "origin": _tuple(_camera_origin[None]),
        "u": _tuple(_camera_u[None]),
        "v": _tuple(_camera_v[None]),
        "w": _tuple(_camera_w[None]),
        "fov_adjustment": float(_fov_adjustment[None]),
    }
