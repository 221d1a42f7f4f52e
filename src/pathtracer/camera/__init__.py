"""Camera module for prime ray generation.

Components:
    pinhole: Pinhole (perspective) camera with one ray per pixel center

Pixel coordinates have (0, 0) at the top-left corner of the image.
"""

from .pinhole import PinholeCamera, get_camera_info, get_prime_ray, setup_camera

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_prime_ray",
    "get_camera_info",
]
