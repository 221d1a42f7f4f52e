"""Output module for writing rendered frames.

Components:
    export: PNG writing with Pillow and image comparison helpers
"""

from .export import compute_rmse, image_to_uint8, save_png

__all__ = [
    "save_png",
    "image_to_uint8",
    "compute_rmse",
]
