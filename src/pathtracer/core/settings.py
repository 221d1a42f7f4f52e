"""Render settings shared by the integrator and the frame renderer.

Example:
    >>> settings = RenderSettings(width=320, height=180, samples_per_pixel=4)
    >>> settings.divisor
    4.0
    >>> RenderSettings.from_dict(settings.to_dict()) == settings
    True
"""

from dataclasses import asdict, dataclass, fields
from typing import Any

# Hard limits of the preallocated render buffers
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Hard limit of concurrent sub-paths per pixel (size of the path state)
MAX_PATH_CAPACITY = 32

# Defaults
DEFAULT_SAMPLES_PER_PIXEL = 16
DEFAULT_MAX_BOUNCES = 8
DEFAULT_BIAS = 0.01
DEFAULT_MAX_PATHS = 16


@dataclass
class RenderSettings:
    """Parameters of a single frame.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Independent path samples traced per pixel.
        max_bounces: Rounds each sample's work list is advanced.
        bias: Distance new ray origins are pushed off a surface.
        max_paths: Maximum concurrent sub-paths per sample; refraction forks
            beyond this are dropped.
        normalization: Divisor applied to each pixel's summed radiance.
            ``None`` divides by ``samples_per_pixel``.
        seed: Seed of the per-pixel random generators.
    """

    width: int = 1280
    height: int = 720
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_bounces: int = DEFAULT_MAX_BOUNCES
    bias: float = DEFAULT_BIAS
    max_paths: int = DEFAULT_MAX_PATHS
    normalization: float | None = None
    seed: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_bounces < 0:
            raise ValueError(f"max_bounces must be non-negative, got {self.max_bounces}")
        if self.bias < 0.0:
            raise ValueError(f"bias must be non-negative, got {self.bias}")
        if not 1 <= self.max_paths <= MAX_PATH_CAPACITY:
            raise ValueError(
                f"max_paths must be in [1, {MAX_PATH_CAPACITY}], got {self.max_paths}"
            )
        if self.normalization is not None and self.normalization <= 0.0:
            raise ValueError(f"normalization must be positive, got {self.normalization}")
        if not 0 <= self.seed < 2**32:
            raise ValueError(f"seed must fit in 32 bits, got {self.seed}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @property
    def divisor(self) -> float:
        """The effective divisor for summed radiance."""
        if self.normalization is None:
            return float(self.samples_per_pixel)
        return float(self.normalization)

    def to_dict(self) -> dict[str, Any]:
        """Export the settings to a dictionary (for JSON serialization)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Create settings from a dictionary, ignoring unknown keys.

        Raises:
            ValueError: If any value is invalid.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
