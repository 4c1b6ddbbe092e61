"""Image and render settings for a render job."""

from dataclasses import asdict, dataclass
from typing import Any

# Maximum supported image dimensions
MAX_IMAGE_WIDTH = 4096
MAX_IMAGE_HEIGHT = 4096


@dataclass(frozen=True)
class ImageSettings:
    """Output image geometry.

    Attributes:
        aspect: Width divided by height.
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If a dimension or the aspect ratio is not positive.
        RuntimeError: If a dimension exceeds the supported maximum.
    """

    aspect: float
    width: int
    height: int

    def __post_init__(self) -> None:
        if not self.aspect > 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {self.aspect}")
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image size must be at least 1x1, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise RuntimeError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )

    @classmethod
    def from_width(cls, width: int, aspect: float) -> "ImageSettings":
        """Derive the height from a width and an aspect ratio.

        The height is ``int(width / aspect)`` (truncated).
        """
        if not aspect > 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect}")
        return cls(aspect=aspect, width=width, height=int(width / aspect))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImageSettings":
        """Build image settings from a dictionary.

        'height' is optional and derived from 'width' and 'aspect' when
        missing.
        """
        aspect = float(data.get("aspect", 1.5))
        width = int(data.get("width", 200))
        if "height" in data:
            return cls(aspect=aspect, width=width, height=int(data["height"]))
        return cls.from_width(width, aspect)


@dataclass(frozen=True)
class RenderSettings:
    """Sampling parameters of a render.

    Attributes:
        frame_count: Number of independently rendered frames (one random
            stream each) averaged into the final image.
        samples_per_frame: Samples per pixel within each frame.
        max_depth: Maximum number of bounces per path.

    Raises:
        ValueError: If any value is less than 1.
    """

    frame_count: int = 4
    samples_per_frame: int = 25
    max_depth: int = 50

    def __post_init__(self) -> None:
        for name in ("frame_count", "samples_per_frame", "max_depth"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")

    @property
    def total_samples(self) -> int:
        """Samples per pixel over all frames."""
        return self.frame_count * self.samples_per_frame

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        defaults = cls()
        return cls(
            frame_count=int(data.get("frame_count", defaults.frame_count)),
            samples_per_frame=int(data.get("samples_per_frame", defaults.samples_per_frame)),
            max_depth=int(data.get("max_depth", defaults.max_depth)),
        )
