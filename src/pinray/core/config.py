"""Render configuration.

A RenderConfig describes the output image and the sampling budget. It can be
built directly, from a dictionary, or from a JSON file:

    {
        "aspect_ratio": 1.7777,
        "image_width": 400,
        "samples_per_pixel": 50,
        "max_depth": 20,
        "seed": 7,
        "output_path": "room.png"
    }

Keys that are missing fall back to the dataclass defaults; unknown keys are
rejected.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Output image size and sampling parameters.

    Attributes:
        aspect_ratio: Image width divided by height.
        image_width: Width in pixels.
        image_height: Height in pixels; derived as int(width / aspect_ratio)
            when None.
        samples_per_pixel: Primary rays averaged per pixel.
        max_depth: Maximum number of surface interactions per path.
        seed: Seed for the per-sample random streams.
        jitter: Randomize the sub-pixel position of each primary ray.
        output_path: Destination PNG path.
    """

    aspect_ratio: float = 16.0 / 9.0
    image_width: int = 800
    image_height: int | None = None
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0
    jitter: bool = True
    output_path: str = "render.png"

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width < 1:
            raise ValueError(f"image_width must be at least 1, got {self.image_width}")
        if self.image_height is None:
            self.image_height = int(self.image_width / self.aspect_ratio)
        if self.image_height < 1:
            raise ValueError(
                f"image_height must be at least 1, got {self.image_height} "
                f"(width {self.image_width}, aspect {self.aspect_ratio})"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) in pixels."""
        return self.image_width, int(self.image_height)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a config from a dictionary of field values.

        Raises:
            ValueError: If the dictionary holds unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown render config keys: {', '.join(unknown)}")
        return cls(**data)


def load_render_config(path: str | Path) -> RenderConfig:
    """Load a RenderConfig from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the JSON is malformed or holds invalid values.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Render config in {path} must be a JSON object")
    config = RenderConfig.from_dict(data)
    logger.debug("Loaded render config from %s: %s", path, config)
    return config


def default_output_name(
    config: RenderConfig,
    max_depth: int | None = None,
    now: datetime | None = None,
) -> str:
    """Build a timestamped file name describing a render.

    Format: ``render_<W>x<H>_<N>samples_<D>depth_<YYYYMMDD>_<HHMMSS>.png``

    Args:
        config: The render configuration.
        max_depth: Depth to report; defaults to config.max_depth.
        now: Timestamp; defaults to the current local time.
    """
    width, height = config.size
    depth = config.max_depth if max_depth is None else max_depth
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"render_{width}x{height}_{config.samples_per_pixel}samples_{depth}depth_{stamp}.png"
