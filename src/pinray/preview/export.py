"""Image quantization and PNG export.

Rendered images are linear float RGB. Converting them to 8-bit output takes
three steps per channel:

    1. gamma encode: c ** (1 / gamma)  (gamma 2.0 is a square root)
    2. clamp to [0, 0.999]
    3. scale by 256 and truncate

The result is a row-major RGB byte buffer, one row per scanline in the
renderer's scan order (top row first), which Pillow writes as an 8-bit
truecolor PNG.

Example:
    >>> from pinray.preview.export import to_rgb_bytes, save_png
    >>> data = to_rgb_bytes(image)  # image: (H, W, 3) float array
    >>> save_png(data, width, height, "output.png")
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Upper clamp before scaling, keeps 1.0 from overflowing to 256
MAX_CHANNEL = 0.999


def quantize(
    image: npt.NDArray[np.floating],
    gamma: float = 2.0,
) -> npt.NDArray[np.uint8]:
    """Gamma encode, clamp and convert a linear image to 8 bits per channel.

    Negative and NaN values map to 0, values at or above 1 map to 255.

    Args:
        image: Linear image array of any shape, typically (H, W, 3).
        gamma: Encoding gamma. Must be positive.

    Returns:
        Array of the same shape with dtype uint8.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    linear = np.nan_to_num(np.asarray(image, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    encoded = np.power(np.maximum(linear, 0.0), 1.0 / gamma)
    clamped = np.clip(encoded, 0.0, MAX_CHANNEL)
    return (256.0 * clamped).astype(np.uint8)


def to_rgb_bytes(image: npt.NDArray[np.floating], gamma: float = 2.0) -> bytes:
    """Quantize an (H, W, 3) image into a row-major RGB byte buffer."""
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    return quantize(image, gamma).tobytes()


def save_png(rgb_bytes: bytes, width: int, height: int, filepath: str | Path) -> None:
    """Write a row-major RGB byte buffer as an 8-bit truecolor PNG.

    Args:
        rgb_bytes: 3 * width * height bytes, top row first.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path.

    Raises:
        ValueError: If the buffer length does not match the dimensions.
        OSError: If the file cannot be written.
    """
    expected = 3 * width * height
    if len(rgb_bytes) != expected:
        raise ValueError(
            f"RGB buffer holds {len(rgb_bytes)} bytes, expected {expected} "
            f"for {width}x{height}"
        )

    pil_image = PILImage.frombytes("RGB", (width, height), bytes(rgb_bytes))
    pil_image.save(filepath, format="PNG")


def save_png_from_array(
    image: npt.NDArray[np.floating],
    filepath: str | Path,
    *,
    gamma: float = 2.0,
) -> None:
    """Quantize a linear (H, W, 3) image and save it as a PNG file."""
    height, width = image.shape[:2]
    save_png(to_rgb_bytes(image, gamma), width, height, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
