"""Preview module for image output.

Components:
    export: Gamma quantization, RGB byte buffers and PNG writing (Pillow)

Example:
    >>> from pinray.preview import save_png, to_rgb_bytes
    >>> save_png(to_rgb_bytes(image), width, height, "output.png")
"""

from pinray.preview.export import (
    compute_rmse,
    quantize,
    save_png,
    save_png_from_array,
    to_rgb_bytes,
)

__all__ = [
    "quantize",
    "to_rgb_bytes",
    "save_png",
    "save_png_from_array",
    "compute_rmse",
]
