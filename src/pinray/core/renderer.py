"""Render target, sample accumulation and image assembly.

The renderer owns a preallocated accumulation buffer. Each call to the
sampling kernel adds one sample to every pixel; the final color of a pixel is
the accumulated sum divided by the number of samples taken.

Every sample draws from its own random stream, seeded from
``(seed, pixel_index, sample_index)``. Sample indices keep counting across
calls, so rendering 8 samples at once or as 4 + 4 gives the same image, and
two renders with the same seed are identical.

Pixel (col, row) uses the camera convention: row 0 is the bottom of the
image. Images returned to Python are in scan order instead: row ``height-1``
first, columns left to right, which is the top-down order PNG expects.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.core.config import RenderConfig
    >>> from pinray.core.renderer import render_image
    >>> from pinray.scene.room import create_room_scene
    >>>
    >>> scene = create_room_scene()
    >>> config = RenderConfig(image_width=320, samples_per_pixel=16)
    >>> data = render_image(config)  # 3 * 320 * 180 bytes
"""

import logging
import time
from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pinray.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera
from pinray.core.config import RenderConfig
from pinray.core.integrator import ray_color
from pinray.core.rng import seed_sample
from pinray.preview.export import to_rgb_bytes
from pinray.scene.intersection import get_box_count, get_rect_count, get_sphere_count
from pinray.scene.lights import get_light_count

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Callback receives (current_samples, target_samples)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of all samples per pixel, indexed [col, row]
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Samples accumulated so far (identical for every pixel)
_samples_taken = ti.field(dtype=ti.i32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the accumulated samples."""
    _color_buffer.fill(0.0)
    _samples_taken[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def get_total_samples() -> int:
    """Number of samples accumulated per pixel so far."""
    return int(_samples_taken[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Sampling Kernels
# =============================================================================


# Stand-in for +inf samples; large enough to saturate after averaging
MAX_SAMPLE_RADIANCE = 1e20


@ti.func
def sanitize_sample(color: vec3) -> vec3:
    """Make a sample safe to accumulate.

    NaN and negative components become 0. Positive infinity becomes
    MAX_SAMPLE_RADIANCE, so the pixel still quantizes to full brightness.
    """
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or result[c] < 0.0:
            result[c] = 0.0
        elif result[c] > MAX_SAMPLE_RADIANCE:
            result[c] = MAX_SAMPLE_RADIANCE
    return result


@ti.func
def _sample_pixel(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    seed: ti.u32,
    sample_index: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
) -> vec3:
    """Trace one primary-ray sample through a pixel."""
    state = seed_sample(seed, row * width + col, sample_index)
    ray, state = get_ray_jittered(col, row, width, height, jitter, state)
    color, _ = ray_color(ray.origin, ray.direction, max_depth, state)
    return sanitize_sample(color)


@ti.kernel
def _render_one_spp(
    width: ti.i32,
    height: ti.i32,
    seed: ti.u32,
    sample_index: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
):
    """Add one sample to every pixel."""
    for i, j in ti.ndrange(width, height):
        _color_buffer[i, j] += _sample_pixel(
            i, j, width, height, seed, sample_index, max_depth, jitter
        )


@ti.kernel
def _render_single_pixel(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    num_samples: ti.i32,
    seed: ti.u32,
    max_depth: ti.i32,
    jitter: ti.i32,
) -> vec3:
    total = vec3(0.0, 0.0, 0.0)
    ti.loop_config(serialize=True)
    for s in range(num_samples):
        total += _sample_pixel(col, row, width, height, seed, s, max_depth, jitter)
    return total / ti.cast(num_samples, ti.f32)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_samples(
    num_samples: int,
    seed: int = 0,
    max_depth: int = 50,
    jitter: bool = True,
    callback: ProgressCallback | None = None,
    batch_size: int = 1,
) -> None:
    """Accumulate more samples into the render target.

    Can be called repeatedly; sample indices continue where the previous
    call stopped.

    Args:
        num_samples: Number of samples to add per pixel.
        seed: Seed for the random streams.
        max_depth: Maximum number of surface interactions per path.
        jitter: Randomize the sub-pixel position of each primary ray.
        callback: Called after each batch with (current, target) samples.
        batch_size: Samples per batch between callbacks and progress logs.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    if num_samples <= 0:
        return

    width, height = get_image_dimensions()
    seed_u32 = seed & 0xFFFFFFFF
    start = get_total_samples()
    target = start + num_samples
    batch_size = max(1, batch_size)

    done = start
    while done < target:
        batch_end = min(done + batch_size, target)
        for sample_index in range(done, batch_end):
            _render_one_spp(width, height, seed_u32, sample_index, max_depth, int(jitter))
        done = batch_end
        _samples_taken[None] = done

        logger.debug("Accumulated %d/%d samples", done, target)
        if callback is not None:
            callback(done, target)


def render_pixel(
    col: int,
    row: int,
    num_samples: int,
    seed: int = 0,
    max_depth: int = 50,
    jitter: bool = True,
) -> tuple[float, float, float]:
    """Average the first num_samples samples of a single pixel.

    Uses the same random streams as render_samples(), so the result matches
    the corresponding pixel of a full render.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = bottom).
        num_samples: Number of samples to average.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the pixel is outside the target or num_samples < 1.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    if not (0 <= col < width and 0 <= row < height):
        raise ValueError(f"Pixel ({col}, {row}) outside {width}x{height} render target")
    if num_samples < 1:
        raise ValueError(f"num_samples must be at least 1, got {num_samples}")

    color = _render_single_pixel(
        col, row, width, height, num_samples, seed & 0xFFFFFFFF, max_depth, int(jitter)
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear image in scan order.

    Returns:
        Array of shape (height, width, 3), dtype float32. Row 0 is the top
        of the image. All zeros before any sample has been taken.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    samples = max(get_total_samples(), 1)

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :] / np.float32(samples)

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Row index 0 is the bottom of the viewport; scan order starts at the top
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)


def _log_scene_summary(config: RenderConfig) -> None:
    width, height = config.size
    logger.info(
        "Scene: %d spheres, %d rects, %d boxes, %d lights",
        get_sphere_count(),
        get_rect_count(),
        get_box_count(),
        get_light_count(),
    )
    logger.info(
        "Rendering %dx%d, %d samples per pixel, max depth %d, seed %d",
        width,
        height,
        config.samples_per_pixel,
        config.max_depth,
        config.seed,
    )


def render_linear(
    config: RenderConfig,
    camera: PinholeCamera | None = None,
    callback: ProgressCallback | None = None,
    batch_size: int = 10,
) -> npt.NDArray[np.float32]:
    """Render the current scene to a linear float image.

    Args:
        config: Image size and sampling parameters.
        camera: Camera to render from; defaults to a pinhole camera with
            the config's aspect ratio at the origin.
        callback: Progress callback, see render_samples().
        batch_size: Samples per progress report.

    Returns:
        Array of shape (height, width, 3) in scan order (top row first).
    """
    if camera is None:
        camera = PinholeCamera(aspect_ratio=config.aspect_ratio)
    setup_camera(camera)

    width, height = config.size
    setup_render_target(width, height)
    _log_scene_summary(config)

    start_time = time.perf_counter()
    render_samples(
        config.samples_per_pixel,
        seed=config.seed,
        max_depth=config.max_depth,
        jitter=config.jitter,
        callback=callback,
        batch_size=batch_size,
    )
    ti.sync()
    logger.info("Render finished in %.2f s", time.perf_counter() - start_time)

    return get_image_numpy()


def render_image(
    config: RenderConfig,
    camera: PinholeCamera | None = None,
    callback: ProgressCallback | None = None,
    batch_size: int = 10,
) -> bytes:
    """Render the current scene to a quantized RGB byte buffer.

    Returns:
        3 * width * height bytes, row-major, top row first.
    """
    return to_rgb_bytes(render_linear(config, camera, callback, batch_size))
