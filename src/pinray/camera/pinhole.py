"""Pinhole camera model for perspective projection ray generation.

The camera sits at ``origin`` and looks down -z with +y up. Its image plane
lies ``focal_length`` in front of it and is ``viewport_height`` tall and
``aspect_ratio * viewport_height`` wide. Four vectors describe the viewport
completely:

    horizontal        = (viewport_width, 0, 0)
    vertical          = (0, viewport_height, 0)
    lower_left_corner = origin - horizontal/2 - vertical/2 - (0, 0, focal_length)

A primary ray through normalized image coordinates (u, v) has direction

    lower_left_corner + u * horizontal + v * vertical - origin

which is deliberately left unnormalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from pinray.core.ray import Ray, make_ray, vec3
from pinray.core.rng import random_float

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class CameraViewport:
    """The four vectors that define primary-ray generation.

    Attributes:
        origin: Camera position.
        horizontal: Full-width edge of the viewport.
        vertical: Full-height edge of the viewport.
        lower_left_corner: Lower-left point of the viewport.
    """

    origin: tuple[float, float, float]
    horizontal: tuple[float, float, float]
    vertical: tuple[float, float, float]
    lower_left_corner: tuple[float, float, float]


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    A pinhole camera produces perfect perspective projection with no
    depth of field effects.

    Attributes:
        aspect_ratio: Width divided by height of the output image.
        viewport_height: Height of the image plane in world units.
        focal_length: Distance from the origin to the image plane.
        origin: Camera position in world space (x, y, z).
    """

    aspect_ratio: float
    viewport_height: float = 2.0
    focal_length: float = 1.0
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.viewport_height <= 0.0:
            raise ValueError(f"viewport_height must be positive, got {self.viewport_height}")
        if self.focal_length <= 0.0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")

    @property
    def viewport_width(self) -> float:
        return self.aspect_ratio * self.viewport_height

    def viewport(self) -> CameraViewport:
        """Compute the viewport vectors for this camera."""
        origin = np.array(self.origin, dtype=np.float64)
        horizontal = np.array([self.viewport_width, 0.0, 0.0])
        vertical = np.array([0.0, self.viewport_height, 0.0])
        lower_left = (
            origin - horizontal / 2.0 - vertical / 2.0 - np.array([0.0, 0.0, self.focal_length])
        )
        return CameraViewport(
            origin=tuple(origin.tolist()),
            horizontal=tuple(horizontal.tolist()),
            vertical=tuple(vertical.tolist()),
            lower_left_corner=tuple(lower_left.tolist()),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera_viewport(viewport: CameraViewport) -> None:
    """Upload viewport vectors supplied directly by the caller."""
    _camera_origin[None] = list(viewport.origin)
    _viewport_horizontal[None] = list(viewport.horizontal)
    _viewport_vertical[None] = list(viewport.vertical)
    _lower_left_corner[None] = list(viewport.lower_left_corner)


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    This must be called before rendering.

    Args:
        camera: Camera configuration.
    """
    setup_camera_viewport(camera.viewport())


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    The coordinates are normalized:
    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Args:
        u: Horizontal coordinate.
        v: Vertical coordinate.

    Returns:
        A Ray from the camera origin with an unnormalized direction.
    """
    origin = _camera_origin[None]
    direction = (
        _lower_left_corner[None]
        + u * _viewport_horizontal[None]
        + v * _viewport_vertical[None]
        - origin
    )
    return make_ray(origin, direction)


@ti.func
def get_ray_jittered(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    jitter: ti.i32,
    state: ti.u32,
):
    """Generate the primary ray for one sample of a pixel.

    With jitter enabled the ray passes through a uniform random point of the
    pixel cell, otherwise through its center. Pixel (0, 0) is bottom-left.

        u = (col + du) / (width - 1),  v = (row + dv) / (height - 1)

    The denominators are clamped to at least 1 so single-pixel images work.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        jitter: 1 for random sub-pixel offsets, 0 for the pixel center.
        state: RNG state.

    Returns:
        A tuple of (ray, state).
    """
    du = 0.5
    dv = 0.5
    rng = state
    if jitter != 0:
        du, rng = random_float(rng)
        dv, rng = random_float(rng)

    u = (ti.cast(col, ti.f32) + du) / ti.cast(ti.max(width - 1, 1), ti.f32)
    v = (ti.cast(row, ti.f32) + dv) / ti.cast(ti.max(height - 1, 1), ti.f32)

    return get_ray(u, v), rng


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical, lower_left.
    """
    origin_vec = _camera_origin[None]
    h_vec = _viewport_horizontal[None]
    vert_vec = _viewport_vertical[None]
    ll_vec = _lower_left_corner[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(vert_vec[0]), float(vert_vec[1]), float(vert_vec[2])),
        "lower_left": (float(ll_vec[0]), float(ll_vec[1]), float(ll_vec[2])),
    }
