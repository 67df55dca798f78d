"""Camera module for view and ray generation.

Components:
    pinhole: Fixed-orientation pinhole (perspective) camera

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    CameraViewport,
    PinholeCamera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
    setup_camera_viewport,
)

__all__ = [
    "CameraViewport",
    "PinholeCamera",
    "setup_camera",
    "setup_camera_viewport",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
