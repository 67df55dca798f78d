"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    hittable: Hit record and face-orientation helper shared by all shapes
    sphere: Sphere primitive (signed radius) with ray-sphere intersection
    rect: Axis-aligned rectangles in the XY, XZ and YZ orientations
    box: Axis-aligned box composed of six rectangles

All intersection routines are implemented as Taichi functions (@ti.func).
Ray-object intersection follows the pattern:
    record = hit_<shape>(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .box import Box, hit_box, make_box
from .hittable import HitRecord, miss_record, set_face_normal
from .rect import (
    XY,
    XZ,
    YZ,
    AxisAlignedRect,
    RectOrientation,
    axis_component,
    hit_rect,
    xy_rect,
    xz_rect,
    yz_rect,
)
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "miss_record",
    "set_face_normal",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "AxisAlignedRect",
    "RectOrientation",
    "XY",
    "XZ",
    "YZ",
    "axis_component",
    "hit_rect",
    "xy_rect",
    "xz_rect",
    "yz_rect",
    "Box",
    "hit_box",
    "make_box",
]
