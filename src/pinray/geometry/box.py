"""Axis-aligned box primitive built from six rectangles.

A box has no volume test of its own: a ray hits a box exactly when it hits
one of the six faces, and the nearest face wins. Faces carry outward
normals (+z on the max-z face, -z on the min-z face, and likewise for y
and x), so ``front_face`` is 1 for rays arriving from outside.
"""

import taichi as ti
import taichi.math as tm

from pinray.geometry.hittable import HitRecord, miss_record
from pinray.geometry.rect import AxisAlignedRect, hit_rect, xy_rect, xz_rect, yz_rect

vec3 = tm.vec3


@ti.dataclass
class Box:
    """An axis-aligned box.

    Attributes:
        minimum: Corner with the smallest coordinates.
        maximum: Corner with the largest coordinates.
    """

    minimum: vec3
    maximum: vec3


@ti.func
def _closer_side(
    ray_origin: vec3,
    ray_direction: vec3,
    rect: AxisAlignedRect,
    t_min: ti.f32,
    best: HitRecord,
    closest_t: ti.f32,
):
    """Keep whichever of ``best`` and the hit on ``rect`` is nearer."""
    result = best
    new_closest = closest_t
    rec = hit_rect(ray_origin, ray_direction, rect, t_min, closest_t)
    if rec.hit == 1:
        result = rec
        new_closest = rec.t
    return result, new_closest


@ti.func
def hit_box(
    ray_origin: vec3,
    ray_direction: vec3,
    box: Box,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Nearest intersection of a ray with the six faces of a box."""
    lo = box.minimum
    hi = box.maximum

    best = miss_record()
    closest_t = t_max

    best, closest_t = _closer_side(
        ray_origin, ray_direction, xy_rect(lo.x, hi.x, lo.y, hi.y, hi.z, 0), t_min, best, closest_t
    )
    best, closest_t = _closer_side(
        ray_origin, ray_direction, xy_rect(lo.x, hi.x, lo.y, hi.y, lo.z, 1), t_min, best, closest_t
    )
    best, closest_t = _closer_side(
        ray_origin, ray_direction, xz_rect(lo.x, hi.x, lo.z, hi.z, hi.y, 0), t_min, best, closest_t
    )
    best, closest_t = _closer_side(
        ray_origin, ray_direction, xz_rect(lo.x, hi.x, lo.z, hi.z, lo.y, 1), t_min, best, closest_t
    )
    best, closest_t = _closer_side(
        ray_origin, ray_direction, yz_rect(lo.y, hi.y, lo.z, hi.z, hi.x, 0), t_min, best, closest_t
    )
    best, closest_t = _closer_side(
        ray_origin, ray_direction, yz_rect(lo.y, hi.y, lo.z, hi.z, lo.x, 1), t_min, best, closest_t
    )

    return best


@ti.func
def make_box(minimum: vec3, maximum: vec3) -> Box:
    return Box(minimum=minimum, maximum=maximum)
