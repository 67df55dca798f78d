"""Axis-aligned rectangle primitive.

A rectangle lies in a plane of constant coordinate ``k`` along one world axis
(the normal axis) and spans ``[u0, u1] x [v0, v1]`` along the two remaining
axes (the tangent axes). Three orientations exist:

    XY: spans x and y at constant z, base normal +z
    XZ: spans x and z at constant y, base normal +y
    YZ: spans y and z at constant x, base normal +x

Setting ``flip`` negates the base normal, which is how walls and box faces
are made to point the way the scene needs.

Ray-rectangle intersection:
1. Solve for the plane crossing along the normal axis (parallel rays miss).
2. Reject t outside [t_min, t_max].
3. Project the hit point onto the tangent axes and reject it outside the
   rectangle bounds.

Example:
    >>> @ti.kernel
    ... def floor_hit() -> ti.i32:
    ...     floor = xz_rect(-1.0, 1.0, -2.0, 0.0, -0.5, 0)
    ...     rec = hit_rect(vec3(0, 0, -1), vec3(0, -1, 0), floor, 1e-3, 1e6)
    ...     return rec.hit
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pinray.geometry.hittable import HitRecord, set_face_normal

vec3 = tm.vec3

# Axis indices
AXIS_X = 0
AXIS_Y = 1
AXIS_Z = 2

# Rays closer than this to parallel with the plane are treated as misses
PARALLEL_EPSILON = 1e-8


@dataclass(frozen=True)
class RectOrientation:
    """Which world axes span a rectangle and which one supplies its normal.

    Attributes:
        tangent_u: Axis index of the first in-plane coordinate.
        tangent_v: Axis index of the second in-plane coordinate.
        normal_axis: Axis index perpendicular to the plane.
        base_normal: Unit normal before any flip.
    """

    tangent_u: int
    tangent_v: int
    normal_axis: int
    base_normal: tuple[float, float, float]

    def outward_normal(self, flip: bool = False) -> tuple[float, float, float]:
        """Return the base normal, negated when ``flip`` is set."""
        if flip:
            return (-self.base_normal[0], -self.base_normal[1], -self.base_normal[2])
        return self.base_normal


XY = RectOrientation(AXIS_X, AXIS_Y, AXIS_Z, (0.0, 0.0, 1.0))
XZ = RectOrientation(AXIS_X, AXIS_Z, AXIS_Y, (0.0, 1.0, 0.0))
YZ = RectOrientation(AXIS_Y, AXIS_Z, AXIS_X, (1.0, 0.0, 0.0))


@ti.dataclass
class AxisAlignedRect:
    """An axis-aligned rectangle.

    Attributes:
        tangent_u: Axis index of the u coordinate.
        tangent_v: Axis index of the v coordinate.
        normal_axis: Axis index of the plane normal.
        normal: Outward normal with the flip already applied.
        u0, u1: Bounds along tangent_u (u0 <= u1, not enforced).
        v0, v1: Bounds along tangent_v (v0 <= v1, not enforced).
        k: Plane offset along normal_axis.
    """

    tangent_u: ti.i32
    tangent_v: ti.i32
    normal_axis: ti.i32
    normal: vec3
    u0: ti.f32
    u1: ti.f32
    v0: ti.f32
    v1: ti.f32
    k: ti.f32


@ti.func
def _flipped(normal: vec3, flip: ti.i32) -> vec3:
    result = normal
    if flip != 0:
        result = -normal
    return result


@ti.func
def xy_rect(x0: ti.f32, x1: ti.f32, y0: ti.f32, y1: ti.f32, k: ti.f32, flip: ti.i32) -> AxisAlignedRect:
    """Rectangle on the plane z = k spanning [x0, x1] x [y0, y1]."""
    return AxisAlignedRect(
        tangent_u=AXIS_X,
        tangent_v=AXIS_Y,
        normal_axis=AXIS_Z,
        normal=_flipped(vec3(0.0, 0.0, 1.0), flip),
        u0=x0,
        u1=x1,
        v0=y0,
        v1=y1,
        k=k,
    )


@ti.func
def xz_rect(x0: ti.f32, x1: ti.f32, z0: ti.f32, z1: ti.f32, k: ti.f32, flip: ti.i32) -> AxisAlignedRect:
    """Rectangle on the plane y = k spanning [x0, x1] x [z0, z1]."""
    return AxisAlignedRect(
        tangent_u=AXIS_X,
        tangent_v=AXIS_Z,
        normal_axis=AXIS_Y,
        normal=_flipped(vec3(0.0, 1.0, 0.0), flip),
        u0=x0,
        u1=x1,
        v0=z0,
        v1=z1,
        k=k,
    )


@ti.func
def yz_rect(y0: ti.f32, y1: ti.f32, z0: ti.f32, z1: ti.f32, k: ti.f32, flip: ti.i32) -> AxisAlignedRect:
    """Rectangle on the plane x = k spanning [y0, y1] x [z0, z1]."""
    return AxisAlignedRect(
        tangent_u=AXIS_Y,
        tangent_v=AXIS_Z,
        normal_axis=AXIS_X,
        normal=_flipped(vec3(1.0, 0.0, 0.0), flip),
        u0=y0,
        u1=y1,
        v0=z0,
        v1=z1,
        k=k,
    )


@ti.func
def axis_component(v: vec3, axis: ti.i32) -> ti.f32:
    """Select the x, y or z component of v by axis index."""
    result = v.x
    if axis == AXIS_Y:
        result = v.y
    elif axis == AXIS_Z:
        result = v.z
    return result


@ti.func
def hit_rect(
    ray_origin: vec3,
    ray_direction: vec3,
    rect: AxisAlignedRect,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-rectangle intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        rect: The rectangle to test.
        t_min: Minimum accepted t (inclusive).
        t_max: Maximum accepted t (inclusive).

    Returns:
        A HitRecord; check its ``hit`` field.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    denom = axis_component(ray_direction, rect.normal_axis)

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = (rect.k - axis_component(ray_origin, rect.normal_axis)) / denom

        if t >= t_min and t <= t_max:
            u = axis_component(ray_origin, rect.tangent_u) + t * axis_component(
                ray_direction, rect.tangent_u
            )
            v = axis_component(ray_origin, rect.tangent_v) + t * axis_component(
                ray_direction, rect.tangent_v
            )

            if u >= rect.u0 and u <= rect.u1 and v >= rect.v0 and v <= rect.v1:
                did_hit = 1
                hit_t = t
                hit_point = ray_origin + t * ray_direction
                hit_normal, is_front_face = set_face_normal(ray_direction, rect.normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )
