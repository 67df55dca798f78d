"""Scene-level primitive intersection testing (the hittable list).

This module stores every primitive of the scene in Taichi fields and answers
nearest-hit and any-hit queries against all of them. There is no spatial
index: each query scans spheres, then rectangles, then boxes, shrinking the
search interval to the closest hit found so far, so the result is the
globally nearest intersection in the original range.

Each primitive carries a material ID; many primitives may share one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.geometry.rect import XZ
    >>> from pinray.scene.intersection import add_sphere, add_rect, clear_scene
    >>> clear_scene()
    >>> add_sphere((0, 0, -1), 0.5, material_id=0)
    >>> add_rect(XZ, -5, 5, -5, 5, -0.5, material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pinray.geometry.box import Box, hit_box
from pinray.geometry.hittable import HitRecord
from pinray.geometry.rect import AxisAlignedRect, RectOrientation, hit_rect
from pinray.geometry.sphere import Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any primitive, 0 on a miss.
        t: Ray parameter of the nearest intersection.
        point: The nearest intersection point.
        normal: Unit normal facing against the ray.
        front_face: 1 if the ray hit the outward-facing side.
        material_id: Material of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_RECTS = 1024
MAX_BOXES = 256

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Rectangle storage: axes are (tangent_u, tangent_v, normal_axis),
# bounds are (u0, u1, v0, v1)
rect_axes = ti.Vector.field(3, dtype=ti.i32, shape=MAX_RECTS)
rect_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RECTS)
rect_bounds = ti.Vector.field(4, dtype=ti.f32, shape=MAX_RECTS)
rect_offsets = ti.field(dtype=ti.f32, shape=MAX_RECTS)
rect_material_ids = ti.field(dtype=ti.i32, shape=MAX_RECTS)
num_rects = ti.field(dtype=ti.i32, shape=())

# Box storage
box_minimums = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_maximums = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_material_ids = ti.field(dtype=ti.i32, shape=MAX_BOXES)
num_boxes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all primitives from the scene.

    Resets the primitive counts to zero. Field contents are overwritten as
    new primitives are added.
    """
    num_spheres[None] = 0
    num_rects[None] = 0
    num_boxes[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The signed radius (negative for an inward-facing sphere).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_rect(
    orientation: RectOrientation,
    u0: float,
    u1: float,
    v0: float,
    v1: float,
    k: float,
    material_id: int = 0,
    flip: bool = False,
) -> int:
    """Add an axis-aligned rectangle to the scene.

    Args:
        orientation: One of XY, XZ, YZ.
        u0, u1: Bounds along the orientation's first tangent axis.
        v0, v1: Bounds along the second tangent axis.
        k: Plane offset along the normal axis.
        material_id: The material ID to associate with this rectangle.
        flip: Negate the orientation's base normal.

    Returns:
        The index of the added rectangle.

    Raises:
        RuntimeError: If the maximum number of rectangles is exceeded.
    """
    idx = num_rects[None]
    if idx >= MAX_RECTS:
        raise RuntimeError(f"Maximum number of rectangles ({MAX_RECTS}) exceeded")
    rect_axes[idx] = (orientation.tangent_u, orientation.tangent_v, orientation.normal_axis)
    rect_normals[idx] = orientation.outward_normal(flip)
    rect_bounds[idx] = (u0, u1, v0, v1)
    rect_offsets[idx] = k
    rect_material_ids[idx] = material_id
    num_rects[None] = idx + 1
    return idx


def add_box(
    minimum: tuple[float, float, float],
    maximum: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add an axis-aligned box to the scene.

    Args:
        minimum: Corner with the smallest coordinates.
        maximum: Corner with the largest coordinates.
        material_id: The material ID shared by all six faces.

    Returns:
        The index of the added box.

    Raises:
        RuntimeError: If the maximum number of boxes is exceeded.
    """
    idx = num_boxes[None]
    if idx >= MAX_BOXES:
        raise RuntimeError(f"Maximum number of boxes ({MAX_BOXES}) exceeded")
    box_minimums[idx] = minimum
    box_maximums[idx] = maximum
    box_material_ids[idx] = material_id
    num_boxes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_rect_count() -> int:
    """Get the number of rectangles in the scene."""
    return int(num_rects[None])


def get_box_count() -> int:
    """Get the number of boxes in the scene."""
    return int(num_boxes[None])


@ti.func
def _sphere_at(i: ti.i32) -> Sphere:
    return Sphere(center=sphere_centers[i], radius=sphere_radii[i])


@ti.func
def _rect_at(i: ti.i32) -> AxisAlignedRect:
    axes = rect_axes[i]
    bounds = rect_bounds[i]
    return AxisAlignedRect(
        tangent_u=axes[0],
        tangent_v=axes[1],
        normal_axis=axes[2],
        normal=rect_normals[i],
        u0=bounds[0],
        u1=bounds[1],
        v0=bounds[2],
        v1=bounds[3],
        k=rect_offsets[i],
    )


@ti.func
def _box_at(i: ti.i32) -> Box:
    return Box(minimum=box_minimums[i], maximum=box_maximums[i])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the whole scene.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray_origin, ray_direction, _sphere_at(i), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    for i in range(num_rects[None]):
        rec = hit_rect(ray_origin, ray_direction, _rect_at(i), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, rect_material_ids[i])

    for i in range(num_boxes[None]):
        rec = hit_box(ray_origin, ray_direction, _box_at(i), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, box_material_ids[i])

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test whether anything in the scene blocks the ray (shadow query).

    Returns:
        1 if any primitive was hit within [t_min, t_max], 0 otherwise.
    """
    hit_any = 0

    for i in range(num_spheres[None]):
        if hit_any == 0:
            rec = hit_sphere(ray_origin, ray_direction, _sphere_at(i), t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    for i in range(num_rects[None]):
        if hit_any == 0:
            rec = hit_rect(ray_origin, ray_direction, _rect_at(i), t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    for i in range(num_boxes[None]):
        if hit_any == 0:
            rec = hit_box(ray_origin, ray_direction, _box_at(i), t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    return hit_any
