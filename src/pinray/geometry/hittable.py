"""Hit record shared by every intersectable primitive.

Each primitive exposes ``hit_<shape>(ray_origin, ray_direction, shape,
t_min, t_max) -> HitRecord``. A miss is reported through the ``hit`` flag;
intersection routines never raise. The stored normal always faces against
the incoming ray, and ``front_face`` records whether that required a flip.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal oriented against the ray, so that
            dot(ray_direction, normal) <= 0. Only valid if hit == 1.
        front_face: 1 if the ray arrived on the side the outward normal
            points to, 0 if it arrived from behind.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient an outward normal against the incoming ray.

    Returns:
        A tuple (normal, front_face).
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return normal, front_face


@ti.func
def miss_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )
