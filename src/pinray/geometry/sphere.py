"""Sphere primitive with robust ray-sphere intersection.

The ray-sphere intersection solves

    |ray_origin + t * ray_direction - center|^2 = radius^2

which expands to a*t^2 + 2*h*t + c = 0 with

    a = dot(direction, direction)
    h = dot(direction, origin - center)   (half of the usual 'b')
    c = |origin - center|^2 - radius^2

Roots are computed with the cancellation-free form from Ray Tracing Gems
(q = -(h + sign(h) * sqrt(discriminant)), t0 = q / a, t1 = c / q).

The radius is sign-significant: a negative radius describes the same surface
with the outward normal reversed. Nesting a negative-radius sphere inside a
glass sphere of the same center models a hollow glass shell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pinray.geometry.hittable import HitRecord, set_face_normal

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and signed radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius. Negative values invert the surface normal.
    """

    center: vec3
    radius: ti.f32


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 without catastrophic cancellation.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # q near zero: fall back to the textbook formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The nearer root is preferred; if it falls outside [t_min, t_max] the
    farther root is tried. Both bounds are inclusive.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (any non-zero length).
        sphere: The sphere to test intersection against.
        t_min: Minimum accepted t (avoids self-intersection).
        t_max: Maximum accepted t (closest hit so far, or shadow distance).

    Returns:
        A HitRecord; check its ``hit`` field.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = t >= t_min and t <= t_max
        if not valid:
            t = t1
            valid = t >= t_min and t <= t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

            # Dividing by the signed radius flips the normal of hollow spheres
            outward_normal = (hit_point - sphere.center) / sphere.radius
            hit_normal, is_front_face = set_face_normal(ray_direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    return Sphere(center=center, radius=radius)
