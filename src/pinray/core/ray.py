"""Ray data structure and vector utilities for the ray tracer.

This module provides the Ray dataclass, the vector helpers shared by the
geometry and material code, and the Monte Carlo direction samplers. One
3-component type serves as point, direction and color; ``Point3`` and
``Color`` are aliases that document intent at call sites.

Samplers take an explicit generator state (see ``pinray.core.rng``) and
return the advanced state together with their result.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from pinray.core.rng import random_float, random_range

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
Point3 = vec3
Color = vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; intersection routines handle any non-zero length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The caller must not pass a zero-length vector.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident vector about a unit normal: v - 2(v.n)n."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_incident: vec3, normal: vec3, refraction_ratio: ti.f32) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    The refracted direction is split into the component perpendicular to the
    normal and the component parallel to it:

        perp     = ratio * (v + cos_theta * n)
        parallel = -sqrt(|1 - |perp|^2|) * n

    The caller is responsible for routing total internal reflection to
    ``reflect`` first; the absolute value keeps the result finite anyway.

    Args:
        unit_incident: The incoming direction (unit length).
        normal: The surface normal facing the incident ray (unit length).
        refraction_ratio: n_incident / n_transmitted.

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-unit_incident, normal), 1.0)
    perpendicular = refraction_ratio * (unit_incident + cos_theta * normal)
    parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(perpendicular, perpendicular))) * normal
    return perpendicular + parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        refraction_ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is below 1e-8 in magnitude."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point inside the unit sphere.

    Uses rejection sampling. Acceptance probability is about 52%, so the
    iteration cap is never reached in practice.

    Returns:
        A tuple (point, new_state) with |point| < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    rng = state
    found = False
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            x, rng = random_range(rng, -1.0, 1.0)
            y, rng = random_range(rng, -1.0, 1.0)
            z, rng = random_range(rng, -1.0, 1.0)
            p = vec3(x, y, z)
            if length_squared(p) < 1.0:
                found = True
    return p, rng


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Returns:
        A tuple (unit_vector, new_state).
    """
    p, rng = random_in_unit_sphere(state)
    result = vec3(1.0, 0.0, 0.0)
    if length_squared(p) > 1e-12:
        result = normalize(p)
    return result, rng


@ti.func
def random_cosine_direction(state: ti.u32):
    """Generate a cosine-weighted direction in the local z-up frame.

    Maps a uniform disk sample (r = sqrt(u1), phi = 2 pi u2) onto the
    hemisphere with height z = sqrt(1 - r^2). The density is cos(theta)/pi.

    Returns:
        A tuple (local_direction, new_state).
    """
    r1, rng = random_float(state)
    r2, rng = random_float(rng)
    r = ti.sqrt(r1)
    phi = 2.0 * tm.pi * r2
    x = r * ti.cos(phi)
    y = r * ti.sin(phi)
    z = ti.sqrt(tm.max(0.0, 1.0 - r * r))
    return vec3(x, y, z), rng


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis whose z-axis is the given unit normal.

    Returns:
        A tuple (tangent, bitangent, normal).
    """
    # Helper axis must not be near-parallel to the normal
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(normal.x) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    tangent = normalize(cross(normal, a))
    bitangent = cross(normal, tangent)
    return tangent, bitangent, normal


@ti.func
def local_to_world(local_dir: vec3, tangent: vec3, bitangent: vec3, normal: vec3) -> vec3:
    return local_dir.x * tangent + local_dir.y * bitangent + local_dir.z * normal


@ti.func
def sample_cosine_hemisphere(normal: vec3, state: ti.u32):
    """Cosine-weighted hemisphere sample around a unit normal.

    Args:
        normal: The surface normal defining the hemisphere orientation.
        state: Generator state.

    Returns:
        A tuple (world_direction, new_state). The direction is unit length
        unless the sample degenerates, which the caller must check with
        ``near_zero``.
    """
    local_dir, rng = random_cosine_direction(state)
    tangent, bitangent, n = build_onb_from_normal(normal)
    world_dir = local_to_world(local_dir, tangent, bitangent, n)
    result = world_dir
    if length_squared(world_dir) > 1e-16:
        result = normalize(world_dir)
    return result, rng
