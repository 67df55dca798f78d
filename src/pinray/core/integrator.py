"""Color integrator: direct point lighting plus recursive scattering.

For a ray with remaining depth ``d`` the color is

    color(ray, 0) = black
    color(ray, d) = sky(ray)                                      on a miss
                  = direct                                        if absorbed
                  = direct + attenuation * color(scattered, d - 1)

where ``direct`` is ``base_color * direct_lighting(hit)`` for matte surfaces
and zero otherwise. Taichi functions cannot recurse, so the recursion is
unrolled into a bounded loop that carries the product of the attenuations
seen so far (the throughput); each bounce adds ``throughput * direct`` and a
miss adds ``throughput * sky``. There is no Russian roulette: ``max_depth``
is the only bound on path length.

Material dispatch:
    MATTE: cosine-weighted diffuse bounce, receives direct light
    REFLECTIVE: fuzzy mirror, may absorb
    TRANSPARENT: reflect/refract, white attenuation

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.core.integrator import trace_ray
    >>> trace_ray((0, 0, 0), (0, 1, 0), max_depth=5, seed=1)  # empty scene: sky
"""

import taichi as ti
import taichi.math as tm

from pinray.core.lighting import direct_lighting
from pinray.core.rng import seed_sample
from pinray.materials.matte import get_matte_color, scatter_matte_by_id
from pinray.materials.reflective import get_reflective_color, scatter_reflective_by_id
from pinray.materials.transparent import scatter_transparent_by_id
from pinray.scene.intersection import intersect_scene
from pinray.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Accepted ray parameter range for scene intersection
T_MIN = 1e-3
T_MAX = 1e6

# Sky gradient endpoints (horizon and zenith)
SKY_HORIZON = vec3(1.0, 1.0, 1.0)
SKY_ZENITH = vec3(0.5, 0.7, 1.0)


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background color for rays that escape the scene.

    Blends white and sky blue using only the vertical component of the
    unit direction: t = 0.5 * (y + 1).
    """
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON + t * SKY_ZENITH


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _base_color(material_id: ti.i32) -> vec3:
    """Surface color of a material (white for transparent materials)."""
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    color = vec3(1.0, 1.0, 1.0)
    if mat_type == int(MaterialType.MATTE):
        color = get_matte_color(type_index)
    elif mat_type == int(MaterialType.REFLECTIVE):
        color = get_reflective_color(type_index)
    return color


@ti.func
def _is_diffuse(material_id: ti.i32) -> ti.i32:
    result = 0
    if get_material_type(material_id) == int(MaterialType.MATTE):
        result = 1
    return result


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing the ray).
        front_face: 1 if the outward side was hit, 0 otherwise.
        state: RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    rng = state

    if mat_type == int(MaterialType.MATTE):
        scattered_direction, attenuation, rng = scatter_matte_by_id(type_index, normal, rng)
        did_scatter = 1

    elif mat_type == int(MaterialType.REFLECTIVE):
        scattered_direction, attenuation, did_scatter, rng = scatter_reflective_by_id(
            type_index, incident_direction, normal, rng
        )

    elif mat_type == int(MaterialType.TRANSPARENT):
        scattered_direction, attenuation, rng = scatter_transparent_by_id(
            type_index, incident_direction, normal, front_face, rng
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter, rng


# =============================================================================
# Integrator Core
# =============================================================================


@ti.func
def ray_color(ray_origin: vec3, ray_direction: vec3, max_depth: ti.i32, state: ti.u32):
    """Estimate the color carried back along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (any non-zero length).
        max_depth: Maximum number of surface interactions. Zero or less
            yields black.
        state: RNG state.

    Returns:
        A tuple of (color, state).
    """
    origin = ray_origin
    direction = ray_direction
    rng = state

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance += throughput * sky_color(direction)
                active = 0
            else:
                if _is_diffuse(rec.material_id) == 1:
                    direct = _base_color(rec.material_id) * direct_lighting(rec.point, rec.normal)
                    radiance += throughput * direct

                scattered_direction, attenuation, did_scatter, rng = _scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face, rng
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    return radiance, rng


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.u32) -> vec3:
    color, _ = ray_color(origin, direction, max_depth, seed_sample(seed, 0, 0))
    return color


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = 50,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Evaluate ray_color for a single ray from Python.

    Intended for tests and tools; full images go through
    ``pinray.core.renderer``.

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero).
        max_depth: Maximum number of surface interactions.
        seed: Seed for the ray's random stream.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_ray_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
        seed & 0xFFFFFFFF,
    )
    return (float(color[0]), float(color[1]), float(color[2]))
