"""Reflective (fuzzy mirror) material implementation.

The incoming direction is mirrored about the normal,

    R = I - 2(I . N)N

and then perturbed by ``fuzz * random_unit_vector``. A fuzz of 0 gives a
perfect mirror; larger values blur the reflection. When the perturbation
pushes the ray below the surface the ray is absorbed.

The scattered direction is not renormalized; downstream code only relies on
its direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.materials.reflective import scatter_reflective
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, state = scatter_reflective(
    >>> #     color, fuzz, incident_dir, normal, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pinray.core.ray import random_unit_vector, reflect

vec3 = tm.vec3


@ti.func
def scatter_reflective(
    color: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Reflect a ray off a fuzzy mirror.

    Args:
        color: The reflective color.
        fuzz: Perturbation scale in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        state: RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
        ``did_scatter`` is 0 when the perturbed ray points into the surface.
    """
    reflected = reflect(tm.normalize(incident_direction), normal)
    offset, rng = random_unit_vector(state)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, color, did_scatter, rng


# Maximum number of reflective materials in the scene
MAX_REFLECTIVE_MATERIALS = 256

reflective_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_REFLECTIVE_MATERIALS)
reflective_fuzzes = ti.field(dtype=ti.f32, shape=MAX_REFLECTIVE_MATERIALS)
num_reflective_materials = ti.field(dtype=ti.i32, shape=())


def clear_reflective_materials() -> None:
    """Clear all reflective materials."""
    num_reflective_materials[None] = 0


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz value into [0, 1]."""
    return min(max(float(fuzz), 0.0), 1.0)


def add_reflective_material(
    color: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a reflective material to the material registry.

    Args:
        color: The reflective color as an (R, G, B) tuple in [0, 1].
        fuzz: Perturbation scale. Values outside [0, 1] are clamped.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If any color component is outside [0, 1].
        RuntimeError: If the maximum number of materials is exceeded.
    """
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Color component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_reflective_materials[None]
    if idx >= MAX_REFLECTIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of reflective materials ({MAX_REFLECTIVE_MATERIALS}) exceeded"
        )

    reflective_colors[idx] = vec3(color[0], color[1], color[2])
    reflective_fuzzes[idx] = clamp_fuzz(fuzz)
    num_reflective_materials[None] = idx + 1
    return idx


def get_reflective_material_count() -> int:
    """Get the number of reflective materials in the registry."""
    return int(num_reflective_materials[None])


@ti.func
def get_reflective_color(material_idx: ti.i32) -> vec3:
    return reflective_colors[material_idx]


@ti.func
def get_reflective_fuzz(material_idx: ti.i32) -> ti.f32:
    return reflective_fuzzes[material_idx]


@ti.func
def scatter_reflective_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Look up a registered reflective material and scatter off it.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state).
    """
    return scatter_reflective(
        get_reflective_color(material_idx),
        get_reflective_fuzz(material_idx),
        incident_direction,
        normal,
        state,
    )
