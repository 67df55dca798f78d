"""Transparent (dielectric) material implementation.

Transparent surfaces such as glass and water either reflect or refract each
incoming ray:

    - Snell's law: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when ratio * sin(theta) > 1
    - Schlick's approximation for the reflect/refract probability

Attenuation is always white; a clear dielectric absorbs nothing.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.materials.transparent import scatter_transparent
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, state = scatter_transparent(
    >>> #     ior, incident_dir, normal, front_face, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pinray.core.ray import reflect, refract, schlick_reflectance
from pinray.core.rng import random_float

vec3 = tm.vec3


@ti.func
def scatter_transparent(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Reflect or refract a ray at a dielectric boundary.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it exits.
        state: RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, state). Transparent
        surfaces always scatter.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    # Entering: air to material. Exiting: material to air.
    refraction_ratio = 1.0 / ior
    if front_face == 0:
        refraction_ratio = ior

    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))

    cannot_refract = refraction_ratio * sin_theta > 1.0

    # One draw per scatter, even under total internal reflection
    rand, rng = random_float(state)
    reflectance = schlick_reflectance(cos_theta, refraction_ratio)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or reflectance > rand:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    return scattered_direction, attenuation, rng


# Maximum number of transparent materials in the scene
MAX_TRANSPARENT_MATERIALS = 256

transparent_iors = ti.field(dtype=ti.f32, shape=MAX_TRANSPARENT_MATERIALS)
num_transparent_materials = ti.field(dtype=ti.i32, shape=())


def clear_transparent_materials() -> None:
    """Clear all transparent materials."""
    num_transparent_materials[None] = 0


def add_transparent_material(ior: float = 1.5) -> int:
    """Add a transparent material to the material registry.

    Args:
        ior: Index of refraction. Must be positive.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If ior is not positive.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive")

    idx = num_transparent_materials[None]
    if idx >= MAX_TRANSPARENT_MATERIALS:
        raise RuntimeError(
            f"Maximum number of transparent materials ({MAX_TRANSPARENT_MATERIALS}) exceeded"
        )

    transparent_iors[idx] = ior
    num_transparent_materials[None] = idx + 1
    return idx


def get_transparent_material_count() -> int:
    """Get the number of transparent materials in the registry."""
    return int(num_transparent_materials[None])


@ti.func
def get_transparent_ior(material_idx: ti.i32) -> ti.f32:
    return transparent_iors[material_idx]


@ti.func
def scatter_transparent_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Look up a registered transparent material and scatter off it."""
    return scatter_transparent(
        get_transparent_ior(material_idx), incident_direction, normal, front_face, state
    )
