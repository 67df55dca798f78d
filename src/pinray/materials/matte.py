"""Matte (ideal diffuse) material implementation.

A matte surface scatters incoming light in a cosine-weighted distribution
around the surface normal. With cosine-weighted sampling the BRDF and the
sampling density cancel:

    attenuation = (color / pi) * cos(theta) / (cos(theta) / pi) = color

so the scatter routine returns the surface color unchanged as attenuation.
Matte is the only material that receives direct light from point lights.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.materials.matte import scatter_matte
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, state = scatter_matte(color, normal, state)
"""

import taichi as ti
import taichi.math as tm

from pinray.core.ray import near_zero, sample_cosine_hemisphere

vec3 = tm.vec3


@ti.func
def scatter_matte(color: vec3, normal: vec3, state: ti.u32):
    """Sample a diffuse bounce off a matte surface.

    Args:
        color: The surface color.
        normal: The unit surface normal at the hit point.
        state: RNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, state). Matte surfaces
        always scatter.
    """
    scattered_direction, rng = sample_cosine_hemisphere(normal, state)

    # Degenerate sample (rounding): send the ray along the normal
    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, color, rng


# Maximum number of matte materials in the scene
MAX_MATTE_MATERIALS = 256

matte_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATTE_MATERIALS)
num_matte_materials = ti.field(dtype=ti.i32, shape=())


def clear_matte_materials() -> None:
    """Clear all matte materials."""
    num_matte_materials[None] = 0


def add_matte_material(color: tuple[float, float, float]) -> int:
    """Add a matte material to the material registry.

    Args:
        color: The diffuse color as an (R, G, B) tuple in [0, 1].

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

    idx = num_matte_materials[None]
    if idx >= MAX_MATTE_MATERIALS:
        raise RuntimeError(f"Maximum number of matte materials ({MAX_MATTE_MATERIALS}) exceeded")

    matte_colors[idx] = vec3(color[0], color[1], color[2])
    num_matte_materials[None] = idx + 1
    return idx


def get_matte_material_count() -> int:
    """Get the number of matte materials in the registry."""
    return int(num_matte_materials[None])


@ti.func
def get_matte_color(material_idx: ti.i32) -> vec3:
    return matte_colors[material_idx]


@ti.func
def scatter_matte_by_id(material_idx: ti.i32, normal: vec3, state: ti.u32):
    """Look up a registered matte material and scatter off it."""
    return scatter_matte(get_matte_color(material_idx), normal, state)
