"""Point light storage.

Lights are omnidirectional points with an RGB intensity. Intensity is not
clamped and may exceed 1; the irradiance a light contributes falls off with
the squared distance (see ``pinray.core.lighting``).
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@dataclass
class Light:
    """A point light source.

    Attributes:
        position: World-space position of the light.
        intensity: RGB intensity (unbounded).
    """

    position: tuple[float, float, float]
    intensity: tuple[float, float, float]


MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def add_light(
    position: tuple[float, float, float],
    intensity: tuple[float, float, float],
) -> int:
    """Add a point light.

    Args:
        position: World-space position of the light.
        intensity: RGB intensity. Components must be non-negative.

    Returns:
        The index of the added light.

    Raises:
        ValueError: If any intensity component is negative.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    for i, component in enumerate(intensity):
        if component < 0.0:
            raise ValueError(f"Light intensity component {i} = {component} is negative")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_positions[idx] = vec3(position[0], position[1], position[2])
    light_intensities[idx] = vec3(intensity[0], intensity[1], intensity[2])
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


def get_light(idx: int) -> Light:
    """Read a stored light back as a host-side Light."""
    if idx < 0 or idx >= num_lights[None]:
        raise IndexError(f"Light index {idx} out of range")
    p = light_positions[idx]
    c = light_intensities[idx]
    return Light(
        position=(float(p[0]), float(p[1]), float(p[2])),
        intensity=(float(c[0]), float(c[1]), float(c[2])),
    )
