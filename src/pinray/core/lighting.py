"""Direct illumination from point lights.

For a shading point ``p`` with unit normal ``n`` each light contributes

    max(n . l, 0) * intensity / d^2

where ``l`` is the unit vector towards the light and ``d`` its distance,
unless a shadow ray from ``p`` to the light is blocked. The shadow ray starts
slightly above the surface and stops slightly short of the light, so neither
the shading surface nor a surface the light sits on casts the shadow.
"""

import taichi as ti
import taichi.math as tm

from pinray.scene.intersection import intersect_scene_any
from pinray.scene.lights import light_intensities, light_positions, num_lights

vec3 = tm.vec3

# Offset applied along the normal and at both ends of the shadow ray
SHADOW_BIAS = 1e-3


@ti.func
def light_contribution(point: vec3, normal: vec3, light_position: vec3, intensity: vec3) -> vec3:
    """Unoccluded-or-zero contribution of a single point light."""
    result = vec3(0.0, 0.0, 0.0)

    to_light = light_position - point
    distance = tm.length(to_light)

    if distance > 0.0:
        direction = to_light / distance
        n_dot_l = tm.dot(normal, direction)

        if n_dot_l > 0.0:
            shadow_origin = point + SHADOW_BIAS * normal
            occluded = intersect_scene_any(
                shadow_origin, direction, SHADOW_BIAS, distance - SHADOW_BIAS
            )
            if occluded == 0:
                result = n_dot_l * intensity / (distance * distance)

    return result


@ti.func
def direct_lighting(point: vec3, normal: vec3) -> vec3:
    """Sum the contributions of every light in the scene at a surface point.

    Args:
        point: The shading point.
        normal: The unit normal at the point, facing the viewer.

    Returns:
        The direct irradiance (black when the scene has no lights).
    """
    total = vec3(0.0, 0.0, 0.0)
    for i in range(num_lights[None]):
        total += light_contribution(point, normal, light_positions[i], light_intensities[i])
    return total
