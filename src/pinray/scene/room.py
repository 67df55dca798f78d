"""Cornell-style demo room.

The room is an open box seen from the camera at the origin looking down -z:

- Floor, ceiling and back wall: white matte
- Left wall: red matte, right wall: green matte
- The front (camera side) is open
- A white matte box, a matte sphere, a mirror sphere, a glass sphere and a
  hollow glass sphere (glass shell around a negative-radius sphere)
- By default a single point lamp hangs just below the ceiling at the center
  of the room

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.scene.room import create_room_scene, ring_lights
    >>> scene = create_room_scene()
    >>> scene.object_count(), scene.light_count()
    (11, 1)
    >>> scene = create_room_scene(lights=ring_lights())
"""

import logging
import math
from dataclasses import dataclass

from pinray.scene.lights import Light
from pinray.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Wall colors
RED_WALL_COLOR = (0.65, 0.05, 0.05)
GREEN_WALL_COLOR = (0.12, 0.45, 0.15)
WHITE_WALL_COLOR = (0.73, 0.73, 0.73)

# Object materials
MATTE_SPHERE_COLOR = (0.8, 0.6, 0.2)
MIRROR_COLOR = (0.9, 0.9, 0.9)
MIRROR_FUZZ = 0.05
GLASS_IOR = 1.5

# Default lamp
LAMP_INTENSITY = 10.0
LAMP_DROP_FROM_CEILING = 0.3


@dataclass
class RoomLayout:
    """Geometric description of the room.

    Attributes:
        half_width: Half the room width along x.
        half_depth: Half the room depth along z.
        floor_y: y of the floor plane.
        ceiling_y: y of the ceiling plane.
        back_wall_z: z of the back wall.
        front_opening_z: z of the open front (camera side).
    """

    half_width: float
    half_depth: float
    floor_y: float
    ceiling_y: float
    back_wall_z: float
    front_opening_z: float

    def __post_init__(self) -> None:
        if self.half_width <= 0.0 or self.half_depth <= 0.0:
            raise ValueError("Room half_width and half_depth must be positive")
        if self.ceiling_y <= self.floor_y:
            raise ValueError("Room ceiling must be above the floor")
        if self.front_opening_z <= self.back_wall_z:
            raise ValueError("Room front opening must be in front of the back wall")

    @property
    def center_z(self) -> float:
        return self.back_wall_z + self.half_depth


def default_room_layout() -> RoomLayout:
    """Room used by the demo render, framed by the default camera."""
    return RoomLayout(
        half_width=3.0,
        half_depth=2.5,
        floor_y=-1.0,
        ceiling_y=3.0,
        back_wall_z=-6.0,
        front_opening_z=-1.0,
    )


def default_lamp(layout: RoomLayout) -> Light:
    """Point lamp hanging just below the ceiling at the center of the room."""
    return Light(
        position=(0.0, layout.ceiling_y - LAMP_DROP_FROM_CEILING, layout.center_z),
        intensity=(LAMP_INTENSITY, LAMP_INTENSITY, LAMP_INTENSITY),
    )


def ring_lights(
    count: int = 3,
    radius: float = 6.0,
    height: float = 6.0,
    intensity: float = 14.0,
    center_z: float = -2.5,
    z_amplitude: float = 1.5,
) -> list[Light]:
    """Lights spaced evenly on a ring above the scene.

    Light i sits at angle 2*pi*i/count with position
    (radius*cos(a), height, center_z + z_amplitude*sin(a)).

    Raises:
        ValueError: If count is negative.
    """
    if count < 0:
        raise ValueError(f"Light count must be non-negative, got {count}")

    lights = []
    for index in range(count):
        angle = 2.0 * math.pi * index / count
        lights.append(
            Light(
                position=(
                    radius * math.cos(angle),
                    height,
                    center_z + z_amplitude * math.sin(angle),
                ),
                intensity=(intensity, intensity, intensity),
            )
        )
    return lights


def create_room_scene(
    layout: RoomLayout | None = None,
    lights: list[Light] | None = None,
    scene: SceneManager | None = None,
) -> SceneManager:
    """Build the demo room.

    Args:
        layout: Room dimensions; defaults to default_room_layout().
        lights: Lights to place. None gives the default ceiling lamp; an
            empty list gives a room lit only by the sky.
        scene: SceneManager to fill; it is cleared first. A new one is
            created when None.

    Returns:
        The populated SceneManager.
    """
    if layout is None:
        layout = default_room_layout()
    if lights is None:
        lights = [default_lamp(layout)]
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    hw = layout.half_width
    floor = layout.floor_y
    ceiling = layout.ceiling_y
    back = layout.back_wall_z
    front = layout.front_opening_z
    cz = layout.center_z

    red = scene.add_matte_material(RED_WALL_COLOR)
    green = scene.add_matte_material(GREEN_WALL_COLOR)
    white = scene.add_matte_material(WHITE_WALL_COLOR)
    ochre = scene.add_matte_material(MATTE_SPHERE_COLOR)
    mirror = scene.add_reflective_material(MIRROR_COLOR, MIRROR_FUZZ)
    glass = scene.add_transparent_material(GLASS_IOR)

    # Walls, normals pointing into the room
    scene.add_xz_rect(-hw, hw, back, front, floor, white)
    scene.add_xz_rect(-hw, hw, back, front, ceiling, white, flip=True)
    scene.add_xy_rect(-hw, hw, floor, ceiling, back, white)
    scene.add_yz_rect(floor, ceiling, back, front, -hw, red)
    scene.add_yz_rect(floor, ceiling, back, front, hw, green, flip=True)

    # Tall box in the back-left corner
    scene.add_box(
        (-hw + 0.6, floor, back + 0.6),
        (-hw + 1.8, floor + 1.6, back + 1.8),
        white,
    )

    scene.add_sphere((-0.9, floor + 0.5, cz + 0.4), 0.5, ochre)
    scene.add_sphere((1.4, floor + 0.8, cz - 1.0), 0.8, mirror)
    scene.add_sphere((0.1, floor + 0.45, cz + 1.2), 0.45, glass)

    # Hollow glass: outer surface plus an inward-facing inner surface
    scene.add_sphere((1.5, floor + 0.35, cz + 1.3), 0.35, glass)
    scene.add_sphere((1.5, floor + 0.35, cz + 1.3), -0.3, glass)

    for light in lights:
        scene.add_light(light.position, light.intensity)

    logger.info(
        "Built room scene: %d objects, %d lights, %d materials",
        scene.object_count(),
        scene.light_count(),
        scene.get_material_count(),
    )
    return scene
