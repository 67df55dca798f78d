"""Scene module for primitive storage, lights and scene construction.

Components:
    intersection: Sphere, rectangle and box storage with nearest-hit and
        shadow queries
    lights: Point light storage
    manager: Unified scene manager coordinating primitives, materials and
        lights, with dictionary (JSON) serialization
    room: The Cornell-style demo room

Scene data is kept in Structure-of-Arrays Taichi fields with fixed
capacities, so kernels never recompile when the scene changes.
"""

from .intersection import (
    MAX_BOXES,
    MAX_RECTS,
    MAX_SPHERES,
    SceneHitRecord,
    add_box,
    add_rect,
    add_sphere,
    clear_scene,
    get_box_count,
    get_rect_count,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
)
from .lights import MAX_LIGHTS, Light, add_light, clear_lights, get_light, get_light_count
from .manager import (
    MAX_MATERIALS,
    BoxInfo,
    MaterialInfo,
    MaterialType,
    RectInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .room import RoomLayout, create_room_scene, default_room_layout, ring_lights

__all__ = [
    # Intersection
    "SceneHitRecord",
    "add_sphere",
    "add_rect",
    "add_box",
    "clear_scene",
    "get_sphere_count",
    "get_rect_count",
    "get_box_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_SPHERES",
    "MAX_RECTS",
    "MAX_BOXES",
    # Lights
    "Light",
    "add_light",
    "clear_lights",
    "get_light",
    "get_light_count",
    "MAX_LIGHTS",
    # Manager
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "RectInfo",
    "BoxInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Demo room
    "RoomLayout",
    "create_room_scene",
    "default_room_layout",
    "ring_lights",
]
