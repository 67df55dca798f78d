"""Unified scene manager for coordinating primitives, materials and lights.

This module provides a high-level scene building API on top of the raw
primitive, material and light storage. It tracks which material type
(Matte, Reflective, Transparent) each material ID corresponds to, so the
integrator can dispatch to the right scattering function.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- Host-side records of every sphere, rectangle, box and light
- Scene serialization to and from plain dictionaries (JSON friendly)

Materials are shared: any number of surfaces may reference one material ID.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pinray.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_matte_material(color=(0.65, 0.05, 0.05))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
    >>> scene.add_light(position=(0, 2, -1), intensity=(10, 10, 10))
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from pinray.geometry.rect import XY, XZ, YZ, RectOrientation
from pinray.materials.matte import add_matte_material, clear_matte_materials
from pinray.materials.reflective import (
    add_reflective_material,
    clamp_fuzz,
    clear_reflective_materials,
)
from pinray.materials.transparent import (
    add_transparent_material,
    clear_transparent_materials,
)
from pinray.scene.intersection import (
    MAX_BOXES,
    MAX_RECTS,
    MAX_SPHERES,
    add_box,
    add_rect,
    add_sphere,
    clear_scene,
    get_box_count,
    get_rect_count,
    get_sphere_count,
)
from pinray.scene.lights import MAX_LIGHTS, Light, add_light, clear_lights, get_light_count

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    MATTE = 0
    REFLECTIVE = 1
    TRANSPARENT = 2


# Maximum number of materials across all types
MAX_MATERIALS = 768  # 256 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd reflective material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())

_ORIENTATIONS: dict[str, RectOrientation] = {"xy": XY, "xz": XZ, "yz": YZ}


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    Returns:
        The index into the type-specific material registry, or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _vec3_tuple(values: Any, default: tuple[float, float, float]) -> tuple[float, float, float]:
    if values is None:
        return default
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific registry.
        params: The material parameters as stored.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class RectInfo:
    """Information about an axis-aligned rectangle in the scene.

    Attributes:
        rect_index: The index in the rectangle storage arrays.
        orientation: "xy", "xz" or "yz".
        u0, u1, v0, v1: Bounds on the two tangent axes.
        k: Plane offset along the normal axis.
        flip: Whether the base normal is negated.
        material_id: The material ID assigned to the rectangle.
    """

    rect_index: int
    orientation: str
    u0: float
    u1: float
    v0: float
    v1: float
    k: float
    flip: bool
    material_id: int


@dataclass
class BoxInfo:
    """Information about a box in the scene."""

    box_index: int
    minimum: tuple[float, float, float]
    maximum: tuple[float, float, float]
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        rects: List of rectangle configurations.
        boxes: List of box configurations.
        lights: List of light configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    rects: list[dict[str, Any]] = field(default_factory=list)
    boxes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Unified scene manager coordinating primitives, materials and lights.

    Attributes:
        materials: MaterialInfo for all registered materials.
        spheres: SphereInfo for all spheres in the scene.
        rects: RectInfo for all rectangles in the scene.
        boxes: BoxInfo for all boxes in the scene.
        lights: Light for all point lights in the scene.

    Example:
        >>> scene = SceneManager()
        >>> white = scene.add_matte_material(color=(0.73, 0.73, 0.73))
        >>> mirror = scene.add_reflective_material(color=(0.8, 0.8, 0.8), fuzz=0.0)
        >>> glass = scene.add_transparent_material(ior=1.5)
        >>> scene.add_xz_rect(-2, 2, -4, 0, -1, white)
        >>> scene.add_sphere((0.5, -0.5, -2), 0.5, mirror)
        >>> scene.add_sphere((-0.5, -0.5, -2), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.rects: list[RectInfo] = []
        self.boxes: list[BoxInfo] = []
        self.lights: list[Light] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_matte_materials()
        clear_reflective_materials()
        clear_transparent_materials()
        clear_lights()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self.rects.clear()
        self.boxes.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives, materials and lights)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign a unified material ID to a type-local registry entry."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_matte_material(self, color: tuple[float, float, float]) -> int:
        """Add a matte (diffuse) material to the scene.

        Args:
            color: The diffuse color as (R, G, B), each component in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any color component is outside [0, 1].
        """
        type_index = add_matte_material(color)
        return self._register_material(MaterialType.MATTE, type_index, {"color": tuple(color)})

    def add_reflective_material(
        self,
        color: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a reflective (fuzzy mirror) material to the scene.

        Args:
            color: The reflective color as (R, G, B), each component in [0, 1].
            fuzz: Perturbation scale; clamped to [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any color component is outside [0, 1].
        """
        type_index = add_reflective_material(color, fuzz)
        return self._register_material(
            MaterialType.REFLECTIVE,
            type_index,
            {"color": tuple(color), "fuzz": clamp_fuzz(fuzz)},
        )

    def add_transparent_material(self, ior: float = 1.5) -> int:
        """Add a transparent (dielectric) material to the scene.

        Args:
            ior: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If ior is not positive.
        """
        type_index = add_transparent_material(ior)
        return self._register_material(MaterialType.TRANSPARENT, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For lookups inside kernels, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The signed radius. A negative radius flips the normals,
                which turns a sphere nested in a glass sphere into a hollow shell.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is zero.
        """
        self._check_material_id(material_id)
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")

        center = _vec3_tuple(center, (0.0, 0.0, 0.0))
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_rect(
        self,
        orientation: str,
        u0: float,
        u1: float,
        v0: float,
        v1: float,
        k: float,
        material_id: int,
        flip: bool = False,
    ) -> int:
        """Add an axis-aligned rectangle to the scene.

        Args:
            orientation: "xy", "xz" or "yz".
            u0, u1: Bounds on the first tangent axis.
            v0, v1: Bounds on the second tangent axis.
            k: Plane offset along the normal axis.
            material_id: The unified material ID to assign to the rectangle.
            flip: Negate the orientation's base normal.

        Returns:
            The index of the added rectangle.

        Raises:
            RuntimeError: If the maximum number of rectangles is exceeded.
            ValueError: If material_id or orientation is invalid.
        """
        self._check_material_id(material_id)
        key = orientation.lower()
        if key not in _ORIENTATIONS:
            raise ValueError(f"Unknown rectangle orientation: {orientation}")

        rect_index = add_rect(_ORIENTATIONS[key], u0, u1, v0, v1, k, material_id, flip)
        self.rects.append(
            RectInfo(
                rect_index=rect_index,
                orientation=key,
                u0=u0,
                u1=u1,
                v0=v0,
                v1=v1,
                k=k,
                flip=bool(flip),
                material_id=material_id,
            )
        )
        return rect_index

    def add_xy_rect(self, x0, x1, y0, y1, k, material_id, flip=False) -> int:
        """Add a rectangle on the plane z = k (base normal +z)."""
        return self.add_rect("xy", x0, x1, y0, y1, k, material_id, flip)

    def add_xz_rect(self, x0, x1, z0, z1, k, material_id, flip=False) -> int:
        """Add a rectangle on the plane y = k (base normal +y)."""
        return self.add_rect("xz", x0, x1, z0, z1, k, material_id, flip)

    def add_yz_rect(self, y0, y1, z0, z1, k, material_id, flip=False) -> int:
        """Add a rectangle on the plane x = k (base normal +x)."""
        return self.add_rect("yz", y0, y1, z0, z1, k, material_id, flip)

    def add_box(
        self,
        minimum: tuple[float, float, float],
        maximum: tuple[float, float, float],
        material_id: int,
    ) -> int:
        """Add an axis-aligned box to the scene.

        Raises:
            RuntimeError: If the maximum number of boxes is exceeded.
            ValueError: If material_id is invalid or minimum exceeds maximum.
        """
        self._check_material_id(material_id)
        minimum = _vec3_tuple(minimum, (0.0, 0.0, 0.0))
        maximum = _vec3_tuple(maximum, (0.0, 0.0, 0.0))
        if any(lo > hi for lo, hi in zip(minimum, maximum)):
            raise ValueError(f"Box minimum {minimum} exceeds maximum {maximum}")

        box_index = add_box(minimum, maximum, material_id)
        self.boxes.append(
            BoxInfo(box_index=box_index, minimum=minimum, maximum=maximum, material_id=material_id)
        )
        return box_index

    # =========================================================================
    # Lights
    # =========================================================================

    def add_light(
        self,
        position: tuple[float, float, float],
        intensity: tuple[float, float, float],
    ) -> int:
        """Add a point light to the scene.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If any intensity component is negative.
        """
        position = _vec3_tuple(position, (0.0, 0.0, 0.0))
        intensity = _vec3_tuple(intensity, (0.0, 0.0, 0.0))
        light_index = add_light(position, intensity)
        self.lights.append(Light(position=position, intensity=intensity))
        return light_index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_rect_count(self) -> int:
        """Get the number of rectangles in the scene."""
        return get_rect_count()

    def get_box_count(self) -> int:
        """Get the number of boxes in the scene."""
        return get_box_count()

    def object_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_rect_count() + self.get_box_count()

    def light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            params = {
                key: list(value) if isinstance(value, tuple) else value
                for key, value in mat.params.items()
            }
            config.materials.append({"type": mat.material_type.name.lower(), **params})

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for rect in self.rects:
            config.rects.append(
                {
                    "orientation": rect.orientation,
                    "u0": rect.u0,
                    "u1": rect.u1,
                    "v0": rect.v0,
                    "v1": rect.v1,
                    "k": rect.k,
                    "flip": rect.flip,
                    "material_id": rect.material_id,
                }
            )

        for box in self.boxes:
            config.boxes.append(
                {
                    "min": list(box.minimum),
                    "max": list(box.maximum),
                    "material_id": box.material_id,
                }
            )

        for light in self.lights:
            config.lights.append(
                {"position": list(light.position), "intensity": list(light.intensity)}
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with one described by a configuration.

        Material IDs in the configuration refer to positions in its
        ``materials`` list, so materials are loaded first and in order.

        Raises:
            ValueError: If a material type or rectangle orientation is unknown.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "matte")).lower()
            if mat_type == "matte":
                self.add_matte_material(_vec3_tuple(mat_config.get("color"), (0.5, 0.5, 0.5)))
            elif mat_type == "reflective":
                self.add_reflective_material(
                    _vec3_tuple(mat_config.get("color"), (0.8, 0.8, 0.8)),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == "transparent":
                self.add_transparent_material(mat_config.get("ior", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _vec3_tuple(sphere_config.get("center"), (0.0, 0.0, 0.0)),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        for rect_config in config.rects:
            self.add_rect(
                rect_config.get("orientation", "xy"),
                rect_config.get("u0", 0.0),
                rect_config.get("u1", 1.0),
                rect_config.get("v0", 0.0),
                rect_config.get("v1", 1.0),
                rect_config.get("k", 0.0),
                rect_config.get("material_id", 0),
                rect_config.get("flip", False),
            )

        for box_config in config.boxes:
            self.add_box(
                _vec3_tuple(box_config.get("min"), (0.0, 0.0, 0.0)),
                _vec3_tuple(box_config.get("max"), (1.0, 1.0, 1.0)),
                box_config.get("material_id", 0),
            )

        for light_config in config.lights:
            self.add_light(
                _vec3_tuple(light_config.get("position"), (0.0, 0.0, 0.0)),
                _vec3_tuple(light_config.get("intensity"), (1.0, 1.0, 1.0)),
            )

        logger.debug(
            "Loaded scene: %d materials, %d objects, %d lights",
            self.get_material_count(),
            self.object_count(),
            self.light_count(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "rects": config.rects,
            "boxes": config.boxes,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with the keys produced by to_dict."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            rects=data.get("rects", []),
            boxes=data.get("boxes", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_rects() -> int:
        return MAX_RECTS

    @staticmethod
    def get_max_boxes() -> int:
        return MAX_BOXES

    @staticmethod
    def get_max_lights() -> int:
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
