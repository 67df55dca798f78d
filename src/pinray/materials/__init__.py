"""Materials module for surface scattering models.

Components:
    matte: Ideal diffuse reflection with cosine-weighted sampling
    reflective: Fuzzy mirror reflection
    transparent: Dielectric reflection/refraction (Snell + Schlick)

Every scatter routine takes the RNG state as its last argument and returns
the advanced state as its last result, so the random stream is explicit and
renders are reproducible.

Each material keeps a fixed-capacity registry in Taichi fields. Registries
are per type; ``pinray.scene.manager.SceneManager`` maps them to unified
material IDs.
"""

from .matte import (
    add_matte_material,
    clear_matte_materials,
    get_matte_color,
    get_matte_material_count,
    scatter_matte,
    scatter_matte_by_id,
)
from .reflective import (
    add_reflective_material,
    clamp_fuzz,
    clear_reflective_materials,
    get_reflective_color,
    get_reflective_fuzz,
    get_reflective_material_count,
    scatter_reflective,
    scatter_reflective_by_id,
)
from .transparent import (
    add_transparent_material,
    clear_transparent_materials,
    get_transparent_ior,
    get_transparent_material_count,
    scatter_transparent,
    scatter_transparent_by_id,
)

__all__ = [
    # Matte
    "add_matte_material",
    "clear_matte_materials",
    "get_matte_color",
    "get_matte_material_count",
    "scatter_matte",
    "scatter_matte_by_id",
    # Reflective
    "add_reflective_material",
    "clamp_fuzz",
    "clear_reflective_materials",
    "get_reflective_color",
    "get_reflective_fuzz",
    "get_reflective_material_count",
    "scatter_reflective",
    "scatter_reflective_by_id",
    # Transparent
    "add_transparent_material",
    "clear_transparent_materials",
    "get_transparent_ior",
    "get_transparent_material_count",
    "scatter_transparent",
    "scatter_transparent_by_id",
]
