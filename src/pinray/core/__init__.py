"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and direction sampling
    rng: Explicit per-sample random-number streams
    lighting: Direct illumination from point lights
    integrator: Recursive color integrator (bounded loop)
    renderer: Render target, sample accumulation and image assembly
    config: Render configuration

Only the field-free modules are re-exported here. Modules that declare
Taichi fields (lighting, integrator, renderer) must be imported after
ti.init(), directly from their submodules.
"""

from .config import RenderConfig, default_output_name, load_render_config
from .ray import (
    Ray,
    build_onb_from_normal,
    cross,
    dot,
    length,
    length_squared,
    local_to_world,
    make_ray,
    near_zero,
    normalize,
    random_cosine_direction,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    sample_cosine_hemisphere,
    schlick_reflectance,
    vec3,
)
from .rng import random_float, random_range, seed_sample, wang_hash, xorshift32

__all__ = [
    "RenderConfig",
    "default_output_name",
    "load_render_config",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_cosine_direction",
    "build_onb_from_normal",
    "local_to_world",
    "sample_cosine_hemisphere",
    "wang_hash",
    "xorshift32",
    "seed_sample",
    "random_float",
    "random_range",
]
