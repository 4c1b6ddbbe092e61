"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector helpers, reflection and refraction
    sampler: Per-frame random streams and sampling helpers
    integrator: Radiance estimate along a ray (path tracing with direct light)
    renderer: Multi-sample, multi-frame image estimation

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampler import (
    MAX_STREAMS,
    get_stream_state,
    random_f32,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_u32,
    random_unit_vector,
    seed_streams,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from pathtracer.core.integrator or pathtracer.core.renderer.

__all__ = [
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
    "MAX_STREAMS",
    "seed_streams",
    "get_stream_state",
    "random_u32",
    "random_f32",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
