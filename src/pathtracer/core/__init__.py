"""Core rendering module.

Components:
    ray: Ray data structure, vector math and random direction sampling
    interval: Closed/open real intervals used to bound ray parameters
    integrator: Path tracing loop, color resolution and the render target
    renderer: Convenience wrapper rendering a camera's image

All per-ray work runs inside Taichi kernels.
"""

from .interval import (
    EMPTY,
    UNIVERSE,
    Interval,
    empty_interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
    universe_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    fast_inv_sqrt,
    length,
    length_squared,
    linear_to_gamma,
    make_ray,
    near_zero,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_on_hemisphere,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    unit_vector_fast,
    vec3,
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
    "dot",
    "cross",
    "unit_vector",
    "unit_vector_fast",
    "fast_inv_sqrt",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "linear_to_gamma",
    "random_vec3",
    "random_vec3_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_on_hemisphere",
    "random_in_unit_disk",
    "Interval",
    "make_interval",
    "empty_interval",
    "universe_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "EMPTY",
    "UNIVERSE",
]
