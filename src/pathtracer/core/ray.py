"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the vector kernel used on every
hot path of the renderer: arithmetic helpers, exact and fast normalization,
reflection/refraction, and the random sampling routines that drive the
Monte Carlo estimate. All functions are Taichi functions and must be called
from within a kernel.

Points, directions and RGB colors share a single representation (vec3).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero (degenerate scatter detection)
NEAR_ZERO_EPSILON = 1e-8

# Magic constant for the bit-level inverse square root initial guess
_INV_SQRT_MAGIC = 0x5F3759DF

# Attempts made by the rejection samplers before giving up
_MAX_REJECTION_ATTEMPTS = 100


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            normalized; intersection and scattering accept any length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector (no square root)."""
    return tm.dot(v, v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Normalize a vector exactly (division by its length).

    A zero-length input is a precondition violation and is not guarded.
    """
    return tm.normalize(v)


@ti.func
def fast_inv_sqrt(t: ti.f32) -> ti.f32:
    """Approximate 1 / sqrt(t) without a division or square root.

    The initial guess reinterprets the float's bits as an integer, halves
    the exponent with a shift and subtracts it from a magic constant. Two
    Newton-Raphson steps on f(y) = 1/y^2 - t then refine it:

        y <- y * (1.5 - 0.5 * t * y^2)

    After two steps the relative error is far below 1%.

    Args:
        t: A positive value.

    Returns:
        An approximation of 1 / sqrt(t).
    """
    half_t = 0.5 * t
    bits = ti.bit_cast(t, ti.i32)
    bits = _INV_SQRT_MAGIC - (bits >> 1)
    y = ti.bit_cast(bits, ti.f32)
    y = y * (1.5 - half_t * y * y)
    y = y * (1.5 - half_t * y * y)
    return y


@ti.func
def unit_vector_fast(v: vec3) -> vec3:
    """Normalize a vector using the fast inverse square root.

    This is the normalization used on the renderer's hot paths.
    """
    return v * fast_inv_sqrt(length_squared(v))


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to detect degenerate scatter directions.

    Returns:
        1 if every component's magnitude is below NEAR_ZERO_EPSILON, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect v about the (unit) normal n: v - 2(v . n)n."""
    return v - 2.0 * dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is split into the components perpendicular and
    parallel to the normal:

        r_perp = eta * (uv + cos_theta * n)
        r_par  = -sqrt(|1 - |r_perp|^2|) * n

    Total internal reflection must be ruled out by the caller.

    Args:
        uv: The incoming unit direction.
        n: The unit normal, on the same side as the incoming ray.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Approximate the Fresnel reflectance with Schlick's polynomial.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        The reflectance r0 + (1 - r0)(1 - cosine)^5.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def linear_to_gamma(linear_component: ti.f32) -> ti.f32:
    """Gamma-2 encode a linear color channel (square root)."""
    result = 0.0
    if linear_component > 0.0:
        result = ti.sqrt(linear_component)
    return result


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3() -> vec3:
    """Random vector with each component uniform in [0, 1)."""
    return vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def random_vec3_range(lo: ti.f32, hi: ti.f32) -> vec3:
    """Random vector with each component uniform in [lo, hi)."""
    return lo + (hi - lo) * random_vec3()


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling to generate uniformly distributed points
    within the unit sphere.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Bounded rejection loop
    for _ in range(_MAX_REJECTION_ATTEMPTS):
        if not found:
            p = random_vec3_range(-1.0, 1.0)
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    return unit_vector_fast(random_in_unit_sphere())


@ti.func
def random_on_hemisphere(normal: vec3) -> vec3:
    """Generate a random unit vector in the hemisphere around a normal.

    Args:
        normal: The surface normal defining the hemisphere orientation.

    Returns:
        A random unit vector with a positive dot product against normal.
    """
    on_sphere = random_unit_vector()
    result = on_sphere
    if dot(on_sphere, normal) <= 0.0:
        result = -on_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used by the camera's defocus (depth-of-field) sampling.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_ATTEMPTS):
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                0.0,
            )
            if length_squared(p) < 1.0:
                found = True
    return p
