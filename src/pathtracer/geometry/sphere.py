"""Sphere primitive and ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine used by the scene aggregate.

The ray-sphere intersection is found by solving

    |origin + t * direction - center|^2 = radius^2

which expands to a*t^2 + 2*h*t + c = 0 with

    a = dot(direction, direction)
    h = dot(direction, origin - center)   (half of the usual 'b')
    c = |origin - center|^2 - radius^2

The smaller root is tried first, then the larger one. A root only counts if
it lies strictly inside the query interval, which keeps a scattered ray from
re-hitting the surface it just left.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.interval import Interval, interval_surrounds
from pathtracer.core.ray import Ray, dot, length_squared, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Handle of the sphere's material in the material registry.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected anything (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point, equal to ray_at(ray, t).
        normal: The unit surface normal, always oriented against the
            incoming ray (so dot(direction, normal) <= 0).
        front_face: 1 if the ray hit the outside of the surface, 0 if it hit
            from within.
        material_id: The material handle of the hit surface. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray: Ray, outward_normal: vec3):
    """Orient a unit outward normal against the incoming ray.

    Args:
        ray: The incoming ray.
        outward_normal: The geometric normal pointing out of the surface
            (assumed unit length).

    Returns:
        A tuple (front_face, normal) where front_face is 1 when the ray
        arrives from outside and normal points against the ray.
    """
    front_face = 1
    normal = outward_normal
    if dot(ray.direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Test a ray against a sphere.

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to intersect.
        ray_t: The open interval of acceptable ray parameters.

    Returns:
        A HitRecord for the nearest root strictly inside ray_t, or a miss
        record (hit == 0) if the discriminant is negative or neither root
        qualifies.
    """
    oc = ray.origin - sphere.center
    a = length_squared(ray.direction)
    half_b = dot(ray.direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root first, then the far one
        root = (-half_b - sqrt_d) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material handle."""
    return Sphere(center=center, radius=radius, material_id=material_id)
