"""Geometry module for shape primitives.

Intersection routines are Taichi functions that take a ray, a primitive and
an open interval of acceptable ray parameters, and return a HitRecord.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "set_face_normal",
]
