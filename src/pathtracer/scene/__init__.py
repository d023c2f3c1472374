"""Scene module for scene storage and construction.

Components:
    intersection: Sphere storage in Taichi fields and nearest-hit queries
    manager: Scene manager coordinating spheres and materials
    final_scene: The random-spheres showcase scene

Scene data is kept in Structure-of-Arrays Taichi fields and written only
from Python before rendering.
"""

from .final_scene import create_final_camera, create_final_scene
from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Showcase scene
    "create_final_scene",
    "create_final_camera",
]
