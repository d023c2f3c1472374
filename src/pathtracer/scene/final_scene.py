"""The "many random spheres" showcase scene.

The scene consists of:
- A huge grey Lambertian sphere acting as the ground plane
- A 22x22 grid of small spheres (radius 0.2) jittered within their cells,
  each randomly Lambertian (80 %), metal (15 %) or glass (5 %)
- Three large spheres: glass in the middle, brown Lambertian behind it and
  polished metal in front

Small spheres too close to the large metal sphere are skipped. Host-side
randomness comes from a seeded random.Random, so a given seed always builds
the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.final_scene import create_final_scene
    >>>
    >>> scene, camera = create_final_scene(seed=42)
    >>> scene.get_sphere_count() > 4
    True
"""

import math
import random

from pathtracer.camera.camera import Camera
from pathtracer.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed for a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2
CELL_JITTER = 0.9

# Small spheres closer than this to KEEP_CLEAR_POINT are skipped
KEEP_CLEAR_POINT = (4.0, 0.2, 0.0)
KEEP_CLEAR_DISTANCE = 0.9

# Cumulative material choice thresholds
LAMBERTIAN_THRESHOLD = 0.8
METAL_THRESHOLD = 0.95

GLASS_IOR = 1.5
LARGE_RADIUS = 1.0
LARGE_GLASS_CENTER = (0.0, 1.0, 0.0)
LARGE_DIFFUSE_CENTER = (-4.0, 1.0, 0.0)
LARGE_DIFFUSE_ALBEDO = (0.4, 0.2, 0.1)
LARGE_METAL_CENTER = (4.0, 1.0, 0.0)
LARGE_METAL_ALBEDO = (0.7, 0.6, 0.5)


def create_final_camera() -> Camera:
    """Camera used to render the showcase scene."""
    return Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=1200,
        samples_per_pixel=100,
        max_depth=50,
        vfov=20.0,
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
    )


def _random_color(rng: random.Random, low: float = 0.0, high: float = 1.0):
    return (rng.uniform(low, high), rng.uniform(low, high), rng.uniform(low, high))


def create_final_scene(seed: int | None = None) -> tuple[SceneManager, Camera]:
    """Build the showcase scene.

    Args:
        seed: Seed for the host-side random generator. None seeds from the
            system, producing a different layout every call.

    Returns:
        Tuple of (scene, camera).
    """
    rng = random.Random(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = (
                a + CELL_JITTER * rng.random(),
                SMALL_RADIUS,
                b + CELL_JITTER * rng.random(),
            )

            if math.dist(center, KEEP_CLEAR_POINT) <= KEEP_CLEAR_DISTANCE:
                continue

            if choose_mat < LAMBERTIAN_THRESHOLD:
                c1 = _random_color(rng)
                c2 = _random_color(rng)
                albedo = (c1[0] * c2[0], c1[1] * c2[1], c1[2] * c2[2])
                scene.add_lambertian_sphere(center, SMALL_RADIUS, albedo)
            elif choose_mat < METAL_THRESHOLD:
                albedo = _random_color(rng, 0.5, 1.0)
                fuzz = rng.uniform(0.0, 0.5)
                scene.add_metal_sphere(center, SMALL_RADIUS, albedo, fuzz)
            else:
                scene.add_dielectric_sphere(center, SMALL_RADIUS, GLASS_IOR)

    scene.add_dielectric_sphere(LARGE_GLASS_CENTER, LARGE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere(LARGE_DIFFUSE_CENTER, LARGE_RADIUS, LARGE_DIFFUSE_ALBEDO)
    scene.add_metal_sphere(LARGE_METAL_CENTER, LARGE_RADIUS, LARGE_METAL_ALBEDO, 0.0)

    return scene, create_final_camera()
