"""Taichi path tracer for sphere scenes.

This package renders scenes of spheres with Lambertian, metal and dielectric
materials by Monte Carlo path tracing, with a thin-lens camera for defocus
blur and a sky-gradient background.

Subpackages:
    core: Vector math, rays, intervals, the path integrator and the renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Scattering models and their material registries
    scene: Scene storage, scene manager and the showcase scene
    camera: Thin-lens camera with jittered ray generation
    preview: PPM and PNG image export
"""

__version__ = "0.1.0"
