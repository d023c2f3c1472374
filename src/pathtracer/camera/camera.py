"""Thin-lens camera for primary ray generation.

The camera maps pixel (i, j) to a ray. Pixel (0, 0) is the upper-left corner
of the image; i grows to the right and j grows downward. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view
- Defocus blur (depth of field) through a thin-lens disk
- Box-filter jittered sampling within each pixel for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits at focus_dist in front of the camera, so objects at that
distance are in perfect focus. When defocus_angle > 0, ray origins are
sampled from a disk of radius focus_dist * tan(defocus_angle / 2) centered
on the camera.

Setup runs once in Python with NumPy and writes the derived values into
Taichi fields; get_ray() is a Taichi function that reads them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.camera import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(aspect_ratio=16.0 / 9.0, image_width=400, vfov=20.0)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0, 0)  # Jittered ray through the upper-left pixel
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray, random_in_unit_disk, vec3

# Largest image the preallocated render target can hold
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for a thin-lens camera and its render settings.

    Attributes:
        aspect_ratio: Ideal ratio of image width over height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Camera-relative "up" direction.
        defocus_angle: Variation angle of rays through each pixel, in degrees.
            0 disables defocus blur.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, -1.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float = 10.0

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Pixel grid on the viewport
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())

# Defocus disk basis
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_angle = ti.field(dtype=ti.f32, shape=())

# Render settings
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_samples_per_pixel = ti.field(dtype=ti.i32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def validate_camera(camera: Camera) -> None:
    """Check a camera configuration.

    Raises:
        ValueError: If the image size, sample count or depth is invalid, or
            the image exceeds the render target capacity.
    """
    if camera.image_width <= 0:
        raise ValueError(f"image_width must be positive, got {camera.image_width}")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")
    if camera.samples_per_pixel <= 0:
        raise ValueError(
            f"samples_per_pixel must be positive, got {camera.samples_per_pixel}"
        )
    if camera.max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {camera.max_depth}")
    if camera.image_width > MAX_IMAGE_WIDTH or camera.image_height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image size {camera.image_width}x{camera.image_height} exceeds maximum "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
        )


def setup_camera(camera: Camera) -> None:
    """Derive the camera's viewport geometry and store it for rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the configuration is invalid (see validate_camera).
    """
    validate_camera(camera)

    image_width = camera.image_width
    image_height = camera.image_height

    center = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # Viewport dimensions at the focus distance
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * camera.focus_dist
    # Width follows the realized pixel ratio, not the ideal aspect ratio
    viewport_width = viewport_height * (float(image_width) / image_height)

    w = center - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Viewport edges: across the horizontal edge, and down the vertical edge
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = (
        center - camera.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    )
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = camera.focus_dist * math.tan(math.radians(camera.defocus_angle / 2.0))

    _camera_center[None] = center.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _defocus_disk_u[None] = (u * defocus_radius).tolist()
    _defocus_disk_v[None] = (v * defocus_radius).tolist()
    _defocus_angle[None] = camera.defocus_angle

    _image_width[None] = image_width
    _image_height[None] = image_height
    _samples_per_pixel[None] = camera.samples_per_pixel
    _max_depth[None] = camera.max_depth


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def sample_square() -> vec3:
    """Random offset in the [-0.5, 0.5) x [-0.5, 0.5) unit square."""
    return vec3(ti.random(ti.f32) - 0.5, ti.random(ti.f32) - 0.5, 0.0)


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p[0] * _defocus_disk_u[None] + p[1] * _defocus_disk_v[None]


@ti.func
def get_ray(i: ti.i32, j: ti.i32) -> Ray:
    """Generate a jittered camera ray for pixel (i, j).

    The ray starts at the camera center (or on the defocus disk when
    defocus blur is enabled) and passes through a random point inside the
    pixel's square on the focus plane. The direction is not normalized.

    Args:
        i: Pixel column, 0 at the left edge.
        j: Pixel row, 0 at the top edge.

    Returns:
        The sampled Ray.
    """
    offset = sample_square()
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(i, ti.f32) + offset[0]) * _pixel_delta_u[None]
        + (ti.cast(j, ti.f32) + offset[1]) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        origin = defocus_disk_sample()

    return make_ray(origin, pixel_sample - origin)


@ti.func
def get_pixel_center(i: ti.i32, j: ti.i32) -> vec3:
    """Center of pixel (i, j) on the focus plane."""
    return _pixel00_loc[None] + ti.cast(i, ti.f32) * _pixel_delta_u[None] + ti.cast(
        j, ti.f32
    ) * _pixel_delta_v[None]


@ti.func
def get_samples_per_pixel() -> ti.i32:
    return _samples_per_pixel[None]


@ti.func
def get_max_depth() -> ti.i32:
    return _max_depth[None]


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(field) -> tuple[float, float, float]:
    value = field[None]
    return (float(value[0]), float(value[1]), float(value[2]))


def get_image_size() -> tuple[int, int]:
    """Get the (width, height) configured by the last setup_camera() call."""
    return int(_image_width[None]), int(_image_height[None])


def get_camera_info() -> dict[str, object]:
    """Get the derived camera state for inspection from Python.

    Returns:
        Dictionary with the image size, render settings, center, basis
        vectors, pixel grid and defocus disk vectors.
    """
    return {
        "image_width": int(_image_width[None]),
        "image_height": int(_image_height[None]),
        "samples_per_pixel": int(_samples_per_pixel[None]),
        "max_depth": int(_max_depth[None]),
        "defocus_angle": float(_defocus_angle[None]),
        "center": _as_tuple(_camera_center),
        "u": _as_tuple(_camera_u),
        "v": _as_tuple(_camera_v),
        "w": _as_tuple(_camera_w),
        "pixel00_loc": _as_tuple(_pixel00_loc),
        "pixel_delta_u": _as_tuple(_pixel_delta_u),
        "pixel_delta_v": _as_tuple(_pixel_delta_v),
        "defocus_disk_u": _as_tuple(_defocus_disk_u),
        "defocus_disk_v": _as_tuple(_defocus_disk_v),
    }
