"""Path tracing integrator.

This module implements the per-pixel rendering loop: camera rays are traced
through the sphere scene, bounce off surfaces according to their materials,
and pick up the sky gradient when they escape.

A path's color is the product of the attenuations collected at each bounce
times the background color where the path leaves the scene. Paths that are
absorbed, or that are still bouncing after max_depth intersections,
contribute black. Taichi functions cannot recurse, so the bounce chain is an
explicit loop carrying the running throughput.

Rendering is sequential: each row is one kernel launch with a serialized
pixel loop, and rows are dispatched top to bottom from Python so progress can
be reported between them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.camera import Camera, setup_camera
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>>
    >>> camera = Camera(image_width=64)
    >>> setup_camera(camera)
    >>> setup_render_target(camera.image_width, camera.image_height)
    >>> render_image()
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.camera import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    get_max_depth,
    get_ray,
    get_samples_per_pixel,
)
from pathtracer.core.interval import Interval, interval_clamp, make_interval
from pathtracer.core.ray import linear_to_gamma, make_ray, unit_vector_fast
from pathtracer.materials.dielectric import (
    get_dielectric_ior,
    scatter_dielectric,
)
from pathtracer.materials.lambertian import (
    get_lambertian_albedo,
    scatter_lambertian,
)
from pathtracer.materials.metal import (
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type aliases for 3D vectors
vec3 = tm.vec3
ivec3 = ti.types.vector(3, ti.i32)

# =============================================================================
# Rendering Constants
# =============================================================================

# Lower bound of the hit interval for every bounce (avoids shadow acne)
T_MIN = 0.001

# Sky gradient endpoints
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# Largest intensity written before scaling to 8 bits
MAX_INTENSITY = 0.999

# Multiplier taking a clamped intensity to an 8-bit value
COLOR_SCALE = 255.999


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Active image size
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Indexed [row, column], row 0 at the top of the image.
# Averaged linear color per pixel
_linear_image = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
# Gamma corrected 8-bit color per pixel
_pixels = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH so kernels never need
    recompiling for a new size.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _linear_image.fill(0.0)
    _pixels.fill(0)


def reset_render_target() -> None:
    """Mark the render target as not set up."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing the ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            ior, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Vertical white-to-blue sky gradient for rays that escape the scene."""
    unit_direction = unit_vector_fast(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_WHITE + a * SKY_BLUE


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the color carried back along a ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Maximum number of surface interactions. 0 yields black.

    Returns:
        The path color: throughput times background on escape, black if the
        path is absorbed or runs out of depth.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Active flag for path continuation (no break out of ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            ray = make_ray(ray_origin, ray_direction)
            rec = intersect_scene(ray, Interval(lower=T_MIN, upper=tm.inf))

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color


@ti.func
def write_color(pixel_color_sum: vec3, samples_per_pixel: ti.i32):
    """Resolve a sum of samples into an 8-bit color triple.

    Averages the samples, applies gamma 2 (square root), clamps each channel
    to [0, 0.999] and scales by 255.999, truncating to integers in [0, 255].
    """
    intensity = make_interval(0.0, MAX_INTENSITY)
    scale = 1.0 / ti.cast(samples_per_pixel, ti.f32)

    result = ivec3(0, 0, 0)
    for c in ti.static(range(3)):
        gamma_value = linear_to_gamma(pixel_color_sum[c] * scale)
        result[c] = ti.cast(COLOR_SCALE * interval_clamp(intensity, gamma_value), ti.i32)
    return result


@ti.func
def sample_pixel(i: ti.i32, j: ti.i32) -> vec3:
    """Trace one camera path through pixel (i, j)."""
    ray = get_ray(i, j)
    return ray_color(ray.origin, ray.direction, get_max_depth())


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_row(j: ti.i32, width: ti.i32):
    """Render every pixel of row j, left to right."""
    ti.loop_config(serialize=True)
    for i in range(width):
        samples = get_samples_per_pixel()
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples):
            pixel_color += sample_pixel(i, j)

        _linear_image[j, i] = pixel_color / ti.cast(samples, ti.f32)
        _pixels[j, i] = write_color(pixel_color, samples)


@ti.kernel
def _render_single_pixel(i: ti.i32, j: ti.i32) -> vec3:
    return sample_pixel(i, j)


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    return ray_color(origin, direction, max_depth)


@ti.kernel
def _write_color_kernel(pixel_color_sum: vec3, samples_per_pixel: ti.i32) -> ivec3:
    return write_color(pixel_color_sum, samples_per_pixel)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(callback=None) -> None:
    """Render the whole image into the render target.

    Rows are rendered top to bottom with the camera configured by the last
    setup_camera() call.

    Args:
        callback: Optional callable receiving the number of rows still to be
            rendered, called before each row.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    for j in range(height):
        if callback is not None:
            callback(height - j)
        _render_row(j, width)


def render_row(j: int) -> None:
    """Render a single row of the render target.

    Raises:
        RuntimeError: If render target has not been set up.
        IndexError: If the row is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= j < height:
        raise IndexError(f"Row {j} outside image of height {height}")
    _render_row(j, width)


def render_pixel(i: int, j: int) -> tuple[float, float, float]:
    """Trace a single camera path through pixel (i, j).

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    color = _render_single_pixel(i, j)
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
) -> tuple[float, float, float]:
    """Trace one path from an arbitrary ray through the current scene."""
    color = _trace_ray_kernel(vec3(*origin), vec3(*direction), max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def resolve_color(
    pixel_color_sum: tuple[float, float, float], samples_per_pixel: int
) -> tuple[int, int, int]:
    """Python entry point to write_color()."""
    rgb = _write_color_kernel(vec3(*pixel_color_sum), samples_per_pixel)
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]))


def get_image_numpy() -> np.ndarray:
    """Get the averaged linear colors as a (height, width, 3) float32 array.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _linear_image.to_numpy()[:height, :width, :]
    return image.astype(np.float32)


def get_pixels_numpy() -> np.ndarray:
    """Get the resolved 8-bit pixels as a (height, width, 3) uint8 array.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    pixels = _pixels.to_numpy()[:height, :width, :]
    return pixels.astype(np.uint8)
