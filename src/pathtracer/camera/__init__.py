"""Camera module for view and ray generation.

Pixel coordinates follow image conventions:
    i in [0, width): left to right across the image
    j in [0, height): top to bottom across the image

Rays are jittered within their pixel for anti-aliasing and, when the
defocus angle is positive, start from a random point on the lens disk.
"""

from .camera import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    Camera,
    get_camera_info,
    get_image_size,
    get_ray,
    setup_camera,
    validate_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "validate_camera",
    "get_ray",
    "get_camera_info",
    "get_image_size",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
]
