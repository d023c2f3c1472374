"""Image output.

Example:
    >>> from pathtracer.preview import save_ppm
    >>> save_ppm(renderer.get_pixels_numpy(), "image.ppm")
"""

from pathtracer.preview.export import (
    format_ppm,
    resolve_pixels,
    save_image,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    "format_ppm",
    "write_ppm",
    "save_ppm",
    "save_png",
    "save_image",
    "resolve_pixels",
]
