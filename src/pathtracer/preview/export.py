"""Image export utilities for rendered images.

Supported formats:
    - PPM (plain-text P3, 8-bit)
    - PNG (8-bit via Pillow)

Both writers take resolved 8-bit pixels as a (height, width, 3) array with
row 0 at the top of the image. resolve_pixels() produces such an array from
averaged linear colors, matching the integrator's write_color().

Example:
    >>> from pathtracer.preview.export import save_ppm
    >>> from pathtracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(camera)
    >>> renderer.render()
    >>> save_ppm(renderer.get_pixels_numpy(), "image.ppm")
"""

from __future__ import annotations

import os
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

PPM_MAX_VALUE = 255

# Matches the integrator's write_color()
MAX_INTENSITY = 0.999
COLOR_SCALE = 255.999


def _check_pixels(pixels: npt.NDArray) -> npt.NDArray[np.uint8]:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected a (height, width, 3) pixel array, got shape {pixels.shape}")
    if pixels.dtype != np.uint8:
        if np.any(pixels < 0) or np.any(pixels > PPM_MAX_VALUE):
            raise ValueError(f"Pixel values must lie in [0, {PPM_MAX_VALUE}]")
        pixels = pixels.astype(np.uint8)
    return pixels


def resolve_pixels(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert averaged linear colors to 8-bit pixels.

    Applies gamma 2 (square root, with non-positive values mapping to 0),
    clamps to [0, 0.999] and scales by 255.999, truncating to integers.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    linear = np.asarray(image, dtype=np.float64)
    gamma = np.sqrt(np.where(linear > 0.0, linear, 0.0))
    clamped = np.clip(gamma, 0.0, MAX_INTENSITY)
    return (COLOR_SCALE * clamped).astype(np.uint8)


def format_ppm(pixels: npt.NDArray) -> str:
    """Render pixels as a plain-text (P3) PPM document.

    The header is "P3", then "<width> <height>", then "255", followed by one
    "r g b" line per pixel, rows top to bottom and pixels left to right.

    Raises:
        ValueError: If the array is not (H, W, 3) or holds values outside
            [0, 255].
    """
    pixels = _check_pixels(pixels)
    height, width, _ = pixels.shape

    lines = ["P3", f"{width} {height}", str(PPM_MAX_VALUE)]
    for r, g, b in pixels.reshape(-1, 3):
        lines.append(f"{r} {g} {b}")
    return "\n".join(lines) + "\n"


def write_ppm(pixels: npt.NDArray, stream: TextIO) -> None:
    """Write pixels to an open text stream as a P3 PPM document."""
    stream.write(format_ppm(pixels))


def save_ppm(pixels: npt.NDArray, filepath: str | os.PathLike[str]) -> None:
    """Save pixels as a P3 PPM file."""
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        write_ppm(pixels, f)


def save_png(pixels: npt.NDArray, filepath: str | os.PathLike[str]) -> None:
    """Save pixels as an 8-bit RGB PNG file using Pillow."""
    pixels = _check_pixels(pixels)
    pil_image = PILImage.fromarray(pixels)
    pil_image.save(filepath)


def save_image(pixels: npt.NDArray, filepath: str | os.PathLike[str]) -> None:
    """Save pixels, choosing PPM or PNG from the file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    extension = os.path.splitext(os.fspath(filepath))[1].lower()
    if extension == ".ppm":
        save_ppm(pixels, filepath)
    elif extension == ".png":
        save_png(pixels, filepath)
    else:
        raise ValueError(f"Unsupported image format {extension!r}; use .ppm or .png")
