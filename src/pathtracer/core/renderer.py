"""Renderer wrapping the integrator for a configured camera.

This module provides a convenient wrapper around the core integrator that:
- Sets up the camera and a render target of the camera's image size
- Renders the full image with an optional per-row progress callback
- Renders row by row as a generator for callers that want to interleave work
- Exposes the result as NumPy arrays and writes PPM/PNG files

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import Renderer
    >>> from pathtracer.scene.final_scene import create_final_scene
    >>>
    >>> scene, camera = create_final_scene(seed=7)
    >>> renderer = Renderer(camera)
    >>> renderer.render()
    >>> renderer.save_ppm("image.ppm")
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from pathtracer.camera.camera import Camera, setup_camera
from pathtracer.core.integrator import (
    get_image_numpy,
    get_pixels_numpy,
    render_image,
    render_row,
    setup_render_target,
)
from pathtracer.preview.export import save_png, save_ppm

# Callback receives the number of rows still to be rendered
ProgressCallback = Callable[[int], None]


class Renderer:
    """Renders the current scene through a camera.

    The renderer owns no image memory itself; it configures and reads the
    integrator's global render target.

    Attributes:
        camera: The camera configuration being rendered.
    """

    def __init__(self, camera: Camera) -> None:
        """Set up the camera and a matching render target.

        Raises:
            ValueError: If the camera configuration is invalid.
        """
        self.camera = camera
        setup_camera(camera)
        setup_render_target(self.width, self.height)

    @property
    def width(self) -> int:
        return self.camera.image_width

    @property
    def height(self) -> int:
        return self.camera.image_height

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render the whole image.

        Args:
            callback: Optional callback called before each row with the
                number of rows remaining.
        """
        render_image(callback)

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render row by row, yielding progress after each row.

        Yields:
            Tuple of (rows_done, rows_total).
        """
        for j in range(self.height):
            render_row(j)
            yield (j + 1, self.height)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Averaged linear colors, shape (height, width, 3)."""
        return get_image_numpy()

    def get_pixels_numpy(self) -> npt.NDArray[np.uint8]:
        """Resolved 8-bit pixels, shape (height, width, 3)."""
        return get_pixels_numpy()

    def save_ppm(self, filepath: str | os.PathLike[str]) -> None:
        save_ppm(self.get_pixels_numpy(), filepath)

    def save_png(self, filepath: str | os.PathLike[str]) -> None:
        save_png(self.get_pixels_numpy(), filepath)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.camera.samples_per_pixel}, "
            f"max_depth={self.camera.max_depth})"
        )
