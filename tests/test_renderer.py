"""Tests for the Renderer wrapper."""

import numpy as np
import pytest


@pytest.fixture
def small_camera():
    from pathtracer.camera.camera import Camera

    return Camera(
        aspect_ratio=2.0,
        image_width=6,
        samples_per_pixel=1,
        max_depth=3,
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        focus_dist=1.0,
    )


class TestRenderer:
    """Tests for Renderer setup, rendering and output."""

    def test_dimensions_follow_camera(self, small_camera):
        from pathtracer.core.integrator import get_image_dimensions
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(small_camera)
        assert (renderer.width, renderer.height) == (6, 3)
        assert get_image_dimensions() == (6, 3)

    def test_invalid_camera_rejected(self):
        from pathtracer.camera.camera import Camera
        from pathtracer.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(Camera(samples_per_pixel=0))

    def test_render_with_callback(self, small_camera):
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(small_camera)
        remaining = []
        renderer.render(remaining.append)

        assert remaining == [3, 2, 1]
        pixels = renderer.get_pixels_numpy()
        assert pixels.shape == (3, 6, 3)
        assert pixels.dtype == np.uint8
        assert pixels.min() > 0

    def test_render_progressive(self, small_camera):
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(small_camera)
        progress = list(renderer.render_progressive())

        assert progress == [(1, 3), (2, 3), (3, 3)]
        assert renderer.get_image_numpy().min() > 0.0

    def test_save_ppm(self, small_camera, tmp_path):
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(small_camera)
        renderer.render()
        output = tmp_path / "render.ppm"
        renderer.save_ppm(output)

        lines = output.read_text().splitlines()
        assert lines[:3] == ["P3", "6 3", "255"]
        assert len(lines) == 3 + 6 * 3

    def test_save_png(self, small_camera, tmp_path):
        from PIL import Image

        from pathtracer.core.renderer import Renderer

        renderer = Renderer(small_camera)
        renderer.render()
        output = tmp_path / "render.png"
        renderer.save_png(output)

        with Image.open(output) as img:
            assert img.size == (6, 3)
            assert img.mode == "RGB"
            assert np.array_equal(np.asarray(img), renderer.get_pixels_numpy())

    def test_repr(self, small_camera):
        from pathtracer.core.renderer import Renderer

        assert repr(Renderer(small_camera)) == (
            "Renderer(width=6, height=3, samples_per_pixel=1, max_depth=3)"
        )
