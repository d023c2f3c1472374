"""Integration tests for end-to-end rendering pipeline.

This module tests the complete rendering pipeline from scene creation through
final image output. It verifies that all components work together correctly
and that the output meets basic quality criteria.

Tests are designed to be fast (low resolution, few samples) while still
exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
from PIL import Image


def _render_small_final_scene(seed: int = 7):
    import dataclasses

    from pathtracer.core.renderer import Renderer
    from pathtracer.scene.final_scene import create_final_scene

    scene, camera = create_final_scene(seed=seed)
    camera = dataclasses.replace(camera, image_width=32, samples_per_pixel=2, max_depth=8)
    renderer = Renderer(camera)
    renderer.render()
    return scene, renderer


class TestFinalSceneIntegration:
    """Integration tests for the showcase scene."""

    def test_final_scene_end_to_end(self) -> None:
        _, renderer = _render_small_final_scene()

        assert (renderer.width, renderer.height) == (32, 18)
        pixels = renderer.get_pixels_numpy()
        assert pixels.shape == (18, 32, 3)
        assert pixels.dtype == np.uint8

    def test_final_scene_output_is_finite_and_non_negative(self) -> None:
        _, renderer = _render_small_final_scene()

        image = renderer.get_image_numpy()
        assert not np.isnan(image).any()
        assert not np.isinf(image).any()
        assert (image >= 0.0).all()

    def test_final_scene_has_sky_and_ground(self) -> None:
        """The top of the frame shows sky, the bottom shows the ground."""
        _, renderer = _render_small_final_scene()

        pixels = renderer.get_pixels_numpy().astype(float)
        top = pixels[0].mean(axis=0)
        bottom = pixels[-1].mean(axis=0)
        # Sky is brighter and bluer than the grey ground
        assert top.mean() > bottom.mean()
        assert top[2] >= top[0]


class TestRenderScript:
    """Tests for the render_final_scene example script."""

    def test_parse_args_defaults(self) -> None:
        from examples.render_final_scene import parse_args

        args = parse_args([])
        assert args.width == 1200
        assert args.samples == 100
        assert args.max_depth == 50
        assert args.seed is None
        assert args.scene is None
        assert args.output == "image.ppm"
        assert not args.cpu
        assert not args.quiet

    def test_renders_ppm(self, tmp_path: Path) -> None:
        from examples.render_final_scene import render_final_scene

        output = render_final_scene(
            width=16,
            samples_per_pixel=1,
            max_depth=4,
            seed=3,
            output_path=str(tmp_path / "final.ppm"),
            quiet=True,
        )

        lines = output.read_text().splitlines()
        assert lines[:3] == ["P3", "16 9", "255"]
        assert len(lines) == 3 + 16 * 9
        for line in lines[3:]:
            values = [int(v) for v in line.split()]
            assert len(values) == 3
            assert all(0 <= v <= 255 for v in values)

    def test_renders_png(self, tmp_path: Path) -> None:
        from examples.render_final_scene import render_final_scene

        output = render_final_scene(
            width=16,
            samples_per_pixel=1,
            max_depth=4,
            seed=3,
            output_path=str(tmp_path / "final.png"),
            quiet=True,
        )

        with Image.open(output) as img:
            assert img.size == (16, 9)

    def test_progress_output(self, tmp_path: Path, capsys) -> None:
        from examples.render_final_scene import render_final_scene

        render_final_scene(
            width=16,
            samples_per_pixel=1,
            max_depth=2,
            seed=3,
            output_path=str(tmp_path / "final.ppm"),
        )

        err = capsys.readouterr().err
        assert "Scanlines remaining: 9" in err
        assert "Scanlines remaining: 1" in err
        assert "Done." in err

    def test_renders_scene_file(self, tmp_path: Path) -> None:
        from examples.render_final_scene import render_final_scene

        scene_file = tmp_path / "scene.json"
        scene_file.write_text(
            json.dumps(
                {
                    "materials": [
                        {"type": "lambertian", "albedo": [0.5, 0.5, 0.5]},
                        {"type": "dielectric", "ior": 1.5},
                    ],
                    "spheres": [
                        {"center": [0.0, -1000.0, 0.0], "radius": 1000.0, "material_id": 0},
                        {"center": [0.0, 1.0, 0.0], "radius": 1.0, "material_id": 1},
                    ],
                }
            )
        )

        output = render_final_scene(
            width=16,
            samples_per_pixel=1,
            max_depth=4,
            scene_path=str(scene_file),
            output_path=str(tmp_path / "scene.ppm"),
            quiet=True,
        )

        assert output.read_text().startswith("P3\n16 9\n255\n")

    def test_unsupported_output_format(self, tmp_path: Path) -> None:
        import pytest

        from examples.render_final_scene import render_final_scene

        with pytest.raises(ValueError, match="Unsupported image format"):
            render_final_scene(
                width=8,
                samples_per_pixel=1,
                max_depth=1,
                seed=3,
                output_path=str(tmp_path / "final.bmp"),
                quiet=True,
            )
