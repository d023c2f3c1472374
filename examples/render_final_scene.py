#!/usr/bin/env python3
"""Render the random-spheres showcase scene.

This script builds the showcase scene (or loads a scene from a JSON file),
renders it row by row and writes the result as a PPM or PNG image.

Usage:
    python -m examples.render_final_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 1200)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Maximum ray bounces (default: 50)
    --seed SEED             Seed for the random scene layout (default: random)
    --scene FILE            Load the scene from a JSON file instead
    --output OUTPUT         Output file, .ppm or .png (default: image.ppm)
    --cpu                   Force the CPU backend
    --quiet                 Suppress progress output

Example:
    python -m examples.render_final_scene --width 400 --samples 10 --seed 7
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random-spheres showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum number of ray bounces (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random scene layout (default: random)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to render instead of the showcase scene",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Use the CPU backend even if a GPU is available",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_final_scene(
    width: int = 1200,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
    seed: int | None = None,
    scene_path: str | None = None,
    output_path: str = "image.ppm",
    quiet: bool = False,
) -> Path:
    """Build the scene, render it and save the image.

    Args:
        width: Image width in pixels.
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum number of ray bounces.
        seed: Seed for the random scene layout.
        scene_path: Optional JSON scene file replacing the showcase scene.
        output_path: Output file path (.ppm or .png).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.renderer import Renderer
    from pathtracer.preview.export import save_image
    from pathtracer.scene.final_scene import create_final_camera, create_final_scene
    from pathtracer.scene.manager import SceneManager

    if scene_path is not None:
        scene = SceneManager()
        scene.from_dict(json.loads(Path(scene_path).read_text()))
        camera = create_final_camera()
    else:
        scene, camera = create_final_scene(seed)

    camera = dataclasses.replace(
        camera,
        image_width=width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
    )

    renderer = Renderer(camera)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{renderer.width}x{renderer.height}, {samples_per_pixel} spp...",
            file=sys.stderr,
        )

    start_time = time.time()

    def progress_callback(rows_remaining: int) -> None:
        if not quiet:
            print(
                f"\rScanlines remaining: {rows_remaining} ",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(progress_callback)

    output_file = Path(output_path)
    save_image(renderer.get_pixels_numpy(), output_file)

    if not quiet:
        print("\rDone.                 ", file=sys.stderr)
        print(f"Saved to: {output_file.absolute()}", file=sys.stderr)
        print(f"Total time: {time.time() - start_time:.2f}s", file=sys.stderr)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    backend = "CPU"
    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        # Use GPU if available, fall back to CPU
        try:
            ti.init(arch=ti.gpu)
            backend = "GPU"
        except RuntimeError:
            ti.init(arch=ti.cpu)

    if not args.quiet:
        print(f"Using {backend} backend", file=sys.stderr)

    try:
        render_final_scene(
            width=args.width,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            scene_path=args.scene,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
