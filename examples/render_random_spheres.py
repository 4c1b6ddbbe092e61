#!/usr/bin/env python3
"""Render the random spheres scene (or a JSON scene file).

This script builds the scene, sets up the thin-lens camera and renders the
configured number of independent frames, printing progress after each batch
of frames.

Usage:
    python examples/render_random_spheres.py [options]

Options:
    --width WIDTH           Image width in pixels (default: scene setting)
    --frames FRAMES         Number of independent frames (default: scene setting)
    --samples SAMPLES       Samples per pixel per frame (default: scene setting)
    --max-depth DEPTH       Maximum bounces per path (default: scene setting)
    --seed SEED             Seed for scene generation and rendering
    --scene PATH            Render a JSON scene file instead of random spheres
    --output OUTPUT         Output file path (default: random_spheres.png)
    --batch-size SIZE       Frames per kernel launch; progress is reported once
                            per batch (default: all frames in one launch)
    --tone-map METHOD       none, reinhard or exposure (default: none)
    --gamma GAMMA           Power-law gamma instead of the sRGB curve
    --arch {cpu,gpu}        Taichi backend (default: try GPU, then CPU)
    --quiet                 Suppress progress output

Example:
    python examples/render_random_spheres.py --width 300 --frames 8 --seed 7
"""

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--frames", type=int, default=None, help="Number of independent frames")
    parser.add_argument(
        "--samples", type=int, default=None, help="Samples per pixel per frame"
    )
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum bounces per path")
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for scene generation and rendering"
    )
    parser.add_argument(
        "--scene", type=str, default=None, help="JSON scene file to render instead"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="random_spheres.png",
        help="Output file path (default: random_spheres.png)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=(
            "Frames per kernel launch; frames in a launch render in parallel and "
            "progress is reported once per launch (default: all frames at once)"
        ),
    )
    parser.add_argument(
        "--tone-map",
        choices=["none", "reinhard", "exposure"],
        default="none",
        help="Tone mapping method (default: none)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=None,
        help="Power-law gamma; the sRGB curve is used when omitted",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default=None,
        help="Taichi backend (default: try GPU, then CPU)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args(argv)


def init_taichi(arch: str | None, quiet: bool) -> None:
    """Initialize Taichi on the requested backend."""
    if arch == "cpu":
        ti.init(arch=ti.cpu)
    elif arch == "gpu":
        ti.init(arch=ti.gpu)
    else:
        # Use GPU if available, fall back to CPU
        try:
            ti.init(arch=ti.gpu)
            if not quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not quiet:
                print("Using CPU backend")


def render_random_spheres(args: argparse.Namespace) -> Path:
    """Build the scene, render it and save the image.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.renderer import FrameRenderer
    from pathtracer.scene.random_spheres import create_random_spheres_scene
    from pathtracer.scene.scene import load_scene_file
    from pathtracer.scene.settings import ImageSettings

    quiet = args.quiet

    if args.scene is not None:
        if not quiet:
            print(f"Loading scene from {args.scene}...")
        scene, camera = load_scene_file(args.scene)
    else:
        if not quiet:
            print("Creating random spheres scene...")
        scene, camera = create_random_spheres_scene(seed=args.seed)

    if args.width is not None:
        scene.image = ImageSettings.from_width(args.width, scene.image.aspect)

    overrides = {
        "frame_count": args.frames,
        "samples_per_frame": args.samples,
        "max_depth": args.max_depth,
    }
    scene.render = replace(
        scene.render, **{key: value for key, value in overrides.items() if value is not None}
    )

    camera.aspect_ratio = scene.image.aspect
    setup_camera(camera)

    renderer = FrameRenderer(scene.image, scene.render)

    if not quiet:
        print(
            f"Rendering {scene.image.width}x{scene.image.height}, "
            f"{scene.world.get_sphere_count()} spheres, "
            f"{scene.render.frame_count} frames x {scene.render.samples_per_frame} samples..."
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            frames_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} frames "
                f"({progress_pct:.1f}%) - {frames_per_sec:.2f} frames/s",
                end="",
                flush=True,
            )

    renderer.render(seed=args.seed, batch_size=args.batch_size, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(args.output)
    if args.gamma is None:
        renderer.save_image(output_file, srgb=True, tone_map=args.tone_map)
    else:
        renderer.save_image(output_file, gamma=args.gamma, tone_map=args.tone_map)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    init_taichi(args.arch, args.quiet)

    try:
        render_random_spheres(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
