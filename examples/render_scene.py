#!/usr/bin/env python3
"""Render a demo scene or a JSON scene file.

This script demonstrates end-to-end rendering with the Whitted ray tracer:
it builds (or loads) a scene, sets up the camera and renders one ray per
pixel with shadows and mirror reflections.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene NAME        Demo scene: "showcase" or "mirror_box" (default: showcase)
    --scene-file PATH   Load a JSON scene instead of a demo scene
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 360)
    --bounces N         Maximum reflection bounces (default: 5)
    --no-shadows        Disable shadow rays
    --cube-map PATHS    Six face images (+X -X +Y -Y +Z -Z) for the background
    --output OUTPUT     Output file path (default: render.png)
    --save-scene PATH   Also write the scene as JSON
    --show              Display the result with Matplotlib
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --scene mirror_box --width 256 --height 256 --bounces 8
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the Whitted ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("showcase", "mirror_box"),
        default="showcase",
        help="Demo scene to render (default: showcase)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene file to render instead of a demo scene",
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Image height in pixels (default: 360)")
    parser.add_argument(
        "--bounces",
        type=int,
        default=5,
        help="Maximum reflection bounces (default: 5)",
    )
    parser.add_argument("--no-shadows", action="store_true", help="Disable shadow rays")
    parser.add_argument(
        "--cube-map",
        nargs=6,
        metavar="FACE",
        default=None,
        help="Six cube map face images in the order +X -X +Y -Y +Z -Z",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument("--save-scene", type=str, default=None, help="Also write the scene as JSON")
    parser.add_argument("--show", action="store_true", help="Display the result with Matplotlib")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_scene(args: argparse.Namespace) -> Path:
    """Build the scene described by the arguments, render it and save it.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.tracer.core.renderer import Renderer
    from src.tracer.core.settings import RenderSettings
    from src.tracer.preview.display import show_image
    from src.tracer.scene.demo_scenes import create_mirror_box_scene, create_showcase_scene
    from src.tracer.scene.environment import clear_environment, load_cube_map
    from src.tracer.scene.manager import SceneManager

    settings = RenderSettings(
        width=args.width,
        height=args.height,
        max_bounces=args.bounces,
        shadows_enabled=not args.no_shadows,
    )

    if args.scene_file is not None:
        if not args.quiet:
            print(f"Loading scene from {args.scene_file}...")
        scene = SceneManager()
        camera, file_settings = scene.load_json(args.scene_file)
        if camera is None:
            raise ValueError(f"Scene file {args.scene_file} has no camera")
        if file_settings is not None:
            settings = file_settings
    else:
        if not args.quiet:
            print(f"Creating {args.scene} scene ({settings.width}x{settings.height})...")
        factory = create_showcase_scene if args.scene == "showcase" else create_mirror_box_scene
        scene, camera = factory(aspect_ratio=settings.aspect_ratio)

    clear_environment()
    if args.cube_map is not None:
        load_cube_map(args.cube_map)

    if args.save_scene is not None:
        scene.save_json(args.save_scene, camera=camera, settings=settings)

    renderer = Renderer(settings)

    if not args.quiet:
        print(f"Rendering with up to {settings.max_bounces} bounces...")

    start_time = time.time()
    image = renderer.render(scene, camera)

    output_file = Path(args.output)
    renderer.save(output_file)

    total_time = time.time() - start_time
    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if args.show:
        show_image(image, title=output_file.name)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_scene(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
