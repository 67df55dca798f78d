#!/usr/bin/env python3
"""Render the demo room scene to a PNG file.

Builds the Cornell-style room, renders it with the pinhole camera at the
origin and writes the quantized image with Pillow.

Usage:
    python -m examples.render_room [options]

Options:
    --width WIDTH       Image width in pixels (default: 1024)
    --aspect RATIO      Aspect ratio, width / height (default: 16/9)
    --samples SAMPLES   Samples per pixel (default: 500)
    --depth DEPTH       Maximum ray depth (default: 100)
    --seed SEED         Seed for the random streams (default: 0)
    --no-jitter         Sample pixel centers only
    --ring-lights N     Replace the ceiling lamp with N lights on a ring
    --config PATH       Load render settings from a JSON file
    --output OUTPUT     Output file path (default: timestamped name)
    --cpu               Force the CPU backend
    -v, --verbose       Log batch progress

Example:
    python -m examples.render_room --width 320 --samples 16 --depth 10
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_room")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo room scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument(
        "--aspect", type=float, default=None, help="Aspect ratio (width / height)"
    )
    parser.add_argument("--samples", type=int, default=None, help="Samples per pixel")
    parser.add_argument("--depth", type=int, default=None, help="Maximum ray depth")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random streams")
    parser.add_argument(
        "--no-jitter", action="store_true", help="Sample pixel centers only"
    )
    parser.add_argument(
        "--ring-lights",
        type=int,
        default=None,
        metavar="N",
        help="Replace the ceiling lamp with N lights on a ring",
    )
    parser.add_argument(
        "--config", type=str, default=None, help="JSON file with render settings"
    )
    parser.add_argument(
        "--output", type=str, default=None, help="Output file path (default: timestamped)"
    )
    parser.add_argument(
        "--batch-size", type=int, default=10, help="Samples per progress update"
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log batch progress")
    return parser.parse_args(argv)


# Used for options given neither on the command line nor in a config file
DEFAULT_OPTIONS = {
    "aspect_ratio": 16.0 / 9.0,
    "image_width": 1024,
    "samples_per_pixel": 500,
    "max_depth": 100,
    "seed": 0,
}


def explicit_options(args: argparse.Namespace) -> dict:
    """RenderConfig fields set explicitly on the command line."""
    options = {
        "aspect_ratio": args.aspect,
        "image_width": args.width,
        "samples_per_pixel": args.samples,
        "max_depth": args.depth,
        "seed": args.seed,
    }
    options = {key: value for key, value in options.items() if value is not None}
    if args.no_jitter:
        options["jitter"] = False
    if args.output is not None:
        options["output_path"] = args.output
    return options


def build_config(args: argparse.Namespace):
    """Combine the optional JSON config with command-line options.

    Options given on the command line override the JSON file. Changing the
    width or aspect ratio re-derives the image height.
    """
    from pinray.core.config import RenderConfig, default_output_name, load_render_config

    overrides = explicit_options(args)

    if args.config is not None:
        config = load_render_config(args.config)
        if "image_width" in overrides or "aspect_ratio" in overrides:
            overrides["image_height"] = None
        return replace(config, **overrides)

    config = RenderConfig(**{**DEFAULT_OPTIONS, **overrides})
    if "output_path" not in overrides:
        config = replace(config, output_path=default_output_name(config))
    return config


def render_room(args: argparse.Namespace) -> Path:
    """Build the scene, render it and save the PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pinray.camera.pinhole import PinholeCamera
    from pinray.core.renderer import render_image
    from pinray.preview.export import save_png
    from pinray.scene.room import create_room_scene, ring_lights

    config = build_config(args)

    lights = None
    if args.ring_lights is not None:
        lights = ring_lights(count=args.ring_lights)
    create_room_scene(lights=lights)

    def progress_callback(current: int, target: int) -> None:
        logger.debug("Progress: %d/%d samples (%.1f%%)", current, target, 100.0 * current / target)

    camera = PinholeCamera(aspect_ratio=config.aspect_ratio)
    data = render_image(config, camera, callback=progress_callback, batch_size=args.batch_size)

    width, height = config.size
    output_file = Path(config.output_path)
    save_png(data, width, height, output_file)
    logger.info("Saved image to %s", output_file.absolute())
    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        # Falls back to CPU when no GPU backend is available
        ti.init(arch=ti.gpu)

    try:
        render_room(args)
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Render failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
