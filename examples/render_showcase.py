#!/usr/bin/env python3
"""Render the showcase scene.

This script renders the reference room scene end to end: it builds the
scene, sets up the camera, renders the frame tile by tile and writes a PNG.

Usage:
    python examples/render_showcase.py [options]

Options:
    --samples SAMPLES   Samples per pixel (default: 16)
    --seed SEED         Random seed (default: 0)
    --mesh PATH         OBJ mesh placed on the floor (default: none)
    --floor-texture PATH  Image used for the floor (default: checkerboard)
    --scene PATH        Render a JSON scene file instead of the showcase
    --dump-scene PATH   Also write the rendered scene as a JSON scene file
    --output OUTPUT     Output file path (default: showcase.png)
    --cpu             Force the CPU backend
    --verbose           Enable debug logging
    --quiet             Suppress progress output

Example:
    python examples/render_showcase.py --samples 4 --mesh teapot.obj
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=16,
        help="Samples per pixel (default: 16)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--mesh",
        type=str,
        default=None,
        help="OBJ mesh placed on the floor (default: none)",
    )
    parser.add_argument(
        "--floor-texture",
        type=str,
        default=None,
        help="Image used for the floor (default: procedural checkerboard)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to render instead of the showcase",
    )
    parser.add_argument(
        "--dump-scene",
        type=str,
        default=None,
        help="Write the rendered scene to this JSON file",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="showcase.png",
        help="Output file path (default: showcase.png)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_showcase(
    num_samples: int = 16,
    seed: int = 0,
    mesh_path: str | None = None,
    floor_texture: str | None = None,
    scene_path: str | None = None,
    dump_path: str | None = None,
    output_path: str = "showcase.png",
    quiet: bool = False,
) -> Path:
    """Render the showcase scene (or a scene file) and save to file.

    Args:
        num_samples: Samples per pixel for the showcase.
        seed: Random seed for the showcase.
        mesh_path: Optional OBJ file placed on the floor.
        floor_texture: Optional image file for the floor.
        scene_path: JSON scene file rendered with its own settings instead
            of the showcase.
        dump_path: Optional JSON file the rendered scene is written to.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.pinhole import setup_camera
    from pathtracer.core.renderer import FrameRenderer
    from pathtracer.scene.scene_file import load_scene_file, save_scene_file
    from pathtracer.scene.showcase import ShowcaseParams, create_showcase_scene

    load_start = time.perf_counter()
    if scene_path is not None:
        scene, camera, settings = load_scene_file(scene_path)
    else:
        params = ShowcaseParams(mesh_path=mesh_path, floor_texture=floor_texture)
        scene, camera, settings = create_showcase_scene(
            params, samples_per_pixel=num_samples, seed=seed
        )
    setup_camera(camera)

    if dump_path is not None:
        save_scene_file(dump_path, scene, camera, settings)

    if not quiet:
        print(f"Load time: {time.perf_counter() - load_start:.2f}s")
        print(
            f"Rendering {settings.width}x{settings.height}, "
            f"{scene.get_element_count()} elements, {settings.samples_per_pixel} spp..."
        )

    renderer = FrameRenderer(settings)

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            print(f"\r  Progress: {done}/{total} tiles ({done / total * 100:.1f}%)", end="", flush=True)

    renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time: {renderer.render_seconds:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        try:
            ti.init(arch=ti.gpu)
        except Exception:
            ti.init(arch=ti.cpu)

    try:
        render_showcase(
            num_samples=args.samples,
            seed=args.seed,
            mesh_path=args.mesh,
            floor_texture=args.floor_texture,
            scene_path=args.scene,
            dump_path=args.dump_scene,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
