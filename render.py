import argparse
import json
import sys
import time

from whitted.scene import default_scene, load_scene, scene_to_dict
from whitted.integrator import render_image
from whitted.image_io import save_image
from whitted.types import MAX_DEPTH


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Whitted-style JAX ray tracer")
    parser.add_argument('--width', type=int, default=1024, help='Image width')
    parser.add_argument('--height', type=int, default=768, help='Image height')
    parser.add_argument('--fov', type=float, default=1.05, help='Vertical field of view in radians')
    parser.add_argument('--max-depth', type=int, default=MAX_DEPTH, help='Maximum reflection/refraction depth')
    parser.add_argument('--tile-rows', type=int, default=64, help='Image rows shaded per compiled batch')
    parser.add_argument('--scene', type=str, default=None, help='Path to a JSON scene file (default: built-in scene)')
    parser.add_argument('--dump-scene', type=str, default=None, help='Write the effective scene as JSON to this path and exit')
    parser.add_argument('--output', type=str, default='out.ppm', help='Output image path (.ppm writes binary P6)')
    parser.add_argument('--no-progress', action='store_true', help='Disable the progress bar')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # --- Scene ---
    try:
        if args.scene:
            print(f"Loading scene from {args.scene}...")
            scene = load_scene(args.scene)
        else:
            scene = default_scene()
    except (OSError, ValueError) as e:
        print(f"Error loading scene: {e}", file=sys.stderr)
        return 1
    print(f"Scene: {scene.num_spheres} spheres, {scene.num_lights} lights")

    if args.dump_scene:
        try:
            with open(args.dump_scene, 'w') as f:
                json.dump(scene_to_dict(scene), f, indent=2)
        except OSError as e:
            print(f"Error writing scene: {e}", file=sys.stderr)
            return 1
        print(f"Scene written to {args.dump_scene}")
        return 0

    # --- Rendering ---
    print(f"Rendering {args.width}x{args.height} image, fov {args.fov:.2f} rad, max depth {args.max_depth}...")
    print("Compiling renderer (JIT)...")
    start_time = time.time()
    try:
        framebuffer = render_image(
            scene,
            width=args.width, height=args.height, fov=args.fov,
            max_depth=args.max_depth, tile_rows=args.tile_rows,
            progress=not args.no_progress,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Rendering finished in {time.time() - start_time:.2f} seconds.")

    # --- Save Image ---
    try:
        save_image(framebuffer, args.output)
    except (OSError, ValueError) as e:
        print(f"Error saving image to {args.output}: {e}", file=sys.stderr)
        return 1
    print(f"Image saved to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
