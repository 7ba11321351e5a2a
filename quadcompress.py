## Approximate an image with flat rectangles by greedy quadtree refinement.
## e.g. quadcompress photo.jpg -iter 2000
##      quadcompress photo.jpg -iter 500 -outline 000000 -o boxes.png
##      quadcompress photo.jpg -iter 3000 -gif 50 -delay 80

import sys
import argparse

from compressor import Compressor
from render import FrameSampler
from image_io import (GIF_FRAME_DELAY_MS, default_output_path, downscale,
                      hex_to_rgb, image_format, load_raster, rgb_to_hex,
                      save_animation, save_raster)

# ---------------- argument types ----------------

def non_negative_int(s):
    try:
        n = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {s!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {s!r}")
    return n


def positive_int(s):
    n = non_negative_int(s)
    if n == 0:
        raise argparse.ArgumentTypeError("expected a positive integer, got 0")
    return n


def hex_color(s):
    try:
        return hex_to_rgb(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def scale_factor(s):
    try:
        f = float(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got {s!r}")
    if not 0 < f <= 1:
        raise argparse.ArgumentTypeError("scale must be in (0, 1]")
    return f


def build_parser():
    ap = argparse.ArgumentParser(
        prog="quadcompress",
        description="Approximate an image with flat-colour rectangles by splitting "
                    "the highest-error region, one split per iteration.")
    ap.add_argument("input", help="Input image (any format skimage can read)")
    ap.add_argument("-o", dest="output", default=None,
                    help="Output file (default: <input>-comprs.<ext>, or .gif with -gif)")
    ap.add_argument("-iter", dest="iterations", type=non_negative_int, required=True,
                    help="Number of refinement iterations")
    ap.add_argument("-outline", type=hex_color, default=None, metavar="RRGGBB",
                    help="Draw region borders in this colour")
    ap.add_argument("-gif", dest="gif", type=positive_int, default=None, metavar="K",
                    help="Write an animated GIF with a frame every K iterations")
    ap.add_argument("-delay", type=positive_int, default=GIF_FRAME_DELAY_MS, metavar="MS",
                    help=f"GIF frame delay in milliseconds (default {GIF_FRAME_DELAY_MS})")
    ap.add_argument("-scale", type=scale_factor, default=None, metavar="F",
                    help="Downscale the input by F before compressing")
    ap.add_argument("-q", "--quiet", action="store_true",
                    help="Only report errors")
    return ap

# --------------- core ----------------

def compress_file(args, log=print):
    """load -> (downscale) -> refine -> render/sample -> write"""
    animated = args.gif is not None
    output = args.output or default_output_path(args.input, animated=animated)
    if not animated:
        image_format(output)  # fail on a bad extension before doing any work

    raster = load_raster(args.input)
    if args.scale is not None:
        raster = downscale(raster, args.scale)
    h, w = raster.shape[:2]
    log(f"loaded {w}x{h} image from {args.input}")

    if args.outline is not None:
        log(f"outlining regions in #{rgb_to_hex(args.outline)}")

    compressor = Compressor(raster)
    sampler = FrameSampler(args.gif, outline=args.outline) if animated else None
    done = compressor.run(args.iterations, sampler=sampler)
    log(f"refined {done} regions ({len(compressor.leaves())} leaves, "
        f"squared error {compressor.total_error():.0f})")

    if animated:
        log(f"encoding gif ({len(sampler)} frames)...")
        save_animation(sampler.frames, output, delay_ms=args.delay)
    else:
        save_raster(compressor.render(outline=args.outline), output)
    log(f"wrote {output}")
    return output

# --------------- CLI ----------------

def main(argv=None):
    args = build_parser().parse_args(argv)
    log = (lambda *a, **k: None) if args.quiet else print
    try:
        compress_file(args, log=log)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
