#!/usr/bin/env python3
"""
Holomorph — Holomorphic Image Transformer
CLI entry point. Also importable as a library.

Usage:
    python holomorph.py apply "z^2 + sin(z)" --image photo.jpg
    python holomorph.py poly --image photo.jpg --coefficients "0, 1, 0, 0.5"
    python holomorph.py video "1/z" --input clip.mp4 --quality hi
    python holomorph.py webcam "z^3" --resolution hd
    python holomorph.py parse "z^2 + 1"
    python holomorph.py list-functions --category trig
    python holomorph.py serve
"""

import sys
import os
import argparse

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.expression import parse, ParseError
from core.polynomial import polynomial, rational, parse_coefficients
from core.render import render_image, render_video, output_path_for
from core.resample import remap_image
from core.safety import (
    IMAGE_EXTENSIONS, preflight, validate_dimensions,
    set_processing_timeout, clear_processing_timeout,
)
from core.video_io import load_frame, save_frame
from functions import list_functions, list_categories, CATEGORIES

__version__ = "0.3.0"

DEFAULT_DIMENSIONS = (640, 480)

# Named capture resolutions for webcam mode
RESOLUTIONS = {
    "hd": (1280, 720),
    "full-hd": (1920, 1080),
    "uhd": (3840, 2160),
    "qhd": (2560, 1440),
    "wqhd": (2560, 1600),
    "four-k": (3840, 2160),
    "eight-k": (7680, 4320),
    "sd": (640, 480),
    "retina": (2048, 1536),
    "svga": (800, 600),
    "xga": (1024, 768),
    "wxga": (1280, 800),
    "hd-ready": (1366, 768),
    "wvga": (800, 480),
    "qvga": (320, 240),
    "cga": (640, 200),
}


def parse_dimensions(value: str) -> tuple[int, int]:
    """argparse type for 'width,height'."""
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("Dimensions must be in format width,height")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid dimensions: {value}")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Dimensions must be positive: {value}")
    return width, height


def resolve_dimensions(args) -> tuple[int, int]:
    """A --resolution preset overrides --dimensions; default is 640x480."""
    if getattr(args, "resolution", None):
        return RESOLUTIONS[args.resolution]
    if getattr(args, "dimensions", None):
        return args.dimensions
    return DEFAULT_DIMENSIONS


def cmd_apply(args):
    """Transform an image file with the bilinear path."""
    out = render_image(args.image, args.function, args.output)
    print(f"Image saved as: {out}")


def cmd_poly(args):
    """Transform an image with a polynomial (or rational) built from coefficients."""
    numerator = parse_coefficients(args.coefficients)
    if args.denominator:
        tree = rational(numerator, parse_coefficients(args.denominator))
    else:
        tree = polynomial(numerator)
    print(f"Function: {tree}")

    info = preflight(args.image, allowed=IMAGE_EXTENSIONS)
    frame = load_frame(info["path"])
    validate_dimensions(frame.shape[1], frame.shape[0])
    result = remap_image(frame, tree)

    label = "_".join(f"{c:.1f}" for c in numerator)
    out = args.output or output_path_for(args.image, label)
    save_frame(result, str(out))
    print(f"Image saved as: {out}")


def cmd_video(args):
    """Transform every frame of a video through a lookup table."""
    set_processing_timeout(args.timeout)
    try:
        out = render_video(args.input, args.function, args.output, quality=args.quality)
    finally:
        clear_processing_timeout()
    print(f"Video saved as: {out}")


def cmd_webcam(args):
    """Live webcam transform. Esc or q quits."""
    from core.webcam import run_webcam

    width, height = resolve_dimensions(args)
    parse(args.function)  # Fail fast before opening the camera
    print(f"Webcam {args.camera} at {width}x{height} — press Esc or q to quit")
    shown = run_webcam(args.function, width, height, camera=args.camera)
    print(f"Displayed {shown} frames")


def cmd_parse(args):
    """Show how an expression is parsed."""
    try:
        tree = parse(args.function)
    except ParseError as e:
        print(f"  {args.function}", file=sys.stderr)
        print(f"  {' ' * e.position}^", file=sys.stderr)
        raise
    print(tree)


def cmd_list_functions(args):
    """List registered functions, grouped by category."""
    categories = [args.category] if args.category else list_categories()
    for cat in categories:
        items = list_functions(cat)
        if args.compact:
            print(f"{cat}: {', '.join(i['name'] for i in items)}")
            continue
        print(f"\n{cat.upper()} — {CATEGORIES[cat]}")
        for item in items:
            alias = f" (alias of {item['alias_of']})" if item.get("alias_of") else ""
            print(f"  {item['name']:<8} {item['description']}{alias}")


def cmd_serve(args):
    """Launch the HTTP API."""
    from server import start
    start(port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="holomorph",
        description="Holomorph — remap images through complex functions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    # apply
    p = sub.add_parser("apply", help="Transform an image file")
    p.add_argument("function", metavar="FUNCTION", help="Function of z, e.g. 'z^2 + sin(z)'")
    p.add_argument("-i", "--image", required=True, help="Path to the image to process")
    p.add_argument("-o", "--output", help="Output path (default: output/<name>_<fn>_<time>.jpeg)")

    # poly
    p = sub.add_parser("poly", help="Transform an image with a polynomial from coefficients")
    p.add_argument("-i", "--image", required=True, help="Path to the image to process")
    p.add_argument("-c", "--coefficients", required=True,
                   help="Ascending coefficients c0,c1,c2,... for c0 + c1*z + c2*z^2 ...")
    p.add_argument("-d", "--denominator", help="Denominator coefficients (makes a rational function)")
    p.add_argument("-o", "--output", help="Output path")

    # video
    p = sub.add_parser("video", help="Transform a video file (lookup table per resolution)")
    p.add_argument("function", metavar="FUNCTION", help="Function of z")
    p.add_argument("--input", required=True, help="Path to the source video")
    p.add_argument("-o", "--output", help="Output path (default: output/<name>_<fn>_<time>.mp4)")
    p.add_argument("--quality", choices=["lo", "mid", "hi"], default="mid")
    p.add_argument("--timeout", type=int, default=300, help="Abort after this many seconds")

    # webcam
    p = sub.add_parser("webcam", help="Live webcam transform")
    p.add_argument("function", metavar="FUNCTION", help="Function of z")
    p.add_argument("-r", "--resolution", choices=sorted(RESOLUTIONS), help="Resolution preset (overrides --dimensions)")
    p.add_argument("-d", "--dimensions", type=parse_dimensions, help="Custom size as width,height")
    p.add_argument("--camera", type=int, default=0, help="Capture device index")

    # parse
    p = sub.add_parser("parse", help="Show the parsed form of an expression")
    p.add_argument("function", metavar="FUNCTION", help="Function of z")

    # list-functions
    p = sub.add_parser("list-functions", help="List available functions")
    p.add_argument("--category", choices=list_categories(), help="Filter by category")
    p.add_argument("--compact", action="store_true", help="Compact view (names only)")

    # serve
    p = sub.add_parser("serve", help="Launch the HTTP API")
    p.add_argument("--port", type=int, default=7861)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "apply": cmd_apply,
        "poly": cmd_poly,
        "video": cmd_video,
        "webcam": cmd_webcam,
        "parse": cmd_parse,
        "list-functions": cmd_list_functions,
        "serve": cmd_serve,
    }

    if args.command in commands:
        try:
            commands[args.command](args)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
