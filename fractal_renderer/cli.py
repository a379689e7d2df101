"""
Command-line entry point.

    fractal-render FILE METHOD PIXELS UPPERLEFT LOWERRIGHT SEED LIMIT

Renders the requested fractal with the banded renderer, applies a grayscale
mapping and writes the result as a PNG.
"""

import argparse
import logging
import re
import sys
import time

from .buffer import MAX_LIMIT
from .colormaps import get_colormap, list_colormap_names
from .compute import FractalVariant
from .errors import RenderError
from .image import write_image
from .parsing import parse_complex, parse_geometry
from .renderer import FractalRenderer
from .settings import default_workers, load_settings

logger = logging.getLogger(__name__)

EXAMPLES = """\
examples:
  %(prog)s mandel.png mandelbrot 1000x750 -1.20,0.35 -1,0.20 0,0 255
  %(prog)s julia.png julia 1000x750 -1.50,1 1.5,-1 -0.8,0.156 255
  %(prog)s newton.png newton 800x800 -2,2 2,-2 1,0 64 --color binary
"""


class CoordinateArgumentParser(argparse.ArgumentParser):
    """
    ArgumentParser that reads "-1.20,0.35" as a value, not an option.

    Stock argparse only recognizes plain negative numbers; anything else
    starting with "-" is taken for a flag. argparse has no public hook for
    this, so the parser replaces its private _negative_number_matcher
    attribute. If a Python release drops that attribute the override has no
    effect and negative coordinates need a "--" in front of the positionals
    (test_cli.py covers both forms).
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._negative_number_matcher = re.compile(r'^-\.?\d')


def build_parser():
    parser = CoordinateArgumentParser(
        prog="fractal-render",
        description="Render an escape-time fractal to a grayscale PNG.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", help="output PNG file")
    parser.add_argument("method", help="fractal to render: mandelbrot, julia or newton")
    parser.add_argument("pixels", help="image size, e.g. 1000x750")
    parser.add_argument("upper_left", metavar="upperleft", help="upper left corner, e.g. -1.20,0.35")
    parser.add_argument("lower_right", metavar="lowerright", help="lower right corner, e.g. -1,0.20")
    parser.add_argument("seed", help="seed value, e.g. 0,0 or -0.8,0.156")
    parser.add_argument("limit", type=int, help="maximum iterations per pixel")
    parser.add_argument("--color", choices=list_colormap_names(), default=None,
                        help="grayscale mapping (default from settings, normally 'escape')")
    parser.add_argument("--workers", type=int, default=None,
                        help="number of band workers (default: one per CPU)")
    parser.add_argument("--settings", default=None,
                        help="settings JSON file to use instead of the packaged one")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(format="%(levelname)s: %(message)s",
                        level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = load_settings(args.settings)
    try:
        variant = FractalVariant.from_str(args.method)
        bounds, upper_left, lower_right = parse_geometry(args.pixels, args.upper_left, args.lower_right)
        seed = parse_complex(args.seed)
        if seed is None:
            raise ValueError(f"error parsing seeded value {args.seed!r}")
        if not 0 <= args.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 0 and {MAX_LIMIT}, got {args.limit}")
        if args.workers is not None and args.workers < 1:
            raise ValueError(f"workers must be at least 1, got {args.workers}")
        color = args.color or settings['color']
        colorize = get_colormap(color)
    except KeyError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: unknown color mapping {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 1

    workers = args.workers or default_workers(settings)
    renderer = FractalRenderer(bounds[0], bounds[1], upper_left, lower_right,
                               variant=variant, seed=seed, limit=args.limit, workers=workers)
    logger.info("Rendering %s at %dx%d with %d worker(s)",
                variant.name.lower(), bounds[0], bounds[1], workers)

    started = time.perf_counter()
    try:
        result = renderer.render()
    except RenderError as e:
        print(f"{parser.prog}: render failed: {e}", file=sys.stderr)
        return 2
    logger.info("Computed %d pixels in %.2fs", len(result), time.perf_counter() - started)

    pixels = colorize(result)
    write_image(args.file, pixels, bounds)
    print(f"Image saved to: {args.file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
