"""
Escape-Time Fractal Renderer Package

Computes Mandelbrot, Julia and Newton fractals over a rectangle of the
complex plane, splitting the image into row bands that are rendered in
parallel by Numba-compiled kernels, and writes grayscale PNGs.

Quick Start:
    from fractal_renderer import FractalRenderer, write_image
    renderer = FractalRenderer(1000, 750, complex(-1.2, 0.35), complex(-1.0, 0.2))
    result = renderer.render()
    write_image("mandel.png", renderer.colorize(result), renderer.bounds)

Or from command line:
    python -m fractal_renderer mandel.png mandelbrot 1000x750 -1.20,0.35 -1,0.20 0,0 255

Package Structure:
    - compute.py: JIT-compiled mapping and escape computation kernels
    - buffer.py: FractalResult and the ResultBuffer the bands write into
    - renderer.py: Band planning and the multi-threaded render
    - colormaps.py: Grayscale mappings (escape, binary, sum, real, imaginary)
    - parsing.py: Coordinate string parsing and validation
    - image.py: PNG output
    - settings.py: Default settings loaded from settings.json
    - cli.py: Command-line entry point
"""

from .buffer import FractalResult, ResultBuffer
from .colormaps import COLORMAPS, get_colormap, list_colormap_names
from .compute import FractalVariant, evaluate_point, pixel_to_point
from .errors import PreconditionViolation, RenderError, WorkerFault
from .image import write_image
from .parsing import parse_complex, parse_pair
from .renderer import Band, FractalRenderer, plan_bands, render

__version__ = "1.0.0"
__all__ = [
    "Band",
    "COLORMAPS",
    "FractalRenderer",
    "FractalResult",
    "FractalVariant",
    "PreconditionViolation",
    "RenderError",
    "ResultBuffer",
    "WorkerFault",
    "evaluate_point",
    "get_colormap",
    "list_colormap_names",
    "parse_complex",
    "parse_pair",
    "pixel_to_point",
    "plan_bands",
    "render",
    "write_image",
]
