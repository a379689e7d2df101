"""
Banded, multi-threaded fractal renderer.

The image is split into contiguous row bands, one per worker thread. Each
band owns a disjoint slice of the result buffer and is filled by the
nogil render_band kernel, so the threads run in parallel without any
locking. render() blocks until every band is done and fails as a whole if
any band fails.

Usage:
    buffer = ResultBuffer.for_bounds((800, 600))
    render(buffer, (800, 600), complex(-2.0, 1.2), complex(1.0, -1.2),
           FractalVariant.MANDELBROT, 0j, 255)

    # or, keeping the parameters around:
    renderer = FractalRenderer(800, 600, limit=255)
    result = renderer.render()
"""

import logging
import math
import threading
import time
from dataclasses import dataclass

from .buffer import MAX_LIMIT, ResultBuffer
from .colormaps import get_colormap
from .compute import FractalVariant, pixel_to_point, render_band
from .errors import PreconditionViolation, WorkerFault
from .settings import default_workers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Band:
    """
    A contiguous run of image rows assigned to one worker.

    Attributes:
        index: Position of the band, counting from the top
        top: First image row of the band
        rows: Number of rows in the band
        start, stop: Flat [start, stop) range in the result buffer
        upper_left, lower_right: Complex corners the band covers
    """

    index: int
    top: int
    rows: int
    start: int
    stop: int
    upper_left: complex
    lower_right: complex


def plan_bands(bounds, upper_left, lower_right, workers):
    """
    Split an image into at most `workers` bands of whole rows.

    Every band but the last has ceil(height / workers) rows; the last one
    takes what is left. Corners are mapped with the full image geometry.

    Returns:
        List of Band, ordered top to bottom
    """
    width, height = bounds
    rows_per_band = math.ceil(height / workers)
    band_len = rows_per_band * width

    bands = []
    for index, start in enumerate(range(0, width * height, band_len)):
        stop = min(start + band_len, width * height)
        top = rows_per_band * index
        rows = (stop - start) // width
        bands.append(Band(
            index=index,
            top=top,
            rows=rows,
            start=start,
            stop=stop,
            upper_left=pixel_to_point(bounds, (0, top), upper_left, lower_right),
            lower_right=pixel_to_point(bounds, (width, top + rows), upper_left, lower_right),
        ))
    return bands


def _check_preconditions(buffer, bounds, variant, limit, workers):
    """Validate render inputs, returning the variant as a FractalVariant."""
    width, height = bounds
    if width <= 0 or height <= 0:
        raise PreconditionViolation(f"image bounds must be positive, got {width}x{height}")
    if len(buffer) != width * height:
        raise PreconditionViolation(
            f"buffer holds {len(buffer)} results but a {width}x{height} image "
            f"needs {width * height}"
        )
    try:
        variant = FractalVariant(variant)
    except ValueError:
        raise PreconditionViolation(f"unknown fractal variant {variant!r}") from None
    if not 0 <= limit <= MAX_LIMIT:
        raise PreconditionViolation(
            f"iteration limit must be between 0 and {MAX_LIMIT}, got {limit}")
    if workers is not None and workers < 1:
        raise PreconditionViolation(f"worker count must be at least 1, got {workers}")
    return variant


def render(buffer, bounds, upper_left, lower_right, variant, seed, limit, workers=None):
    """
    Render a rectangle of the complex plane into `buffer`.

    Args:
        buffer: ResultBuffer of length width * height (modified in place)
        bounds: (width, height) of the image in pixels
        upper_left, lower_right: Complex corners of the image. Their
            ordering is not checked; swapped corners give a mirrored image.
        variant: FractalVariant to compute
        seed: Seed value (start z for Mandelbrot, constant for Julia/Newton)
        limit: Maximum iterations per point
        workers: Number of band workers (default: see settings.default_workers)

    Raises:
        PreconditionViolation: malformed inputs; nothing was computed
        WorkerFault: a band failed; the buffer contents are not usable
    """
    variant = _check_preconditions(buffer, bounds, variant, limit, workers)
    if workers is None:
        workers = default_workers()

    bounds = (int(bounds[0]), int(bounds[1]))
    upper_left = complex(upper_left)
    lower_right = complex(lower_right)
    seed = complex(seed)
    variant_id = int(variant)
    limit = int(limit)

    bands = plan_bands(bounds, upper_left, lower_right, workers)
    logger.debug("Rendering %dx%d %s in %d band(s) of up to %d rows",
                 bounds[0], bounds[1], variant.name, len(bands), bands[0].rows)

    faults = [None] * len(bands)

    def _band_thread(band):
        """Worker thread body: fill one band, recording any failure."""
        escape, value = buffer.band(band.start, band.stop)
        try:
            render_band(escape, value, bounds, band.top, upper_left, lower_right,
                        variant_id, seed, limit)
        except Exception as e:
            faults[band.index] = e

    started = time.perf_counter()
    threads = []
    for band in bands:
        thread = threading.Thread(target=_band_thread, args=(band,),
                                  name=f"fractal-band-{band.index}")
        thread.daemon = True
        thread.start()
        threads.append(thread)
    for thread in threads:
        thread.join()

    for band, fault in zip(bands, faults):
        if fault is not None:
            logger.error("Band %d failed: %r", band.index, fault)
            raise WorkerFault(band, fault) from fault

    logger.debug("Rendered %d band(s) in %.3fs", len(bands), time.perf_counter() - started)


class FractalRenderer:
    """
    Holds a view and fractal selection and renders it on demand.

    Usage:
        renderer = FractalRenderer(1000, 750, complex(-1.2, 0.35), complex(-1.0, 0.2))
        result = renderer.render()
        pixels = renderer.colorize(result, 'binary')

    Attributes:
        width, height: Image dimensions in pixels
        upper_left, lower_right: Complex corners of the view
        variant: FractalVariant to compute
        seed: Seed value
        limit: Maximum iteration count
        workers: Band worker count (None = default)
    """

    DEFAULT_UPPER_LEFT = complex(-2.5, 1.75)
    DEFAULT_LOWER_RIGHT = complex(1.0, -1.75)

    def __init__(self, width, height, upper_left=None, lower_right=None,
                 variant=FractalVariant.MANDELBROT, seed=0j, limit=255, workers=None):
        """
        Initialize the renderer.

        Args:
            width, height: Image dimensions in pixels
            upper_left, lower_right: Corners of the view (default shows the
                classic Mandelbrot overview)
            variant: FractalVariant or variant name
            seed: Seed value (default 0)
            limit: Maximum iterations (default 255)
            workers: Band worker count (default: one per CPU)
        """
        self.width = width
        self.height = height
        self.upper_left = complex(upper_left if upper_left is not None else self.DEFAULT_UPPER_LEFT)
        self.lower_right = complex(lower_right if lower_right is not None else self.DEFAULT_LOWER_RIGHT)
        self.variant = _as_variant(variant)
        self.seed = complex(seed)
        self.limit = limit
        self.workers = workers

    @property
    def bounds(self):
        return (self.width, self.height)

    def render(self, buffer=None):
        """
        Render the current view.

        Args:
            buffer: ResultBuffer to fill (default: a freshly allocated one)

        Returns:
            The filled ResultBuffer
        """
        if buffer is None:
            if self.width <= 0 or self.height <= 0:
                raise PreconditionViolation(
                    f"image bounds must be positive, got {self.width}x{self.height}")
            buffer = ResultBuffer.for_bounds(self.bounds)
        render(buffer, self.bounds, self.upper_left, self.lower_right,
               self.variant, self.seed, self.limit, workers=self.workers)
        return buffer

    def colorize(self, buffer, color='escape'):
        """Apply a named grayscale mapping to a rendered buffer."""
        return get_colormap(color)(buffer)


def _as_variant(variant):
    if isinstance(variant, str):
        return FractalVariant.from_str(variant)
    return FractalVariant(variant)
