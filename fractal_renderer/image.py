"""
PNG output for grayscale pixel buffers.
"""

import os

import numpy as np

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402


GRAY_PALETTE = [(v, v, v) for v in range(256)]


def write_image(filename, pixels, bounds):
    """
    Write a buffer of grayscale pixels to a PNG file.

    Args:
        filename: Destination path
        pixels: One byte per pixel, row-major, length width * height
        bounds: (width, height) of the image

    Raises:
        ValueError if the buffer does not match the bounds
    """
    width, height = bounds
    pixels = np.asarray(pixels, dtype=np.uint8)
    if pixels.size != width * height:
        raise ValueError(
            f"pixel buffer holds {pixels.size} bytes but a {width}x{height} "
            f"image needs {width * height}"
        )

    # surfarray is indexed (x, y)
    grid = np.ascontiguousarray(pixels.reshape(height, width).swapaxes(0, 1))
    surface = pygame.surfarray.make_surface(grid)
    surface.set_palette(GRAY_PALETTE)
    pygame.image.save(surface, os.fspath(filename))
