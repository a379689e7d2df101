"""
Escape-time fractal computation functions using Numba JIT compilation.

This module contains all the performance-critical computation functions
that are JIT-compiled for speed. These functions handle:
- Mapping pixel coordinates onto the complex plane
- Per-point escape iteration for every supported fractal variant
- Filling one band (a contiguous run of rows) of a result buffer

Supported fractal variants:
- 0: Mandelbrot   z = z² + c, starting from z = seed
- 1: Julia        z = z² + seed, starting from z = c
- 2: Newton       Newton-Raphson on f(z) = z³ - seed, starting from z = c

All kernels are compiled with nogil=True so that band workers running in
separate threads execute in parallel. The "numpy" error model is used so a
division by zero produces inf/nan instead of raising.
"""

import enum

from numba import jit

from .buffer import FractalResult


# Variant IDs (passed into the kernels as plain integers)
MANDELBROT = 0
JULIA = 1
NEWTON = 2

BAILOUT_NORM = 4.0          # |z|² above this means the orbit escaped
NEWTON_POWER = 3            # degree of the Newton polynomial z^p - seed
NEWTON_TOLERANCE = 1e-5     # |z_{n+1} - z_n|² at or below this means converged


class FractalVariant(enum.IntEnum):
    """Which iteration recurrence to run for every pixel."""

    MANDELBROT = MANDELBROT
    JULIA = JULIA
    NEWTON = NEWTON

    @classmethod
    def from_str(cls, token):
        """
        Parse a variant name such as "mandelbrot", "julia" or "newton".

        Raises:
            ValueError if the token does not name a known variant
        """
        name = token.strip().lower()
        try:
            return cls(_VARIANT_TOKENS[name])
        except KeyError:
            raise ValueError(
                f"unknown fractal method {token!r} "
                f"(expected one of: {', '.join(sorted(_VARIANT_TOKENS))})"
            ) from None


_VARIANT_TOKENS = {
    'mandelbrot': MANDELBROT,
    'mandel': MANDELBROT,
    'julia': JULIA,
    'newton': NEWTON,
}


@jit(nopython=True, nogil=True, cache=True, error_model="numpy")
def pixel_to_point(bounds, pixel, upper_left, lower_right):
    """
    Map a pixel of the output image onto the complex plane.

    Args:
        bounds: (width, height) of the image in pixels
        pixel: (column, row) of the pixel; rows grow downwards
        upper_left, lower_right: complex corners covered by the image

    Returns:
        The complex point for that pixel. Pixels outside the image
        extrapolate linearly.
    """
    width_span = lower_right.real - upper_left.real
    height_span = upper_left.imag - lower_right.imag
    # Rows grow downwards while the imaginary axis grows upwards
    return complex(
        upper_left.real + pixel[0] * width_span / bounds[0],
        upper_left.imag - pixel[1] * height_span / bounds[1],
    )


@jit(nopython=True, nogil=True, cache=True)
def complex_pow_n(zr, zi, n):
    """Compute z^n for integer n using repeated squaring."""
    if n == 0:
        return 1.0, 0.0
    if n == 1:
        return zr, zi

    result_r, result_i = 1.0, 0.0
    base_r, base_i = zr, zi

    while n > 0:
        if n % 2 == 1:
            new_r = result_r * base_r - result_i * base_i
            new_i = result_r * base_i + result_i * base_r
            result_r, result_i = new_r, new_i
        new_r = base_r * base_r - base_i * base_i
        new_i = 2 * base_r * base_i
        base_r, base_i = new_r, new_i
        n //= 2

    return result_r, result_i


@jit(nopython=True, nogil=True, cache=True)
def quadratic_orbit(zr, zi, cr, ci, limit):
    """
    Iterate z = z² + c from the given start until |z|² exceeds the bailout.

    Returns:
        (escape, zr, zi) where escape is limit - i for the iteration i at
        which the orbit escaped, or 0 if it stayed bounded for limit steps.
    """
    for i in range(limit):
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
        if zr * zr + zi * zi > BAILOUT_NORM:
            return limit - i, zr, zi
    return 0, zr, zi


@jit(nopython=True, nogil=True, cache=True, error_model="numpy")
def newton(zr, zi, sr, si, limit):
    """
    Newton-Raphson iteration for f(z) = z^p - seed with p = NEWTON_POWER.

        z_{n+1} = ((p - 1) * z^p + seed) / (p * z^(p - 1))

    A vanishing derivative is not guarded against: the division yields
    inf/nan, which then stays in the returned value.

    Returns:
        (escape, zr, zi) where escape is limit - i for the iteration i at
        which |z_{n+1} - z_n|² dropped to NEWTON_TOLERANCE, or 0 if the
        iteration did not converge within limit steps.
    """
    p = NEWTON_POWER
    for i in range(limit):
        pr, pi = complex_pow_n(zr, zi, p)
        dr, di = complex_pow_n(zr, zi, p - 1)
        num_r = (p - 1) * pr + sr
        num_i = (p - 1) * pi + si
        den_r = p * dr
        den_i = p * di
        den_mag2 = den_r * den_r + den_i * den_i
        nr = (num_r * den_r + num_i * den_i) / den_mag2
        ni = (num_i * den_r - num_r * den_i) / den_mag2

        step_r = nr - zr
        step_i = ni - zi
        zr, zi = nr, ni
        if step_r * step_r + step_i * step_i <= NEWTON_TOLERANCE:
            return limit - i, zr, zi
    return 0, zr, zi


@jit(nopython=True, nogil=True, cache=True, error_model="numpy")
def evaluate(variant, c, seed, limit):
    """
    Evaluate a single point of the selected fractal.

    Args:
        variant: Variant ID (MANDELBROT, JULIA or NEWTON)
        c: The pixel's point on the complex plane
        seed: Starting z for Mandelbrot, the constant for Julia and Newton
        limit: Maximum number of iterations

    Returns:
        (escape, value): escape count (0 = did not escape/converge) and
        the final iterate
    """
    if variant == JULIA:
        escape, zr, zi = quadratic_orbit(c.real, c.imag, seed.real, seed.imag, limit)
    elif variant == NEWTON:
        escape, zr, zi = newton(c.real, c.imag, seed.real, seed.imag, limit)
    else:
        escape, zr, zi = quadratic_orbit(seed.real, seed.imag, c.real, c.imag, limit)
    return escape, complex(zr, zi)


@jit(nopython=True, nogil=True, cache=True, error_model="numpy")
def render_band(escape, value, bounds, top, upper_left, lower_right,
                variant, seed, limit):
    """
    Compute one band of the image, writing into existing arrays.

    The arrays are the band's own slice of the result buffer: element k
    holds pixel (k % width, top + k // width) of the full image. Points are
    mapped with the full image bounds and corners, so the result for every
    pixel is the same whichever band computes it.

    Args:
        escape: uint32 array for escape counts (modified in place)
        value: complex128 array for final iterates (modified in place)
        bounds: (width, height) of the full image
        top: Image row of the band's first element
        upper_left, lower_right: Corners of the full image
        variant, seed, limit: See evaluate()
    """
    width = bounds[0]
    for k in range(escape.shape[0]):
        row = top + k // width
        column = k % width
        point = pixel_to_point(bounds, (column, row), upper_left, lower_right)
        n, z = evaluate(variant, point, seed, limit)
        escape[k] = n
        value[k] = z


def evaluate_point(variant, c, seed=0j, limit=255):
    """
    Evaluate one point from Python and wrap it in a FractalResult.

    Args:
        variant: FractalVariant (or its integer ID)
        c: Point on the complex plane
        seed: Seed value (see evaluate())
        limit: Maximum iterations (default 255)
    """
    escape, value = evaluate(int(variant), complex(c), complex(seed), int(limit))
    return FractalResult(int(escape), complex(value))
