"""
Grayscale colour mappings for rendered fractals.

Each mapping takes a ResultBuffer and returns a flat uint8 array of the
same length, one byte per pixel, ready for write_image(). Mappings must
cope with non-finite values (Newton renders can contain inf/nan).

To add a new mapping:
1. Define a function taking a ResultBuffer and returning the byte array
2. Add it to the COLORMAPS dictionary at the bottom of this file
"""

import numpy as np
from numba import jit, prange


STANDARD_COMPONENTS = ('sum', 'real', 'imaginary')


def escape_color(buffer):
    """
    Raw escape count, truncated to 8 bits.

    Fast-escaping points are bright; points that never escaped are black.
    """
    return (buffer.escape & 0xFF).astype(np.uint8)


@jit(nopython=True, parallel=True, cache=True)
def _binary_decomposition(value, out):
    for k in prange(value.shape[0]):
        z = value[k]
        if z.real * z.imag >= 0.0:
            out[k] = 255
        else:
            out[k] = 0


def binary_decomposition(buffer):
    """
    Binary decomposition colouring.

    Multiplies the real and imaginary parts of each final value: white if
    the product is non-negative, black if it is negative or nan.
    """
    out = np.zeros(len(buffer), dtype=np.uint8)
    _binary_decomposition(buffer.value, out)
    return out


def standard_color(buffer, component='sum'):
    """
    Scale one component of the final values linearly into 0..255.

    Args:
        buffer: Rendered ResultBuffer
        component: 'sum' (real + imaginary), 'real' or 'imaginary'

    Returns:
        uint8 array. The smallest finite component maps to 0 and the
        largest to 255; non-finite values and constant fields map to 0.
    """
    if component == 'sum':
        data = buffer.value.real + buffer.value.imag
    elif component == 'real':
        data = buffer.value.real.copy()
    elif component == 'imaginary':
        data = buffer.value.imag.copy()
    else:
        raise ValueError(
            f"unknown component {component!r} (expected one of: {', '.join(STANDARD_COMPONENTS)})"
        )

    out = np.zeros(data.shape[0], dtype=np.uint8)
    finite = np.isfinite(data)
    if not finite.any():
        return out

    low = data[finite].min()
    high = data[finite].max()
    span = high - low
    if span <= 0 or not np.isfinite(span):
        return out

    scaled = (data[finite] - low) / span * 255.0
    out[finite] = np.clip(np.rint(scaled), 0, 255).astype(np.uint8)
    return out


def sum_color(buffer):
    return standard_color(buffer, 'sum')


def real_color(buffer):
    return standard_color(buffer, 'real')


def imaginary_color(buffer):
    return standard_color(buffer, 'imaginary')


# Registry of all available mappings.
# Keys are the names accepted on the command line.
COLORMAPS = {
    'escape': escape_color,
    'binary': binary_decomposition,
    'sum': sum_color,
    'real': real_color,
    'imaginary': imaginary_color,
}


def get_colormap(name):
    """
    Get a colour mapping by name.

    Args:
        name: Key from COLORMAPS dictionary

    Returns:
        Function taking a ResultBuffer and returning a uint8 array

    Raises:
        KeyError if name not found
    """
    return COLORMAPS[name]


def list_colormap_names():
    """Get list of available mapping names."""
    return list(COLORMAPS.keys())
