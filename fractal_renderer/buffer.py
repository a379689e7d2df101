"""
Result buffer shared between the band workers and the colour mappers.

The buffer stores one FractalResult per pixel in row-major order, laid out
column-wise as two NumPy arrays so that each band worker can be handed
plain slice views of its own rows.
"""

from dataclasses import dataclass

import numpy as np


ESCAPE_DTYPE = np.uint32
MAX_LIMIT = int(np.iinfo(ESCAPE_DTYPE).max)     # largest escape count the buffer can hold


@dataclass(frozen=True)
class FractalResult:
    """
    Outcome of evaluating one point.

    Attributes:
        escape: Escape count, 0 if the orbit did not escape (or Newton did
            not converge) within the iteration limit
        value: Final complex iterate, whether it escaped or not
    """

    escape: int
    value: complex

    @classmethod
    def zero(cls):
        return cls(0, 0j)


class ResultBuffer:
    """
    Flat, row-major sequence of FractalResult values.

    Index ``row * width + column`` holds the result for that pixel. A new
    buffer is zero-initialized (escape 0, value 0j).

    Attributes:
        escape: uint32 array of escape counts
        value: complex128 array of final iterates
    """

    def __init__(self, length):
        if length < 0:
            raise ValueError(f"buffer length must be non-negative, got {length}")
        self.escape = np.zeros(length, dtype=ESCAPE_DTYPE)
        self.value = np.zeros(length, dtype=np.complex128)

    @classmethod
    def for_bounds(cls, bounds):
        """Allocate a buffer sized for a (width, height) image."""
        width, height = bounds
        return cls(width * height)

    def __len__(self):
        return self.escape.shape[0]

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        return FractalResult(int(self.escape[index]), complex(self.value[index]))

    def __iter__(self):
        for escape, value in zip(self.escape, self.value):
            yield FractalResult(int(escape), complex(value))

    def band(self, start, stop):
        """
        Views onto the [start, stop) range of both arrays.

        Writes through the views land in this buffer.
        """
        return self.escape[start:stop], self.value[start:stop]
