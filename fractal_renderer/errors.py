"""Exceptions raised by the band scheduler."""


class RenderError(Exception):
    """Base class for render failures."""


class PreconditionViolation(RenderError, ValueError):
    """The render was called with malformed inputs; nothing was computed."""


class WorkerFault(RenderError, RuntimeError):
    """
    A band worker raised while computing its rows.

    The whole render is failed; ``band`` is the first band that faulted and
    the worker's exception is chained as ``__cause__``.
    """

    def __init__(self, band, error):
        super().__init__(
            f"band {band.index} (rows {band.top}-{band.top + band.rows - 1}) "
            f"failed: {error!r}"
        )
        self.band = band
        self.error = error
