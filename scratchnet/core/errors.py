"""Error taxonomy for scratchnet.

Every error raised by the engine derives from :class:`ScratchNetError` and
also from the builtin exception that best describes it, so callers can catch
either.  Nothing is retried internally.
"""

from __future__ import annotations


class ScratchNetError(Exception):
    """Base class for all scratchnet errors."""


class ShapeMismatch(ScratchNetError, ValueError):
    """Input, weight or layer arity disagreement."""


class UnsupportedOperation(ScratchNetError, NotImplementedError):
    """Backward or gradient call on a layer that has no trainable state."""


class InvalidConfiguration(ScratchNetError, ValueError):
    """Unknown activation/pooling kind, empty layer list, bad training args."""


class PersistenceError(ScratchNetError, OSError):
    """Missing or pre-existing model directory, unreadable parameter file."""


class MissingForwardPass(ScratchNetError, RuntimeError):
    """``backward``/``apply_gradient`` called before any ``forward``."""


class DatasetError(ScratchNetError, ValueError):
    """Malformed dataset file."""


__all__ = [
    "DatasetError",
    "InvalidConfiguration",
    "MissingForwardPass",
    "PersistenceError",
    "ScratchNetError",
    "ShapeMismatch",
    "UnsupportedOperation",
]
