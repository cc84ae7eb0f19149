"""Explicit random generator handling."""

from __future__ import annotations

import numpy as np


def resolve_rng(
    rng: np.random.Generator | None = None, seed: int | None = None
) -> np.random.Generator:
    """Return ``rng`` or a fresh generator seeded with ``seed``.

    Passing both is an error: the caller would not know which one wins.
    """

    if rng is not None and seed is not None:
        raise TypeError("Pass either rng or seed, not both")
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


__all__ = ["resolve_rng"]
