"""Activation functions and their derivatives."""

from __future__ import annotations

import math

import numpy as np

from .types import ActivationKind, Array


def _sigmoid(x: float) -> float:
    if x >= 0.0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def activate(kind: ActivationKind, x: float) -> float:
    """Apply the activation ``kind`` to the pre-activation sum ``x``."""

    if kind is ActivationKind.LINEAR:
        return x
    if kind is ActivationKind.SIGMOID:
        return _sigmoid(x)
    if kind is ActivationKind.RELU:
        return x if x > 0.0 else 0.0
    raise ValueError(f"Unknown activation: {kind!r}")  # pragma: no cover - closed enum


def derivative(kind: ActivationKind, y: float) -> float:
    """Return the derivative of ``kind`` expressed in its output ``y``.

    All three activations have a closed form in terms of the
    post-activation value, so the cached neuron output is enough and the
    pre-activation sum never has to be stored.
    """

    if kind is ActivationKind.LINEAR:
        return 1.0
    if kind is ActivationKind.SIGMOID:
        return y * (1.0 - y)
    if kind is ActivationKind.RELU:
        return 1.0 if y > 0.0 else 0.0
    raise ValueError(f"Unknown activation: {kind!r}")  # pragma: no cover - closed enum


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def sigmoid(x: Array) -> Array:
    return 0.5 * (1.0 + np.tanh(0.5 * np.asarray(x, dtype=np.float64)))


__all__ = ["activate", "derivative", "relu", "sigmoid"]
