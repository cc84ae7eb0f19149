"""Single computation unit of a dense layer."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .activations import activate, derivative
from .errors import InvalidConfiguration, ShapeMismatch
from .types import ActivationKind, Array

WEIGHT_INIT_STD = 0.5


def as_vector(values: Sequence[float] | Array, name: str = "inputs") -> Array:
    """Return ``values`` as a 1-D float64 array."""

    vector = np.asarray(values, dtype=np.float64)
    if vector.ndim != 1:
        raise ShapeMismatch(f"{name} must be a flat vector, got shape {vector.shape}")
    return vector


class Neuron:
    """Weighted sum followed by an activation.

    ``output`` holds the activation of the last :meth:`forward` call and
    ``delta`` the error signal of the last :meth:`backward` call.  The number
    of weights is fixed at construction.
    """

    __slots__ = ("weights", "bias", "activation", "output", "delta")

    def __init__(
        self,
        input_arity: int,
        activation: ActivationKind | str,
        rng: np.random.Generator,
    ) -> None:
        if int(input_arity) < 1:
            raise InvalidConfiguration(f"Neuron input arity must be >= 1, got {input_arity}")
        self.activation = ActivationKind.parse(activation)
        self.weights: Array = rng.normal(0.0, WEIGHT_INIT_STD, size=int(input_arity))
        self.bias = 0.0
        self.output = 0.0
        self.delta = 0.0

    @classmethod
    def from_parameters(
        cls,
        weights: Sequence[float] | Array,
        bias: float,
        activation: ActivationKind | str,
    ) -> "Neuron":
        neuron = cls.__new__(cls)
        neuron.activation = ActivationKind.parse(activation)
        neuron.weights = as_vector(weights, "weights").copy()
        if neuron.weights.size < 1:
            raise InvalidConfiguration("Neuron needs at least one weight")
        neuron.bias = float(bias)
        neuron.output = 0.0
        neuron.delta = 0.0
        return neuron

    @property
    def input_arity(self) -> int:
        return int(self.weights.size)

    def _check_arity(self, inputs: Array) -> None:
        if inputs.shape[0] != self.weights.shape[0]:
            raise ShapeMismatch(
                f"Number of inputs ({inputs.shape[0]}) does not match "
                f"number of weights ({self.weights.shape[0]})"
            )

    def forward(self, inputs: Sequence[float] | Array) -> float:
        inputs = as_vector(inputs)
        self._check_arity(inputs)
        total = self.bias + float(np.dot(self.weights, inputs))
        self.output = activate(self.activation, total)
        return self.output

    def backward(self, error: float) -> None:
        self.delta = float(error) * derivative(self.activation, self.output)

    def apply_gradient(self, inputs: Sequence[float] | Array, learning_rate: float) -> None:
        inputs = as_vector(inputs)
        self._check_arity(inputs)
        step = float(learning_rate) * self.delta
        self.weights -= step * inputs
        self.bias -= step

    def set_parameters(self, weights: Sequence[float] | Array, bias: float) -> None:
        weights = as_vector(weights, "weights")
        if weights.shape != self.weights.shape:
            raise ShapeMismatch(
                f"Expected {self.weights.shape[0]} weights, got {weights.shape[0]}"
            )
        self.weights[:] = weights
        self.bias = float(bias)

    def __repr__(self) -> str:
        return (
            f"Neuron(inputs={self.input_arity}, activation={self.activation.value}, "
            f"bias={self.bias:.4f})"
        )


__all__ = ["Neuron", "WEIGHT_INIT_STD", "as_vector"]
