"""Layer variants.

The set of layers is closed: :class:`DenseLayer` and :class:`PoolingLayer`.
Both expose the same surface (``forward``, ``backward``, ``apply_gradient``,
``propagate_errors``) and carry an explicit ``kind`` discriminant, which is
what :func:`build_layer` and the persistence codec dispatch on.
"""

from __future__ import annotations

from typing import List, Sequence, Union

import numpy as np

from .errors import InvalidConfiguration, ShapeMismatch, UnsupportedOperation
from .neuron import Neuron, as_vector
from .types import ActivationKind, Array, LayerKind, LayerSpec, PoolingKind


class DenseLayer:
    """Fully connected layer of :class:`Neuron` objects."""

    kind = LayerKind.DENSE
    trainable = True

    def __init__(
        self,
        input_arity: int,
        width: int,
        activation: ActivationKind | str,
        rng: np.random.Generator,
    ) -> None:
        if int(width) < 1:
            raise InvalidConfiguration(f"Dense layer width must be >= 1, got {width}")
        self.activation = ActivationKind.parse(activation)
        self.neurons: List[Neuron] = [
            Neuron(input_arity, self.activation, rng) for _ in range(int(width))
        ]

    @property
    def input_arity(self) -> int:
        return self.neurons[0].input_arity

    @property
    def output_width(self) -> int:
        return len(self.neurons)

    def spec(self) -> LayerSpec:
        return LayerSpec.dense(self.output_width, self.activation)

    def forward(self, inputs: Sequence[float] | Array) -> Array:
        inputs = as_vector(inputs)
        if inputs.shape[0] != self.input_arity:
            raise ShapeMismatch(
                f"Dense layer expects {self.input_arity} inputs, got {inputs.shape[0]}"
            )
        return np.array([neuron.forward(inputs) for neuron in self.neurons])

    def backward(self, errors: Sequence[float] | Array) -> None:
        errors = as_vector(errors, "errors")
        if errors.shape[0] != self.output_width:
            raise ShapeMismatch(
                f"Dense layer has {self.output_width} neurons, got {errors.shape[0]} errors"
            )
        for neuron, error in zip(self.neurons, errors):
            neuron.backward(float(error))

    def propagate_errors(self) -> Array:
        """Return the error attributed to each input of this layer."""

        errors = np.zeros(self.input_arity)
        for neuron in self.neurons:
            errors += neuron.weights * neuron.delta
        return errors

    def apply_gradient(self, inputs: Sequence[float] | Array, learning_rate: float) -> None:
        inputs = as_vector(inputs)
        for neuron in self.neurons:
            neuron.apply_gradient(inputs, learning_rate)

    def parameters(self) -> tuple[Array, Array]:
        """Return copies of the ``(width, input_arity)`` weights and the biases."""

        weights = np.stack([neuron.weights for neuron in self.neurons]).copy()
        biases = np.array([neuron.bias for neuron in self.neurons])
        return weights, biases

    def set_parameters(
        self,
        weights: Sequence[Sequence[float]] | Array,
        biases: Sequence[float] | Array,
    ) -> None:
        weights = np.asarray(weights, dtype=np.float64)
        biases = as_vector(biases, "biases")
        expected = (self.output_width, self.input_arity)
        if weights.shape != expected or biases.shape[0] != self.output_width:
            raise ShapeMismatch(
                f"Expected weights {expected} and {self.output_width} biases, "
                f"got {weights.shape} and {biases.shape[0]}"
            )
        for neuron, row, bias in zip(self.neurons, weights, biases):
            neuron.set_parameters(row, float(bias))

    def describe(self) -> dict:
        return {
            "kind": self.kind.value,
            "inputs": self.input_arity,
            "width": self.output_width,
            "activation": self.activation.value,
        }


class PoolingLayer:
    """Fixed ``stride x stride`` reduction over a row-major 2-D grid.

    Pooling has no trainable state and no backward pass; a network that
    contains one can run forward but cannot be trained through it.
    """

    kind = LayerKind.POOLING
    trainable = False

    def __init__(
        self,
        pooling: PoolingKind | str,
        input_width: int,
        input_height: int,
        stride: int,
    ) -> None:
        self.pooling = PoolingKind.parse(pooling)
        self.input_width = int(input_width)
        self.input_height = int(input_height)
        self.stride = int(stride)
        if self.stride < 1:
            raise InvalidConfiguration(f"Pooling stride must be >= 1, got {stride}")
        if self.input_width < self.stride or self.input_height < self.stride:
            raise InvalidConfiguration(
                f"Pooling window {self.stride}x{self.stride} does not fit a "
                f"{self.input_width}x{self.input_height} input"
            )
        self.output_columns = self.input_width // self.stride
        self.output_rows = self.input_height // self.stride

    @property
    def input_arity(self) -> int:
        return self.input_width * self.input_height

    @property
    def output_width(self) -> int:
        return self.output_columns * self.output_rows

    def spec(self) -> LayerSpec:
        return LayerSpec.pool(self.pooling, self.input_width, self.input_height, self.stride)

    def forward(self, inputs: Sequence[float] | Array) -> Array:
        inputs = as_vector(inputs)
        if inputs.shape[0] != self.input_arity:
            raise ShapeMismatch(
                f"Pooling layer expects {self.input_arity} inputs, got {inputs.shape[0]}"
            )
        stride = self.stride
        outputs = np.empty(self.output_width)
        for row in range(self.output_rows):
            for col in range(self.output_columns):
                if self.pooling is PoolingKind.MAX:
                    value = -np.inf
                elif self.pooling is PoolingKind.MIN:
                    value = np.inf
                else:
                    value = 0.0
                for k in range(stride):
                    base = (row * stride + k) * self.input_width + col * stride
                    for offset in range(stride):
                        x = inputs[base + offset]
                        if self.pooling is PoolingKind.MAX:
                            value = max(value, x)
                        elif self.pooling is PoolingKind.MIN:
                            value = min(value, x)
                        else:
                            value += x
                if self.pooling is PoolingKind.AVERAGE:
                    value /= stride * stride
                outputs[row * self.output_columns + col] = value
        return outputs

    def backward(self, errors: Sequence[float] | Array) -> None:
        raise UnsupportedOperation("Pooling layer does not support backpropagation")

    def propagate_errors(self) -> Array:
        raise UnsupportedOperation("Pooling layer does not support backpropagation")

    def apply_gradient(self, inputs: Sequence[float] | Array, learning_rate: float) -> None:
        raise UnsupportedOperation("Pooling layer does not support backpropagation")

    def describe(self) -> dict:
        return {
            "kind": self.kind.value,
            "inputs": self.input_arity,
            "width": self.output_width,
            "pooling": self.pooling.value,
            "input_width": self.input_width,
            "input_height": self.input_height,
            "stride": self.stride,
        }


Layer = Union[DenseLayer, PoolingLayer]


def build_layer(spec: LayerSpec, input_arity: int, rng: np.random.Generator) -> Layer:
    """Materialise ``spec`` as a layer fed by ``input_arity`` values."""

    if spec.kind is LayerKind.DENSE:
        if spec.activation is None:
            raise InvalidConfiguration("Dense layer spec requires an activation")
        return DenseLayer(input_arity, spec.width, spec.activation, rng)
    if spec.kind is LayerKind.POOLING:
        if spec.pooling is None:
            raise InvalidConfiguration("Pooling layer spec requires a pooling kind")
        layer = PoolingLayer(spec.pooling, spec.input_width, spec.input_height, spec.stride)
        if layer.input_arity != input_arity:
            raise ShapeMismatch(
                f"Pooling layer covers {layer.input_width}x{layer.input_height}="
                f"{layer.input_arity} inputs but receives {input_arity}"
            )
        return layer
    raise InvalidConfiguration(f"Layer kind {spec.kind.value!r} is not implemented")


__all__ = ["DenseLayer", "Layer", "PoolingLayer", "build_layer"]
