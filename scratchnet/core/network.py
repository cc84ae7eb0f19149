"""Feed-forward network built from an ordered list of layer specs."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from .errors import InvalidConfiguration, MissingForwardPass, ShapeMismatch
from .layers import DenseLayer, Layer, build_layer
from .neuron import as_vector
from .rng import resolve_rng
from .types import Array, LayerSpec


def argmax(values: Sequence[float] | Array) -> int:
    """Index of the largest value; ties resolve to the lowest index."""

    values = as_vector(values, "values")
    if values.size == 0:
        raise ShapeMismatch("argmax of an empty vector")
    return int(np.argmax(values))


class Network:
    """Ordered stack of layers with a fixed architecture.

    The network owns its layers and, after each :meth:`forward`, the list of
    every layer's output for that pass.  :meth:`backward` and
    :meth:`apply_gradient` read from that list, so they must follow a
    forward pass on the example being learned.
    """

    def __init__(
        self,
        input_arity: int,
        specs: Sequence[LayerSpec | Mapping[str, Any]],
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        if not specs:
            raise InvalidConfiguration("A network needs at least one layer spec")
        if int(input_arity) < 1:
            raise InvalidConfiguration(f"Input arity must be >= 1, got {input_arity}")
        generator = resolve_rng(rng, seed)
        self.input_arity = int(input_arity)
        self.layers: List[Layer] = []
        arity = self.input_arity
        for spec in specs:
            if not isinstance(spec, LayerSpec):
                spec = LayerSpec.from_config(spec)
            layer = build_layer(spec, arity, generator)
            self.layers.append(layer)
            arity = layer.output_width
        self._activations: List[Array] | None = None

    @property
    def output_width(self) -> int:
        return self.layers[-1].output_width

    @property
    def specs(self) -> List[LayerSpec]:
        return [layer.spec() for layer in self.layers]

    @property
    def outputs(self) -> Array:
        """Activations of the last layer from the latest forward pass."""

        if self._activations is None:
            return np.zeros(self.output_width)
        return self._activations[-1].copy()

    def prediction(self) -> int:
        return argmax(self.outputs)

    def forward(self, inputs: Sequence[float] | Array) -> int:
        inputs = as_vector(inputs)
        if inputs.shape[0] != self.input_arity:
            raise ShapeMismatch(
                f"Network expects {self.input_arity} inputs, got {inputs.shape[0]}"
            )
        activations: List[Array] = []
        values = inputs
        for layer in self.layers:
            values = layer.forward(values)
            activations.append(values)
        self._activations = activations
        return argmax(values)

    def predict(self, inputs: Sequence[float] | Array) -> int:
        self.forward(inputs)
        return self.prediction()

    def backward(self, label: int) -> None:
        """Compute every neuron's delta for a one-hot ``label`` target.

        The output error is ``outputs - one_hot(label)`` whatever the output
        activation is.  Hidden errors are pulled from the next layer's
        weights and deltas, one layer at a time.
        """

        if self._activations is None:
            raise MissingForwardPass("backward() requires a preceding forward()")
        outputs = self._activations[-1]
        label = int(label)
        if not 0 <= label < outputs.shape[0]:
            raise ShapeMismatch(
                f"Label {label} is outside the output width {outputs.shape[0]}"
            )
        target = np.zeros_like(outputs)
        target[label] = 1.0
        self.layers[-1].backward(outputs - target)
        for idx in range(len(self.layers) - 2, -1, -1):
            errors = self.layers[idx + 1].propagate_errors()
            self.layers[idx].backward(errors)

    def apply_gradient(
        self, original_inputs: Sequence[float] | Array, learning_rate: float
    ) -> None:
        if self._activations is None:
            raise MissingForwardPass("apply_gradient() requires a preceding forward()")
        original_inputs = as_vector(original_inputs)
        if original_inputs.shape[0] != self.input_arity:
            raise ShapeMismatch(
                f"Network expects {self.input_arity} inputs, got {original_inputs.shape[0]}"
            )
        layer_inputs = [original_inputs] + self._activations[:-1]
        for layer, inputs in zip(self.layers, layer_inputs):
            layer.apply_gradient(inputs, learning_rate)

    def train_step(
        self, inputs: Sequence[float] | Array, label: int, learning_rate: float
    ) -> int:
        """Forward, backward and gradient step on one example."""

        prediction = self.forward(inputs)
        self.backward(label)
        self.apply_gradient(inputs, learning_rate)
        return prediction

    def dense_layers(self) -> List[tuple[int, DenseLayer]]:
        return [
            (idx, layer) for idx, layer in enumerate(self.layers) if isinstance(layer, DenseLayer)
        ]

    def parameter_count(self) -> int:
        return int(
            sum(layer.output_width * (layer.input_arity + 1) for _, layer in self.dense_layers())
        )

    def state_dict(self) -> Dict[str, Array]:
        state: Dict[str, Array] = {}
        for idx, layer in self.dense_layers():
            weights, biases = layer.parameters()
            state[f"layer_{idx}.weights"] = weights
            state[f"layer_{idx}.bias"] = biases
        return state

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        for idx, _ in self.dense_layers():
            for suffix in ("weights", "bias"):
                if f"layer_{idx}.{suffix}" not in state:
                    raise KeyError(f"Missing layer_{idx}.{suffix} in state dict")
        staged = []
        for idx, layer in self.dense_layers():
            weights = np.asarray(state[f"layer_{idx}.weights"], dtype=np.float64)
            biases = np.asarray(state[f"layer_{idx}.bias"], dtype=np.float64)
            expected = (layer.output_width, layer.input_arity)
            if weights.shape != expected or biases.shape != (layer.output_width,):
                raise ShapeMismatch(
                    f"layer_{idx}: expected weights {expected}, got {weights.shape}"
                )
            staged.append((layer, weights, biases))
        for layer, weights, biases in staged:
            layer.set_parameters(weights, biases)

    def describe(self) -> Dict[str, Any]:
        """Architecture summary, as stored in the persistence manifest."""

        return {
            "input_arity": self.input_arity,
            "layers": [layer.describe() for layer in self.layers],
        }

    def __repr__(self) -> str:
        widths = " -> ".join(str(layer.output_width) for layer in self.layers)
        return f"Network({self.input_arity} -> {widths})"


__all__ = ["Network", "argmax"]
