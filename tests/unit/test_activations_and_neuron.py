import numpy as np
import pytest

from scratchnet.core.activations import activate, derivative, relu, sigmoid
from scratchnet.core.errors import InvalidConfiguration, ShapeMismatch
from scratchnet.core.neuron import Neuron
from scratchnet.core.types import ActivationKind


def test_closed_form_derivatives():
    assert derivative(ActivationKind.SIGMOID, 0.5) == pytest.approx(0.25)
    assert derivative(ActivationKind.RELU, 0.0) == 0.0
    assert derivative(ActivationKind.RELU, 3.0) == 1.0
    for y in (-5.0, 0.0, 0.5, 12.0):
        assert derivative(ActivationKind.LINEAR, y) == 1.0


def test_activation_values():
    assert activate(ActivationKind.LINEAR, -2.5) == -2.5
    assert activate(ActivationKind.RELU, -2.5) == 0.0
    assert activate(ActivationKind.SIGMOID, 0.0) == pytest.approx(0.5)
    assert activate(ActivationKind.SIGMOID, -1000.0) == pytest.approx(0.0)
    assert activate(ActivationKind.SIGMOID, 1000.0) == pytest.approx(1.0)


def test_vector_helpers_match_scalar_activations():
    x = np.array([-2.0, 0.0, 1.5])
    assert np.allclose(relu(x), [0.0, 0.0, 1.5])
    expected = [activate(ActivationKind.SIGMOID, v) for v in x]
    assert np.allclose(sigmoid(x), expected)


def test_activation_kind_parse():
    assert ActivationKind.parse("ReLU") is ActivationKind.RELU
    assert ActivationKind.parse(ActivationKind.SIGMOID) is ActivationKind.SIGMOID
    with pytest.raises(InvalidConfiguration):
        ActivationKind.parse("tanh")


def test_neuron_initialisation_is_seeded():
    a = Neuron(1000, "relu", np.random.default_rng(3))
    b = Neuron(1000, "relu", np.random.default_rng(3))
    assert np.array_equal(a.weights, b.weights)
    assert a.bias == 0.0
    assert a.weights.shape == (1000,)
    assert abs(float(np.std(a.weights)) - 0.5) < 0.05
    assert abs(float(np.mean(a.weights))) < 0.1


def test_neuron_rejects_unknown_activation():
    with pytest.raises(InvalidConfiguration):
        Neuron(3, "softplus", np.random.default_rng(0))


def test_neuron_forward_backward_and_gradient():
    neuron = Neuron.from_parameters([0.5, -1.0], bias=0.25, activation="linear")
    out = neuron.forward([2.0, 1.0])
    assert out == pytest.approx(0.25 + 1.0 - 1.0)

    neuron.backward(0.5)
    assert neuron.delta == pytest.approx(0.5)

    neuron.apply_gradient([2.0, 1.0], learning_rate=0.1)
    assert np.allclose(neuron.weights, [0.5 - 0.1 * 0.5 * 2.0, -1.0 - 0.1 * 0.5 * 1.0])
    assert neuron.bias == pytest.approx(0.25 - 0.1 * 0.5)


def test_sigmoid_delta_uses_cached_output():
    neuron = Neuron.from_parameters([1.0], bias=0.0, activation="sigmoid")
    out = neuron.forward([0.0])
    assert out == pytest.approx(0.5)
    neuron.backward(2.0)
    assert neuron.delta == pytest.approx(2.0 * 0.25)


def test_neuron_arity_mismatch():
    neuron = Neuron(3, "linear", np.random.default_rng(0))
    with pytest.raises(ShapeMismatch):
        neuron.forward([1.0, 2.0])
    with pytest.raises(ShapeMismatch):
        neuron.apply_gradient([1.0], learning_rate=0.1)
    with pytest.raises(ShapeMismatch):
        neuron.set_parameters([1.0, 2.0], 0.0)
