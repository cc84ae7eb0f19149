"""Core numerical primitives for scratchnet."""

from . import activations, errors, types
from .layers import DenseLayer, PoolingLayer, build_layer
from .network import Network, argmax
from .neuron import Neuron

__all__ = [
    "DenseLayer",
    "Network",
    "Neuron",
    "PoolingLayer",
    "activations",
    "argmax",
    "build_layer",
    "errors",
    "types",
]
