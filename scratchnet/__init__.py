"""scratchnet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import (
    DatasetError,
    InvalidConfiguration,
    MissingForwardPass,
    PersistenceError,
    ScratchNetError,
    ShapeMismatch,
    UnsupportedOperation,
)
from .core.layers import DenseLayer, PoolingLayer
from .core.network import Network
from .core.neuron import Neuron
from .core.types import ActivationKind, LayerKind, LayerSpec, PoolingKind
from .persistence import load_network, save_network
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "ActivationKind",
    "DatasetError",
    "DenseLayer",
    "InvalidConfiguration",
    "LayerKind",
    "LayerSpec",
    "MissingForwardPass",
    "Network",
    "Neuron",
    "PersistenceError",
    "PoolingKind",
    "PoolingLayer",
    "ScratchNetError",
    "ShapeMismatch",
    "Trainer",
    "UnsupportedOperation",
    "activations",
    "load_network",
    "load_preset",
    "presets",
    "run_pipeline",
    "save_network",
    "types",
]
