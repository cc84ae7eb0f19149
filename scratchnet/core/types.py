"""Core typing contracts for scratchnet."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping

import numpy as np

from .errors import InvalidConfiguration

Array = np.ndarray


class _ParsableEnum(Enum):
    @classmethod
    def parse(cls, value: object):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        choices = ", ".join(member.value for member in cls)
        raise InvalidConfiguration(
            f"Unknown {cls.__name__} {value!r}; expected one of: {choices}"
        )


class ActivationKind(_ParsableEnum):
    """Closed set of neuron nonlinearities."""

    LINEAR = "linear"
    SIGMOID = "sigmoid"
    RELU = "relu"


class PoolingKind(_ParsableEnum):
    """Reductions available to :class:`~scratchnet.core.layers.PoolingLayer`."""

    MAX = "max"
    AVERAGE = "average"
    MIN = "min"


class LayerKind(_ParsableEnum):
    DENSE = "dense"
    CONVOLUTIONAL = "convolutional"
    POOLING = "pooling"


@dataclass(frozen=True)
class LayerSpec:
    """Construction-time description of one layer.

    Only the fields relevant to ``kind`` are meaningful: ``width`` and
    ``activation`` for dense layers, ``pooling``, ``input_width``,
    ``input_height`` and ``stride`` for pooling layers.
    """

    kind: LayerKind
    width: int = 0
    activation: ActivationKind | None = None
    pooling: PoolingKind | None = None
    input_width: int = 0
    input_height: int = 0
    stride: int = 1

    @classmethod
    def dense(cls, width: int, activation: ActivationKind | str) -> "LayerSpec":
        return cls(
            kind=LayerKind.DENSE,
            width=int(width),
            activation=ActivationKind.parse(activation),
        )

    @classmethod
    def pool(
        cls,
        kind: PoolingKind | str,
        input_width: int,
        input_height: int,
        stride: int,
    ) -> "LayerSpec":
        return cls(
            kind=LayerKind.POOLING,
            pooling=PoolingKind.parse(kind),
            input_width=int(input_width),
            input_height=int(input_height),
            stride=int(stride),
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "LayerSpec":
        """Build a spec from a config mapping such as ``{"kind": "dense", ...}``."""

        if "kind" not in config:
            raise InvalidConfiguration(f"Layer config is missing 'kind': {dict(config)}")
        kind = LayerKind.parse(config["kind"])
        if kind is LayerKind.DENSE:
            if "width" not in config or "activation" not in config:
                raise InvalidConfiguration(
                    "Dense layer config requires 'width' and 'activation'"
                )
            return cls.dense(int(config["width"]), config["activation"])
        if kind is LayerKind.POOLING:
            missing = {"pooling", "input_width", "input_height", "stride"} - set(config)
            if missing:
                raise InvalidConfiguration(
                    f"Pooling layer config is missing: {', '.join(sorted(missing))}"
                )
            return cls.pool(
                config["pooling"],
                int(config["input_width"]),
                int(config["input_height"]),
                int(config["stride"]),
            )
        return cls(kind=kind, width=int(config.get("width", 0)))

    def to_config(self) -> Dict[str, Any]:
        if self.kind is LayerKind.DENSE:
            return {
                "kind": self.kind.value,
                "width": self.width,
                "activation": self.activation.value if self.activation else None,
            }
        if self.kind is LayerKind.POOLING:
            return {
                "kind": self.kind.value,
                "pooling": self.pooling.value if self.pooling else None,
                "input_width": self.input_width,
                "input_height": self.input_height,
                "stride": self.stride,
            }
        return {"kind": self.kind.value, "width": self.width}


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`scratchnet.training.pipelines.run_pipeline`."""

    epochs: int
    accuracy: float
    metrics_path: str
    manifest_path: str
    model_path: str = ""


__all__ = [
    "ActivationKind",
    "Array",
    "LayerKind",
    "LayerSpec",
    "PoolingKind",
    "RunResult",
]
