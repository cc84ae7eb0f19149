"""Training loop: random contiguous windows, one example at a time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from ..core.errors import InvalidConfiguration
from ..core.network import Network
from ..core.rng import resolve_rng
from ..core.types import Array
from .metrics import DEFAULT_METRICS, compute_metrics


@dataclass(frozen=True)
class EvaluationResult:
    correct: int
    total: int
    accuracy: float
    metrics: Mapping[str, float] = field(default_factory=dict)

    def as_metrics(self) -> Dict[str, float]:
        payload = {"correct": float(self.correct), "total": float(self.total)}
        payload.update(self.metrics)
        payload["accuracy"] = self.accuracy
        return payload


@dataclass
class TrainResult:
    epochs: int
    examples_seen: int
    history: List[Tuple[int, Mapping[str, float]]] = field(default_factory=list)

    @property
    def final_accuracy(self) -> float | None:
        if not self.history:
            return None
        return float(self.history[-1][1]["accuracy"])


def should_evaluate(epoch: int, epochs: int) -> bool:
    """Whether 1-based ``epoch`` of ``epochs`` is an evaluation epoch."""

    if epochs < 10:
        return True
    return epoch == 1 or epoch == epochs or epoch % (epochs // 10) == 0


def _as_examples(
    inputs: Sequence[Sequence[float]] | Array, labels: Sequence[int] | Array, what: str
) -> tuple[Array, Array]:
    inputs_arr = np.asarray(inputs, dtype=np.float64)
    labels_arr = np.asarray(labels, dtype=np.int64).reshape(-1)
    if inputs_arr.ndim != 2:
        raise InvalidConfiguration(
            f"{what} inputs must be a sequence of vectors, got shape {inputs_arr.shape}"
        )
    if inputs_arr.shape[0] != labels_arr.shape[0]:
        raise InvalidConfiguration(
            f"{what}: {inputs_arr.shape[0]} inputs but {labels_arr.shape[0]} labels"
        )
    return inputs_arr, labels_arr


class Trainer:
    """Drive a :class:`Network` through epochs of per-example descent.

    Callbacks receive ``on_epoch(epoch, metrics)`` for every evaluation
    epoch; plain callables are called with the same arguments.
    """

    def __init__(
        self,
        network: Network,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        callbacks: Sequence[object] | None = None,
        metric_names: Sequence[str] = DEFAULT_METRICS,
    ) -> None:
        self.network = network
        self.rng = resolve_rng(rng, seed)
        self.callbacks = list(callbacks or [])
        self.metric_names = list(metric_names)

    def train(
        self,
        inputs: Sequence[Sequence[float]] | Array,
        labels: Sequence[int] | Array,
        epochs: int,
        learning_rate: float,
        batch_size: int,
        eval_inputs: Sequence[Sequence[float]] | Array | None = None,
        eval_labels: Sequence[int] | Array | None = None,
    ) -> TrainResult:
        inputs_arr, labels_arr = _as_examples(inputs, labels, "training")
        n = inputs_arr.shape[0]
        epochs = int(epochs)
        batch_size = int(batch_size)
        if epochs < 0:
            raise InvalidConfiguration(f"epochs must be >= 0, got {epochs}")
        if batch_size < 1:
            raise InvalidConfiguration(f"batch_size must be >= 1, got {batch_size}")
        if batch_size > n:
            raise InvalidConfiguration(
                f"batch_size {batch_size} exceeds the {n} available training examples"
            )
        if (eval_inputs is None) != (eval_labels is None):
            raise InvalidConfiguration("eval_inputs and eval_labels must be given together")
        if eval_inputs is not None:
            eval_x, eval_y = _as_examples(eval_inputs, eval_labels, "evaluation")
        else:
            eval_x, eval_y = inputs_arr, labels_arr

        result = TrainResult(epochs=epochs, examples_seen=0)
        for epoch in range(1, epochs + 1):
            start = int(self.rng.integers(0, n - batch_size + 1))
            for idx in range(start, start + batch_size):
                self.network.train_step(inputs_arr[idx], int(labels_arr[idx]), learning_rate)
            result.examples_seen += batch_size
            if should_evaluate(epoch, epochs):
                metrics = self.evaluate(eval_x, eval_y).as_metrics()
                result.history.append((epoch, metrics))
                self._emit_epoch(epoch, metrics)
        return result

    def evaluate(
        self,
        inputs: Sequence[Sequence[float]] | Array,
        labels: Sequence[int] | Array,
    ) -> EvaluationResult:
        inputs_arr, labels_arr = _as_examples(inputs, labels, "evaluation")
        if inputs_arr.shape[0] == 0:
            raise InvalidConfiguration("Cannot evaluate on an empty set")
        predictions = np.array([self.network.predict(x) for x in inputs_arr], dtype=np.int64)
        correct = int(np.sum(predictions == labels_arr))
        total = int(labels_arr.shape[0])
        extra = compute_metrics(
            [name for name in self.metric_names if name != "accuracy"],
            predictions,
            labels_arr,
            num_classes=self.network.output_width,
        )
        return EvaluationResult(
            correct=correct, total=total, accuracy=correct / total, metrics=dict(extra)
        )

    def test(
        self,
        inputs: Sequence[Sequence[float]] | Array,
        labels: Sequence[int] | Array,
    ) -> float:
        """Fraction of ``inputs`` whose prediction equals the label."""

        return self.evaluate(inputs, labels).accuracy

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["EvaluationResult", "TrainResult", "Trainer", "should_evaluate"]
