"""Classification metrics over predicted and true class indices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Sequence

import numpy as np

from ..core.types import Array

DEFAULT_METRICS = ("accuracy",)


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def confusion_matrix(
    predictions: Sequence[int] | Array, labels: Sequence[int] | Array, num_classes: int
) -> Array:
    """Return a ``(num_classes, num_classes)`` count matrix indexed [label, prediction]."""

    preds = np.asarray(predictions, dtype=np.int64).reshape(-1)
    targs = np.asarray(labels, dtype=np.int64).reshape(-1)
    matrix = np.zeros((num_classes, num_classes), dtype=np.int64)
    np.add.at(matrix, (targs, preds), 1)
    return matrix


def compute_metric(
    name: str,
    predictions: Sequence[int] | Array,
    labels: Sequence[int] | Array,
    *,
    num_classes: int | None = None,
) -> MetricResult:
    key = name.lower()
    preds = np.asarray(predictions, dtype=np.int64).reshape(-1)
    targs = np.asarray(labels, dtype=np.int64).reshape(-1)
    if preds.shape != targs.shape:
        raise ValueError(
            f"predictions ({preds.shape[0]}) and labels ({targs.shape[0]}) differ in length"
        )
    if key == "accuracy":
        value = float(np.mean(preds == targs)) if preds.size else 0.0
    elif key == "error_rate":
        value = float(np.mean(preds != targs)) if preds.size else 0.0
    elif key == "macro_f1":
        if num_classes is None:
            raise ValueError("macro_f1 requires num_classes")
        f1_scores = []
        for cls in range(num_classes):
            tp = np.sum((preds == cls) & (targs == cls))
            fp = np.sum((preds == cls) & (targs != cls))
            fn = np.sum((preds != cls) & (targs == cls))
            precision = tp / (tp + fp + 1e-9)
            recall = tp / (tp + fn + 1e-9)
            f1_scores.append(2 * precision * recall / (precision + recall + 1e-9))
        value = float(np.mean(f1_scores))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str],
    predictions: Sequence[int] | Array,
    labels: Sequence[int] | Array,
    *,
    num_classes: int | None = None,
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, labels, num_classes=num_classes)
        results[metric.name] = metric.value
    return results


__all__ = ["DEFAULT_METRICS", "MetricResult", "compute_metrics", "confusion_matrix"]
