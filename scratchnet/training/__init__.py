"""Training loop, metrics and config-driven pipelines."""

from .metrics import compute_metrics, confusion_matrix
from .pipelines import load_preset, presets, run_pipeline
from .trainer import EvaluationResult, Trainer, TrainResult, should_evaluate

__all__ = [
    "EvaluationResult",
    "TrainResult",
    "Trainer",
    "compute_metrics",
    "confusion_matrix",
    "load_preset",
    "presets",
    "run_pipeline",
    "should_evaluate",
]
