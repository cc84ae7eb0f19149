"""Metrics sinks for training runs."""

from __future__ import annotations

import csv
import json
import sys
from pathlib import Path
from typing import Mapping, TextIO

from .artifacts import git_sha


class JsonlSink:
    """Append-only JSONL writer for evaluation metrics."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "test",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.seed = seed
        self.sha = sha or git_sha()

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = {
            "epoch": int(epoch),
            "split": self.split,
            "seed": self.seed,
            "sha": self.sha,
        }
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write metrics to CSV with a stable schema."""

    def __init__(self, path: str | Path, *, split: str = "test") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        row = {"epoch": int(epoch), "split": self.split}
        row.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


class ProgressPrinter:
    """Print ``Epoch e/E - Accuracy: a`` lines as evaluations arrive."""

    def __init__(self, epochs: int, stream: TextIO | None = None) -> None:
        self.epochs = int(epochs)
        self.stream = stream

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        stream = self.stream or sys.stdout
        accuracy = float(metrics.get("accuracy", 0.0))
        correct = int(metrics.get("correct", 0))
        total = int(metrics.get("total", 0))
        print(
            f"Epoch {epoch}/{self.epochs} - Accuracy: {accuracy:.4f} ({correct}/{total})",
            file=stream,
            flush=True,
        )


__all__ = ["CsvSink", "JsonlSink", "ProgressPrinter"]
