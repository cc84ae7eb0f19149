"""Config-driven training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Sequence

import numpy as np

from ..core.errors import InvalidConfiguration, ShapeMismatch
from ..core.network import Network
from ..core.types import LayerSpec, RunResult
from ..data import registry
from ..persistence.codec import load_network, save_network
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink, ProgressPrinter
from ..reporting.plots import PlotAdapter
from .trainer import Trainer

_MNIST_LAYERS = [
    {"kind": "dense", "width": 16, "activation": "relu"},
    {"kind": "dense", "width": 16, "activation": "relu"},
    {"kind": "dense", "width": 10, "activation": "sigmoid"},
]

_PRESETS: Dict[str, Mapping[str, object]] = {
    "mnist-3b1b": {
        "data": {"name": "mnist", "options": {"limit": None}},
        "model": {"input_arity": 784, "layers": _MNIST_LAYERS},
        "train": {
            "epochs": 2000,
            "learning_rate": 0.05,
            "batch_size": 64,
            "seed": 0,
            "run_dir": "runs/mnist-3b1b",
            "save_to": "models/3b1b",
            "overwrite": "prompt",
            "enable_plots": False,
        },
    },
    "mnist-3b1b-eval": {
        "data": {"name": "mnist", "options": {"limit": None}},
        "model": {"input_arity": 784, "layers": _MNIST_LAYERS, "load_from": "models/3b1b"},
        "train": {
            "epochs": 0,
            "seed": 0,
            "run_dir": "runs/mnist-3b1b-eval",
            "enable_plots": False,
        },
    },
    "synthetic-min": {
        "data": {
            "name": "synthetic",
            "options": {
                "n_train": 128,
                "n_test": 32,
                "input_arity": 16,
                "num_classes": 4,
                "seed": 0,
            },
        },
        "model": {
            "input_arity": 16,
            "layers": [
                {"kind": "dense", "width": 8, "activation": "relu"},
                {"kind": "dense", "width": 4, "activation": "sigmoid"},
            ],
        },
        "train": {
            "epochs": 50,
            "learning_rate": 0.1,
            "batch_size": 16,
            "seed": 7,
            "run_dir": "runs/synthetic-min",
            "enable_plots": False,
        },
    },
}

ConfirmOverwrite = Callable[[Path], bool]


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Dict[str, Any]:
    try:
        return deepcopy(dict(_PRESETS[name]))
    except KeyError as exc:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def build_network(
    model_cfg: Mapping[str, Any], input_arity: int, rng: np.random.Generator
) -> Network:
    layers = model_cfg.get("layers")
    if not layers:
        raise InvalidConfiguration("model.layers must list at least one layer")
    specs = [LayerSpec.from_config(layer) for layer in layers]
    return Network(input_arity, specs, rng=rng)


def run_pipeline(
    config: Mapping[str, Any],
    *,
    confirm: ConfirmOverwrite | None = None,
    inspect: Callable[[Network, registry.Dataset], None] | None = None,
) -> RunResult:
    """Build, optionally load, train, evaluate and save one network.

    ``confirm`` is consulted when ``train.overwrite`` is ``"prompt"`` and the
    save target already exists.  ``inspect`` receives the final network and
    the dataset before the run returns.
    """

    for section in ("data", "model", "train"):
        if section not in config:
            raise InvalidConfiguration(f"Config is missing the {section!r} section")
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = registry.get_dataset(data_cfg["name"], **(data_cfg.get("options") or {}))

    input_arity = int(model_cfg.get("input_arity", dataset.input_arity))
    if input_arity != dataset.input_arity:
        raise ShapeMismatch(
            f"Configured input_arity={input_arity} but {dataset.name} inputs have "
            f"{dataset.input_arity} values"
        )

    seed = int(train_cfg.get("seed", 0))
    rng = np.random.default_rng(seed)
    network = build_network(model_cfg, input_arity, rng)
    if network.output_width != dataset.num_classes:
        raise InvalidConfiguration(
            f"Output layer has {network.output_width} units but {dataset.name} "
            f"has {dataset.num_classes} classes"
        )
    if model_cfg.get("load_from"):
        load_network(network, model_cfg["load_from"])

    epochs = int(train_cfg.get("epochs", 1))
    learning_rate = float(train_cfg.get("learning_rate", 0.05))
    batch_size = int(train_cfg.get("batch_size", 32))
    metric_names = train_cfg.get("metrics", ["accuracy"])
    if isinstance(metric_names, str):
        metric_names = [m.strip() for m in metric_names.split(",") if m.strip()]

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        splits=dataset.splits,
        network=network,
        epochs=epochs,
        learning_rate=learning_rate,
        batch_size=batch_size,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="test", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="test")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: list[object] = [jsonl, csv_sink, plots]
    if train_cfg.get("progress", True):
        callbacks.append(ProgressPrinter(epochs))

    trainer = Trainer(network, rng=rng, callbacks=callbacks, metric_names=metric_names)
    eval_split = str(train_cfg.get("eval_split", "test"))
    if eval_split == "test":
        eval_x, eval_y = dataset.test_inputs, dataset.test_labels
    elif eval_split == "train":
        eval_x, eval_y = dataset.train_inputs, dataset.train_labels
    else:
        raise InvalidConfiguration(
            f"train.eval_split must be 'test' or 'train', got {eval_split!r}"
        )

    if epochs > 0:
        trainer.train(
            dataset.train_inputs,
            dataset.train_labels,
            epochs,
            learning_rate,
            batch_size,
            eval_inputs=eval_x,
            eval_labels=eval_y,
        )
    final = trainer.evaluate(eval_x, eval_y)
    if epochs == 0:
        for callback in callbacks:
            callback.on_epoch(0, final.as_metrics())  # type: ignore[attr-defined]
    plots.close()

    model_path = ""
    if train_cfg.get("save_to"):
        policy = train_cfg.get("overwrite", False)
        saved = save_network(
            network,
            train_cfg["save_to"],
            overwrite=policy is True,
            confirm=confirm if policy == "prompt" else None,
        )
        model_path = str(saved)

    manifest = write_manifest(
        run_dir / "manifest.json",
        config=json.loads(json.dumps(config)),
        dataset_provenance=dataset.provenance,
        architecture=network.describe(),
        results={"accuracy": final.accuracy, "correct": final.correct, "total": final.total},
    )
    if inspect is not None:
        inspect(network, dataset)

    return RunResult(
        epochs=epochs,
        accuracy=final.accuracy,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        model_path=model_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    splits: Mapping[str, int],
    network: Network,
    epochs: int,
    learning_rate: float,
    batch_size: int,
) -> None:
    layers: Sequence[str] = [
        f"{spec.kind.value}({layer.output_width})"
        for spec, layer in zip(network.specs, network.layers)
    ]
    print("=== scratchnet run ===")
    print(f"Dataset       : {dataset_name} {dict(splits)}")
    print(f"Network       : {network.input_arity} -> {' -> '.join(layers)}")
    print(f"Parameters    : {network.parameter_count()}")
    print(f"Epochs        : {epochs}")
    print(f"Learning rate : {learning_rate}")
    print(f"Batch size    : {batch_size}")
    print("======================")


__all__ = ["build_network", "load_preset", "presets", "run_pipeline"]
