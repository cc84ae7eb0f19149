"""Command line entry point for scratchnet training and evaluation runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from scratchnet.core.errors import ScratchNetError
from scratchnet.core.network import Network
from scratchnet.data.registry import Dataset
from scratchnet.reporting.ascii import render_confidence, render_image
from scratchnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "accuracy": result.accuracy,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if result.model_path:
        payload["model"] = result.model_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="synthetic-min",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument("--seed", type=int, help="Seed for weight init and batch sampling")
    parser.add_argument("--epochs", type=int, help="Number of training epochs (0 = evaluate only)")
    parser.add_argument("--learning-rate", type=float, help="Gradient step size")
    parser.add_argument("--batch-size", type=int, help="Examples per epoch window")
    parser.add_argument("--data-dir", help="Directory holding the MNIST IDX files")
    parser.add_argument("--limit", type=int, help="Maximum number of examples to read")
    parser.add_argument("--load", help="Load parameters from this model directory first")
    parser.add_argument("--save", help="Save trained parameters to this model directory")
    overwrite = parser.add_mutually_exclusive_group()
    overwrite.add_argument(
        "--overwrite",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Replace an existing model directory without asking",
    )
    overwrite.add_argument(
        "--prompt-overwrite",
        action="store_true",
        help="Ask before replacing an existing model directory",
    )
    parser.add_argument("--run-dir", help="Directory for metrics and manifest")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write an accuracy curve PNG"
    )
    parser.add_argument(
        "--show",
        type=int,
        default=0,
        metavar="N",
        help="Render the first N test examples with the network's confidence",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _prompt_overwrite(path: Path) -> bool:
    answer = input(f"Folder '{path}' already exists. Overwrite? (y/N): ")
    return answer.strip().lower() == "y"


def _apply_args(config: dict, args: argparse.Namespace) -> dict:
    train = config.setdefault("train", {})
    model = config.setdefault("model", {})
    data = config.setdefault("data", {})
    options = dict(data.get("options") or {})
    data["options"] = options
    if args.seed is not None:
        train["seed"] = int(args.seed)
    if args.epochs is not None:
        train["epochs"] = int(args.epochs)
    if args.learning_rate is not None:
        train["learning_rate"] = float(args.learning_rate)
    if args.batch_size is not None:
        train["batch_size"] = int(args.batch_size)
    if args.run_dir:
        train["run_dir"] = args.run_dir
    if args.enable_plots:
        train["enable_plots"] = True
    if args.save:
        train["save_to"] = args.save
    if args.overwrite is not None:
        train["overwrite"] = bool(args.overwrite)
    if args.prompt_overwrite:
        train["overwrite"] = "prompt"
    if args.load:
        model["load_from"] = args.load
    if data.get("name") == "mnist":
        if args.data_dir:
            options["root"] = args.data_dir
        if args.limit is not None:
            options["limit"] = int(args.limit)
    elif args.limit is not None:
        options["n_train"] = int(args.limit)
    return config


def _show_examples(count: int):
    def _inspect(network: Network, dataset: Dataset) -> None:
        shown = min(count, dataset.test_inputs.shape[0])
        for idx in range(shown):
            inputs = dataset.test_inputs[idx]
            network.forward(inputs)
            if len(dataset.input_shape) == 2:
                print(render_image(inputs, dataset.input_shape))
            print(f"label={int(dataset.test_labels[idx])} prediction={network.prediction()}")
            print(render_confidence(network.outputs, network.prediction()))
            print()

    return _inspect


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = pipelines.load_preset(args.preset)
    if args.config:
        override = _load_override(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)
    config = _apply_args(json.loads(json.dumps(config)), args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    try:
        result = pipelines.run_pipeline(
            config,
            confirm=_prompt_overwrite,
            inspect=_show_examples(args.show) if args.show > 0 else None,
        )
    except (ScratchNetError, FileNotFoundError) as exc:
        raise SystemExit(f"error: {exc}") from exc
    print(_format_result(result))


if __name__ == "__main__":
    main()
