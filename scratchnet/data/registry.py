"""Dataset registry and metadata contracts."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, MutableMapping, Tuple

import numpy as np

from ..core.errors import DatasetError
from ..core.types import Array
from . import idx

DATA_DIR_ENV = "SCRATCHNET_DATA_DIR"
DEFAULT_MNIST_DIR = Path("data") / "mnist"

MNIST_FILES = {
    "train": ("train-images-idx3-ubyte", "train-labels-idx1-ubyte"),
    "test": ("t10k-images-idx3-ubyte", "t10k-labels-idx1-ubyte"),
}


@dataclass(frozen=True)
class Dataset:
    """In-memory train/test split with index-aligned labels.

    Attributes
    ----------
    input_arity:
        Length of every input vector.
    num_classes:
        Number of distinct labels; the network's output width.
    input_shape:
        ``(rows, cols)`` when inputs are flattened images, used for rendering
        and pooling layers.
    provenance:
        Free-form metadata recorded in the run manifest.
    """

    name: str
    train_inputs: Array
    train_labels: Array
    test_inputs: Array
    test_labels: Array
    num_classes: int
    input_shape: Tuple[int, ...] = ()
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def input_arity(self) -> int:
        return int(self.train_inputs.shape[1])

    @property
    def splits(self) -> Dict[str, int]:
        return {
            "train": int(self.train_inputs.shape[0]),
            "test": int(self.test_inputs.shape[0]),
        }


DatasetFactory = Callable[..., Dataset]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(name: str) -> Callable[[DatasetFactory], DatasetFactory]:
    """Decorator registering a dataset factory under ``name``::

        @register_dataset("mnist")
        def build_mnist(**options):
            ...
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[name] = func
        return func

    return _decorator


def get_dataset(name: str, **options: Any) -> Dataset:
    """Build the dataset registered as ``name`` with ``options``."""

    if name not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    dataset = _REGISTRY[name](**options)
    _validate(dataset)
    return dataset


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


def _validate(dataset: Dataset) -> None:
    for split in ("train", "test"):
        inputs = getattr(dataset, f"{split}_inputs")
        labels = getattr(dataset, f"{split}_labels")
        if inputs.ndim != 2 or inputs.shape[0] != labels.shape[0]:
            raise DatasetError(
                f"{dataset.name}/{split}: inputs {inputs.shape} do not align with "
                f"labels {labels.shape}"
            )
        if labels.size and (labels.min() < 0 or labels.max() >= dataset.num_classes):
            raise DatasetError(
                f"{dataset.name}/{split}: labels outside [0, {dataset.num_classes})"
            )
    if dataset.test_inputs.shape[1] != dataset.train_inputs.shape[1]:
        raise DatasetError(f"{dataset.name}: train and test input lengths differ")


def resolve_data_dir(root: str | Path | None = None) -> Path:
    return Path(root or os.environ.get(DATA_DIR_ENV) or DEFAULT_MNIST_DIR)


@register_dataset("mnist")
def build_mnist(
    *,
    root: str | Path | None = None,
    limit: int | None = None,
    test_limit: int | None = None,
) -> Dataset:
    """MNIST read from the four standard IDX files under ``root``."""

    base = resolve_data_dir(root)
    train_images, train_labels = (base / name for name in MNIST_FILES["train"])
    test_images, test_labels = (base / name for name in MNIST_FILES["test"])
    train_x, train_y = idx.load_dataset(train_images, train_labels, limit)
    test_x, test_y = idx.load_dataset(
        test_images, test_labels, test_limit if test_limit is not None else limit
    )
    return Dataset(
        name="mnist",
        train_inputs=train_x,
        train_labels=train_y,
        test_inputs=test_x,
        test_labels=test_y,
        num_classes=10,
        input_shape=idx.image_shape(train_images),
        provenance={"type": "idx", "root": str(base), "limit": limit},
    )


def _blobs(
    rng: np.random.Generator, prototypes: Array, count: int, noise: float
) -> tuple[Array, Array]:
    labels = np.arange(count, dtype=np.int64) % prototypes.shape[0]
    rng.shuffle(labels)
    inputs = prototypes[labels] + noise * rng.standard_normal((count, prototypes.shape[1]))
    return np.clip(inputs, 0.0, 1.0), labels


@register_dataset("synthetic")
def build_synthetic(
    *,
    n_train: int = 256,
    n_test: int = 64,
    input_arity: int = 16,
    num_classes: int = 4,
    noise: float = 0.1,
    seed: int = 0,
) -> Dataset:
    """Noisy copies of one random prototype per class, clipped to ``[0, 1]``."""

    rng = np.random.default_rng(seed)
    prototypes = rng.uniform(0.0, 1.0, size=(num_classes, input_arity))
    train_x, train_y = _blobs(rng, prototypes, n_train, noise)
    test_x, test_y = _blobs(rng, prototypes, n_test, noise)
    side = int(round(np.sqrt(input_arity)))
    shape = (side, side) if side * side == input_arity else ()
    return Dataset(
        name="synthetic",
        train_inputs=train_x,
        train_labels=train_y,
        test_inputs=test_x,
        test_labels=test_y,
        num_classes=num_classes,
        input_shape=shape,
        provenance={
            "type": "synthetic",
            "n_train": n_train,
            "n_test": n_test,
            "input_arity": input_arity,
            "num_classes": num_classes,
            "noise": noise,
            "seed": seed,
        },
    )


__all__ = [
    "Dataset",
    "available_datasets",
    "build_mnist",
    "build_synthetic",
    "get_dataset",
    "register_dataset",
]
