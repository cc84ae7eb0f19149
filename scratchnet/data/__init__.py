"""Dataset registry and loader helpers."""

from .idx import load_dataset, load_images, load_labels, write_images, write_labels
from .registry import Dataset, available_datasets, get_dataset, register_dataset

__all__ = [
    "Dataset",
    "available_datasets",
    "get_dataset",
    "load_dataset",
    "load_images",
    "load_labels",
    "register_dataset",
    "write_images",
    "write_labels",
]
