"""Reader and writer for IDX files (the MNIST image/label format).

An IDX file starts with a big-endian header: a magic number whose low byte is
the number of dimensions, then one 32-bit size per dimension.  The payload is
unsigned bytes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

import numpy as np

from ..core.errors import DatasetError
from ..core.types import Array

IMAGES_MAGIC = 2051
LABELS_MAGIC = 2049


def _open(path: str | Path) -> bytes:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Could not open file '{path}'")
    return path.read_bytes()


def _parse(raw: bytes, magic: int, path: str | Path) -> tuple[Tuple[int, ...], memoryview]:
    ndim = magic & 0xFF
    header_size = 4 * (1 + ndim)
    if len(raw) < header_size:
        raise DatasetError(f"'{path}' is too short for an IDX header")
    header = np.frombuffer(raw[:header_size], dtype=">u4")
    if int(header[0]) != magic:
        raise DatasetError(
            f"'{path}' has magic number {int(header[0])}, expected {magic}"
        )
    dims = tuple(int(d) for d in header[1:])
    return dims, memoryview(raw)[header_size:]


def _limit(count: int, limit: int | None) -> int:
    if limit is None or limit <= 0:
        return count
    return min(count, int(limit))


def load_images(path: str | Path, limit: int | None = None) -> Array:
    """Return images as ``(n, rows * cols)`` float vectors scaled to ``[0, 1]``."""

    dims, payload = _parse(_open(path), IMAGES_MAGIC, path)
    count, rows, cols = dims
    count = _limit(count, limit)
    size = count * rows * cols
    if len(payload) < size:
        raise DatasetError(f"'{path}' is truncated: {len(payload)} of {size} pixel bytes")
    pixels = np.frombuffer(payload[:size], dtype=np.uint8)
    return pixels.reshape(count, rows * cols).astype(np.float64) / 255.0


def load_labels(path: str | Path, limit: int | None = None) -> Array:
    dims, payload = _parse(_open(path), LABELS_MAGIC, path)
    count = _limit(dims[0], limit)
    if len(payload) < count:
        raise DatasetError(f"'{path}' is truncated: {len(payload)} of {count} labels")
    return np.frombuffer(payload[:count], dtype=np.uint8).astype(np.int64)


def image_shape(path: str | Path) -> Tuple[int, int]:
    dims, _ = _parse(_open(path), IMAGES_MAGIC, path)
    return dims[1], dims[2]


def load_dataset(
    images_path: str | Path, labels_path: str | Path, limit: int | None = None
) -> tuple[Array, Array]:
    """Load index-aligned inputs and labels."""

    inputs = load_images(images_path, limit)
    labels = load_labels(labels_path, limit)
    if inputs.shape[0] != labels.shape[0]:
        raise DatasetError(
            f"'{images_path}' holds {inputs.shape[0]} images but "
            f"'{labels_path}' holds {labels.shape[0]} labels"
        )
    return inputs, labels


def write_images(path: str | Path, images: Array) -> Path:
    """Write ``(n, rows, cols)`` uint8 images as an IDX file."""

    images = np.asarray(images, dtype=np.uint8)
    if images.ndim != 3:
        raise DatasetError(f"images must be (n, rows, cols), got shape {images.shape}")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    header = np.array([IMAGES_MAGIC, *images.shape], dtype=">u4")
    path.write_bytes(header.tobytes() + images.tobytes())
    return path


def write_labels(path: str | Path, labels: Array) -> Path:
    labels = np.asarray(labels, dtype=np.uint8).reshape(-1)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    header = np.array([LABELS_MAGIC, labels.shape[0]], dtype=">u4")
    path.write_bytes(header.tobytes() + labels.tobytes())
    return path


__all__ = [
    "image_shape",
    "load_dataset",
    "load_images",
    "load_labels",
    "write_images",
    "write_labels",
]
