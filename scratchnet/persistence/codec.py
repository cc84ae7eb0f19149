"""Directory-structured, human-readable storage of network parameters.

Layout::

    <root>/manifest.json
    <root>/layer_<i>/neuron_<n>/weights.txt   one float per line, input order
    <root>/layer_<i>/neuron_<n>/bias.txt      a single float

Floats are written with :func:`repr`, which round-trips exactly.  The codec
never builds an architecture: :func:`load_network` fills an existing
:class:`~scratchnet.core.network.Network` whose shape must match the saved
one.
"""

from __future__ import annotations

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

import numpy as np

from ..core.errors import PersistenceError, ShapeMismatch
from ..core.layers import DenseLayer
from ..core.network import Network

FORMAT_VERSION = 1
MANIFEST_NAME = "manifest.json"
WEIGHTS_NAME = "weights.txt"
BIAS_NAME = "bias.txt"

ConfirmOverwrite = Callable[[Path], bool]


def layer_dir(root: Path, index: int) -> Path:
    return root / f"layer_{index}"


def neuron_dir(root: Path, layer_index: int, neuron_index: int) -> Path:
    return layer_dir(root, layer_index) / f"neuron_{neuron_index}"


def _format_float(value: float) -> str:
    return repr(float(value))


def _write_tree(network: Network, root: Path) -> None:
    root.mkdir(parents=True)
    manifest = {"format_version": FORMAT_VERSION, **network.describe()}
    (root / MANIFEST_NAME).write_text(json.dumps(manifest, indent=2, sort_keys=True))
    for l_idx, layer in enumerate(network.layers):
        layer_dir(root, l_idx).mkdir()
        if not isinstance(layer, DenseLayer):
            continue
        for n_idx, neuron in enumerate(layer.neurons):
            path = neuron_dir(root, l_idx, n_idx)
            path.mkdir()
            lines = "".join(_format_float(w) + "\n" for w in neuron.weights)
            (path / WEIGHTS_NAME).write_text(lines)
            (path / BIAS_NAME).write_text(_format_float(neuron.bias) + "\n")


def save_network(
    network: Network,
    root: str | Path,
    *,
    overwrite: bool = False,
    confirm: ConfirmOverwrite | None = None,
) -> Path:
    """Write every dense neuron's parameters under ``root``.

    An existing ``root`` is only replaced when ``overwrite`` is true or
    ``confirm(root)`` answers true; otherwise :class:`PersistenceError` is
    raised and nothing on disk changes.  The tree is assembled in a
    temporary sibling directory and moved into place once complete.
    """

    root = Path(root)
    if root.exists():
        allowed = overwrite or (confirm is not None and confirm(root))
        if not allowed:
            raise PersistenceError(f"Folder '{root}' already exists")
    root.parent.mkdir(parents=True, exist_ok=True)
    staging_parent = Path(tempfile.mkdtemp(prefix=f".{root.name}-", dir=root.parent))
    staging = staging_parent / root.name
    try:
        _write_tree(network, staging)
        if root.exists():
            if root.is_dir():
                shutil.rmtree(root)
            else:
                root.unlink()
        staging.rename(root)
    finally:
        shutil.rmtree(staging_parent, ignore_errors=True)
    return root


def read_manifest(root: str | Path) -> Dict[str, Any] | None:
    """Return the manifest stored under ``root``, or ``None`` if absent."""

    path = Path(root) / MANIFEST_NAME
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"Manifest '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise PersistenceError(f"Manifest '{path}' must contain a JSON object")
    return dict(data)


def _check_manifest(network: Network, manifest: Mapping[str, Any], root: Path) -> None:
    version = manifest.get("format_version")
    if version != FORMAT_VERSION:
        raise PersistenceError(
            f"Unsupported model format version {version!r} in '{root}'"
        )
    expected = network.describe()
    saved = {"input_arity": manifest.get("input_arity"), "layers": manifest.get("layers")}
    if saved != expected:
        raise ShapeMismatch(
            f"Saved architecture in '{root}' does not match the network: "
            f"saved {saved}, network {expected}"
        )


def _read_lines(path: Path) -> List[str]:
    if not path.is_file():
        raise PersistenceError(f"File '{path}' does not exist")
    return [line.strip() for line in path.read_text().splitlines() if line.strip()]


def _parse_floats(path: Path, lines: List[str]) -> np.ndarray:
    try:
        return np.array([float(line) for line in lines], dtype=np.float64)
    except ValueError as exc:
        raise PersistenceError(f"Could not parse '{path}': {exc}") from exc


def load_network(network: Network, root: str | Path) -> Network:
    """Fill ``network`` with the parameters stored under ``root``.

    Every file is read and checked before the first neuron is modified, so a
    failure leaves ``network`` untouched.
    """

    root = Path(root)
    if not root.is_dir():
        raise PersistenceError(f"Folder '{root}' does not exist")
    manifest = read_manifest(root)
    if manifest is not None:
        _check_manifest(network, manifest, root)

    staged = []
    for l_idx, layer in network.dense_layers():
        if not layer_dir(root, l_idx).is_dir():
            raise PersistenceError(f"Folder '{layer_dir(root, l_idx)}' does not exist")
        for n_idx, neuron in enumerate(layer.neurons):
            path = neuron_dir(root, l_idx, n_idx)
            if not path.is_dir():
                raise PersistenceError(f"Folder '{path}' does not exist")
            weights = _parse_floats(path / WEIGHTS_NAME, _read_lines(path / WEIGHTS_NAME))
            if weights.shape[0] != neuron.input_arity:
                raise ShapeMismatch(
                    f"'{path / WEIGHTS_NAME}' holds {weights.shape[0]} weights, "
                    f"neuron expects {neuron.input_arity}"
                )
            bias_lines = _read_lines(path / BIAS_NAME)
            if len(bias_lines) != 1:
                raise PersistenceError(
                    f"'{path / BIAS_NAME}' must hold exactly one value, found {len(bias_lines)}"
                )
            bias = _parse_floats(path / BIAS_NAME, bias_lines)[0]
            staged.append((neuron, weights, float(bias)))

    for neuron, weights, bias in staged:
        neuron.set_parameters(weights, bias)
    return network


__all__ = [
    "FORMAT_VERSION",
    "load_network",
    "read_manifest",
    "save_network",
]
