import json

import numpy as np
import pytest

from scratchnet.core.errors import PersistenceError, ShapeMismatch
from scratchnet.core.network import Network
from scratchnet.core.types import LayerSpec
from scratchnet.persistence import FORMAT_VERSION, load_network, read_manifest, save_network
from scratchnet.training.trainer import Trainer

SPECS = [LayerSpec.dense(4, "relu"), LayerSpec.dense(3, "sigmoid")]


def _trained_network() -> Network:
    rng = np.random.default_rng(0)
    inputs = rng.uniform(0.0, 1.0, size=(24, 6))
    labels = np.arange(24) % 3
    network = Network(6, SPECS, seed=11)
    Trainer(network, seed=12).train(inputs, labels, epochs=10, learning_rate=0.2, batch_size=6)
    return network


def test_save_load_round_trip_is_bit_exact(tmp_path):
    source = _trained_network()
    root = save_network(source, tmp_path / "model")
    restored = load_network(Network(6, SPECS, seed=99), root)

    x = np.linspace(0.0, 1.0, 6)
    source.forward(x)
    restored.forward(x)
    assert np.array_equal(source.outputs, restored.outputs)
    for key, value in source.state_dict().items():
        assert np.array_equal(value, restored.state_dict()[key])


def test_layout_on_disk(tmp_path):
    network = Network(2, [LayerSpec.dense(2, "linear")], seed=0)
    network.layers[0].set_parameters([[0.1, -2.5], [3.0, 0.0]], [0.5, -0.125])
    root = save_network(network, tmp_path / "m")

    weights = (root / "layer_0" / "neuron_0" / "weights.txt").read_text().splitlines()
    assert [float(w) for w in weights] == [0.1, -2.5]
    bias = (root / "layer_0" / "neuron_1" / "bias.txt").read_text().splitlines()
    assert bias == ["-0.125"]
    manifest = read_manifest(root)
    assert manifest["format_version"] == FORMAT_VERSION
    assert manifest["input_arity"] == 2
    assert manifest["layers"][0]["activation"] == "linear"


def test_existing_target_is_not_overwritten_by_default(tmp_path):
    network = _trained_network()
    root = tmp_path / "model"
    root.mkdir()
    (root / "keep.txt").write_text("original")
    with pytest.raises(PersistenceError):
        save_network(network, root)
    with pytest.raises(PersistenceError):
        save_network(network, root, confirm=lambda path: False)
    assert (root / "keep.txt").read_text() == "original"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["model"]


def test_overwrite_and_confirm(tmp_path):
    network = _trained_network()
    root = tmp_path / "model"
    root.mkdir()
    (root / "keep.txt").write_text("original")
    asked = []

    def _confirm(path):
        asked.append(path)
        return True

    save_network(network, root, confirm=_confirm)
    assert asked == [root]
    assert not (root / "keep.txt").exists()
    assert (root / "layer_1" / "neuron_2" / "bias.txt").exists()

    save_network(network, root, overwrite=True)
    assert read_manifest(root) is not None


def test_load_missing_directory_or_file(tmp_path):
    network = Network(6, SPECS, seed=0)
    with pytest.raises(PersistenceError):
        load_network(network, tmp_path / "absent")

    root = save_network(_trained_network(), tmp_path / "model")
    (root / "layer_1" / "neuron_2" / "bias.txt").unlink()
    before = network.state_dict()
    with pytest.raises(PersistenceError):
        load_network(network, root)
    after = network.state_dict()
    assert all(np.array_equal(before[k], after[k]) for k in before)


def test_manifest_detects_architecture_mismatch(tmp_path):
    root = save_network(_trained_network(), tmp_path / "model")
    other = Network(6, [LayerSpec.dense(4, "relu"), LayerSpec.dense(3, "relu")], seed=0)
    with pytest.raises(ShapeMismatch):
        load_network(other, root)


def test_layout_without_manifest_still_loads(tmp_path):
    source = _trained_network()
    root = save_network(source, tmp_path / "model")
    (root / "manifest.json").unlink()
    restored = load_network(Network(6, SPECS, seed=5), root)
    assert np.array_equal(
        source.state_dict()["layer_0.weights"], restored.state_dict()["layer_0.weights"]
    )

    weights = root / "layer_0" / "neuron_0" / "weights.txt"
    weights.write_text("0.5\n" * 5)
    with pytest.raises(ShapeMismatch):
        load_network(Network(6, SPECS, seed=5), root)
    weights.write_text("abc\n" * 6)
    with pytest.raises(PersistenceError):
        load_network(Network(6, SPECS, seed=5), root)


def test_unknown_manifest_version_is_rejected(tmp_path):
    root = save_network(_trained_network(), tmp_path / "model")
    manifest = json.loads((root / "manifest.json").read_text())
    manifest["format_version"] = 99
    (root / "manifest.json").write_text(json.dumps(manifest))
    with pytest.raises(PersistenceError):
        load_network(Network(6, SPECS, seed=0), root)


def test_pooling_layers_save_as_empty_directories(tmp_path):
    specs = [LayerSpec.pool("average", 4, 4, 2), LayerSpec.dense(2, "sigmoid")]
    source = Network(16, specs, seed=3)
    root = save_network(source, tmp_path / "pooled")
    assert list((root / "layer_0").iterdir()) == []
    restored = load_network(Network(16, specs, seed=4), root)
    x = np.linspace(0.0, 1.0, 16)
    assert source.predict(x) == restored.predict(x)
    assert np.array_equal(source.outputs, restored.outputs)
