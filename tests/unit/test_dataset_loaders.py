import numpy as np
import pytest

from scratchnet.core.errors import DatasetError
from scratchnet.data import idx
from scratchnet.data.registry import available_datasets, get_dataset


def _write_mnist_like(root, n_train=6, n_test=3):
    images = (np.arange(n_train * 4 * 4) % 256).reshape(n_train, 4, 4)
    labels = np.arange(n_train) % 10
    idx.write_images(root / "train-images-idx3-ubyte", images)
    idx.write_labels(root / "train-labels-idx1-ubyte", labels)
    idx.write_images(root / "t10k-images-idx3-ubyte", images[:n_test])
    idx.write_labels(root / "t10k-labels-idx1-ubyte", labels[:n_test])
    return images, labels


def test_idx_images_are_normalised(tmp_path):
    images = np.array([[[0, 255], [51, 102]]], dtype=np.uint8)
    path = idx.write_images(tmp_path / "imgs", images)
    inputs = idx.load_images(path)
    assert inputs.shape == (1, 4)
    assert np.allclose(inputs[0], [0.0, 1.0, 0.2, 0.4])
    assert idx.image_shape(path) == (2, 2)


def test_idx_limit_is_clamped(tmp_path):
    images, labels = _write_mnist_like(tmp_path)
    x, y = idx.load_dataset(
        tmp_path / "train-images-idx3-ubyte", tmp_path / "train-labels-idx1-ubyte", limit=4
    )
    assert x.shape == (4, 16)
    assert y.tolist() == labels[:4].tolist()
    x_all = idx.load_images(tmp_path / "train-images-idx3-ubyte", limit=1000)
    assert x_all.shape[0] == images.shape[0]


def test_idx_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        idx.load_labels(tmp_path / "missing")

    labels_path = idx.write_labels(tmp_path / "labels", [1, 2, 3])
    with pytest.raises(DatasetError):
        idx.load_images(labels_path)

    images_path = idx.write_images(tmp_path / "imgs", np.zeros((3, 2, 2)))
    images_path.write_bytes(images_path.read_bytes()[:-1])
    with pytest.raises(DatasetError):
        idx.load_images(images_path)


def test_mnist_registry_reads_idx_root(tmp_path, monkeypatch):
    _write_mnist_like(tmp_path)
    monkeypatch.setenv("SCRATCHNET_DATA_DIR", str(tmp_path))
    dataset = get_dataset("mnist")
    assert dataset.input_arity == 16
    assert dataset.input_shape == (4, 4)
    assert dataset.splits == {"train": 6, "test": 3}
    assert dataset.num_classes == 10


def test_synthetic_dataset_is_deterministic():
    first = get_dataset("synthetic", n_train=20, n_test=8, input_arity=9, num_classes=3, seed=4)
    second = get_dataset("synthetic", n_train=20, n_test=8, input_arity=9, num_classes=3, seed=4)
    assert np.array_equal(first.train_inputs, second.train_inputs)
    assert np.array_equal(first.test_labels, second.test_labels)
    assert first.train_inputs.min() >= 0.0 and first.train_inputs.max() <= 1.0
    assert set(first.train_labels.tolist()) == {0, 1, 2}
    assert first.input_shape == (3, 3)


def test_unknown_dataset():
    assert {"mnist", "synthetic"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("cifar")
