import json
from pathlib import Path

import pytest

from cli.main import main


def _last_json(output: str) -> dict:
    return json.loads(output.strip().splitlines()[-1])


def test_cli_synthetic_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "synthetic-min", "--epochs", "5"])
    run_dir = Path("runs/synthetic-min")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    out = capsys.readouterr().out
    assert "Epoch 5/5 - Accuracy:" in out
    result = _last_json(out)
    assert result["epochs"] == 5
    assert "model" not in result


def test_cli_save_load_and_show(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--epochs", "3", "--save", "model"])
    saved = _last_json(capsys.readouterr().out)
    assert saved["model"] == "model"
    assert Path("model/manifest.json").exists()

    main(["--epochs", "0", "--load", "model", "--run-dir", "eval", "--show", "1"])
    out = capsys.readouterr().out
    assert "Epoch 0/0 - Accuracy:" in out
    assert "prediction=" in out
    assert " <" in out
    assert _last_json(out)["accuracy"] == pytest.approx(saved["accuracy"])


def test_cli_refuses_to_overwrite(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    Path("model").mkdir()
    with pytest.raises(SystemExit) as excinfo:
        main(["--epochs", "1", "--save", "model"])
    assert str(excinfo.value.code).startswith("error:")

    monkeypatch.setattr("builtins.input", lambda prompt: "y")
    main(["--epochs", "1", "--save", "model", "--prompt-overwrite"])
    assert Path("model/layer_0/neuron_0/weights.txt").exists()

    main(["--epochs", "1", "--save", "model", "--overwrite"])
    assert _last_json(capsys.readouterr().out)["model"] == "model"


def test_cli_config_override_and_dump(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.yaml"
    override.write_text("train:\n  epochs: 2\n  learning_rate: 0.3\n")
    main(["--config", str(override), "--seed", "11", "--dump-config", "resolved.json"])
    resolved = json.loads(Path("resolved.json").read_text())
    assert resolved["train"]["epochs"] == 2
    assert resolved["train"]["learning_rate"] == 0.3
    assert resolved["train"]["seed"] == 11
    assert resolved["model"]["input_arity"] == 16


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    names = capsys.readouterr().out.split()
    assert names == ["mnist-3b1b", "mnist-3b1b-eval", "synthetic-min"]


def test_cli_missing_mnist_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main(["--preset", "mnist-3b1b", "--data-dir", str(tmp_path / "nothing")])
    assert "Could not open file" in str(excinfo.value.code)
