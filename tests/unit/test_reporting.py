import io
import json

import numpy as np

from scratchnet.reporting.ascii import ASCII_SCALE, render_confidence, render_image
from scratchnet.reporting.metrics import CsvSink, JsonlSink, ProgressPrinter
from scratchnet.reporting.plots import PlotAdapter


def test_plot_adapter_headless(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_epoch(1, {"accuracy": 0.2})
    adapter.on_epoch(2, {"accuracy": 0.6})
    adapter.close()
    assert (tmp_path / "accuracy.png").exists()


def test_plot_adapter_disabled_writes_nothing(tmp_path):
    adapter = PlotAdapter(tmp_path / "off", enable_plots=False)
    adapter.on_epoch(1, {"accuracy": 0.2})
    adapter.close()
    assert not (tmp_path / "off").exists()


def test_sinks_write_records(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv")
    for epoch, acc in ((1, 0.5), (2, 0.75)):
        metrics = {"accuracy": acc, "correct": acc * 4, "total": 4.0}
        jsonl.on_epoch(epoch, metrics)
        csv_sink.on_epoch(epoch, metrics)
    records = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert [r["epoch"] for r in records] == [1, 2]
    assert records[1]["accuracy"] == 0.75
    assert records[0]["sha"] == "abc" and records[0]["seed"] == 3
    rows = (tmp_path / "m.csv").read_text().splitlines()
    assert rows[0] == "accuracy,correct,epoch,split,total"
    assert len(rows) == 3


def test_progress_printer_format():
    stream = io.StringIO()
    ProgressPrinter(10, stream=stream).on_epoch(3, {"accuracy": 0.5, "correct": 5, "total": 10})
    assert stream.getvalue() == "Epoch 3/10 - Accuracy: 0.5000 (5/10)\n"


def test_render_image_uses_brightness_ramp():
    text = render_image(np.array([0.0, 1.0, 0.5, 0.0]), (2, 2))
    lines = text.splitlines()
    assert lines[0] == "+----+"
    assert lines[1] == "|" + "  " + ASCII_SCALE[-1] * 2 + "|"
    assert lines[2][1] == ASCII_SCALE[int(0.5 * len(ASCII_SCALE))]
    assert len(lines) == 4


def test_render_confidence_marks_prediction():
    text = render_confidence([0.1, 0.9], prediction=1, width=10)
    first, second = text.splitlines()
    assert first == "  0 |#.........| 0.100"
    assert second == "  1 |#########.| 0.900 <"
