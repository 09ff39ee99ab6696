import csv
import json

import pytest

from gdlearn.core.descent import GradientDescent
from gdlearn.core.halting import max_iterations
from gdlearn.models import LinearRegression
from gdlearn.reporting import (
    CsvSink,
    JsonlSink,
    PlotAdapter,
    describe_model,
    write_manifest,
    write_summary,
)


def _run(monitor, steps=4):
    gd = GradientDescent(5.0, 0.1, lambda x: 2 * x)
    gd.each_iteration(monitor).halt_when(max_iterations(steps)).run()
    return gd


def test_jsonl_sink_records_engine_state(tmp_path):
    sink = JsonlSink(tmp_path / "metrics.jsonl", cost_fn=lambda x: x * x)
    _run(sink)
    records = [json.loads(line) for line in (tmp_path / "metrics.jsonl").read_text().splitlines()]
    assert [r["iteration"] for r in records] == [0, 1, 2, 3]
    assert records[0]["cost"] == pytest.approx(25.0)
    assert records[0]["step_norm"] == 0.0
    assert records[1]["step_norm"] == pytest.approx(1.0)
    assert all(r["phase"] == "train" for r in records)


def test_sink_every_n_iterations(tmp_path):
    sink = JsonlSink(tmp_path / "metrics.jsonl", every=2)
    _run(sink, steps=5)
    records = [json.loads(line) for line in (tmp_path / "metrics.jsonl").read_text().splitlines()]
    assert [r["iteration"] for r in records] == [0, 2, 4]
    assert "cost" not in records[0]


def test_sink_rejects_bad_interval(tmp_path):
    with pytest.raises(ValueError):
        JsonlSink(tmp_path / "metrics.jsonl", every=0)


def test_csv_sink_has_stable_schema(tmp_path):
    sink = CsvSink(tmp_path / "metrics.csv", phase="pretrain-0")
    _run(sink, steps=2)
    with (tmp_path / "metrics.csv").open() as handle:
        rows = list(csv.DictReader(handle))
    assert list(rows[0].keys()) == ["iteration", "phase", "step_norm", "cost"]
    assert [row["iteration"] for row in rows] == ["0", "1"]
    assert rows[0]["phase"] == "pretrain-0"
    assert rows[0]["cost"] == ""


def test_write_summary(tmp_path):
    sink = JsonlSink(tmp_path / "metrics.jsonl", cost_fn=lambda x: x * x)
    _run(sink)
    out = write_summary(tmp_path / "metrics.jsonl", tmp_path / "summary.json")
    summary = json.loads(open(out).read())
    assert summary["records"] == 4
    assert summary["phases"] == ["train"]
    assert summary["metrics"]["cost"]["max"] == pytest.approx(25.0)
    assert summary["metrics"]["cost"]["last"] == pytest.approx(25.0 * 0.8**6)
    assert "iteration" not in summary["metrics"]


def test_write_summary_without_metrics(tmp_path):
    out = write_summary(tmp_path / "missing.jsonl", tmp_path / "summary.json")
    assert json.loads(open(out).read())["records"] == 0


def test_plot_adapter_headless(tmp_path):
    pytest.importorskip("matplotlib")
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_step(0, {"cost": 1.0})
    adapter.on_step(1, {"cost": 0.5})
    adapter.phase = "finetune"
    adapter.on_step(0, {"cost": 0.4})
    assert adapter.close() == tmp_path / "cost.png"
    assert (tmp_path / "cost.png").exists()


def test_plot_adapter_disabled(tmp_path):
    adapter = PlotAdapter(tmp_path / "plots", enable_plots=False)
    adapter.on_step(0, {"cost": 1.0})
    assert adapter.close() is None
    assert not (tmp_path / "plots").exists()


def test_manifest_records_regression_parameters(tmp_path):
    model = LinearRegression([[0.0], [1.0], [2.0]], [1.0, 2.0, 3.0], norm_weight=0.1, seed=0)
    assert describe_model(model) == {
        "type": "LinearRegression",
        "norm_weight": 0.1,
        "parameter_shapes": [[2]],
        "parameter_count": 2,
    }
    path = write_manifest(
        tmp_path / "nested" / "manifest.json",
        model=model,
        dataset={"name": "fixture"},
        training={"rate": 0.5, "iterations": 7},
    )
    manifest = json.loads((tmp_path / "nested" / "manifest.json").read_text())
    assert path.endswith("manifest.json")
    assert manifest["model"]["type"] == "LinearRegression"
    assert manifest["dataset"] == {"name": "fixture"}
    assert manifest["training"] == {"rate": 0.5, "iterations": 7}
    assert "generated_at" in manifest
