import json
from pathlib import Path

import numpy as np
import pytest

from gdlearn.training import pipelines


def _config(name, tmp_path, **train):
    config = pipelines.load_preset(name)
    config["train"]["run_dir"] = str(tmp_path / name)
    config["train"].update(train)
    return config


def test_presets_cover_every_model():
    names = set(pipelines.presets())
    assert names == {
        "linear-line",
        "logistic-threshold",
        "softmax-bands",
        "network-sphere",
        "autoencoder-diagonal",
    }
    types = {cfg["model"]["type"] for cfg in pipelines.presets().values()}
    assert types == set(pipelines.MODEL_TYPES)


def test_load_preset_returns_a_copy():
    config = pipelines.load_preset("linear-line")
    config["train"]["rate"] = 99.0
    assert pipelines.load_preset("linear-line")["train"]["rate"] == 0.03


def test_unknown_preset_lists_available():
    with pytest.raises(KeyError) as excinfo:
        pipelines.load_preset("mnist")
    assert "linear-line" in str(excinfo.value)


def test_merge_config_is_recursive():
    base = {"train": {"rate": 1.0, "seed": 0}, "model": {"type": "linear"}}
    merged = pipelines.merge_config(base, {"train": {"rate": 0.5}})
    assert merged == {"train": {"rate": 0.5, "seed": 0}, "model": {"type": "linear"}}
    assert base["train"]["rate"] == 1.0


def test_build_halt_combines_rules():
    assert pipelines.build_halt({}) is None
    assert pipelines.build_halt({"max_iterations": None, "tolerance": None}) is None
    assert callable(pipelines.build_halt({"max_iterations": 5, "tolerance": 1e-3}))


def test_unknown_model_type(tmp_path):
    config = _config("linear-line", tmp_path)
    config["model"]["type"] = "svm"
    with pytest.raises(KeyError):
        pipelines.run_pipeline(config)


def test_linear_preset_writes_artifacts(tmp_path):
    result = pipelines.run_pipeline(_config("linear-line", tmp_path))
    run_dir = tmp_path / "linear-line"
    for name in ("metrics.jsonl", "metrics.csv", "summary.json", "config.json", "manifest.json", "final.json"):
        assert (run_dir / name).exists(), name

    assert result.final["mse"] < 1e-3
    intercept, slope = result.model.parameters
    assert slope == pytest.approx(1.0, abs=1e-2)
    assert intercept == pytest.approx(-1.0, abs=1e-2)

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert records[-1]["iteration"] == result.iterations
    assert json.loads((run_dir / "config.json").read_text())["model"]["type"] == "linear"


def test_logistic_preset_classifies_threshold(tmp_path):
    result = pipelines.run_pipeline(_config("logistic-threshold", tmp_path))
    assert result.final["accuracy"] == 1.0


def test_softmax_preset_with_standardized_inputs(tmp_path):
    config = _config("softmax-bands", tmp_path, max_iterations=500)
    config["data"]["standardize"] = True
    result = pipelines.run_pipeline(config)
    assert result.iterations == 500
    assert 0.0 <= result.final["accuracy"] <= 1.0


def test_network_preset_on_small_grid(tmp_path):
    config = _config("network-sphere", tmp_path, max_iterations=10, log_every=5)
    config["data"]["options"]["half_width"] = 2
    result = pipelines.run_pipeline(config)
    assert result.iterations == 10
    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["iteration"] for r in records] == [0, 5, 10]
    assert all("cost" in r for r in records)
    assert "accuracy" in result.final


def test_autoencoder_preset_pretrains_then_trains(tmp_path):
    config = _config("autoencoder-diagonal", tmp_path, max_iterations=5, log_every=1)
    config["train"]["pretrain"] = {"rate": 1.0, "max_iterations": 5}
    result = pipelines.run_pipeline(config)
    assert result.iterations == 10
    assert result.model.trained == 1
    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["phases"] == ["pretrain-0", "train"]
    assert "mse" in result.final


def test_network_preset_standardizes_features(tmp_path):
    config = _config("network-sphere", tmp_path, max_iterations=2, log_every=1)
    assert config["data"]["standardize"] is True
    config["data"]["options"]["half_width"] = 2
    result = pipelines.run_pipeline(config)
    assert np.allclose(result.model.xs.mean(axis=0), 0.0)
    assert np.allclose(np.sqrt(np.mean(result.model.xs**2, axis=0)), 1.0)


def test_manifest_describes_the_trained_network(tmp_path):
    config = _config("network-sphere", tmp_path, max_iterations=3, log_every=1)
    config["data"]["options"]["half_width"] = 2
    result = pipelines.run_pipeline(config)
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["model"] == {
        "type": "NeuralNetwork",
        "norm_weight": 0.0,
        "layer_sizes": [6, 2],
        "activation": "logistic",
        "parameter_shapes": [[2, 7]],
        "parameter_count": 14,
    }
    assert manifest["dataset"]["name"] == "sphere"
    assert manifest["dataset"]["examples"] == 64
    assert manifest["dataset"]["standardized"] is True
    assert manifest["training"]["rate"] == 1.0
    assert manifest["training"]["iterations"] == 3
    assert manifest["training"]["phases"] == ["train"]


def test_autoencoder_reports_reconstruction_error(tmp_path):
    config = _config("autoencoder-diagonal", tmp_path, max_iterations=20, log_every=5)
    config["train"]["pretrain"] = {"rate": 1.0, "max_iterations": 5}
    result = pipelines.run_pipeline(config)
    assert "cost" not in result.final
    assert result.final["mse"] >= 0.0

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    train = [r for r in records if r["phase"] == "train"]
    assert all(r["cost"] >= 0.0 for r in train)
    assert train[-1]["cost"] == pytest.approx(result.final["mse"])

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["model"]["layer_sizes"] == [2, 1, 2]
    assert manifest["model"]["pretrained_layers"] == 1
    assert manifest["training"]["phases"] == ["pretrain-0", "train"]
