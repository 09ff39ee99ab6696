"""Pipeline assembly: presets, model construction and instrumented training runs."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Sequence

import numpy as np

from ..core.halting import HaltFn, any_of, converged, max_iterations, time_limit
from ..core.types import RunResult
from ..data import registry
from ..models import (
    Autoencoder,
    LinearRegression,
    LogisticRegression,
    NeuralNetwork,
    SoftmaxRegression,
)
from ..preprocessing import Preprocessor
from ..reporting.artifacts import describe_model, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "linear-line": {
        "data": {"name": "line", "options": {}},
        "model": {"type": "linear", "norm_weight": 0.0},
        "train": {
            "rate": 0.03,
            "tolerance": 1e-7,
            "max_iterations": 20000,
            "seed": 0,
            "log_every": 1000,
            "run_dir": "runs/linear-line",
            "enable_plots": False,
        },
    },
    "logistic-threshold": {
        "data": {"name": "threshold", "options": {}},
        "model": {"type": "logistic", "norm_weight": 0.5},
        "train": {
            "rate": 0.05,
            "tolerance": 1e-7,
            "max_iterations": 20000,
            "seed": 0,
            "log_every": 1000,
            "run_dir": "runs/logistic-threshold",
            "enable_plots": False,
        },
    },
    "softmax-bands": {
        "data": {"name": "bands", "options": {"n_points": 100, "cut": 25.0}},
        "model": {"type": "softmax", "norm_weight": 0.0},
        "train": {
            "rate": 1.0,
            "max_iterations": 10000,
            "seed": 0,
            "log_every": 500,
            "run_dir": "runs/softmax-bands",
            "enable_plots": False,
        },
    },
    "network-sphere": {
        "data": {
            "name": "sphere",
            "options": {"half_width": 5, "offset": 0.5, "radius": 4.0},
            "standardize": True,
        },
        "model": {"type": "network", "hidden": [], "activation": "logistic", "norm_weight": 0.0},
        "train": {
            "rate": 1.0,
            "max_iterations": 300,
            "seed": 0,
            "log_every": 20,
            "run_dir": "runs/network-sphere",
            "enable_plots": False,
        },
    },
    "autoencoder-diagonal": {
        "data": {"name": "diagonal", "options": {"n_points": 11}},
        "model": {
            "type": "autoencoder",
            "layers": [1],
            "activation": "logistic",
            "norm_weight": 0.0,
        },
        "train": {
            "rate": 1.0,
            "max_iterations": 1000,
            "pretrain": {"rate": 1.0, "max_iterations": 1000},
            "seed": 0,
            "log_every": 100,
            "run_dir": "runs/autoencoder-diagonal",
            "enable_plots": False,
        },
    },
}

MODEL_TYPES = ("linear", "logistic", "softmax", "network", "autoencoder")
_CLASSIFICATION_TASKS = {"binary", "multilabel"}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Mapping[str, object]:
    try:
        return deepcopy(_PRESETS[name])
    except KeyError:
        raise KeyError(f"Unknown preset: {name}. Available: {sorted(_PRESETS)}") from None


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""

    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_halt(train_cfg: Mapping[str, object]) -> HaltFn | None:
    """Combine the configured stop rules; ``None`` leaves the model's default."""

    predicates: List[HaltFn] = []
    if train_cfg.get("max_iterations") is not None:
        predicates.append(max_iterations(int(train_cfg["max_iterations"])))
    if train_cfg.get("tolerance") is not None:
        predicates.append(converged(float(train_cfg["tolerance"])))
    if train_cfg.get("time_limit") is not None:
        predicates.append(time_limit(float(train_cfg["time_limit"])))
    if not predicates:
        return None
    if len(predicates) == 1:
        return predicates[0]
    return any_of(*predicates)


def build_model(model_cfg: Mapping[str, object], xs: np.ndarray, ys: np.ndarray, seed: int | None):
    kind = str(model_cfg.get("type", ""))
    norm_weight = float(model_cfg.get("norm_weight", 0.0))
    if kind == "linear":
        return LinearRegression(xs, ys, norm_weight, seed=seed)
    if kind == "logistic":
        return LogisticRegression(xs, ys, norm_weight, seed=seed)
    if kind == "softmax":
        return SoftmaxRegression(xs, ys, norm_weight, seed=seed)
    activation = str(model_cfg.get("activation", "logistic"))
    if kind == "network":
        hidden = [int(h) for h in model_cfg.get("hidden", [])]
        return NeuralNetwork(hidden, xs, ys, norm_weight, activation=activation, seed=seed)
    if kind == "autoencoder":
        layers = [int(h) for h in model_cfg.get("layers", [])]
        return Autoencoder(layers, xs, norm_weight, activation=activation, seed=seed)
    raise KeyError(f"Unknown model type: {kind!r}. Available: {list(MODEL_TYPES)}")


class _ProgressRecorder:
    """Engine observer that fans metrics out to the sinks and the log.

    Metrics are computed once per logged iteration, so an expensive cost
    function is only evaluated every ``every`` iterations.
    """

    def __init__(self, sinks: Sequence[Any], every: int) -> None:
        if every < 1:
            raise ValueError("log_every must be >= 1")
        self.sinks = list(sinks)
        self.every = every
        self.phase = "train"
        self.phases: List[str] = []
        self.cost_fn: Callable[[Any], float] | None = None
        self._engine = None
        self._last: int | None = None

    def start_phase(self, phase: str, cost_fn: Callable[[Any], float] | None) -> None:
        self.phase = phase
        self.phases.append(phase)
        self.cost_fn = cost_fn
        self._engine = None
        self._last = None
        for sink in self.sinks:
            sink.phase = phase

    def __call__(self, engine) -> None:
        self._engine = engine
        if engine.iterations % self.every == 0:
            self._record(engine)

    def _record(self, engine) -> None:
        metrics = {"step_norm": float(engine.step_norm)}
        if self.cost_fn is not None:
            metrics["cost"] = float(self.cost_fn(engine.x))
        for sink in self.sinks:
            sink.on_step(engine.iterations, metrics)
        self._last = engine.iterations
        logger.info(
            "[%s] iteration %d: %s",
            self.phase,
            engine.iterations,
            ", ".join(f"{k}={v:.6g}" for k, v in metrics.items()),
        )

    def finish_phase(self) -> int:
        """Record the final iterate of the phase and return its step count."""

        engine = self._engine
        if engine is None:
            return 0
        if self._last != engine.iterations:
            self._record(engine)
        return int(engine.iterations)


def reconstruction_error(model: NeuralNetwork) -> Callable[[Sequence[np.ndarray]], float]:
    """Mean squared difference between the network outputs and its targets."""

    targets = np.asarray(model.ys, dtype=np.float64)

    def mse(weights: Sequence[np.ndarray]) -> float:
        outputs = np.vstack([model.evaluate(weights, x) for x in model.xs])
        return float(np.mean((outputs - targets.reshape(outputs.shape)) ** 2))

    return mse


def _progress_cost(model, task_type: str) -> Callable[[Any], float]:
    # Cross-entropy is only meaningful for targets in [0, 1].
    if task_type == "reconstruction" and isinstance(model, NeuralNetwork):
        return reconstruction_error(model)
    return model.cost


def _train(
    model,
    train_cfg: Mapping[str, object],
    recorder: _ProgressRecorder,
    task_type: str = "regression",
) -> int:
    rate = float(train_cfg.get("rate", 0.01))
    halt = build_halt(train_cfg)
    total = 0

    if isinstance(model, Autoencoder) and train_cfg.get("pretrain"):
        pre_cfg = train_cfg["pretrain"]
        pre_cfg = pre_cfg if isinstance(pre_cfg, Mapping) else {}
        pre_rate = float(pre_cfg.get("rate", rate))
        while model.trained < len(model.layers):
            layer = model.trained
            recorder.start_phase(f"pretrain-{layer}", None)
            model.pretrain_layer(layer, pre_rate, recorder, build_halt(pre_cfg))
            model.trained += 1
            total += recorder.finish_phase()

    recorder.start_phase("train", _progress_cost(model, task_type))
    if isinstance(model, NeuralNetwork):
        model.train(rate, recorder, halt)
    else:
        model.gradient_descent(rate, recorder, halt)
    return total + recorder.finish_phase()


def evaluate(model, xs: np.ndarray, ys: np.ndarray, task_type: str) -> Dict[str, float]:
    """Final quality metrics of a trained model on its training data."""

    if isinstance(model, SoftmaxRegression):
        return {
            "cost": float(model.cost(model.parameters)),
            "accuracy": float(np.mean(model.predict_class(xs) == ys)),
        }
    if isinstance(model, LogisticRegression):
        predicted = (model.predict(xs) >= 0.5).astype(np.float64)
        return {
            "cost": float(model.cost(model.parameters)),
            "accuracy": float(np.mean(predicted == ys)),
        }
    if isinstance(model, LinearRegression):
        residual = model.predict(xs) - ys
        return {"cost": float(model.cost(model.parameters)), "mse": float(np.mean(residual**2))}

    outputs = np.vstack([model.evaluate(model.weights, x) for x in xs])
    targets = np.asarray(ys, dtype=np.float64).reshape(outputs.shape)
    if task_type == "reconstruction":
        return {"mse": float(np.mean((outputs - targets) ** 2))}
    final = {"cost": float(model.cost(model.weights))}
    if task_type in _CLASSIFICATION_TASKS:
        final["accuracy"] = float(np.mean(np.all(np.round(outputs) == targets, axis=1)))
    else:
        final["mse"] = float(np.mean((outputs - targets) ** 2))
    return final


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    xs, ys = dataset.xs, dataset.ys
    if data_cfg.get("standardize"):
        prep = Preprocessor(xs).normalize_mean_x().scale_x()
        xs = prep.xs
        if dataset.task_type == "reconstruction":
            ys = xs

    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    model = build_model(model_cfg, xs, ys, seed)

    run_dir = _resolve_run_dir(train_cfg, dataset.name, str(model_cfg.get("type", "model")))
    run_dir.mkdir(parents=True, exist_ok=True)

    _log_startup_summary(dataset=dataset, model=model, train_cfg=train_cfg, run_dir=run_dir)

    jsonl = JsonlSink(run_dir / "metrics.jsonl")
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    recorder = _ProgressRecorder([jsonl, csv_sink, plots], int(train_cfg.get("log_every", 100)))

    started = time.perf_counter()
    iterations = _train(model, train_cfg, recorder, dataset.task_type)
    elapsed = time.perf_counter() - started
    plots.close()

    final = evaluate(model, xs, ys, dataset.task_type)
    final["iterations"] = float(iterations)
    logger.info(
        "Finished %d iterations in %.2fs: %s",
        iterations,
        elapsed,
        ", ".join(f"{k}={v:.6g}" for k, v in final.items()),
    )

    resolved = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        model=model,
        dataset={
            "name": dataset.name,
            "examples": len(dataset),
            "task_type": dataset.task_type,
            "standardized": bool(data_cfg.get("standardize", False)),
            "provenance": dict(dataset.provenance),
        },
        training={
            "rate": float(train_cfg.get("rate", 0.01)),
            "iterations": iterations,
            "phases": recorder.phases,
            "elapsed_seconds": round(elapsed, 3),
        },
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))
    (run_dir / "final.json").write_text(json.dumps(final, indent=2, sort_keys=True))

    return RunResult(
        iterations=iterations,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        final=final,
        model=model,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str, model: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / model


def _log_startup_summary(*, dataset, model, train_cfg: Mapping[str, object], run_dir: Path) -> None:
    logger.info("=== gdlearn run ===")
    logger.info("Dataset       : %s (%d examples, %s)", dataset.name, len(dataset), dataset.task_type)
    logger.info("Model         : %r", model)
    logger.info("Parameters    : %d", describe_model(model)["parameter_count"])
    logger.info("Rate          : %s", train_cfg.get("rate", 0.01))
    logger.info("Max iterations: %s", train_cfg.get("max_iterations", "model default"))
    logger.info("Run dir       : %s", run_dir)
    logger.info("===================")


__all__ = [
    "MODEL_TYPES",
    "build_halt",
    "build_model",
    "evaluate",
    "load_preset",
    "merge_config",
    "presets",
    "reconstruction_error",
    "run_pipeline",
]
