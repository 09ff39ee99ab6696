"""Metrics sinks that record the progress of gradient descent."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Mapping

from ..core.types import Params

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..core.descent import GradientDescent

CostFn = Callable[[Params], float]

CSV_FIELDS = ("iteration", "phase", "step_norm", "cost")


class EngineSink:
    """Base for sinks usable directly as an engine ``each_iteration`` observer.

    Called with the live engine, the sink turns its state into a metrics
    record every ``every`` iterations and hands it to :meth:`on_step`. Callers
    that already computed metrics can call :meth:`on_step` themselves.
    """

    def __init__(self, *, cost_fn: CostFn | None = None, every: int = 1, phase: str = "train"):
        if every < 1:
            raise ValueError("every must be >= 1")
        self.cost_fn = cost_fn
        self.every = int(every)
        self.phase = phase

    def metrics(self, engine: "GradientDescent") -> Dict[str, float]:
        record = {"step_norm": float(engine.step_norm)}
        if self.cost_fn is not None:
            record["cost"] = float(self.cost_fn(engine.x))
        return record

    def __call__(self, engine: "GradientDescent") -> None:
        if engine.iterations % self.every == 0:
            self.on_step(engine.iterations, self.metrics(engine))

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        raise NotImplementedError


class JsonlSink(EngineSink):
    """Append-only JSONL writer for metrics."""

    def __init__(
        self,
        path: str | Path,
        cost_fn: CostFn | None = None,
        every: int = 1,
        *,
        phase: str = "train",
    ) -> None:
        super().__init__(cost_fn=cost_fn, every=every, phase=phase)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        record: Dict[str, object] = {"iteration": int(step), "phase": self.phase}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")


class CsvSink(EngineSink):
    """Write metrics to CSV with a stable schema."""

    def __init__(
        self,
        path: str | Path,
        cost_fn: CostFn | None = None,
        every: int = 1,
        *,
        phase: str = "train",
    ) -> None:
        super().__init__(cost_fn=cost_fn, every=every, phase=phase)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        row = {field: "" for field in CSV_FIELDS}
        row.update({"iteration": int(step), "phase": self.phase})
        row.update({k: float(v) for k, v in metrics.items() if k in CSV_FIELDS})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=CSV_FIELDS)
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


__all__ = ["CSV_FIELDS", "CostFn", "CsvSink", "EngineSink", "JsonlSink"]
