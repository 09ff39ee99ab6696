"""Deterministic run summarisation helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

import numpy as np


def _extract_numeric(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[float]]:
    metrics: dict[str, list[float]] = {}
    for record in records:
        for key, value in record.items():
            if key == "iteration":
                continue
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                metrics.setdefault(key, []).append(float(value))
    return metrics


def _build_summary(records: list[Mapping[str, object]]) -> Mapping[str, object]:
    summary_metrics: dict[str, Mapping[str, float]] = {}
    for name, values in _extract_numeric(records).items():
        arr = np.asarray(values, dtype=np.float64)
        summary_metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "last": float(arr[-1]),
        }
    phases = sorted({str(r["phase"]) for r in records if "phase" in r})
    return {
        "version": 1,
        "records": len(records),
        "phases": phases,
        "metrics": summary_metrics,
    }


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path) -> str:
    """Write a deterministic summary of ``metrics_jsonl`` and return its path."""

    metrics_path = Path(metrics_jsonl)
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    records: list[Mapping[str, object]] = []
    if metrics_path.exists():
        for line in metrics_path.read_text().splitlines():
            line = line.strip()
            if not line:
                continue
            records.append(json.loads(line))

    out_path.write_text(json.dumps(_build_summary(records), sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["write_summary"]
