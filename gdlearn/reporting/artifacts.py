"""Run manifest: which model was trained, on what data, and for how long."""

from __future__ import annotations

import json
import math
import time
from pathlib import Path
from typing import Any, Dict, Mapping


def describe_model(model: Any) -> Dict[str, object]:
    """Architecture record of a regression, network or autoencoder."""

    card: Dict[str, object] = {"type": type(model).__name__, "norm_weight": model.norm_weight}
    if hasattr(model, "weights"):
        shapes = [list(w.shape) for w in model.weights]
        card["layer_sizes"] = list(model.layer_sizes)
        card["activation"] = model.activation.name
        if hasattr(model, "trained"):
            card["pretrained_layers"] = int(model.trained)
    else:
        shapes = [list(model.parameters.shape)]
    card["parameter_shapes"] = shapes
    card["parameter_count"] = sum(math.prod(shape) for shape in shapes)
    return card


def write_manifest(
    path: str | Path,
    *,
    model: Any,
    dataset: Mapping[str, object],
    training: Mapping[str, object],
) -> str:
    """Write ``manifest.json`` describing the trained model and its run."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "model": describe_model(model),
        "dataset": dict(dataset),
        "training": dict(training),
    }
    path.write_text(json.dumps(manifest, indent=2, sort_keys=True))
    return str(path)


__all__ = ["describe_model", "write_manifest"]
