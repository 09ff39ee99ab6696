"""Command line entry point for gdlearn training runs."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from gdlearn.training import pipelines

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _format_result(result) -> str:
    payload = {
        "iterations": result.iterations,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "final": result.final,
    }
    if result.summary_path:
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="linear-line",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--rate", type=float, help="Override the learning rate")
    parser.add_argument(
        "--max-iterations", type=int, help="Override the iteration ceiling of the main phase"
    )
    parser.add_argument("--seed", type=int, help="Seed used for parameter initialisation")
    parser.add_argument("--run-dir", type=Path, help="Directory for metrics and artifacts")
    parser.add_argument("--enable-plots", action="store_true", help="Write cost.png to the run dir")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument("--dump-config", type=Path, help="Dump the resolved config to a JSON file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        try:
            import yaml
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")
    if not isinstance(data, dict):
        raise TypeError(f"Config override {path.name} must decode to a mapping")
    return data


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        config = pipelines.merge_config(config, _load_override(args.config))

    train_cfg = config.setdefault("train", {})
    if args.rate is not None:
        train_cfg["rate"] = float(args.rate)
    if args.max_iterations is not None:
        train_cfg["max_iterations"] = int(args.max_iterations)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.run_dir is not None:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level), format=LOG_FORMAT, datefmt=LOG_DATEFMT
    )

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
