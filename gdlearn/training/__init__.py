"""Presets and instrumented training pipelines."""

from .pipelines import load_preset, merge_config, presets, run_pipeline

__all__ = ["load_preset", "merge_config", "presets", "run_pipeline"]
