"""Reporting utilities for gdlearn runs."""

from .artifacts import describe_model, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["CsvSink", "JsonlSink", "PlotAdapter", "describe_model", "write_manifest", "write_summary"]
