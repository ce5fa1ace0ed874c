"""Reporting utilities for ModelFit."""

from .artifacts import config_hash, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import compute_auc, write_summary

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "compute_auc",
    "config_hash",
    "write_manifest",
    "write_summary",
]
