"""Reporting utilities for scratchnet."""

from .artifacts import write_manifest
from .ascii import render_confidence, render_image
from .metrics import CsvSink, JsonlSink, ProgressPrinter
from .plots import PlotAdapter

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "ProgressPrinter",
    "render_confidence",
    "render_image",
    "write_manifest",
]
