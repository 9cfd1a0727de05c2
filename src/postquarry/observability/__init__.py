"""Structured logging and Prometheus metrics for the extraction engine."""

from __future__ import annotations

from .logging import configure_logging
from .metrics import ExtractionMetrics, export_prometheus

__all__ = ["configure_logging", "ExtractionMetrics", "export_prometheus"]
