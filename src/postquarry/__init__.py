"""
PostQuarry - Resilient structured-record extraction from rendered social posts.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .extractor import ExtractionRecord, ExtractionResult
from .metadata import RecordExtractor

__all__ = ["__version__", "Config", "ExtractionRecord", "ExtractionResult", "RecordExtractor"]
