"""
Shared test configuration for PostQuarry.

Fixtures parse HTML snapshots of rendered posts into BeautifulSoup record
roots and build orchestrators with injected, deterministic collaborators.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from postquarry.config import ExtractionSettings
from postquarry.extractor.fallback_chain import FallbackChain
from postquarry.metadata import RecordExtractor
from postquarry.observability.metrics import ExtractionMetrics

from tests.helpers.posts import (
    EMPTY_POST_HTML,
    FIXED_NOW,
    FULL_POST_HTML,
    GLYPH_POST_HTML,
    QUOTE_POST_HTML,
    SECONDARY_HANDLE_HTML,
    make_root,
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: End-to-end extraction over HTML snapshots")


# ============================================================================
# Collaborators
# ============================================================================


@pytest.fixture
def diagnostics() -> MagicMock:
    """A diagnostics sink that records every event."""
    return MagicMock(name="diagnostics")


@pytest.fixture
def chain(diagnostics) -> FallbackChain:
    return FallbackChain(diagnostics)


@pytest.fixture
def metrics() -> ExtractionMetrics:
    return ExtractionMetrics(CollectorRegistry())


@pytest.fixture
def extractor(diagnostics, metrics) -> RecordExtractor:
    return RecordExtractor(
        settings=ExtractionSettings(),
        diagnostics=diagnostics,
        metrics=metrics,
        now=lambda: FIXED_NOW,
    )


# ============================================================================
# Record roots
# ============================================================================


@pytest.fixture
def full_post():
    return make_root(FULL_POST_HTML)


@pytest.fixture
def glyph_post():
    return make_root(GLYPH_POST_HTML)


@pytest.fixture
def secondary_handle_post():
    return make_root(SECONDARY_HANDLE_HTML)


@pytest.fixture
def quote_post():
    return make_root(QUOTE_POST_HTML)


@pytest.fixture
def empty_post():
    return make_root(EMPTY_POST_HTML)
