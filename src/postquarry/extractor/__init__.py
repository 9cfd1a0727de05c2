"""
PostQuarry Extraction Engine - Tiered Query Strategies

Resolves each record field against a live document tree through up to three
ordered query strategies:
1. Primary: explicit test identifiers (data-testid)
2. Secondary: accessibility markers (aria-label, role)
3. Tertiary: structural position

Features:
- Read-only query strategy registry, one ExtractionConfig per field
- Fallback resolution with per-tier warnings (single and plural variants)
- Weighted confidence aggregation with separate embedded-record weights
- Human-formatted counter parsing ("1.2K", "10,500", "3M")
- Bounded "Show more" content expansion
"""

from .confidence_scorer import ConfidenceScorer, aggregate, meets_minimum_confidence, parse_metric_count, tier_label
from .expansion import ContentExpansion, ExpansionOutcome, find_show_more_control
from .fallback_chain import FallbackChain
from .models import (
    AuthorData,
    ErrorCode,
    ExtractionConfig,
    ExtractionError,
    ExtractionMetadata,
    ExtractionRecord,
    ExtractionResult,
    FieldExtractionResult,
    FieldOutcome,
    FieldReport,
    LinkCardData,
    MediaData,
    MediaKind,
    MetricsData,
    QueryStrategy,
    RecordTypeFlags,
    Tier,
)
from .protocols import ContentExpander, DiagnosticsSink
from .selectors import SELECTOR_REGISTRY, get_config

__all__ = [
    # Engine
    "FallbackChain",
    "ConfidenceScorer",
    "ContentExpansion",
    "ExpansionOutcome",
    "find_show_more_control",
    "aggregate",
    "tier_label",
    "meets_minimum_confidence",
    "parse_metric_count",
    # Registry
    "SELECTOR_REGISTRY",
    "get_config",
    # Seams
    "ContentExpander",
    "DiagnosticsSink",
    # Models
    "Tier",
    "ErrorCode",
    "MediaKind",
    "QueryStrategy",
    "ExtractionConfig",
    "FieldExtractionResult",
    "FieldOutcome",
    "FieldReport",
    "AuthorData",
    "MetricsData",
    "MediaData",
    "LinkCardData",
    "RecordTypeFlags",
    "ExtractionMetadata",
    "ExtractionRecord",
    "ExtractionError",
    "ExtractionResult",
]
