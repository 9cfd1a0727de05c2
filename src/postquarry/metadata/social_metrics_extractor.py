"""
Social Metrics Extractor - Engagement Counters

Extracts reply, repost, like, bookmark and view counts. Each counter is
resolved independently from label-style strings ("48 replies",
"1.2K Likes") and normalized with ``parse_metric_count``; a missing counter
is ``None`` and never blocks the record.

The metrics field counts as extracted when any of reply, repost or like
resolved; its tier is the best tier among those three.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from bs4 import Tag

from postquarry.extractor.confidence_scorer import parse_metric_count
from postquarry.extractor.models import FieldExtractionResult, FieldReport, MetricsData, Tier
from postquarry.extractor.selectors import BOOKMARK_COUNT, LIKE_COUNT, REPLY_COUNT, REPOST_COUNT, VIEW_COUNT

from .base import FieldExtractor, field_warnings

# (MetricsData attribute, registry config, always shown on the post)
COUNTERS = (
    ("reply_count", REPLY_COUNT, True),
    ("repost_count", REPOST_COUNT, True),
    ("like_count", LIKE_COUNT, True),
    ("bookmark_count", BOOKMARK_COUNT, False),
    ("view_count", VIEW_COUNT, False),
)

CORE_COUNTERS = ("reply_count", "repost_count", "like_count")


class SocialMetricsExtractor(FieldExtractor):
    field_name = "metrics"

    def extract(self, root: Tag) -> FieldReport[MetricsData]:
        warnings: List[str] = []
        counts: Dict[str, Optional[int]] = {}
        results: Dict[str, FieldExtractionResult[Any]] = {}

        for attr, config, always_shown in COUNTERS:
            result = self.chain.resolve(config, root)
            results[attr] = result
            counts[attr] = parse_metric_count(result.value)
            warnings.extend(field_warnings(f"metrics.{attr}", result, optional=not always_shown))

        core_tiers = [results[attr].tier for attr in CORE_COUNTERS if counts[attr] is not None]
        tier: Optional[Tier] = min(core_tiers, key=lambda t: t.rank) if core_tiers else None

        return FieldReport(
            name=self.field_name,
            value=MetricsData(**counts),
            extracted=tier is not None,
            tier=tier,
            warnings=tuple(warnings),
        )
