"""
Record Extractor - Extraction Orchestrator

Drives every field extractor against one record root and assembles the
final ``ExtractionRecord``:

1. Refuse roots at or beyond the maximum embedding depth
2. Expand truncated text ("Show more")
3. Resolve every field, collecting per-field outcomes and warnings
4. Recurse into an embedded record, if one is detected
5. Aggregate confidence (embedded weights below the top level)
6. Attach diagnostic metadata

Maximum depth is the only hard failure. Every other problem degrades the
record field by field; an unexpected exception is converted into an
``EXTRACTION_FAILED`` result and never reaches the caller.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import structlog
from bs4 import Tag

from postquarry.config.config import ExtractionSettings
from postquarry.extractor.expansion import ContentExpansion
from postquarry.extractor.fallback_chain import FallbackChain
from postquarry.extractor.models import (
    AuthorData,
    ErrorCode,
    ExtractionError,
    ExtractionMetadata,
    ExtractionRecord,
    ExtractionResult,
    FieldReport,
    MetricsData,
    RecordTypeFlags,
)
from postquarry.extractor.parsing import format_instant
from postquarry.extractor.protocols import ContentExpander, DiagnosticsSink
from postquarry.observability.metrics import ExtractionMetrics

from .author_extractor import AuthorExtractor
from .base import FieldExtractor
from .date_extractor import DateExtractor
from .link_card_extractor import LinkCardExtractor
from .media_extractor import MediaExtractor
from .record_type_extractor import RecordTypeExtractor, locate_embedded_root
from .social_metrics_extractor import SocialMetricsExtractor
from .text_extractor import TextExtractor
from .url_extractor import UrlExtractor


# Fallback for failures of the injected sinks themselves
log = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordExtractor:
    """
    Entry point of the extraction engine.

    Holds only read-only collaborators; all per-call state (warnings, field
    reports, depth) lives in locals, so one instance may be reused for any
    number of records.
    """

    def __init__(
        self,
        settings: Optional[ExtractionSettings] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
        expander: Optional[ContentExpander] = None,
        metrics: Optional[ExtractionMetrics] = None,
        *,
        timer: Callable[[], float] = time.perf_counter,
        now: Callable[[], datetime] = _utc_now,
        expansion_clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or ExtractionSettings()
        self.diagnostics = diagnostics or structlog.get_logger("postquarry.extractor").bind(
            component="RecordExtractor"
        )
        self.metrics = metrics
        self.scorer = self.settings.confidence.build_scorer()
        self._timer = timer
        self._now = now

        expansion = self.settings.expansion
        self.expansion: Optional[ContentExpansion] = None
        if expansion.enabled:
            self.expansion = ContentExpansion(
                expander,
                timeout_ms=expansion.timeout_ms,
                poll_interval_ms=expansion.poll_interval_ms,
                clock=expansion_clock,
                sleep=sleep,
            )

        chain = FallbackChain(self.diagnostics)
        self.field_extractors: List[FieldExtractor] = [
            TextExtractor(chain),
            AuthorExtractor(chain),
            DateExtractor(chain),
            UrlExtractor(chain),
            SocialMetricsExtractor(chain),
            MediaExtractor(chain),
            LinkCardExtractor(chain),
            RecordTypeExtractor(chain),
        ]
        self.field_order = tuple(extractor.field_name for extractor in self.field_extractors)

    def extract_record(self, root: Tag, depth: int = 0) -> ExtractionResult:
        """
        Extract one record, recursing into at most one embedded record.

        Args:
            root: Container node of the record
            depth: Embedding depth of ``root``; 0 for a top-level record

        Returns:
            ExtractionResult holding either the record or an error
        """
        if depth >= self.settings.max_depth:
            self._observe(
                self.diagnostics.warning,
                "Maximum embedding depth reached",
                depth=depth,
                max_depth=self.settings.max_depth,
            )
            error = ExtractionError(
                code=ErrorCode.MAX_DEPTH_EXCEEDED,
                message="Maximum extraction depth exceeded",
                context={"depth": depth, "max_depth": self.settings.max_depth},
            )
            if self.metrics is not None:
                self._observe(self.metrics.observe_failure, error.code)
            return ExtractionResult.fail(error)

        start_time = self._timer()
        warnings: List[str] = []
        reports: Dict[str, FieldReport[Any]] = {}

        try:
            if self.expansion is not None:
                warnings.extend(self.expansion.expand(root).warnings)

            for extractor in self.field_extractors:
                report = extractor.extract(root)
                reports[report.name] = report
                warnings.extend(report.warnings)

            flags: RecordTypeFlags = reports["record_type"].value
            embedded = self._extract_embedded(root, depth, warnings) if flags.is_embedding else None

            confidence = self.scorer.aggregate(
                (report.outcome() for report in reports.values()),
                is_embedded=depth > 0,
            )
            elapsed_ms = self._elapsed_ms(start_time)

            record = ExtractionRecord(
                text=reports["text"].value,
                author=reports["author"].value or AuthorData(),
                timestamp=reports["timestamp"].value,
                metrics=reports["metrics"].value or MetricsData(),
                media=reports["media"].value,
                link_card=reports["link_card"].value,
                record_type=flags,
                url=reports["url"].value,
                embedded=embedded,
                metadata=ExtractionMetadata(
                    confidence=confidence,
                    captured_at=format_instant(self._now()),
                    dominant_tier=self.scorer.tier_label(confidence),
                    warnings=tuple(warnings),
                    elapsed_ms=elapsed_ms,
                ),
            )

        except Exception as e:
            elapsed_ms = self._elapsed_ms(start_time)
            failed_fields = tuple(
                name for name in self.field_order if name not in reports or not reports[name].extracted
            )
            self._observe(
                self.diagnostics.error,
                "Record extraction failed",
                depth=depth,
                error=str(e),
                error_type=type(e).__name__,
                failed_fields=list(failed_fields),
                elapsed_ms=elapsed_ms,
            )
            error = ExtractionError(
                code=ErrorCode.EXTRACTION_FAILED,
                message=str(e) or type(e).__name__,
                failed_fields=failed_fields,
                context={"depth": depth, "elapsed_ms": elapsed_ms, "warnings": list(warnings)},
            )
            if self.metrics is not None:
                self._observe(self.metrics.observe_failure, error.code, elapsed_ms)
            return ExtractionResult.fail(error)

        if self.metrics is not None:
            for report in reports.values():
                self._observe(self.metrics.observe_field, report)
            self._observe(self.metrics.observe_record, record, depth)

        self._observe(
            self.diagnostics.debug,
            "Record extracted",
            depth=depth,
            confidence=record.metadata.confidence,
            dominant_tier=record.metadata.dominant_tier.value,
            warnings=len(record.metadata.warnings),
            elapsed_ms=record.metadata.elapsed_ms,
        )
        return ExtractionResult.ok(record)

    def _extract_embedded(self, root: Tag, depth: int, warnings: List[str]) -> Optional[ExtractionRecord]:
        embedded_root = locate_embedded_root(root, self.settings.max_embedded_candidates)
        if embedded_root is None:
            warnings.append("embedded: embedding detected but no embedded record container found")
            return None

        result = self.extract_record(embedded_root, depth + 1)
        if result.success or result.error is None:
            return result.data

        warnings.append(f"embedded: {result.error.code.value}: {result.error.message}")
        return None

    def _observe(self, emit: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Call a diagnostics or metrics sink; a failing sink never fails the extraction."""
        try:
            emit(*args, **kwargs)
        except Exception as e:
            log.warning("Extraction sink %s failed: %s", getattr(emit, "__name__", emit), e, exc_info=True)

    def _elapsed_ms(self, start_time: float) -> float:
        return round((self._timer() - start_time) * 1000, 3)
