"""
Defines Prometheus metrics for record extraction.

Collectors are registered on an explicitly supplied ``CollectorRegistry``;
by default each ``ExtractionMetrics`` gets a private registry so that the
engine keeps no process-wide state and tests never collide on metric names.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from postquarry.extractor.models import ErrorCode, ExtractionRecord, FieldReport

# Using a 'postquarry' prefix for all custom metrics
METRIC_PREFIX = "postquarry"

DURATION_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
CONFIDENCE_BUCKETS = (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0)


class ExtractionMetrics:
    """Counters and histograms describing extraction outcomes."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.records_total = Counter(
            f"{METRIC_PREFIX}_records_total",
            "Orchestrator invocations by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.field_resolutions_total = Counter(
            f"{METRIC_PREFIX}_field_resolutions_total",
            "Field resolutions by field and winning tier ('none' when every tier failed)",
            ["field", "tier"],
            registry=self.registry,
        )
        self.extraction_duration_seconds = Histogram(
            f"{METRIC_PREFIX}_extraction_duration_seconds",
            "Wall time of one orchestrator invocation, embedded records included",
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )
        self.record_confidence = Histogram(
            f"{METRIC_PREFIX}_record_confidence",
            "Distribution of aggregated record confidence",
            ["embedded"],
            buckets=CONFIDENCE_BUCKETS,
            registry=self.registry,
        )

    def observe_field(self, report: FieldReport) -> None:
        tier = report.tier.value if report.extracted and report.tier is not None else "none"
        self.field_resolutions_total.labels(field=report.name, tier=tier).inc()

    def observe_record(self, record: ExtractionRecord, depth: int) -> None:
        self.records_total.labels(outcome="success").inc()
        self.extraction_duration_seconds.observe(record.metadata.elapsed_ms / 1000.0)
        self.record_confidence.labels(embedded=str(depth > 0).lower()).observe(record.metadata.confidence)

    def observe_failure(self, code: ErrorCode, elapsed_ms: float = 0.0) -> None:
        self.records_total.labels(outcome=code.value.lower()).inc()
        if elapsed_ms:
            self.extraction_duration_seconds.observe(elapsed_ms / 1000.0)


def export_prometheus(metrics: ExtractionMetrics) -> str:
    """Export metrics in Prometheus text format."""
    return generate_latest(metrics.registry).decode("utf-8")
