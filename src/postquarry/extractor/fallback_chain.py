"""
Tiered fallback resolution over the query strategy registry.

Each field is resolved by trying its strategies in order
(primary -> secondary -> tertiary) and stopping at the first tier that
locates a node, extracts a non-empty value and passes validation.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

import structlog
from bs4 import Tag

from .models import ExtractionConfig, FieldExtractionResult, QueryStrategy
from .protocols import DiagnosticsSink


class FallbackChain:
    """
    Resolves fields against a root node using tiered query strategies.

    The chain holds no per-call state; warnings are accumulated in locals and
    returned inside the result.
    """

    def __init__(self, diagnostics: Optional[DiagnosticsSink] = None) -> None:
        self.diagnostics = diagnostics or structlog.get_logger("postquarry.extractor").bind(
            component="FallbackChain"
        )

    def resolve(self, config: ExtractionConfig, root: Tag) -> FieldExtractionResult[Any]:
        """Return the value of the first tier that survives locate/extract/validate."""
        warnings: List[str] = []

        for strategy in config.tiers():
            try:
                value, failure = self._try_single(strategy, root)
            except Exception as e:
                warnings.append(self._report_fault(strategy, e))
                continue
            if failure is not None:
                warnings.append(failure)
                continue

            return FieldExtractionResult(
                value=value,
                tier=strategy.tier,
                confidence=strategy.confidence,
                warnings=tuple(warnings),
            )

        return FieldExtractionResult(value=None, tier=None, confidence=0.0, warnings=tuple(warnings))

    def resolve_all(self, config: ExtractionConfig, root: Tag) -> FieldExtractionResult[Tuple[Any, ...]]:
        """Collect every valid value at the first tier yielding at least one.

        Values from different tiers are never mixed. When every tier comes up
        empty the result holds an empty tuple and no tier.
        """
        warnings: List[str] = []

        for strategy in config.tiers():
            try:
                values, failure = self._try_multiple(strategy, root)
            except Exception as e:
                warnings.append(self._report_fault(strategy, e))
                continue
            if failure is not None:
                warnings.append(failure)
                continue

            return FieldExtractionResult(
                value=values,
                tier=strategy.tier,
                confidence=strategy.confidence,
                warnings=tuple(warnings),
            )

        return FieldExtractionResult(value=(), tier=None, confidence=0.0, warnings=tuple(warnings))

    def _try_single(self, strategy: QueryStrategy, root: Tag) -> Tuple[Any, Optional[str]]:
        """Value of one tier, or a warning describing why the tier failed."""
        label = strategy.tier.value
        node = root.select_one(strategy.query)
        if node is None:
            return None, f"{label} tier query matched nothing: {strategy.query}"

        value = strategy.extract(node)
        if value is None or value == "":
            return None, f"{label} tier extracted no value: {strategy.query}"

        if strategy.validate is not None and not strategy.validate(value):
            return None, f"{label} tier value rejected by validator: {strategy.query} -> {value!r}"

        return value, None

    def _try_multiple(self, strategy: QueryStrategy, root: Tag) -> Tuple[Tuple[Any, ...], Optional[str]]:
        label = strategy.tier.value
        nodes = root.select(strategy.query)
        if not nodes:
            return (), f"{label} tier query matched nothing: {strategy.query}"

        values = []
        for node in nodes:
            value = strategy.extract(node)
            if value is None or value == "":
                continue
            if strategy.validate is not None and not strategy.validate(value):
                continue
            values.append(value)

        if not values:
            return (), (
                f"{label} tier matched {len(nodes)} node(s) but none yielded a valid value: {strategy.query}"
            )

        return tuple(values), None

    def _report_fault(self, strategy: QueryStrategy, error: Exception) -> str:
        self.diagnostics.warning(
            "Strategy raised during extraction",
            tier=strategy.tier.value,
            query=strategy.query,
            error=str(error),
            error_type=type(error).__name__,
        )
        return f"{strategy.tier.value} tier raised {type(error).__name__}: {strategy.query}"
