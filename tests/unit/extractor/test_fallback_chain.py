"""
Unit tests for FallbackChain tier resolution.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from postquarry.extractor.fallback_chain import FallbackChain
from postquarry.extractor.models import ExtractionConfig, QueryStrategy, Tier
from postquarry.extractor.parsing import plain_text

from tests.helpers.posts import make_root

pytestmark = pytest.mark.unit

ROOT_HTML = """
<article>
  <span class="primary">from primary</span>
  <span class="secondary">from secondary</span>
  <span class="tertiary">from tertiary</span>
  <span class="empty"></span>
  <ul><li>one</li><li>two</li><li>bad</li></ul>
  <ol><li>x</li><li>y</li></ol>
</article>
"""


@pytest.fixture
def root():
    return make_root(ROOT_HTML)


def _config(primary, secondary=None, tertiary=None) -> ExtractionConfig:
    return ExtractionConfig(primary=primary, secondary=secondary, tertiary=tertiary)


def _text(tier: Tier, query: str, confidence: float, **kwargs) -> QueryStrategy:
    return QueryStrategy(query=query, extract=plain_text, confidence=confidence, tier=tier, **kwargs)


class TestResolve:
    def test_primary_wins_without_touching_later_tiers(self, chain, root):
        secondary_extract = MagicMock(return_value="unused")
        tertiary_extract = MagicMock(return_value="unused")
        config = _config(
            _text(Tier.PRIMARY, "span.primary", 0.95),
            QueryStrategy("span.secondary", secondary_extract, 0.75, Tier.SECONDARY),
            QueryStrategy("span.tertiary", tertiary_extract, 0.5, Tier.TERTIARY),
        )

        result = chain.resolve(config, root)

        assert result.value == "from primary"
        assert result.tier is Tier.PRIMARY
        assert result.confidence == 0.95
        assert result.warnings == ()
        secondary_extract.assert_not_called()
        tertiary_extract.assert_not_called()

    def test_missing_node_falls_through_with_warning(self, chain, root):
        config = _config(_text(Tier.PRIMARY, "span.absent", 0.95), _text(Tier.SECONDARY, "span.secondary", 0.75))

        result = chain.resolve(config, root)

        assert result.value == "from secondary"
        assert result.tier is Tier.SECONDARY
        assert result.confidence == 0.75
        assert result.warnings == ("primary tier query matched nothing: span.absent",)

    def test_empty_value_falls_through(self, chain, root):
        config = _config(_text(Tier.PRIMARY, "span.empty", 0.95), _text(Tier.SECONDARY, "span.secondary", 0.75))

        result = chain.resolve(config, root)

        assert result.tier is Tier.SECONDARY
        assert result.warnings == ("primary tier extracted no value: span.empty",)

    def test_validator_rejection_falls_through(self, chain, root):
        config = _config(
            _text(Tier.PRIMARY, "span.primary", 0.95, validate=lambda v: " " not in v),
            _text(Tier.SECONDARY, "li", 0.75),
        )

        result = chain.resolve(config, root)

        assert result.value == "one"
        assert result.warnings == (
            "primary tier value rejected by validator: span.primary -> 'from primary'",
        )

    def test_tertiary_reached_after_two_failures(self, chain, root):
        config = _config(
            _text(Tier.PRIMARY, "span.absent", 0.95),
            _text(Tier.SECONDARY, "span.empty", 0.75),
            _text(Tier.TERTIARY, "span.tertiary", 0.5),
        )

        result = chain.resolve(config, root)

        assert result.value == "from tertiary"
        assert result.tier is Tier.TERTIARY
        assert len(result.warnings) == 2

    def test_tier_failures_are_returned_not_reported(self, chain, diagnostics, root):
        config = _config(_text(Tier.PRIMARY, "span.absent", 0.95), _text(Tier.SECONDARY, "span.empty", 0.75))

        result = chain.resolve(config, root)

        assert len(result.warnings) == 2
        diagnostics.warning.assert_not_called()

    def test_single_tier_outcome_is_a_value(self, chain, root):
        found = _text(Tier.PRIMARY, "span.primary", 0.95)
        missing = _text(Tier.PRIMARY, "span.absent", 0.95)

        assert chain._try_single(found, root) == ("from primary", None)
        assert chain._try_single(missing, root) == (None, "primary tier query matched nothing: span.absent")
        assert chain._try_multiple(missing, root) == ((), "primary tier query matched nothing: span.absent")

    def test_exhausted_tiers(self, chain, root):
        config = _config(_text(Tier.PRIMARY, "span.absent", 0.95), _text(Tier.SECONDARY, "span.gone", 0.75))

        result = chain.resolve(config, root)

        assert result.value is None
        assert result.tier is None
        assert result.confidence == 0.0
        assert not result.extracted
        assert len(result.warnings) == 2

    def test_raising_extract_is_contained(self, chain, diagnostics, root):
        config = _config(
            QueryStrategy("span.primary", MagicMock(side_effect=AttributeError("gone")), 0.95, Tier.PRIMARY),
            _text(Tier.SECONDARY, "span.secondary", 0.75),
        )

        result = chain.resolve(config, root)

        assert result.value == "from secondary"
        assert result.warnings == ("primary tier raised AttributeError: span.primary",)
        diagnostics.warning.assert_called_once()
        assert diagnostics.warning.call_args.kwargs["tier"] == "primary"
        assert diagnostics.warning.call_args.kwargs["error_type"] == "AttributeError"

    def test_raising_validator_is_contained(self, chain, root):
        def explode(value):
            raise TypeError("bad value")

        config = _config(_text(Tier.PRIMARY, "span.primary", 0.95, validate=explode))

        result = chain.resolve(config, root)

        assert result.value is None
        assert result.warnings == ("primary tier raised TypeError: span.primary",)

    def test_invalid_query_is_contained(self, chain, root):
        config = _config(_text(Tier.PRIMARY, "span[", 0.95), _text(Tier.SECONDARY, "span.secondary", 0.75))

        result = chain.resolve(config, root)

        assert result.value == "from secondary"
        assert result.warnings[0].startswith("primary tier raised")

    def test_default_diagnostics_sink(self, root):
        chain = FallbackChain()

        result = chain.resolve(_config(_text(Tier.PRIMARY, "span.primary", 0.95)), root)

        assert result.value == "from primary"


class TestResolveAll:
    def test_collects_every_valid_value_at_first_tier(self, chain, root):
        config = _config(_text(Tier.PRIMARY, "ul li", 0.95, validate=lambda v: v != "bad"))

        result = chain.resolve_all(config, root)

        assert result.value == ("one", "two")
        assert result.tier is Tier.PRIMARY

    def test_never_mixes_tiers(self, chain, root):
        config = _config(
            _text(Tier.PRIMARY, "ul li", 0.95, validate=lambda v: v == "nothing"),
            _text(Tier.SECONDARY, "ol li", 0.75),
        )

        result = chain.resolve_all(config, root)

        assert result.value == ("x", "y")
        assert result.tier is Tier.SECONDARY
        assert result.warnings == (
            "primary tier matched 3 node(s) but none yielded a valid value: ul li",
        )

    def test_exhausted_tiers_yield_empty_tuple(self, chain, root):
        config = _config(_text(Tier.PRIMARY, "table td", 0.95))

        result = chain.resolve_all(config, root)

        assert result.value == ()
        assert result.tier is None
        assert result.confidence == 0.0
        assert result.warnings == ("primary tier query matched nothing: table td",)

    def test_raising_extract_fails_the_whole_tier(self, chain, root):
        calls = []

        def flaky(node):
            calls.append(node)
            if len(calls) == 2:
                raise ValueError("detached")
            return plain_text(node)

        config = _config(
            QueryStrategy("ul li", flaky, 0.95, Tier.PRIMARY),
            _text(Tier.SECONDARY, "ol li", 0.75),
        )

        result = chain.resolve_all(config, root)

        assert result.value == ("x", "y")
        assert result.tier is Tier.SECONDARY
