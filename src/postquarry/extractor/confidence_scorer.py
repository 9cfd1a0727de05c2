"""
Extraction Confidence Scorer

Combines per-field tier outcomes into one record-level confidence, labels
confidence for diagnostics and normalizes human-formatted counters.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Iterable, Mapping, Optional

from .models import FieldOutcome, Tier

# Field weights for top-level records; text and author are the critical fields
FIELD_WEIGHTS: Mapping[str, float] = {
    "text": 0.30,
    "author": 0.25,
    "timestamp": 0.15,
    "metrics": 0.10,
    "media": 0.10,
    "link_card": 0.05,
    "record_type": 0.05,
}

# Embedded records rarely show counters, so identity and content carry the score
EMBEDDED_FIELD_WEIGHTS: Mapping[str, float] = {
    "text": 0.40,
    "author": 0.35,
    "timestamp": 0.15,
    "metrics": 0.02,
    "media": 0.05,
    "link_card": 0.02,
    "record_type": 0.01,
}

TIER_MULTIPLIERS: Mapping[Tier, float] = {
    Tier.PRIMARY: 1.0,
    Tier.SECONDARY: 0.75,
    Tier.TERTIARY: 0.50,
}

PRIMARY_LABEL_THRESHOLD = 0.90
SECONDARY_LABEL_THRESHOLD = 0.70
MINIMUM_VIABLE_CONFIDENCE = 0.50

_SUFFIX_MULTIPLIERS: Dict[str, int] = {
    "": 1,
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}

# Commas only as thousands separators: "10,500" but never "1,5K"
_COUNT_PATTERN = re.compile(r"^((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?)([KMB]?)$", re.IGNORECASE | re.ASCII)


class ConfidenceScorer:
    """
    Weighted confidence aggregation for extraction records.

    Each extracted field contributes ``weight * tier multiplier``; fields that
    were not extracted contribute nothing. Two weight tables exist, one for
    top-level records and one for embedded records.
    """

    def __init__(
        self,
        field_weights: Optional[Mapping[str, float]] = None,
        embedded_field_weights: Optional[Mapping[str, float]] = None,
        tier_multipliers: Optional[Mapping[Tier, float]] = None,
        primary_threshold: float = PRIMARY_LABEL_THRESHOLD,
        secondary_threshold: float = SECONDARY_LABEL_THRESHOLD,
        minimum_confidence: float = MINIMUM_VIABLE_CONFIDENCE,
    ) -> None:
        self.field_weights = dict(field_weights if field_weights is not None else FIELD_WEIGHTS)
        self.embedded_field_weights = dict(
            embedded_field_weights if embedded_field_weights is not None else EMBEDDED_FIELD_WEIGHTS
        )
        self.tier_multipliers = dict(tier_multipliers if tier_multipliers is not None else TIER_MULTIPLIERS)
        self.primary_threshold = primary_threshold
        self.secondary_threshold = secondary_threshold
        self.minimum_confidence = minimum_confidence

    def aggregate(self, outcomes: Iterable[FieldOutcome], is_embedded: bool = False) -> float:
        """
        Calculate overall confidence for a record.

        Args:
            outcomes: Per-field extraction outcomes
            is_embedded: Whether the record is nested inside another record

        Returns:
            Confidence score between 0.0 and 1.0
        """
        weights = self.embedded_field_weights if is_embedded else self.field_weights

        total_score = 0.0
        for outcome in outcomes:
            if not outcome.extracted or outcome.tier is None:
                continue
            total_score += weights.get(outcome.name, 0.0) * self.tier_multipliers.get(outcome.tier, 0.0)

        return max(0.0, min(1.0, total_score))

    def tier_label(self, confidence: float) -> Tier:
        """Coarse label for a confidence score, used in record metadata."""
        if confidence >= self.primary_threshold:
            return Tier.PRIMARY
        elif confidence >= self.secondary_threshold:
            return Tier.SECONDARY
        else:
            return Tier.TERTIARY

    def meets_minimum_confidence(self, confidence: float) -> bool:
        """Advisory check; the engine returns low-confidence records regardless."""
        return confidence >= self.minimum_confidence


_DEFAULT_SCORER = ConfidenceScorer()


def aggregate(outcomes: Iterable[FieldOutcome], is_embedded: bool = False) -> float:
    return _DEFAULT_SCORER.aggregate(outcomes, is_embedded)


def tier_label(confidence: float) -> Tier:
    return _DEFAULT_SCORER.tier_label(confidence)


def meets_minimum_confidence(confidence: float, threshold: float = MINIMUM_VIABLE_CONFIDENCE) -> bool:
    return confidence >= threshold


def parse_metric_count(value: Optional[str]) -> Optional[int]:
    """
    Parse a human-formatted counter such as "1.2K", "3M" or "10,500".

    Returns None for missing or malformed input instead of raising. Fractions
    are only accepted together with a magnitude suffix.
    """
    if not value:
        return None

    cleaned = value.replace(" ", "").strip()
    match = _COUNT_PATTERN.match(cleaned)
    if not match:
        return None

    number, suffix = match.group(1).replace(",", ""), match.group(2).upper()
    if "." in number and not suffix:
        return None

    try:
        scaled = Decimal(number) * _SUFFIX_MULTIPLIERS[suffix]
    except InvalidOperation:
        return None

    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
