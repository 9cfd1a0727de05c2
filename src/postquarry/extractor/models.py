"""
Data models for record extraction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterator, Optional, Tuple, TypeVar

from bs4 import Tag

T = TypeVar("T")


class Tier(str, Enum):
    """Query strategy tiers ordered by assumed reliability."""

    PRIMARY = "primary"  # data-testid markers
    SECONDARY = "secondary"  # aria-label / role markers
    TERTIARY = "tertiary"  # structural position

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {Tier.PRIMARY: 0, Tier.SECONDARY: 1, Tier.TERTIARY: 2}


class ErrorCode(str, Enum):
    MAX_DEPTH_EXCEEDED = "MAX_DEPTH_EXCEEDED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    GIF = "gif"


@dataclass(frozen=True)
class QueryStrategy:
    """One tier of one field's registry entry."""

    query: str
    extract: Callable[[Tag], Any]
    confidence: float
    tier: Tier
    validate: Optional[Callable[[Any], bool]] = None

    def __post_init__(self) -> None:
        if not (0.0 < self.confidence <= 1.0):
            raise ValueError(f"Strategy confidence must be in (0, 1], got {self.confidence}")


@dataclass(frozen=True)
class ExtractionConfig:
    """Up to three ordered strategies for one field."""

    primary: QueryStrategy
    secondary: Optional[QueryStrategy] = None
    tertiary: Optional[QueryStrategy] = None

    def __post_init__(self) -> None:
        expected = (Tier.PRIMARY, Tier.SECONDARY, Tier.TERTIARY)
        slots = (self.primary, self.secondary, self.tertiary)
        for slot_tier, strategy in zip(expected, slots):
            if strategy is not None and strategy.tier is not slot_tier:
                raise ValueError(f"{slot_tier.value} slot holds a {strategy.tier.value} strategy")

        confidences = [s.confidence for s in self.tiers()]
        if any(later > earlier for earlier, later in zip(confidences, confidences[1:])):
            raise ValueError(f"Tier confidences must be non-increasing, got {confidences}")

    def tiers(self) -> Iterator[QueryStrategy]:
        for strategy in (self.primary, self.secondary, self.tertiary):
            if strategy is not None:
                yield strategy


@dataclass(frozen=True)
class FieldExtractionResult(Generic[T]):
    """Outcome of resolving one field."""

    value: Optional[T]
    tier: Optional[Tier]
    confidence: float
    warnings: Tuple[str, ...] = ()

    @property
    def extracted(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class FieldOutcome:
    """Per-field input to confidence aggregation."""

    name: str
    extracted: bool
    tier: Optional[Tier] = None


@dataclass(frozen=True)
class FieldReport(Generic[T]):
    """A field extractor's reshaped output plus what the aggregator needs."""

    name: str
    value: T
    extracted: bool
    tier: Optional[Tier] = None
    warnings: Tuple[str, ...] = ()

    def outcome(self) -> FieldOutcome:
        return FieldOutcome(name=self.name, extracted=self.extracted, tier=self.tier if self.extracted else None)


@dataclass(frozen=True)
class AuthorData:
    handle: Optional[str] = None
    display_name: Optional[str] = None
    is_verified: bool = False
    avatar_url: Optional[str] = None
    profile_url: Optional[str] = None


@dataclass(frozen=True)
class MetricsData:
    reply_count: Optional[int] = None
    repost_count: Optional[int] = None
    like_count: Optional[int] = None
    bookmark_count: Optional[int] = None
    view_count: Optional[int] = None


@dataclass(frozen=True)
class MediaData:
    kind: MediaKind
    url: str
    thumbnail_url: Optional[str] = None
    alt_text: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class LinkCardData:
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    domain: Optional[str] = None


@dataclass(frozen=True)
class RecordTypeFlags:
    is_embedding: bool = False
    is_reshare: bool = False
    is_reply_context: bool = False


@dataclass(frozen=True)
class ExtractionMetadata:
    confidence: float
    captured_at: str
    dominant_tier: Tier
    warnings: Tuple[str, ...] = ()
    elapsed_ms: float = 0.0


@dataclass(frozen=True)
class ExtractionRecord:
    """Structured output of one orchestrator invocation."""

    text: Optional[str]
    author: AuthorData
    timestamp: Optional[str]
    metrics: MetricsData
    media: Tuple[MediaData, ...]
    link_card: Optional[LinkCardData]
    record_type: RecordTypeFlags
    metadata: ExtractionMetadata
    url: Optional[str] = None
    embedded: Optional[ExtractionRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class ExtractionError:
    code: ErrorCode
    message: str
    failed_fields: Tuple[str, ...] = ()
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractionResult:
    """Discriminated result: either ``data`` or ``error`` is set."""

    success: bool
    data: Optional[ExtractionRecord] = None
    error: Optional[ExtractionError] = None

    @classmethod
    def ok(cls, record: ExtractionRecord) -> ExtractionResult:
        return cls(success=True, data=record)

    @classmethod
    def fail(cls, error: ExtractionError) -> ExtractionResult:
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "data": self.data.to_dict() if self.data is not None else None,
            "error": _jsonable(asdict(self.error)) if self.error is not None else None,
        }


def _jsonable(value: Any) -> Any:
    """Convert enums and tuples left by ``asdict`` into JSON-friendly values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value
