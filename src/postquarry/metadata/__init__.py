"""
PostQuarry Field Extraction Module - Record Assembly

Field extractors built on the tiered fallback engine, and the orchestrator
that assembles them into one record.

Components:
- RecordExtractor: Extraction orchestrator (depth-bounded recursion)
- TextExtractor: Body text with inline glyphs in document order
- AuthorExtractor: Handle, display name, badge, avatar and profile URL
- DateExtractor: Timestamp normalized to UTC
- UrlExtractor: Canonical permalink
- SocialMetricsExtractor: Reply/repost/like/bookmark/view counters
- MediaExtractor: Image, video and GIF attachments
- LinkCardExtractor: Link preview card
- RecordTypeExtractor: Embedding, reshare and reply-context flags
"""

from .author_extractor import AuthorExtractor
from .base import FieldExtractor, field_warnings
from .date_extractor import DateExtractor
from .link_card_extractor import LinkCardExtractor
from .media_extractor import MediaExtractor
from .record_extractor import RecordExtractor
from .record_type_extractor import RecordTypeExtractor, locate_embedded_root
from .social_metrics_extractor import SocialMetricsExtractor
from .text_extractor import TextExtractor
from .url_extractor import UrlExtractor

__all__ = [
    # Orchestrator
    "RecordExtractor",
    # Field extractors
    "FieldExtractor",
    "field_warnings",
    "TextExtractor",
    "AuthorExtractor",
    "DateExtractor",
    "UrlExtractor",
    "SocialMetricsExtractor",
    "MediaExtractor",
    "LinkCardExtractor",
    "RecordTypeExtractor",
    "locate_embedded_root",
]
