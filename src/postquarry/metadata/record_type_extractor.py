"""
Record Type Extractor - Embedding, Reshare and Reply Flags

Derives three boolean flags from text patterns inside the record root and
from the presence of a nested record-shaped container:

- is_embedding: a "Quote" label plus a nested link container holding an
  author block
- is_reshare: a short "reposted"/"retweeted" social-context span
- is_reply_context: a "Replying to" span

The flags default to False and the field is always considered extracted.
``locate_embedded_root`` finds the container of the embedded record.
"""

from __future__ import annotations

from typing import Iterator, Optional

from bs4 import Tag

from postquarry.extractor.models import FieldReport, RecordTypeFlags, Tier

from .base import FieldExtractor

EMBEDDING_LABEL = "quote"
RESHARE_INDICATORS = ("reposted", "retweeted")
REPLY_INDICATOR = "replying to"

# Social-context spans are short; longer text is post content mentioning the words
MAX_INDICATOR_LENGTH = 50

AUTHOR_BLOCK_QUERY = '[data-testid="User-Name"]'
TEXT_BLOCK_QUERY = '[data-testid="tweetText"]'
EMBEDDED_CONTAINER_QUERY = '[role="link"][tabindex="0"]'


def _span_texts(root: Tag) -> Iterator[str]:
    for span in root.select("span"):
        yield span.get_text().strip().lower()


def detect_embedding(root: Tag) -> bool:
    if not any(text == EMBEDDING_LABEL for text in _span_texts(root)):
        return False
    # Only link containers below the root count; select() never yields the root itself
    return any(link.select_one(AUTHOR_BLOCK_QUERY) is not None for link in root.select('[role="link"]'))


def detect_reshare(root: Tag) -> bool:
    return any(
        len(text) < MAX_INDICATOR_LENGTH and any(indicator in text for indicator in RESHARE_INDICATORS)
        for text in _span_texts(root)
    )


def detect_reply_context(root: Tag) -> bool:
    return any(REPLY_INDICATOR in text for text in _span_texts(root))


def locate_embedded_root(root: Tag, limit: int = 20) -> Optional[Tag]:
    """
    First nested link container holding both an author block and a text
    block, inspecting at most ``limit`` candidates.
    """
    for candidate in root.select(EMBEDDED_CONTAINER_QUERY, limit=limit):
        if candidate.select_one(AUTHOR_BLOCK_QUERY) is not None and candidate.select_one(TEXT_BLOCK_QUERY) is not None:
            return candidate
    return None


class RecordTypeExtractor(FieldExtractor):
    field_name = "record_type"

    def extract(self, root: Tag) -> FieldReport[RecordTypeFlags]:
        flags = RecordTypeFlags(
            is_embedding=detect_embedding(root),
            is_reshare=detect_reshare(root),
            is_reply_context=detect_reply_context(root),
        )
        return FieldReport(name=self.field_name, value=flags, extracted=True, tier=Tier.PRIMARY)
