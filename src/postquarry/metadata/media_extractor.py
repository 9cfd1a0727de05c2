"""
Media Extractor - Post Attachments

Collects image, video and animated-image (GIF) attachments. Each kind is
resolved with the plural fallback variant, so one kind's list never mixes
tiers. Avatars and other images that are not attachments are filtered out
by URL path markers rather than by tier. Output order is image, video, gif;
a URL already collected under an earlier kind is dropped.
"""

from __future__ import annotations

from typing import List, Optional, Set, Tuple

from bs4 import Tag

from postquarry.extractor.models import FieldReport, MediaData, Tier
from postquarry.extractor.selectors import MEDIA_GIF, MEDIA_IMAGE, MEDIA_VIDEO

from .base import FieldExtractor, field_warnings

MEDIA_CONFIGS = (
    ("media.image", MEDIA_IMAGE),
    ("media.video", MEDIA_VIDEO),
    ("media.gif", MEDIA_GIF),
)


class MediaExtractor(FieldExtractor):
    field_name = "media"

    def extract(self, root: Tag) -> FieldReport[Tuple[MediaData, ...]]:
        media: List[MediaData] = []
        seen: Set[str] = set()
        warnings: List[str] = []
        best_tier: Optional[Tier] = None

        for name, config in MEDIA_CONFIGS:
            result = self.chain.resolve_all(config, root)
            warnings.extend(field_warnings(name, result, optional=True))
            if result.tier is None:
                continue

            if best_tier is None or result.tier.rank < best_tier.rank:
                best_tier = result.tier
            for item in result.value or ():
                if item.url in seen:
                    continue
                seen.add(item.url)
                media.append(item)

        return FieldReport(
            name=self.field_name,
            value=tuple(media),
            extracted=bool(media),
            tier=best_tier if media else None,
            warnings=tuple(warnings),
        )
