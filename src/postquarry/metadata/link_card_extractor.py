"""
Link Card Extractor - Link Preview Cards

Extracts the optional preview card attached to a post (URL, title,
description, image, domain). The domain comes from the label shown on the
card ("example.com" or "From example.com"); the URL's hostname is only used
when the card shows no such label.
"""

from __future__ import annotations

from typing import Optional

from bs4 import Tag

from postquarry.extractor.models import FieldReport, LinkCardData
from postquarry.extractor.selectors import LINK_CARD

from .base import FieldExtractor, field_warnings


class LinkCardExtractor(FieldExtractor):
    field_name = "link_card"

    def extract(self, root: Tag) -> FieldReport[Optional[LinkCardData]]:
        result = self.chain.resolve(LINK_CARD, root)
        return FieldReport(
            name=self.field_name,
            value=result.value,
            extracted=result.extracted,
            tier=result.tier,
            warnings=field_warnings(self.field_name, result, optional=True),
        )
