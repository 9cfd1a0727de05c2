"""
Text Extractor - Post Body Text

Reads the body text of a post. Inline glyphs (emoji, custom icons) are
rendered by the host as ``<img alt="...">`` replacement nodes; their textual
fallback is spliced back into the text at its original document position,
so ``"A" <img alt="🔥"> "B"`` reads ``"A🔥B"``.
"""

from __future__ import annotations

from typing import Optional

from bs4 import Tag

from postquarry.extractor.models import FieldReport
from postquarry.extractor.selectors import TEXT

from .base import FieldExtractor, field_warnings


class TextExtractor(FieldExtractor):
    field_name = "text"

    def extract(self, root: Tag) -> FieldReport[Optional[str]]:
        result = self.chain.resolve(TEXT, root)
        return FieldReport(
            name=self.field_name,
            value=result.value,
            extracted=result.extracted,
            tier=result.tier,
            warnings=field_warnings(self.field_name, result),
        )
