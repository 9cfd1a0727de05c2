"""
URL Extractor - Post Permalink

Resolves the canonical ``https://x.com/<handle>/status/<id>`` permalink of
a post. Query strings, photo/analytics suffixes and relative hrefs are
normalized away.
"""

from __future__ import annotations

from typing import Optional

from bs4 import Tag

from postquarry.extractor.models import FieldReport
from postquarry.extractor.selectors import POST_URL

from .base import FieldExtractor, field_warnings


class UrlExtractor(FieldExtractor):
    field_name = "url"

    def extract(self, root: Tag) -> FieldReport[Optional[str]]:
        result = self.chain.resolve(POST_URL, root)
        return FieldReport(
            name=self.field_name,
            value=result.value,
            extracted=result.extracted,
            tier=result.tier,
            warnings=field_warnings(self.field_name, result, optional=True),
        )
