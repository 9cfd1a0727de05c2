"""
Date Extractor - Post Timestamp

Produces one machine-readable instant (``YYYY-MM-DDTHH:MM:SS.mmmZ``, UTC).

Strategies:
1. ``datetime`` attribute of the post's ``<time>`` element
2. Human-displayed date text next to the permalink, parsed with dateutil
3. The permalink's ``aria-label``

Human text is only accepted when it names a year, a month and a day;
relative ("2h"), year-less ("Mar 4") and day/month-ambiguous ("03/04/2024")
text yields no value rather than a guess. Displayed times without an offset
are read as UTC.
"""

from __future__ import annotations

from typing import Optional

from bs4 import Tag

from postquarry.extractor.models import FieldReport
from postquarry.extractor.selectors import TIMESTAMP

from .base import FieldExtractor, field_warnings


class DateExtractor(FieldExtractor):
    field_name = "timestamp"

    def extract(self, root: Tag) -> FieldReport[Optional[str]]:
        result = self.chain.resolve(TIMESTAMP, root)
        return FieldReport(
            name=self.field_name,
            value=result.value,
            extracted=result.extracted,
            tier=result.tier,
            warnings=field_warnings(self.field_name, result),
        )
