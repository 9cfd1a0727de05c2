"""
Unit tests for the text, timestamp and permalink extractors.
"""

from __future__ import annotations

import pytest

from postquarry.extractor.models import Tier
from postquarry.metadata import DateExtractor, TextExtractor, UrlExtractor

from tests.helpers.posts import make_root

pytestmark = pytest.mark.unit


class TestTextExtractor:
    def test_glyphs_spliced_in_place(self, chain, glyph_post):
        report = TextExtractor(chain).extract(glyph_post)

        assert report.value == "A🔥B"
        assert report.tier is Tier.PRIMARY

    def test_language_tagged_block(self, chain):
        root = make_root('<div><article role="article"><div lang="en" dir="ltr">Plain words</div></article></div>')

        report = TextExtractor(chain).extract(root)

        assert report.value == "Plain words"
        assert report.tier is Tier.SECONDARY
        assert report.warnings[0].startswith("text: primary tier query matched nothing")

    def test_missing_text_warns(self, chain, empty_post):
        report = TextExtractor(chain).extract(empty_post)

        assert not report.extracted
        assert report.warnings[-1] == "text: no tier produced a value"


class TestDateExtractor:
    def test_datetime_attribute(self, chain, full_post):
        report = DateExtractor(chain).extract(full_post)

        assert report.value == "2024-03-04T15:30:00.000Z"
        assert report.tier is Tier.PRIMARY

    def test_displayed_date(self, chain):
        root = make_root('<article><a href="/a/status/9"><time>3:30 PM · Mar 4, 2024</time></a></article>')

        report = DateExtractor(chain).extract(root)

        assert report.value == "2024-03-04T15:30:00.000Z"
        assert report.tier is Tier.SECONDARY

    def test_labelled_permalink(self, chain):
        root = make_root('<article><a href="/a/status/9" aria-label="Mar 4, 2024">2h</a></article>')

        report = DateExtractor(chain).extract(root)

        assert report.value == "2024-03-04T00:00:00.000Z"
        assert report.tier is Tier.TERTIARY

    def test_month_like_word_is_not_guessed(self, chain):
        root = make_root('<article><a href="/u/status/1"><time>Novel 3, 2024</time></a></article>')

        report = DateExtractor(chain).extract(root)

        assert report.value is None
        assert not report.extracted
        assert report.warnings[1].startswith("timestamp: secondary tier extracted no value")

    def test_relative_time_is_not_guessed(self, chain):
        root = make_root('<article><a href="/a/status/9" aria-label="2 hours ago"><time>2h</time></a></article>')

        report = DateExtractor(chain).extract(root)

        assert report.value is None
        assert "timestamp: no tier produced a value" in report.warnings


class TestUrlExtractor:
    def test_permalink(self, chain, full_post):
        report = UrlExtractor(chain).extract(full_post)

        assert report.value == "https://x.com/jack_dev/status/1764000000000000001"
        assert report.tier is Tier.PRIMARY

    def test_missing_permalink_is_silent(self, chain, empty_post):
        report = UrlExtractor(chain).extract(empty_post)

        assert report.value is None
        assert report.warnings == ()
