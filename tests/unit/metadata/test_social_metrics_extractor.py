"""
Unit tests for SocialMetricsExtractor.
"""

from __future__ import annotations

import pytest

from postquarry.extractor.models import MetricsData, Tier
from postquarry.metadata import SocialMetricsExtractor

from tests.helpers.posts import make_root

pytestmark = pytest.mark.unit


@pytest.fixture
def metrics_extractor(chain):
    return SocialMetricsExtractor(chain)


class TestSocialMetricsExtractor:
    def test_counters_from_primary_labels(self, metrics_extractor, full_post):
        report = metrics_extractor.extract(full_post)

        assert report.extracted
        assert report.tier is Tier.PRIMARY
        assert report.value == MetricsData(
            reply_count=48,
            repost_count=1200,
            like_count=10500,
            bookmark_count=3,
            view_count=3000000,
        )

    def test_accessibility_labels(self, metrics_extractor):
        root = make_root(
            """
            <article>
              <button aria-label="12 replies. Reply"></button>
              <button aria-label="5 Retweets. Retweet"></button>
              <button aria-label="2.5K likes. Like"></button>
            </article>
            """
        )

        report = metrics_extractor.extract(root)

        assert report.tier is Tier.SECONDARY
        assert report.value.reply_count == 12
        assert report.value.repost_count == 5
        assert report.value.like_count == 2500
        assert report.value.bookmark_count is None

    def test_structural_position(self, metrics_extractor):
        root = make_root(
            """
            <article>
              <div role="group">
                <div><button><span>7</span></button></div>
                <div><button><span>1.1M</span></button></div>
                <div><button><span>oops</span></button></div>
              </div>
            </article>
            """
        )

        report = metrics_extractor.extract(root)

        assert report.tier is Tier.TERTIARY
        assert report.value.reply_count == 7
        assert report.value.repost_count == 1100000
        assert report.value.like_count is None

    def test_best_tier_among_core_counters(self, metrics_extractor):
        root = make_root(
            """
            <article>
              <button aria-label="3 replies. Reply"></button>
              <button data-testid="like" aria-label="9 Likes. Like"></button>
            </article>
            """
        )

        report = metrics_extractor.extract(root)

        assert report.tier is Tier.PRIMARY
        assert report.value.reply_count == 3
        assert report.value.like_count == 9

    def test_labels_without_numbers_leave_counters_missing(self, metrics_extractor):
        root = make_root(
            """
            <article>
              <button data-testid="reply" aria-label="Reply"></button>
              <button data-testid="like" aria-label="Like"></button>
            </article>
            """
        )

        report = metrics_extractor.extract(root)

        assert not report.extracted
        assert report.value == MetricsData()
        assert any(w.startswith("metrics.reply_count:") for w in report.warnings)
        assert not any(w.startswith("metrics.bookmark_count:") for w in report.warnings)

    def test_view_count_only_does_not_mark_extracted(self, metrics_extractor):
        root = make_root('<article><a href="/a/status/1/analytics" aria-label="900 views"></a></article>')

        report = metrics_extractor.extract(root)

        assert report.value.view_count == 900
        assert not report.extracted
