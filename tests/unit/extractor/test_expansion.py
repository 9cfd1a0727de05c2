"""
Unit tests for the "Show more" content expansion pre-step.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from postquarry.extractor.expansion import ContentExpansion, find_show_more_control

from tests.helpers.posts import make_root

pytestmark = pytest.mark.unit

TRUNCATED_HTML = """
<article>
  <div data-testid="tweetText"><span>The first half</span></div>
  <div role="button" data-testid="tweet-text-show-more-link">Show more</div>
</article>
"""


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestFindControl:
    def test_by_test_identifier(self):
        control = find_show_more_control(make_root(TRUNCATED_HTML))

        assert control is not None
        assert control["data-testid"] == "tweet-text-show-more-link"

    def test_by_button_text(self):
        root = make_root("<article><button>Like</button><button> Show more </button></article>")

        assert find_show_more_control(root).get_text(strip=True) == "Show more"

    def test_absent(self):
        assert find_show_more_control(make_root("<article><button>Show</button></article>")) is None


class TestContentExpansion:
    def test_no_control_is_a_no_op(self, clock):
        expander = MagicMock()
        expansion = ContentExpansion(expander, clock=clock, sleep=clock.sleep)

        outcome = expansion.expand(make_root("<article><span>short post</span></article>"))

        assert not outcome.triggered
        assert outcome.warnings == ()
        expander.assert_not_called()

    def test_finishes_when_control_disappears(self, clock):
        root = make_root(TRUNCATED_HTML)
        expansion = ContentExpansion(lambda control: control.decompose(), clock=clock, sleep=clock.sleep)

        outcome = expansion.expand(root)

        assert outcome.triggered and outcome.expanded
        assert outcome.warnings == ()
        assert clock.sleeps == []

    def test_finishes_when_text_grows(self, clock):
        root = make_root(TRUNCATED_HTML)
        span = root.select_one("span")
        polls = []

        def slow_render(seconds):
            clock.sleep(seconds)
            polls.append(seconds)
            if len(polls) == 3:
                span.string = "The first half and the second half"

        expansion = ContentExpansion(MagicMock(), clock=clock, sleep=slow_render)

        outcome = expansion.expand(root)

        assert outcome.expanded
        assert polls == [0.025, 0.025, 0.025]

    def test_times_out_with_warning(self, clock):
        expander = MagicMock()
        expansion = ContentExpansion(expander, timeout_ms=500, poll_interval_ms=25, clock=clock, sleep=clock.sleep)

        outcome = expansion.expand(make_root(TRUNCATED_HTML))

        expander.assert_called_once()
        assert outcome.triggered
        assert not outcome.expanded
        assert outcome.warnings == ("Content expansion timed out after 500 ms; text may be truncated",)
        assert clock.now == pytest.approx(0.5, abs=0.03)
        assert all(seconds == 0.025 for seconds in clock.sleeps)

    def test_without_expander_the_control_is_left_alone(self, clock):
        root = make_root(TRUNCATED_HTML)

        outcome = ContentExpansion(None, clock=clock, sleep=clock.sleep).expand(root)

        assert not outcome.triggered
        assert "no expander configured" in outcome.warnings[0]
        assert find_show_more_control(root) is not None

    def test_expander_errors_propagate(self, clock):
        expansion = ContentExpansion(MagicMock(side_effect=RuntimeError("detached")), clock=clock, sleep=clock.sleep)

        with pytest.raises(RuntimeError, match="detached"):
            expansion.expand(make_root(TRUNCATED_HTML))

    def test_rejects_invalid_timing(self):
        with pytest.raises(ValueError):
            ContentExpansion(poll_interval_ms=0)
        with pytest.raises(ValueError):
            ContentExpansion(timeout_ms=-1)
