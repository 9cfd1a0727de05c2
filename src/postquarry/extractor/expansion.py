"""
Content expansion pre-step.

Long posts are truncated behind a "Show more" control. Before any field is
read, the control is activated through the injected expander and the tree is
polled until the full text is present or the timeout elapses.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from bs4 import Tag

from .protocols import ContentExpander

SHOW_MORE_QUERY = '[data-testid="tweet-text-show-more-link"]'
SHOW_MORE_LABEL = "show more"

DEFAULT_TIMEOUT_MS = 500
DEFAULT_POLL_INTERVAL_MS = 25


@dataclass(frozen=True)
class ExpansionOutcome:
    triggered: bool = False
    expanded: bool = False
    warnings: Tuple[str, ...] = ()


def find_show_more_control(root: Tag) -> Optional[Tag]:
    control = root.select_one(SHOW_MORE_QUERY)
    if control is not None:
        return control

    for candidate in root.select('button, [role="button"]'):
        if candidate.get_text(strip=True).lower() == SHOW_MORE_LABEL:
            return candidate
    return None


class ContentExpansion:
    """
    Triggers a "Show more" control and busy-polls for the expanded text.

    The only step of an extraction allowed to mutate the document, and only
    through the expander the host supplies. Expansion finishes when the
    control disappears or the root's text grows; otherwise it gives up after
    ``timeout_ms`` and reports a warning. Exceptions raised by the expander
    propagate to the caller.
    """

    def __init__(
        self,
        expander: Optional[ContentExpander] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if timeout_ms < 0 or poll_interval_ms <= 0:
            raise ValueError("timeout_ms must be >= 0 and poll_interval_ms > 0")
        self.expander = expander
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._clock = clock
        self._sleep = sleep

    def expand(self, root: Tag) -> ExpansionOutcome:
        control = find_show_more_control(root)
        if control is None:
            return ExpansionOutcome()

        if self.expander is None:
            return ExpansionOutcome(
                warnings=("Show more control present but no expander configured; text may be truncated",)
            )

        initial_length = len(root.get_text())
        deadline = self._clock() + self.timeout_ms / 1000.0
        self.expander(control)

        while True:
            # Re-query each round; the host may have replaced the subtree
            if find_show_more_control(root) is None or len(root.get_text()) > initial_length:
                return ExpansionOutcome(triggered=True, expanded=True)
            if self._clock() >= deadline:
                break
            self._sleep(self.poll_interval_ms / 1000.0)

        return ExpansionOutcome(
            triggered=True,
            warnings=(f"Content expansion timed out after {self.timeout_ms} ms; text may be truncated",),
        )
