"""
Protocols for the collaborators injected into the extraction engine.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from bs4 import Tag


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Receives structured diagnostic events from the engine.

    A ``structlog`` bound logger satisfies this protocol as-is.
    """

    def debug(self, event: str, **fields: Any) -> Any: ...

    def info(self, event: str, **fields: Any) -> Any: ...

    def warning(self, event: str, **fields: Any) -> Any: ...

    def error(self, event: str, **fields: Any) -> Any: ...


@runtime_checkable
class ContentExpander(Protocol):
    """Activates a "show more" control in the live document.

    The host (browser automation, test harness) owns the document and is the
    only party able to trigger the control; the engine only polls afterwards.
    """

    def __call__(self, control: Tag) -> None: ...
