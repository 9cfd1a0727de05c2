"""
Node-reading and value-normalizing helpers shared by query strategies.

Every helper returns None for input it cannot interpret; none of them raise
for well-formed nodes.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4.element import NavigableString, PreformattedString, Tag
from dateutil import parser as dateutil_parser

from .confidence_scorer import parse_metric_count

SITE_ORIGIN = "https://x.com"

HANDLE_PATTERN = re.compile(r"[A-Za-z0-9_]{1,15}")
_HANDLE_PATH = re.compile(r"/([A-Za-z0-9_]{1,15})/?")
_HANDLE_MENTION = re.compile(r"@([A-Za-z0-9_]{1,15})\b")
_STATUS_PATH = re.compile(r"^/([A-Za-z0-9_]{1,15})/status/(\d+)")
_DOMAIN_LABEL = re.compile(r"^(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,}$", re.IGNORECASE)

_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?(?![a-z])"
)
# A named month directly next to its day: "Mar 4" or "4 March"
_MONTH_DAY = re.compile(
    rf"\b{_MONTH}\s+\d{{1,2}}(?:st|nd|rd|th)?\b|\b\d{{1,2}}(?:st|nd|rd|th)?\s+(?:of\s+)?{_MONTH}",
    re.IGNORECASE,
)
_YEAR = re.compile(r"\b(19|20)\d{2}\b")
_ISO_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")

_FIRST_DEFAULT = datetime(2000, 1, 1)
_SECOND_DEFAULT = datetime(2001, 2, 2)

_SKIPPED_PARENTS = {"script", "style", "noscript", "template"}


# --- Text ---


def render_text(node: Tag) -> Optional[str]:
    """
    Text content of ``node`` with inline glyph images restored in place.

    Glyphs (emoji and custom icons) are rendered as ``<img alt="...">``
    replacement nodes; their ``alt`` text is emitted at the image's position
    in document order. ``<br>`` becomes a newline.
    """
    parts: List[str] = []
    for item in node.descendants:
        if isinstance(item, Tag):
            if item.name == "img":
                alt = item.get("alt")
                if isinstance(alt, str):
                    parts.append(alt)
            elif item.name == "br":
                parts.append("\n")
        elif isinstance(item, NavigableString) and not isinstance(item, PreformattedString):
            if item.parent is not None and item.parent.name in _SKIPPED_PARENTS:
                continue
            parts.append(str(item))

    text = "".join(parts).strip()
    return text or None


def plain_text(node: Tag) -> Optional[str]:
    text = node.get_text().strip()
    return text or None


def attribute(node: Tag, name: str) -> Optional[str]:
    """Single-valued attribute as a stripped string."""
    value = node.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def int_attribute(node: Tag, name: str) -> Optional[int]:
    value = attribute(node, name)
    return int(value) if value is not None and value.isdigit() else None


# --- Identity ---


def is_valid_handle(value: str) -> bool:
    return isinstance(value, str) and HANDLE_PATTERN.fullmatch(value) is not None


def handle_from_text(node: Tag) -> Optional[str]:
    text = plain_text(node)
    if text is None:
        return None
    return text[1:] if text.startswith("@") else text


def handle_from_href(node: Tag) -> Optional[str]:
    href = attribute(node, "href")
    if href is None:
        return None
    match = _HANDLE_PATH.fullmatch(href)
    return match.group(1) if match else None


def handle_from_mention(node: Tag) -> Optional[str]:
    match = _HANDLE_MENTION.search(node.get_text())
    return match.group(1) if match else None


def display_name(node: Tag) -> Optional[str]:
    text = render_text(node)
    if text is None or text.startswith("@"):
        return None
    return text


# --- URLs ---


def is_http_url(value: str) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def absolute_url(href: Optional[str]) -> Optional[str]:
    if not href:
        return None
    return urljoin(SITE_ORIGIN + "/", href)


def profile_url(node: Tag) -> Optional[str]:
    handle = handle_from_href(node)
    return f"{SITE_ORIGIN}/{handle}" if handle else None


def permalink(node: Tag) -> Optional[str]:
    """Canonical ``https://x.com/<handle>/status/<id>`` for a status link."""
    href = attribute(node, "href")
    if href is None:
        return None
    match = _STATUS_PATH.match(urlparse(absolute_url(href) or "").path)
    if not match:
        return None
    return f"{SITE_ORIGIN}/{match.group(1)}/status/{match.group(2)}"


def domain_label(text: Optional[str]) -> Optional[str]:
    """Domain shown on a card label, e.g. "example.com" or "From example.com"."""
    if not text:
        return None
    candidate = text.strip()
    if candidate.lower().startswith("from "):
        candidate = candidate[5:].strip()
    if len(candidate) >= 50 or not _DOMAIN_LABEL.match(candidate):
        return None
    return candidate


def domain_from_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        return urlparse(url).hostname or None
    except ValueError:
        return None


# --- Time ---


def format_instant(moment: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def normalize_instant(value: Optional[str]) -> Optional[str]:
    """Normalize a machine-readable ISO-8601 attribute."""
    if not value:
        return None
    try:
        return format_instant(dateutil_parser.isoparse(value))
    except (ValueError, OverflowError):
        return None


def parse_display_date(text: Optional[str]) -> Optional[str]:
    """
    Parse a human-displayed date such as "3:30 PM · Mar 4, 2024".

    Only text naming a year and a month (by name, next to its day, or in ISO
    order) is accepted, and every date part must come from the text itself.
    Relative ("2h"), year-less ("Mar 4"), all-numeric day/month-ambiguous
    ("03/04/2024") and month-like ("Junk 5, 2024") text returns None rather
    than a guess.
    """
    if not text:
        return None

    cleaned = text.replace("\u00b7", " ").replace("\u00a0", " ").strip()
    if not _YEAR.search(cleaned):
        return None
    if _ISO_DATE.search(cleaned):
        return _fuzzy(cleaned)
    if not _MONTH_DAY.search(cleaned):
        return None

    return _fuzzy(cleaned)


def _fuzzy(text: str) -> Optional[str]:
    # dateutil fills missing parts from its default; two different defaults
    # must agree on the date or some part of it was never in the text
    try:
        first = dateutil_parser.parse(text, fuzzy=True, default=_FIRST_DEFAULT)
        second = dateutil_parser.parse(text, fuzzy=True, default=_SECOND_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return format_instant(first)


# --- Counters ---


def count_from_label(label: Optional[str], keyword: str) -> Optional[str]:
    """Numeric token preceding ``keyword`` in a label like "1.2K Likes. Like"."""
    if not label:
        return None
    match = re.search(
        rf"(\d[\d.,]*\s?[KMB]?)\s+{keyword}",
        label,
        re.IGNORECASE,
    )
    return match.group(1).strip() if match else None


def is_metric_count(value: str) -> bool:
    return parse_metric_count(value) is not None
