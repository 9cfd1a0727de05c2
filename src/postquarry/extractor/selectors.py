"""
Centralized query strategy registry for post extraction.

Strategy tiers:
- Primary: data-testid markers (confidence 0.85-0.98)
- Secondary: aria-label and role markers (confidence 0.60-0.85)
- Tertiary: structural position (confidence 0.40-0.60)

The registry is built once at import time and exposed read-only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from bs4 import Tag

from .models import ExtractionConfig, LinkCardData, MediaData, MediaKind, QueryStrategy, Tier
from .parsing import (
    absolute_url,
    attribute,
    count_from_label,
    display_name,
    domain_from_url,
    domain_label,
    handle_from_href,
    handle_from_mention,
    handle_from_text,
    int_attribute,
    is_http_url,
    is_metric_count,
    is_valid_handle,
    normalize_instant,
    parse_display_date,
    permalink,
    plain_text,
    profile_url,
    render_text,
)

# Path markers separating post attachments from avatars and GIF videos
ATTACHMENT_MARKER = "/media/"
AVATAR_MARKER = "profile_images"
GIF_VIDEO_MARKER = "tweet_video"


def _strategy(
    tier: Tier, query: str, extract: Callable[[Tag], object], confidence: float, **kwargs
) -> QueryStrategy:
    return QueryStrategy(query=query, extract=extract, confidence=confidence, tier=tier, **kwargs)


# --- Text ---


def _text_in_structural_container(el: Tag) -> Optional[str]:
    text_div = el.select_one("div[lang]")
    return render_text(text_div) if text_div is not None else None


TEXT = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, '[data-testid="tweetText"]', render_text, 0.95),
    secondary=_strategy(Tier.SECONDARY, 'article[role="article"] div[lang][dir]', render_text, 0.75),
    tertiary=_strategy(
        Tier.TERTIARY,
        'article[role="article"] > div > div:nth-child(2) > div:nth-child(2)',
        _text_in_structural_container,
        0.50,
    ),
)

# --- Author ---

AUTHOR_HANDLE = ExtractionConfig(
    primary=_strategy(
        Tier.PRIMARY,
        '[data-testid="User-Name"] a[href^="/"][tabindex="-1"] span',
        handle_from_text,
        0.95,
        validate=is_valid_handle,
    ),
    secondary=_strategy(
        Tier.SECONDARY,
        'a[href^="/"][role="link"]',
        handle_from_href,
        0.80,
        validate=is_valid_handle,
    ),
    tertiary=_strategy(
        Tier.TERTIARY,
        '[data-testid="User-Name"]',
        handle_from_mention,
        0.60,
        validate=is_valid_handle,
    ),
)

AUTHOR_DISPLAY_NAME = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, '[data-testid="User-Name"] > div:first-child span', display_name, 0.95),
    secondary=_strategy(
        Tier.SECONDARY,
        'article[role="article"] a[href^="/"][role="link"] > div > span',
        display_name,
        0.75,
    ),
)


def _present(el: Tag) -> bool:
    return True


AUTHOR_VERIFIED = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, '[data-testid="User-Name"] [data-testid="icon-verified"]', _present, 0.98),
    secondary=_strategy(Tier.SECONDARY, 'svg[aria-label*="Verified"]', _present, 0.85),
)


def _src(el: Tag) -> Optional[str]:
    return attribute(el, "src")


AUTHOR_AVATAR_URL = ExtractionConfig(
    primary=_strategy(
        Tier.PRIMARY,
        '[data-testid="Tweet-User-Avatar"] img[src]',
        _src,
        0.95,
        validate=is_http_url,
    ),
    secondary=_strategy(
        Tier.SECONDARY,
        f'img[alt][src*="{AVATAR_MARKER}"]',
        _src,
        0.80,
        validate=is_http_url,
    ),
    tertiary=_strategy(
        Tier.TERTIARY,
        'a[href^="/"] img[src]',
        _src,
        0.55,
        validate=lambda url: is_http_url(url) and AVATAR_MARKER in url,
    ),
)

AUTHOR_PROFILE_URL = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, '[data-testid="User-Name"] a[href^="/"]', profile_url, 0.95),
    secondary=_strategy(Tier.SECONDARY, 'a[href^="/"][role="link"]', profile_url, 0.75),
)

# --- Timestamp and permalink ---


def _datetime_attribute(el: Tag) -> Optional[str]:
    return normalize_instant(attribute(el, "datetime"))


def _displayed_date(el: Tag) -> Optional[str]:
    return parse_display_date(el.get_text())


def _labelled_date(el: Tag) -> Optional[str]:
    return parse_display_date(attribute(el, "aria-label"))


TIMESTAMP = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, "time[datetime]", _datetime_attribute, 0.98),
    secondary=_strategy(Tier.SECONDARY, 'a[href*="/status/"] time', _displayed_date, 0.60),
    tertiary=_strategy(Tier.TERTIARY, 'a[href*="/status/"][aria-label]', _labelled_date, 0.45),
)

POST_URL = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, '[data-testid="User-Name"] a[href*="/status/"]', permalink, 0.95),
    secondary=_strategy(Tier.SECONDARY, 'a[href*="/status/"]:has(> time)', permalink, 0.80),
    tertiary=_strategy(Tier.TERTIARY, 'a[href*="/status/"]', permalink, 0.50),
)

# --- Engagement counters ---


def _label_count(*keywords: str) -> Callable[[Tag], Optional[str]]:
    pattern = "(?:" + "|".join(keywords) + ")"

    def extract(el: Tag) -> Optional[str]:
        return count_from_label(attribute(el, "aria-label"), pattern)

    return extract


def _visible_count(el: Tag) -> Optional[str]:
    text = el.get_text().strip()
    return text or None


def _counter(
    testid: str,
    keywords: Tuple[str, ...],
    primary_confidence: float,
    secondary_confidence: float,
    group_position: Optional[int] = None,
) -> ExtractionConfig:
    tertiary = None
    if group_position is not None:
        tertiary = _strategy(
            Tier.TERTIARY,
            f'div[role="group"] > div:nth-child({group_position}) button span',
            _visible_count,
            0.50,
            validate=is_metric_count,
        )
    return ExtractionConfig(
        primary=_strategy(
            Tier.PRIMARY,
            f'[data-testid="{testid}"][aria-label]',
            _label_count(*keywords),
            primary_confidence,
            validate=is_metric_count,
        ),
        secondary=_strategy(
            Tier.SECONDARY,
            ", ".join(f'button[aria-label*="{keyword}" i]' for keyword in keywords),
            _label_count(*keywords),
            secondary_confidence,
            validate=is_metric_count,
        ),
        tertiary=tertiary,
    )


REPLY_COUNT = _counter("reply", ("repl",), 0.90, 0.75, group_position=1)
REPOST_COUNT = _counter("retweet", ("repost", "retweet"), 0.90, 0.75, group_position=2)
LIKE_COUNT = _counter("like", ("like",), 0.90, 0.75, group_position=3)
BOOKMARK_COUNT = _counter("bookmark", ("bookmark",), 0.85, 0.70)

VIEW_COUNT = ExtractionConfig(
    primary=_strategy(
        Tier.PRIMARY,
        'a[href*="/analytics"][aria-label]',
        _label_count("view"),
        0.90,
        validate=is_metric_count,
    ),
    secondary=_strategy(
        Tier.SECONDARY,
        '[aria-label*="view" i]',
        _label_count("view"),
        0.75,
        validate=is_metric_count,
    ),
)

# --- Media attachments ---


def _image(el: Tag) -> Optional[MediaData]:
    url = attribute(el, "src")
    if url is None:
        return None
    return MediaData(
        kind=MediaKind.IMAGE,
        url=url,
        alt_text=attribute(el, "alt"),
        width=int_attribute(el, "width"),
        height=int_attribute(el, "height"),
    )


def _video_source(video: Tag) -> Optional[str]:
    source = video.select_one("source[src]")
    if source is not None:
        return attribute(source, "src")
    return attribute(video, "src")


def _video(el: Tag) -> Optional[MediaData]:
    url = _video_source(el)
    if url is None:
        return None
    return MediaData(
        kind=MediaKind.VIDEO,
        url=url,
        thumbnail_url=attribute(el, "poster"),
        width=int_attribute(el, "width"),
        height=int_attribute(el, "height"),
    )


def _gif(el: Tag) -> Optional[MediaData]:
    video = el if el.name == "video" else el.select_one("video")
    if video is not None:
        url = _video_source(video)
        if url is None:
            return None
        return MediaData(kind=MediaKind.GIF, url=url, thumbnail_url=attribute(video, "poster"))

    img = el if el.name == "img" else el.select_one("img[src]")
    if img is None or attribute(img, "src") is None:
        return None
    return MediaData(kind=MediaKind.GIF, url=attribute(img, "src"), alt_text=attribute(img, "alt"))


def is_attachment_image(media: MediaData) -> bool:
    return ATTACHMENT_MARKER in media.url and AVATAR_MARKER not in media.url


def is_attachment_video(media: MediaData) -> bool:
    return AVATAR_MARKER not in media.url and GIF_VIDEO_MARKER not in media.url


def is_attachment_gif(media: MediaData) -> bool:
    return AVATAR_MARKER not in media.url


MEDIA_IMAGE = ExtractionConfig(
    primary=_strategy(
        Tier.PRIMARY,
        '[data-testid="tweetPhoto"] img[src]',
        _image,
        0.95,
        validate=is_attachment_image,
    ),
    secondary=_strategy(
        Tier.SECONDARY,
        'a[href*="/photo/"] img[src], [aria-label="Image"] img[src]',
        _image,
        0.75,
        validate=is_attachment_image,
    ),
)

MEDIA_VIDEO = ExtractionConfig(
    primary=_strategy(
        Tier.PRIMARY,
        '[data-testid="videoPlayer"] video',
        _video,
        0.95,
        validate=is_attachment_video,
    ),
    secondary=_strategy(
        Tier.SECONDARY,
        '[aria-label*="video" i] video',
        _video,
        0.75,
        validate=is_attachment_video,
    ),
)

MEDIA_GIF = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, '[data-testid="tweetGif"]', _gif, 0.95, validate=is_attachment_gif),
    secondary=_strategy(
        Tier.SECONDARY,
        f'video[src*="{GIF_VIDEO_MARKER}"], video:has(source[src*="{GIF_VIDEO_MARKER}"])',
        _gif,
        0.70,
        validate=is_attachment_gif,
    ),
)

# --- Link preview card ---


def _first_text(container: Tag, *queries: str) -> Optional[str]:
    for query in queries:
        node = container.select_one(query)
        if node is not None:
            text = plain_text(node)
            if text is not None:
                return text
    return None


def _card_domain(wrapper: Tag, url: str) -> Optional[str]:
    # An on-page label always wins over the URL's hostname
    for span in wrapper.select("span"):
        label = domain_label(span.get_text())
        if label is not None:
            return label
    return domain_from_url(url)


def _card(wrapper: Tag) -> Optional[LinkCardData]:
    link = wrapper.select_one("a[href]")
    url = absolute_url(attribute(link, "href")) if link is not None else None
    if url is None:
        return None

    image = wrapper.select_one('[data-testid="card.layoutLarge.media"] img[src]') or wrapper.select_one("img[src]")
    return LinkCardData(
        url=url,
        title=_first_text(
            wrapper,
            '[data-testid="card.layoutLarge.detail"] > div:first-child span',
            '[data-testid="card.layoutSmall.detail"] span',
        ),
        description=_first_text(
            wrapper,
            '[data-testid="card.layoutLarge.detail"] > div:nth-child(2)',
            '[data-testid="card.layoutSmall.detail"] > div:last-child',
        ),
        image_url=attribute(image, "src") if image is not None else None,
        domain=_card_domain(wrapper, url),
    )


def _labelled_card(link: Tag) -> Optional[LinkCardData]:
    url = absolute_url(attribute(link, "href"))
    label = attribute(link, "aria-label")
    if url is None or label is None:
        return None

    # Labels read "<domain> <title>"
    head, _, rest = label.partition(" ")
    domain = domain_label(head)
    image = link.select_one("img[src]")
    return LinkCardData(
        url=url,
        title=(rest.strip() or None) if domain is not None else label,
        image_url=attribute(image, "src") if image is not None else None,
        domain=domain or domain_from_url(url),
    )


def _is_card(card: LinkCardData) -> bool:
    return is_http_url(card.url)


LINK_CARD = ExtractionConfig(
    primary=_strategy(Tier.PRIMARY, '[data-testid="card.wrapper"]', _card, 0.90, validate=_is_card),
    secondary=_strategy(
        Tier.SECONDARY,
        'a[href^="https://t.co/"][aria-label][role="link"]',
        _labelled_card,
        0.70,
        validate=_is_card,
    ),
)

SELECTOR_REGISTRY: Mapping[str, ExtractionConfig] = MappingProxyType(
    {
        "text": TEXT,
        "author.handle": AUTHOR_HANDLE,
        "author.display_name": AUTHOR_DISPLAY_NAME,
        "author.verified": AUTHOR_VERIFIED,
        "author.avatar_url": AUTHOR_AVATAR_URL,
        "author.profile_url": AUTHOR_PROFILE_URL,
        "timestamp": TIMESTAMP,
        "url": POST_URL,
        "metrics.reply": REPLY_COUNT,
        "metrics.repost": REPOST_COUNT,
        "metrics.like": LIKE_COUNT,
        "metrics.bookmark": BOOKMARK_COUNT,
        "metrics.view": VIEW_COUNT,
        "media.image": MEDIA_IMAGE,
        "media.video": MEDIA_VIDEO,
        "media.gif": MEDIA_GIF,
        "link_card": LINK_CARD,
    }
)


def get_config(field_name: str) -> ExtractionConfig:
    """Registry lookup; raises KeyError for unknown field names."""
    return SELECTOR_REGISTRY[field_name]
