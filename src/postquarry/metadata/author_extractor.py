"""
Author Extractor - Post Author Identity

Resolves five independent author sub-fields: handle, display name,
verification badge, avatar URL and profile URL. Handles must match the
platform's handle syntax (``^[A-Za-z0-9_]{1,15}$``) at every tier, so a
primary-tier node holding e.g. a display name with a space is rejected and
resolution falls through to the next tier.

The author field counts as extracted when the handle is; its tier is the
handle's tier.
"""

from __future__ import annotations

from typing import List

from bs4 import Tag

from postquarry.extractor.models import AuthorData, FieldReport
from postquarry.extractor.parsing import SITE_ORIGIN
from postquarry.extractor.selectors import (
    AUTHOR_AVATAR_URL,
    AUTHOR_DISPLAY_NAME,
    AUTHOR_HANDLE,
    AUTHOR_PROFILE_URL,
    AUTHOR_VERIFIED,
)

from .base import FieldExtractor, field_warnings


class AuthorExtractor(FieldExtractor):
    field_name = "author"

    def extract(self, root: Tag) -> FieldReport[AuthorData]:
        warnings: List[str] = []

        handle = self.chain.resolve(AUTHOR_HANDLE, root)
        warnings.extend(field_warnings("author.handle", handle))

        name = self.chain.resolve(AUTHOR_DISPLAY_NAME, root)
        warnings.extend(field_warnings("author.display_name", name))

        # An absent badge is the ordinary unverified case
        verified = self.chain.resolve(AUTHOR_VERIFIED, root)
        warnings.extend(field_warnings("author.verified", verified, optional=True))

        avatar = self.chain.resolve(AUTHOR_AVATAR_URL, root)
        warnings.extend(field_warnings("author.avatar_url", avatar))

        profile = self.chain.resolve(AUTHOR_PROFILE_URL, root)
        warnings.extend(field_warnings("author.profile_url", profile, optional=True))

        profile_url = profile.value
        if profile_url is None and handle.value is not None:
            profile_url = f"{SITE_ORIGIN}/{handle.value}"

        author = AuthorData(
            handle=handle.value,
            display_name=name.value,
            is_verified=bool(verified.value),
            avatar_url=avatar.value,
            profile_url=profile_url,
        )
        return FieldReport(
            name=self.field_name,
            value=author,
            extracted=handle.extracted,
            tier=handle.tier,
            warnings=tuple(warnings),
        )
