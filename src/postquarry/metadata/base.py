"""
Shared plumbing for field extractors.
"""

from __future__ import annotations

from typing import Any, ClassVar, Tuple

from bs4 import Tag

from postquarry.extractor.fallback_chain import FallbackChain
from postquarry.extractor.models import FieldExtractionResult, FieldReport


def field_warnings(name: str, result: FieldExtractionResult[Any], optional: bool = False) -> Tuple[str, ...]:
    """
    Prefix a resolution's warnings with the field name.

    Optional fields (badges, counters that are often hidden, attachments)
    stay silent when absent altogether; they only report the tiers that
    failed before a later tier succeeded.
    """
    resolved = result.tier is not None
    if optional and not resolved:
        return ()

    warnings = [f"{name}: {warning}" for warning in result.warnings]
    if not resolved:
        warnings.append(f"{name}: no tier produced a value")
    return tuple(warnings)


class FieldExtractor:
    """Base class for extractors that resolve one record field."""

    field_name: ClassVar[str] = ""

    def __init__(self, chain: FallbackChain) -> None:
        self.chain = chain

    def extract(self, root: Tag) -> FieldReport[Any]:
        raise NotImplementedError
