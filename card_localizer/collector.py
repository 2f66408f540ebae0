"""Collect the unique image URLs referenced by a record's scannable fields."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .matcher import DEFAULT_MATCHER, ImageReferenceMatcher
from .utils import get_deep

logger = logging.getLogger("card_localizer")


def field_texts(value: Any) -> List[str]:
    """Return the scannable strings held by a field value.

    Strings are scanned directly, lists and tuples contribute their string
    items in order, and every other type contributes nothing.
    """
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str)]
    return []


def collect_urls(
    record: Mapping[str, Any],
    fields: Sequence[str],
    matcher: ImageReferenceMatcher = DEFAULT_MATCHER,
) -> List[str]:
    """Return the de-duplicated URLs found across ``fields``, in discovery order.

    An empty list means there is nothing to localize.
    """
    found: Dict[str, None] = {}
    for path in fields:
        for text in field_texts(get_deep(record, path, "")):
            for url in matcher.extract_urls(text):
                found.setdefault(url, None)
    urls = list(found)
    if urls:
        logger.debug("Found %d unique image URL(s): %s", len(urls), ", ".join(urls))
    return urls


def count_references(
    record: Mapping[str, Any],
    fields: Iterable[str],
    matcher: ImageReferenceMatcher = DEFAULT_MATCHER,
) -> int:
    """Count every reference, duplicates included, across ``fields``."""
    return sum(
        len(matcher.extract_matches(text))
        for path in fields
        for text in field_texts(get_deep(record, path, ""))
    )
