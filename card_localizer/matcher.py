"""Find embedded image references in free-form card text.

Two inline dialects are recognized by a single pattern:

* bracket links, ``[alt](https://...)`` with an optional leading ``!``
* image tags, ``<img alt="alt" src="https://..." key="value" />`` where ``alt``
  may come before or after ``src`` and the tag may close with ``>`` or ``/>``

The bracket alternative is listed first, so it wins whenever both could start
at the same position. Only absolute ``http``/``https`` URLs count; whitespace,
quotes, ``)`` and ``>`` terminate the URL. Bare URLs outside either dialect are
not matched.
"""

from __future__ import annotations

import re
from typing import Any, Iterator, List, Optional, Pattern

from .models import ReferenceMatch

URL_PATTERN = re.compile(
    r"""
    (?:
        !?\[(?P<alt_bracket>[^\]]*?)\]\s*?\(              # [alt](
      |
        <img(?:\ alt=["'](?P<alt_tag_before>[^"']*?)["'])?  # <img alt="..."
        \ src=["']                                          #  src="
    )
    (?P<url>https?://[^\s)"'>]+)
    (?:
        ["']
        (?:\ alt=(?:["'](?P<alt_tag_after>[^"']*?)["'])?)?
        (?:(?P<attr>\ ?[a-zA-Z0-9]+?=["'][^"']+?["'])*?)?
        \s*/?>
      |
        \s?\)
    )
    """,
    re.IGNORECASE | re.VERBOSE,
)


class ImageReferenceMatcher:
    """Scans text for image references using a compiled pattern.

    The pattern is fixed at construction time so alternative dialect sets can be
    tested without touching module state. It must define a ``url`` group and
    may define ``alt_bracket``, ``alt_tag_before`` and ``alt_tag_after``.
    """

    ALT_GROUPS = ("alt_bracket", "alt_tag_before", "alt_tag_after")

    def __init__(self, pattern: Optional[Pattern[str]] = None) -> None:
        self.pattern = pattern if pattern is not None else URL_PATTERN

    def iter_matches(self, text: Any) -> Iterator[ReferenceMatch]:
        """Yield matches left to right; non-string input yields nothing."""
        if not isinstance(text, str):
            return
        groups = self.pattern.groupindex
        for match in self.pattern.finditer(text):
            url = match.group("url")
            if not url:
                continue
            alt = ""
            for name in self.ALT_GROUPS:
                if name in groups and match.group(name):
                    alt = match.group(name)
                    break
            yield ReferenceMatch(full=match.group(0), url=url, alt=alt)

    def extract_matches(self, text: Any) -> List[ReferenceMatch]:
        return list(self.iter_matches(text))

    def extract_urls(self, text: Any) -> List[str]:
        return [match.url for match in self.iter_matches(text)]


DEFAULT_MATCHER = ImageReferenceMatcher()


def extract_urls(text: Any) -> List[str]:
    """Extract every image URL embedded in ``text``."""
    return DEFAULT_MATCHER.extract_urls(text)


def extract_matches(text: Any) -> List[ReferenceMatch]:
    """Extract every image reference in ``text`` with its alt text."""
    return DEFAULT_MATCHER.extract_matches(text)
