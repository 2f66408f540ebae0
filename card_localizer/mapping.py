"""Assemble the remote-to-local URL map from per-URL resolutions."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, Iterable

logger = logging.getLogger("card_localizer")

Resolver = Callable[[str, int], Awaitable[str]]


async def build_url_map(urls: Iterable[str], resolve: Resolver) -> Dict[str, str]:
    """Resolve each URL in order and keep the ones that succeed.

    ``resolve`` receives the URL and a sequential index that only advances on
    success, so destination filenames stay contiguous. A failure is logged and
    the URL is left out of the map; it never stops the remaining URLs.
    """
    url_map: Dict[str, str] = {}
    index = 0
    for url in urls:
        try:
            local_path = await resolve(url, index)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Failed to localize %s: %s", url, exc)
            continue
        if not local_path:
            logger.warning("Failed to localize %s: no local path returned", url)
            continue
        url_map[url] = local_path
        logger.debug("Localized %s -> %s", url, local_path)
        index += 1
    return url_map
