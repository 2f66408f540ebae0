"""High-level orchestration for localizing the images of one character card.

A run moves through ``RunState``: scanning the record, resolving each unique
URL one at a time, rewriting the fields and persisting the resulting patch.
Two runs against the same card at once are not synchronized; callers must not
start a second run before the first has finished.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from .client import HostClient
from .collector import collect_urls
from .config import LocalizeConfig
from .errors import LocalizeError
from .images import destination_path, extension_from_url, extension_of
from .mapping import build_url_map
from .matcher import ImageReferenceMatcher
from .models import CharacterRef, LocalizeResult, RunState
from .rewrite import build_patch
from .utils import avatar_stem, get_deep

logger = logging.getLogger("card_localizer")


class Collaborators(Protocol):
    """Side-effecting operations the pipeline delegates to."""

    def fetch_record(self, avatar: str) -> Dict[str, Any]: ...

    def resolve_and_store(
        self, url: str, name_hint: str, index: int, ext_hint: Optional[str] = None
    ) -> str: ...

    def relocate(self, local_path: str, destination: str) -> str: ...

    def persist_patch(self, avatar: str, patch: Mapping[str, Any]) -> None: ...

    def invalidate_caches(self, avatar: str, url_map: Mapping[str, str]) -> None: ...


class ImageLocalizer:
    """Runs the scan, resolve, rewrite and persist pipeline for one card."""

    def __init__(
        self,
        client: Collaborators,
        config: LocalizeConfig,
        matcher: Optional[ImageReferenceMatcher] = None,
    ) -> None:
        self.client = client
        self.config = config
        self.matcher = matcher or ImageReferenceMatcher()
        self.state = RunState.IDLE
        self.url_map: Dict[str, str] = {}
        self.patch: Dict[str, Any] = {}

    def _fail(self, message: str, *args: Any) -> LocalizeResult:
        self.state = RunState.FAILED
        logger.error(message, *args)
        return LocalizeResult.FAILURE

    async def localize(self, character: CharacterRef) -> LocalizeResult:
        self.state = RunState.IDLE
        self.url_map = {}
        self.patch = {}

        if not character.avatar:
            return self._fail("No character selected")

        try:
            record = await asyncio.to_thread(self.client.fetch_record, character.avatar)
        except LocalizeError as exc:
            return self._fail("Could not fetch %s: %s", character.avatar, exc)

        self.state = RunState.SCANNING
        fields = self.config.scan_fields
        urls = collect_urls(record, fields, self.matcher)
        if not urls:
            self.state = RunState.EMPTY_RESULT
            logger.info("No URLs found.")
            return LocalizeResult.NOOP
        logger.info("Found %d image URL(s) in %s", len(urls), character.avatar)

        self.state = RunState.RESOLVING
        char_name = (
            character.name
            or get_deep(record, f"{self.config.root_segment}.name")
            or "Unknown"
        )
        avatar_name = avatar_stem(character.avatar)

        async def resolve(url: str, index: int) -> str:
            ext_hint = extension_from_url(url, self.config.default_extension)
            stored = await asyncio.to_thread(
                self.client.resolve_and_store, url, avatar_name, index, ext_hint
            )
            destination = destination_path(
                self.config.images_root,
                char_name,
                avatar_name,
                index,
                extension_of(stored, ext_hint),
            )
            return await asyncio.to_thread(self.client.relocate, stored, destination)

        self.url_map = await build_url_map(urls, resolve)
        logger.info("Localized %d of %d URL(s)", len(self.url_map), len(urls))

        self.state = RunState.REWRITING
        self.patch = build_patch(
            record, fields, self.url_map, self.matcher, root=self.config.root_segment
        )
        if not self.patch:
            self.state = RunState.NO_CHANGE
            logger.info("No field changes needed.")
            return LocalizeResult.NOOP

        try:
            await asyncio.to_thread(self.client.persist_patch, character.avatar, self.patch)
        except LocalizeError as exc:
            return self._fail("Could not save %s: %s", character.avatar, exc)
        self.state = RunState.PATCHED
        logger.info("Successfully updated %s", character.avatar)

        try:
            await asyncio.to_thread(
                self.client.invalidate_caches, character.avatar, dict(self.url_map)
            )
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Cache invalidation for %s failed: %s", character.avatar, exc)

        return LocalizeResult.SUCCESS


async def localize_images(
    character: CharacterRef,
    config: LocalizeConfig,
    client: Optional[Collaborators] = None,
) -> LocalizeResult:
    """Localize one card against the host described by ``config``."""
    localizer = ImageLocalizer(client or HostClient(config), config)
    return await localizer.localize(character)


def run_localize(
    character: CharacterRef,
    config: LocalizeConfig,
    client: Optional[Collaborators] = None,
) -> LocalizeResult:
    return asyncio.run(localize_images(character, config, client))
