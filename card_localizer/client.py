"""HTTP bindings for the host application's character, file and proxy APIs."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Type
from urllib.parse import quote

import requests

from .config import LocalizeConfig
from .errors import (
    CacheInvalidationError,
    DownloadError,
    LocalizeError,
    PersistError,
    RecordFetchError,
    RelocateError,
    StoreError,
)
from .images import infer_image_extension, upload_filename

logger = logging.getLogger("card_localizer")

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


def _error_text(resp: requests.Response) -> str:
    try:
        return resp.text
    except Exception:  # pylint: disable=broad-except
        return ""


class HostClient:
    """Blocking client for one host application instance."""

    MOVE_ENDPOINT = "/api/plugins/st-image-localizer/move-image"

    def __init__(
        self,
        config: LocalizeConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return self.config.base_url.rstrip("/") + "/" + path.lstrip("/")

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.csrf_token:
            headers["X-CSRF-Token"] = self.config.csrf_token
        return headers

    def proxied(self, url: str) -> str:
        """Route a remote URL through the host's CORS proxy when enabled."""
        if not self.config.use_proxy:
            return url
        return self._url(f"/proxy/{quote(url, safe='')}")

    def _post_json(
        self,
        path: str,
        payload: Mapping[str, Any],
        error_cls: Type[LocalizeError],
        action: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        request_headers = self._headers()
        if headers:
            request_headers.update(headers)
        try:
            resp = self.session.post(
                self._url(path),
                json=dict(payload),
                headers=request_headers,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as exc:
            raise error_cls(f"{action} failed: {exc}") from exc
        if not resp.ok:
            raise error_cls(f"{action} failed: {resp.status_code} {_error_text(resp)}")
        return resp

    @staticmethod
    def _json(resp: requests.Response, error_cls: Type[LocalizeError], action: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise error_cls(f"{action} returned invalid JSON: {exc}") from exc

    def fetch_record(self, avatar: str, headers: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Read the full character card JSON."""
        resp = self._post_json(
            "/api/characters/get",
            {"avatar_url": avatar, "format": "json"},
            RecordFetchError,
            "Fetching character JSON",
            headers=headers,
        )
        record = self._json(resp, RecordFetchError, "Fetching character JSON")
        if not isinstance(record, dict):
            raise RecordFetchError(f"Character JSON for {avatar} is not an object")
        return record

    def download(self, url: str) -> Tuple[bytes, str]:
        """Fetch a remote image, returning its bytes and Content-Type."""
        try:
            resp = self.session.get(self.proxied(url), timeout=self.config.request_timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise DownloadError(f"Failed to download remote {url}: {exc}") from exc
        data = resp.content
        if len(data) > self.config.max_image_bytes:
            raise DownloadError(
                f"Image {url} is larger than {self.config.max_image_bytes} bytes"
            )
        return data, resp.headers.get("Content-Type", "")

    def store(self, filename: str, data: bytes) -> str:
        """Upload bytes as a user file and return the stored path."""
        resp = self._post_json(
            "/api/files/upload",
            {"name": filename, "data": base64.b64encode(data).decode("ascii")},
            StoreError,
            "Upload",
        )
        out = self._json(resp, StoreError, "Upload")
        path = out.get("path") if isinstance(out, dict) else None
        if not isinstance(path, str) or not path:
            raise StoreError(f"Upload of {filename} returned no path")
        return path

    def resolve_and_store(
        self,
        url: str,
        name_hint: str,
        index: int,
        ext_hint: Optional[str] = None,
    ) -> str:
        """Download ``url`` and store it as ``<name_hint>_<index>.<ext>``."""
        data, content_type = self.download(url)
        extension = infer_image_extension(
            content_type, data, fallback=ext_hint or self.config.default_extension
        )
        filename = upload_filename(name_hint, index, extension)
        path = self.store(filename, data)
        logger.debug("Stored %s as %s", url, path)
        return path

    def relocate(self, local_path: str, destination: str) -> str:
        """Move a stored file into its permanent location."""
        if not isinstance(local_path, str):
            raise RelocateError("local_path must be a string")
        resp = self._post_json(
            self.MOVE_ENDPOINT,
            {"from": local_path, "to": destination},
            RelocateError,
            "Moving image",
        )
        out = self._json(resp, RelocateError, "Moving image")
        path = out.get("path") if isinstance(out, dict) else None
        return path or destination

    def persist_patch(self, avatar: str, patch: Mapping[str, Any]) -> None:
        """Merge changed fields into the stored character card."""
        payload = {"avatar": avatar}
        payload.update(patch)
        self._post_json(
            "/api/characters/merge-attributes",
            payload,
            PersistError,
            "Merging attributes",
        )

    def _bust(self, url: str) -> None:
        try:
            self.session.get(url, headers=NO_CACHE_HEADERS, timeout=self.config.request_timeout)
        except requests.RequestException as exc:
            logger.warning("Failed cache bust for %s: %s", url, exc)

    def invalidate_caches(self, avatar: str, url_map: Mapping[str, str]) -> None:
        """Re-request everything the host or a browser may have cached.

        Per-image failures are only logged. A failed re-read of the card or
        its avatar raises :class:`CacheInvalidationError`.
        """
        for remote_url, local_path in url_map.items():
            self._bust(self.proxied(remote_url))
            self._bust(self._url(local_path))

        try:
            for _ in range(2):
                self.fetch_record(avatar, headers=NO_CACHE_HEADERS)
        except RecordFetchError as exc:
            raise CacheInvalidationError(str(exc)) from exc

        avatar_url = self._url(f"/characters/{avatar}")
        try:
            resp = self.session.get(
                avatar_url,
                headers={**self._headers(), **NO_CACHE_HEADERS},
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as exc:
            raise CacheInvalidationError(f"Failed to fetch avatar image: {exc}") from exc
        if not resp.ok:
            raise CacheInvalidationError(
                f"Failed to fetch avatar image: {resp.status_code} {_error_text(resp)}"
            )
        logger.debug("Cache bust complete for %s", avatar)
