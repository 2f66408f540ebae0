"""Configuration objects and constants for the image localizer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

DEFAULT_BASE_URL = "http://127.0.0.1:8000"

# Dot-separated paths into the character card that may hold embedded images.
DEFAULT_SCAN_FIELDS: Tuple[str, ...] = (
    "data.first_mes",
    "data.alternate_greetings",
    "data.creator_notes",
)


@dataclass(frozen=True)
class LocalizeConfig:
    """Settings that control scanning, downloading and persisting a card."""

    base_url: str = DEFAULT_BASE_URL
    csrf_token: Optional[str] = None
    scan_fields: Tuple[str, ...] = field(default=DEFAULT_SCAN_FIELDS)
    root_segment: str = "data"
    images_root: str = "/user/images"
    default_extension: str = "png"
    request_timeout: float = 30.0
    use_proxy: bool = True
    max_image_bytes: int = 10 * 1024 * 1024

    @classmethod
    def from_env(cls, **overrides) -> "LocalizeConfig":
        """Build a config from ``CARD_LOCALIZER_*`` variables, then apply overrides."""
        config = cls()
        base_url = os.getenv("CARD_LOCALIZER_BASE_URL")
        if base_url:
            config = replace(config, base_url=base_url)
        token = os.getenv("CARD_LOCALIZER_CSRF_TOKEN")
        if token:
            config = replace(config, csrf_token=token)
        timeout = os.getenv("CARD_LOCALIZER_TIMEOUT")
        if timeout:
            config = replace(config, request_timeout=float(timeout))
        overrides = {key: value for key, value in overrides.items() if value is not None}
        return replace(config, **overrides)
