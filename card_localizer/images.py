"""Image type detection and naming helpers."""

from __future__ import annotations

import posixpath
from typing import Optional
from urllib.parse import urlparse

from filetype import guess

from .utils import avatar_number, safe_name

URL_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def infer_image_extension(
    content_type: Optional[str],
    data: bytes,
    fallback: str = "png",
) -> str:
    """Pick a file extension from the file signature, then HTTP metadata, then ``fallback``."""
    detected = detect_image_format(data)
    if detected:
        return detected
    if content_type:
        parts = content_type.split(";")[0].split("/")
        if len(parts) == 2 and parts[0].strip().lower() == "image" and parts[1].strip():
            ext = parts[1].strip().lower().split("+")[0]
            if ext == "jpeg":
                ext = "jpg"
            return ext
    return fallback


def extension_from_url(url: str, default: str = "png") -> str:
    """Guess the extension a URL's path advertises, limited to common image types."""
    suffix = posixpath.splitext(urlparse(url).path)[1].lstrip(".").lower()
    if suffix in URL_EXTENSIONS:
        return suffix
    return default


def extension_of(path: str, default: str = "png") -> str:
    suffix = posixpath.splitext(path)[1].lstrip(".").lower()
    return suffix or default


def upload_filename(name_hint: str, index: int, extension: str) -> str:
    """Temporary upload name, e.g. ``Alice3_0.png``."""
    return f"{safe_name(name_hint)}_{index}.{extension}"


def destination_path(
    images_root: str,
    char_name: str,
    avatar_name: str,
    index: int,
    extension: str,
) -> str:
    """Permanent location, e.g. ``/user/images/Alice/3/0.png``."""
    parts = [images_root.rstrip("/"), safe_name(char_name)]
    number = avatar_number(avatar_name, char_name)
    if number:
        parts.append(number)
    parts.append(f"{index}.{extension}")
    return "/".join(parts)
