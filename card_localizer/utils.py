"""Utility helpers for nested field access and filename normalization."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

SAFE_NAME_PATTERN = re.compile(r"[^a-z0-9_-]", re.IGNORECASE)
NON_DIGIT_PATTERN = re.compile(r"[^0-9]")


def safe_name(value: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with an underscore."""
    return SAFE_NAME_PATTERN.sub("_", value)


def avatar_stem(avatar: str) -> str:
    """Return the avatar filename without directories or extension."""
    filename = avatar.split("/")[-1] or "character.png"
    return filename.split(".")[0]


def avatar_number(avatar_name: str, char_name: str) -> str:
    """Digits left over once the character name is removed from the avatar stem.

    Hosts disambiguate cards sharing a name as ``Name``, ``Name1``, ``Name2``...
    """
    return NON_DIGIT_PATTERN.sub("", avatar_name.replace(char_name, "", 1))


def get_deep(obj: Any, path: str, default: Any = None) -> Any:
    """Resolve a dot-separated path, returning ``default`` when any level is missing."""
    current = obj
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return default
        if part not in current:
            return default
        current = current[part]
    return default if current is None else current


def set_deep(obj: Dict[str, Any], path: str, value: Any) -> None:
    """Assign ``value`` at a dot-separated path, creating intermediate dicts."""
    parts = path.split(".")
    current = obj
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value
