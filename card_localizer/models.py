"""Data models used throughout the localizer pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


@dataclass(frozen=True)
class ReferenceMatch:
    """One embedded image reference discovered in a text block."""

    full: str
    url: str
    alt: str = ""

    @property
    def is_markdown(self) -> bool:
        return self.full.startswith("[") or self.full.startswith("![")

    @property
    def is_html(self) -> bool:
        return self.full.lower().startswith("<img")


@dataclass
class CharacterRef:
    """Identifies the card to localize on the host application."""

    avatar: str
    name: Optional[str] = None


class LocalizeResult(IntEnum):
    """Outcome of one localization run."""

    FAILURE = -1
    NOOP = 0
    SUCCESS = 1


class RunState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    EMPTY_RESULT = "empty_result"
    RESOLVING = "resolving"
    REWRITING = "rewriting"
    NO_CHANGE = "no_change"
    PATCHED = "patched"
    FAILED = "failed"
