"""Localize remote images embedded in character cards."""

from .config import LocalizeConfig
from .localizer import ImageLocalizer, localize_images, run_localize
from .models import CharacterRef, LocalizeResult, ReferenceMatch

__all__ = [
    "CharacterRef",
    "ImageLocalizer",
    "LocalizeConfig",
    "LocalizeResult",
    "ReferenceMatch",
    "localize_images",
    "run_localize",
]

__version__ = "0.1.0"
