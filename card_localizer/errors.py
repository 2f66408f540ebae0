"""Exceptions raised by the localizer collaborators."""

from __future__ import annotations


class LocalizeError(RuntimeError):
    """Base class for every localizer failure."""


class RecordFetchError(LocalizeError):
    """The character record could not be read from the host."""


FetchError = RecordFetchError


class DownloadError(LocalizeError):
    """A remote image could not be retrieved."""


class StoreError(LocalizeError):
    """A downloaded image could not be uploaded to host storage."""


class RelocateError(LocalizeError):
    """A stored image could not be moved to its permanent location."""


class PersistError(LocalizeError):
    """The patch could not be merged into the stored record."""


class CacheInvalidationError(LocalizeError):
    """Cache busting failed; never fatal."""
