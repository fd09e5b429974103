"""Error taxonomy for the polyfill run.

Every failure aborts the whole run.  Callers that want to react to a
category (network vs. malformed input vs. local disk) catch the subclass;
the CLI catches ``PolyfillError``.
"""

from __future__ import annotations

__all__ = [
    "PolyfillError",
    "FetchError",
    "ShapeError",
    "FilesystemError",
    "DownloadIntegrityError",
]


class PolyfillError(RuntimeError):
    """Base exception for every failure raised by manifest_polyfill."""


class FetchError(PolyfillError):
    """Raised on a transport failure or a non-success HTTP response."""

    def __init__(self, message: str, *, url: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ShapeError(PolyfillError):
    """Raised when an expected JSON field is missing or has the wrong type."""


class FilesystemError(PolyfillError):
    """Raised when reading or writing a local file fails."""


class DownloadIntegrityError(PolyfillError):
    """Reserved for hash verification of pre-existing cached artifacts.

    Cached files are trusted as-is, so nothing raises this yet.
    """
