"""Deduplicating artifact resolution cache.

Maps an artifact URL to its ``ArtifactDescriptor`` (path, url, size, sha1).
Two layers:

- in memory, for the lifetime of the process: a URL is downloaded and
  hashed at most once, however many threads ask for it concurrently;
- on disk under ``base_path``: downloaded bytes survive across runs.  A file
  already present is trusted without re-verification.

The whole miss path (download + hash + insert) runs under one lock.  That
serializes misses for distinct URLs against each other; hits never take
the lock.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from manifest_polyfill.core.fetcher import Fetcher
from manifest_polyfill.core.hasher import sha1_file
from manifest_polyfill.models.artifacts import ArtifactDescriptor

logger = logging.getLogger(__name__)


class ArtifactResolutionCache:
    """Resolve artifact URLs to descriptors, downloading each at most once.

    Parameters
    ----------
    fetcher:
        Used to download artifacts that are not on disk yet.
    base_path:
        Root of the on-disk cache.  An artifact with Maven path ``p`` is
        stored at ``base_path / p``.
    """

    def __init__(self, fetcher: Fetcher, base_path: Path) -> None:
        self._fetcher = fetcher
        self._base = Path(base_path)
        self._descriptors: dict[str, ArtifactDescriptor] = {}
        self._lock = threading.Lock()

    def local_path(self, path: str) -> Path:
        """On-disk location for a Maven-relative artifact path."""
        return self._base / path

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    def resolve(self, url: str, path: str) -> ArtifactDescriptor:
        """Return the descriptor for ``url``, downloading it if needed.

        Parameters
        ----------
        url:
            Where the artifact is published.
        path:
            Maven-relative path, recorded in the descriptor and used as the
            location under the on-disk cache.

        Raises
        ------
        FetchError
            If the download fails.
        FilesystemError
            If the local file cannot be written or read.
        """
        descriptor = self._descriptors.get(url)
        if descriptor is not None:
            return descriptor

        with self._lock:
            # Another thread may have finished this URL while we waited.
            descriptor = self._descriptors.get(url)
            if descriptor is not None:
                return descriptor

            local = self.local_path(path)
            if local.exists():
                logger.debug("Using cached artifact %s", local)
            else:
                logger.info("Downloading %s", url)
                self._fetcher.download(url, local)

            size, digest = sha1_file(local)
            descriptor = ArtifactDescriptor(path=path, url=url, size=size, sha1=digest)
            self._descriptors[url] = descriptor
            return descriptor

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, url: str) -> ArtifactDescriptor | None:
        """Return the descriptor for ``url`` if already resolved, else None."""
        return self._descriptors.get(url)

    def __contains__(self, url: object) -> bool:
        return url in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
