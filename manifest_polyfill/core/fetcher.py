"""HTTP access for manifests, archive indices, and artifact downloads.

``Fetcher`` is the seam the rest of the package depends on; ``HttpFetcher``
is the httpx-backed implementation used by the CLI.  Tests substitute an
in-memory fetcher or an ``httpx.MockTransport``.

Downloads stream into a ``.part`` sibling and are renamed into place only
once the body is complete, so an aborted download never leaves a file that
the artifact cache would later trust.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx

from manifest_polyfill.errors import FetchError, FilesystemError, ShapeError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 20


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Fetcher(Protocol):
    """Anything that can fetch JSON and download files.

    Implementations must be safe to call from several threads at once.
    """

    def get_json(self, url: str) -> Any:
        """Fetch ``url`` and decode the body as JSON."""
        ...

    def download(self, url: str, destination: Path) -> None:
        """Download ``url`` to ``destination``, creating parent directories."""
        ...


# ---------------------------------------------------------------------------
# httpx implementation
# ---------------------------------------------------------------------------


class HttpFetcher:
    """Blocking httpx client wrapper.

    Parameters
    ----------
    timeout:
        Per-request timeout in seconds.
    client:
        Pre-built client (tests pass one with a ``MockTransport``).  When
        omitted, a client is created and owned by this fetcher.
    """

    def __init__(self, timeout: float = 60.0, client: httpx.Client | None = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "manifest-polyfill"},
        )

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def get_text(self, url: str) -> str:
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"GET {url} returned HTTP {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {url} failed: {exc}", url=url) from exc
        return response.text

    def get_json(self, url: str) -> Any:
        text = self.get_text(url)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ShapeError(f"Response from {url} is not JSON: {exc}") from exc

    def download(self, url: str, destination: Path) -> None:
        part_path = destination.with_name(destination.name + ".part")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"Cannot create {destination.parent}: {exc}") from exc

        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with part_path.open("wb") as stream:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        stream.write(chunk)
            part_path.replace(destination)
        except httpx.HTTPStatusError as exc:
            part_path.unlink(missing_ok=True)
            raise FetchError(
                f"Download of {url} returned HTTP {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            part_path.unlink(missing_ok=True)
            raise FetchError(f"Download of {url} failed: {exc}", url=url) from exc
        except OSError as exc:
            part_path.unlink(missing_ok=True)
            raise FilesystemError(f"Cannot write {destination}: {exc}") from exc

        logger.debug("Downloaded %s to %s", url, destination)
