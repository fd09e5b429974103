"""Shared test fixtures for manifest_polyfill."""

from __future__ import annotations

import threading
import time
from collections import Counter
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from manifest_polyfill.config import PolyfillConfig
from manifest_polyfill.core.artifact_cache import ArtifactResolutionCache
from manifest_polyfill.core.library_patcher import LibraryPatcher
from manifest_polyfill.errors import FetchError

MAVEN = "https://maven.example.org/fork/"
INDEX_URL = "https://archive.example.org/server_index.json"
MANIFEST_URL = "https://meta.example.org/version_manifest_v2.json"


class FakeFetcher:
    """In-memory ``Fetcher``: canned JSON by URL, canned bytes for downloads.

    With ``echo_downloads`` every URL missing from ``bytes_by_url``
    downloads as ``b"jar:<url>"``.  Downloads are counted per URL;
    ``download_delay`` widens the window in which concurrent callers race.
    """

    def __init__(self, *, echo_downloads: bool = True, download_delay: float = 0.0) -> None:
        self.json_by_url: dict[str, Any] = {}
        self.bytes_by_url: dict[str, bytes] = {}
        self.echo_downloads = echo_downloads
        self.download_delay = download_delay
        self.downloads: Counter[str] = Counter()
        self.json_requests: Counter[str] = Counter()
        self._lock = threading.Lock()

    def get_json(self, url: str) -> Any:
        with self._lock:
            self.json_requests[url] += 1
        if url not in self.json_by_url:
            raise FetchError(f"GET {url} returned HTTP 404", url=url, status_code=404)
        return self.json_by_url[url]

    def download(self, url: str, destination: Path) -> None:
        with self._lock:
            self.downloads[url] += 1
        if self.download_delay:
            time.sleep(self.download_delay)
        if url in self.bytes_by_url:
            data = self.bytes_by_url[url]
        elif self.echo_downloads:
            data = f"jar:{url}".encode()
        else:
            raise FetchError(f"Download of {url} returned HTTP 404", url=url, status_code=404)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)


@pytest.fixture
def fetcher() -> FakeFetcher:
    """Provide a FakeFetcher that echoes any download URL as its bytes."""
    return FakeFetcher()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def cache(fetcher: FakeFetcher, cache_dir: Path) -> ArtifactResolutionCache:
    """Provide a fresh ArtifactResolutionCache in a temp directory."""
    return ArtifactResolutionCache(fetcher, cache_dir)


@pytest.fixture
def patcher(cache: ArtifactResolutionCache) -> LibraryPatcher:
    """Provide a LibraryPatcher with the default legacy/replacement pair."""
    return LibraryPatcher(
        cache,
        legacy_group_id="org.lwjgl.lwjgl",
        legacy_version_prefix="2.",
        replacement_version="2.9.4-babric.1",
        replacement_base_url=MAVEN,
    )


@pytest.fixture
def config(tmp_path: Path) -> PolyfillConfig:
    """Provide a PolyfillConfig pointing at fake URLs and temp directories."""
    return PolyfillConfig(
        secondary_index_url=INDEX_URL,
        top_level_manifest_url=MANIFEST_URL,
        replacement_base_url=MAVEN,
        emission_base_url="https://self.example.org/polyfill/",
        output_directory=tmp_path / "out",
        local_cache_directory=tmp_path / "cache",
    )


# ---------------------------------------------------------------------------
# Payload factories — shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_server_record() -> Callable[..., dict[str, Any]]:
    """Factory fixture: raw server archive record JSON."""

    def _factory(
        clients: list[str],
        jar_url: str = "https://archive.example.org/server.jar",
        jar_sha1: str = "ABCDEF0123456789ABCDEF0123456789ABCDEF01",
        jar_size: int = 1234,
        **overrides: Any,
    ) -> dict[str, Any]:
        record: dict[str, Any] = {
            "available_formats": [
                {"format": "zip", "sha1": "0" * 40, "size": 99, "url": jar_url + ".zip"},
                {"format": "jar", "sha1": jar_sha1, "size": jar_size, "url": jar_url},
            ],
            "compatible_clients": clients,
        }
        record.update(overrides)
        return record

    return _factory


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    """Factory fixture: a version document with a client download."""

    def _factory(
        version_id: str = "b1.7.3",
        libraries: list[dict[str, Any]] | None = None,
        *,
        with_server: bool = False,
    ) -> dict[str, Any]:
        downloads: dict[str, Any] = {
            "client": {
                "sha1": "43db9b498cb67058d2e12d394e6507722e71bb45",
                "size": 1465375,
                "url": f"https://launcher.example.org/{version_id}/client.jar",
            }
        }
        if with_server:
            downloads["server"] = {
                "sha1": "1" * 40,
                "size": 1,
                "url": f"https://launcher.example.org/{version_id}/server.jar",
            }
        document: dict[str, Any] = {
            "id": version_id,
            "downloads": downloads,
            "mainClass": "net.minecraft.launchwrapper.Launch",
        }
        if libraries is not None:
            document["libraries"] = libraries
        return document

    return _factory


@pytest.fixture
def make_library() -> Callable[..., dict[str, Any]]:
    """Factory fixture: a library entry shaped like the upstream launcher's."""

    def _factory(
        name: str = "org.lwjgl.lwjgl:lwjgl:2.9.0",
        *,
        natives: dict[str, str] | None = None,
        rules: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        library: dict[str, Any] = {
            "downloads": {
                "artifact": {
                    "path": "old/path.jar",
                    "sha1": "2" * 40,
                    "size": 10,
                    "url": "https://libraries.example.org/old.jar",
                }
            },
            "name": name,
        }
        if natives is not None:
            library["extract"] = {"exclude": ["META-INF/"]}
            library["natives"] = natives
        if rules is not None:
            library["rules"] = rules
        return library

    return _factory


@pytest.fixture
def make_fetcher() -> Callable[..., FakeFetcher]:
    """Factory fixture: independent FakeFetchers within one test."""
    return FakeFetcher
