"""Tests for ArtifactResolutionCache — dedup, disk reuse, concurrency."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from manifest_polyfill.core import artifact_cache as artifact_cache_module
from manifest_polyfill.core.artifact_cache import ArtifactResolutionCache
from manifest_polyfill.core.hasher import sha1_file, sha1_hex
from manifest_polyfill.errors import FetchError

URL = "https://maven.example.org/fork/org/lwjgl/lwjgl/lwjgl/2.9.4-babric.1/lwjgl-2.9.4-babric.1.jar"
PATH = "org/lwjgl/lwjgl/lwjgl/2.9.4-babric.1/lwjgl-2.9.4-babric.1.jar"


class TestResolve:
    def test_downloads_and_describes(self, cache, fetcher, cache_dir: Path):
        descriptor = cache.resolve(URL, PATH)

        expected = f"jar:{URL}".encode()
        assert descriptor.path == PATH
        assert descriptor.url == URL
        assert descriptor.size == len(expected)
        assert descriptor.sha1 == sha1_hex(expected)
        assert (cache_dir / PATH).read_bytes() == expected
        assert fetcher.downloads[URL] == 1

    def test_second_resolve_is_memoized(self, cache, fetcher):
        first = cache.resolve(URL, PATH)
        second = cache.resolve(URL, PATH)

        assert second is first
        assert fetcher.downloads[URL] == 1

    def test_existing_file_is_trusted(self, cache, fetcher, cache_dir: Path):
        """A file left by an earlier run is hashed as-is, never re-downloaded."""
        local = cache_dir / PATH
        local.parent.mkdir(parents=True)
        local.write_bytes(b"from a previous run")

        descriptor = cache.resolve(URL, PATH)

        assert fetcher.downloads[URL] == 0
        assert descriptor.sha1 == sha1_hex(b"from a previous run")
        assert descriptor.size == len(b"from a previous run")

    def test_fetch_failure_propagates_and_caches_nothing(self, cache, fetcher, cache_dir):
        fetcher.echo_downloads = False

        with pytest.raises(FetchError):
            cache.resolve(URL, PATH)

        assert URL not in cache
        assert len(cache) == 0
        assert not (cache_dir / PATH).exists()

    def test_get_and_contains(self, cache):
        assert cache.get(URL) is None
        descriptor = cache.resolve(URL, PATH)
        assert URL in cache
        assert cache.get(URL) is descriptor
        assert len(cache) == 1


class TestConcurrency:
    def test_concurrent_same_url_downloads_once(self, fetcher, cache_dir: Path):
        fetcher.download_delay = 0.05
        cache = ArtifactResolutionCache(fetcher, cache_dir)
        callers = 16
        barrier = threading.Barrier(callers)

        def _resolve(_: int):
            barrier.wait()
            return cache.resolve(URL, PATH)

        with ThreadPoolExecutor(max_workers=callers) as pool:
            descriptors = list(pool.map(_resolve, range(callers)))

        assert fetcher.downloads[URL] == 1
        assert all(d == descriptors[0] for d in descriptors)
        assert all(d is descriptors[0] for d in descriptors)

    def test_concurrent_same_url_hashes_once(self, fetcher, cache_dir: Path, monkeypatch):
        local = cache_dir / PATH
        local.parent.mkdir(parents=True)
        local.write_bytes(b"from a previous run")
        hashed: list[Path] = []
        hashed_lock = threading.Lock()

        def _counting_sha1_file(path: Path):
            with hashed_lock:
                hashed.append(path)
            time.sleep(0.05)
            return sha1_file(path)

        monkeypatch.setattr(artifact_cache_module, "sha1_file", _counting_sha1_file)
        cache = ArtifactResolutionCache(fetcher, cache_dir)
        callers = 16
        barrier = threading.Barrier(callers)

        def _resolve(_: int):
            barrier.wait()
            return cache.resolve(URL, PATH)

        with ThreadPoolExecutor(max_workers=callers) as pool:
            descriptors = list(pool.map(_resolve, range(callers)))

        assert hashed == [local]
        assert fetcher.downloads[URL] == 0
        assert all(d is descriptors[0] for d in descriptors)
        assert descriptors[0].sha1 == sha1_hex(b"from a previous run")

    def test_concurrent_distinct_urls_each_download_once(self, fetcher, cache_dir: Path):
        fetcher.download_delay = 0.01
        cache = ArtifactResolutionCache(fetcher, cache_dir)
        paths = [f"g/a/1/a-1-natives-{i}.jar" for i in range(8)]
        requests = [p for p in paths for _ in range(4)]
        barrier = threading.Barrier(len(requests))

        def _resolve(path: str):
            barrier.wait()
            return cache.resolve("https://m.example.org/" + path, path)

        with ThreadPoolExecutor(max_workers=len(requests)) as pool:
            list(pool.map(_resolve, requests))

        assert len(cache) == len(paths)
        assert set(fetcher.downloads.values()) == {1}
