"""Version patch orchestrator — drives a complete polyfill run.

Per version:
1. fetch the version document;
2. backfill a missing ``server`` download from the server archive index;
3. rewrite legacy native libraries via the ``LibraryPatcher``;
4. if either step changed the document, serialize it, hash the bytes, write
   it out, and point the manifest entry at the self-hosted copy.

Versions are independent and may run on a thread pool; the artifact cache is
the only state they share.  Any error aborts the run before the manifest is
written, leaving already-emitted documents on disk.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from pydantic import BaseModel, ConfigDict

from manifest_polyfill.config import PolyfillConfig
from manifest_polyfill.core.artifact_cache import ArtifactResolutionCache
from manifest_polyfill.core.fetcher import Fetcher
from manifest_polyfill.core.hasher import document_bytes, sha1_hex
from manifest_polyfill.core.library_patcher import LibraryPatcher
from manifest_polyfill.core.output import OutputWriter
from manifest_polyfill.core.server_index import ServerIndexMatcher
from manifest_polyfill.errors import ShapeError
from manifest_polyfill.models.report import PolyfillReport
from manifest_polyfill.models.server import ServerBuildRecord
from manifest_polyfill.models.validation import validate_shape
from manifest_polyfill.models.versions import VersionIndexEntry, VersionManifest

logger = logging.getLogger(__name__)


class VersionResult(BaseModel):
    """Outcome of processing one manifest entry."""

    model_config = ConfigDict(frozen=True)

    entry: VersionIndexEntry
    backfilled: bool = False
    patched: bool = False

    @property
    def changed(self) -> bool:
        return self.backfilled or self.patched


class VersionPatchOrchestrator:
    """Central coordinator for a polyfill run.

    Parameters
    ----------
    config:
        Run configuration.  Uses ``PolyfillConfig()`` defaults if omitted.
    fetcher:
        Network access for manifests, documents and artifacts.
    cache:
        Artifact cache to share; one rooted at
        ``config.local_cache_directory`` is created if omitted.
    writer:
        Output sink; one rooted at ``config.output_directory`` is created
        if omitted.
    """

    def __init__(
        self,
        config: PolyfillConfig | None = None,
        *,
        fetcher: Fetcher,
        cache: ArtifactResolutionCache | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self.config = config or PolyfillConfig()
        self.fetcher = fetcher
        self.cache = cache or ArtifactResolutionCache(
            fetcher, self.config.local_cache_directory
        )
        self.writer = writer or OutputWriter(
            self.config.output_directory, self.config.index_file_name
        )
        self.matcher = ServerIndexMatcher(self.config.server_match_strategy)
        self.patcher = LibraryPatcher(
            self.cache,
            legacy_group_id=self.config.legacy_group_id,
            legacy_version_prefix=self.config.legacy_version_prefix,
            replacement_version=self.config.replacement_version,
            replacement_base_url=self.config.replacement_base_url,
        )
        self.server_index: dict[str, ServerBuildRecord] = {}

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def load_server_index(self) -> dict[str, ServerBuildRecord]:
        """Fetch the server archive index and build the client id lookup."""
        url = self.config.secondary_index_url
        records = self.matcher.parse_records(self.fetcher.get_json(url), source=url)
        self.server_index = self.matcher.build_index(records)
        return self.server_index

    def load_manifest(self) -> VersionManifest:
        url = self.config.top_level_manifest_url
        return validate_shape(VersionManifest, self.fetcher.get_json(url), source=url)

    def run(self) -> PolyfillReport:
        """Process every manifest version and write the rewritten manifest.

        The manifest file is only written once every version succeeded.
        """
        self.load_server_index()
        manifest = self.load_manifest()
        logger.info("Processing %d versions", len(manifest.versions))

        results = self._process_all(manifest.versions)

        rewritten = manifest.model_copy(
            update={"versions": [result.entry for result in results]}
        )
        self.writer.write_index(rewritten)

        report = PolyfillReport(
            total_versions=len(results),
            emitted=[r.entry.id for r in results if r.changed],
            backfilled=[r.entry.id for r in results if r.backfilled],
            patched=[r.entry.id for r in results if r.patched],
            artifacts_resolved=len(self.cache),
        )
        logger.info(
            "Emitted %d of %d versions (%d server backfills, %d library rewrites)",
            len(report.emitted),
            report.total_versions,
            len(report.backfilled),
            len(report.patched),
        )
        return report

    def _process_all(self, entries: list[VersionIndexEntry]) -> list[VersionResult]:
        if self.config.max_workers == 1:
            return [self.process_version(entry) for entry in entries]

        executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="polyfill"
        )
        futures: list[Future[VersionResult]] = [
            executor.submit(self.process_version, entry) for entry in entries
        ]
        try:
            results = [future.result() for future in futures]
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return results

    # ------------------------------------------------------------------
    # Per-version processing
    # ------------------------------------------------------------------

    def process(self, entry: VersionIndexEntry) -> VersionIndexEntry:
        """Process one version; return the entry, rewritten if emitted."""
        return self.process_version(entry).entry

    def process_version(self, entry: VersionIndexEntry) -> VersionResult:
        document = self.fetcher.get_json(entry.url)
        if not isinstance(document, dict):
            raise ShapeError(f"Version document {entry.id} must be a JSON object")

        document, backfilled = self.backfill_server(document, entry.id)
        document, patched = self.patcher.patch(document)

        if backfilled:
            logger.info("%s: added server download", entry.id)
        if patched:
            logger.info("%s: rewrote legacy libraries", entry.id)

        if not (backfilled or patched):
            logger.debug("%s: unchanged", entry.id)
            return VersionResult(entry=entry)

        return VersionResult(
            entry=self.emit(entry, document), backfilled=backfilled, patched=patched
        )

    def backfill_server(
        self, document: dict[str, Any], version_id: str
    ) -> tuple[dict[str, Any], bool]:
        """Return ``(document, changed)`` with a ``server`` download added.

        The version id is mapped through ``config.id_substitutions`` before
        the server index lookup.  Documents that already have a server
        download, or whose id has no match, come back unchanged.
        """
        downloads = document.get("downloads")
        if not isinstance(downloads, dict):
            raise ShapeError(f"Version document {version_id} has no 'downloads' object")
        if "server" in downloads:
            return document, False

        canonical_id = self.config.id_substitutions.get(version_id, version_id)
        record = self.server_index.get(canonical_id)
        if record is None:
            return document, False

        jar = record.jar_format()
        server = {"sha1": jar.sha1.lower(), "size": jar.size, "url": jar.url}
        return {**document, "downloads": {**downloads, "server": server}}, True

    def emit(self, entry: VersionIndexEntry, document: dict[str, Any]) -> VersionIndexEntry:
        """Write ``document`` and return ``entry`` pointing at the written copy."""
        data = document_bytes(document)
        digest = sha1_hex(data)
        self.writer.write_document(entry.id, data)
        logger.info("%s: emitted (sha1=%s)", entry.id, digest)
        return entry.model_copy(
            update={"url": self.config.emission_url(entry.id), "sha1": digest}
        )
