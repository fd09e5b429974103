"""Writes emitted version documents and the rewritten manifest to disk.

Layout: {base_path}/{version_id}.json and {base_path}/{index_file_name}
"""

from __future__ import annotations

import logging
from pathlib import Path

from manifest_polyfill.core.hasher import document_bytes
from manifest_polyfill.errors import FilesystemError
from manifest_polyfill.models.versions import VersionManifest

logger = logging.getLogger(__name__)


class OutputWriter:
    """Persists polyfill output under one directory.

    Parameters
    ----------
    base_path:
        Output directory; created on first write.
    index_file_name:
        File name of the rewritten top-level manifest.
    """

    def __init__(self, base_path: Path, index_file_name: str = "version_manifest_v2.json") -> None:
        self._base = Path(base_path)
        self.index_file_name = index_file_name

    @property
    def base_path(self) -> Path:
        return self._base

    def document_path(self, version_id: str) -> Path:
        return self._base / f"{version_id}.json"

    def write_document(self, version_id: str, data: bytes) -> Path:
        """Write already-serialized document bytes for ``version_id``."""
        target = self.document_path(version_id)
        self._write(target, data)
        logger.debug("Wrote %s (%d bytes)", target, len(data))
        return target

    def write_index(self, manifest: VersionManifest) -> Path:
        target = self._base / self.index_file_name
        self._write(target, document_bytes(manifest.to_json()))
        logger.info("Wrote manifest with %d versions to %s", len(manifest.versions), target)
        return target

    def _write(self, target: Path, data: bytes) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise FilesystemError(f"Cannot write {target}: {exc}") from exc
