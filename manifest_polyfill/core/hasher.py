"""Hashing and serialization helpers for emitted documents and artifacts.

Emitted documents are hashed over exactly the bytes written to disk, so the
serialization must be deterministic for a given input:
- key insertion order preserved (no sorting, upstream order survives)
- no whitespace separators (",", ":")
- non-ASCII kept as-is, UTF-8 encoded
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from manifest_polyfill.errors import FilesystemError

_CHUNK_SIZE = 1 << 20


def document_bytes(obj: Any) -> bytes:
    """Serialize a JSON document to compact, order-preserving UTF-8 bytes."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def sha1_hex(data: bytes) -> str:
    """Return the SHA-1 hex digest of raw bytes."""
    return hashlib.sha1(data).hexdigest()


def sha1_file(path: Path) -> tuple[int, str]:
    """Stream a file and return ``(size, sha1_hex)``."""
    digest = hashlib.sha1()
    size = 0
    try:
        with path.open("rb") as stream:
            for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
                size += len(chunk)
    except OSError as exc:
        raise FilesystemError(f"Cannot read {path}: {exc}") from exc
    return size, digest.hexdigest()
