"""Summary of a finished polyfill run."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PolyfillReport(BaseModel):
    """What a run changed.  Ids are in manifest order."""

    model_config = ConfigDict(frozen=True)

    total_versions: int
    emitted: list[str] = []
    backfilled: list[str] = []
    patched: list[str] = []
    artifacts_resolved: int = 0
