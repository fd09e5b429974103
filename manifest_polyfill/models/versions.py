"""Top-level version manifest models.

Unknown keys are kept (``extra="allow"``) and dumped back in the order they
arrived, so the rewritten manifest only differs from upstream in the
entries we touched.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator


class _UpstreamOrderedModel(BaseModel):
    """Remembers the key order of the mapping it was validated from."""

    _key_order: tuple[str, ...] = PrivateAttr(default=())

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler: Any) -> Any:
        model = handler(data)
        if isinstance(data, dict):
            model._key_order = tuple(data)
        return model

    def to_json(self) -> dict[str, Any]:
        dumped = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        keys = [key for key in self._key_order if key in dumped]
        keys += [key for key in dumped if key not in keys]
        return {key: dumped[key] for key in keys}


class VersionIndexEntry(_UpstreamOrderedModel):
    """One ``versions[]`` entry of the top-level manifest."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    type: str | None = None
    url: str
    time: str | None = None
    release_time: str | None = Field(default=None, alias="releaseTime")
    sha1: str
    compliance_level: int | None = Field(default=None, alias="complianceLevel")


class VersionManifest(_UpstreamOrderedModel):
    """The top-level index: ``{"latest": {...}, "versions": [...]}``."""

    model_config = ConfigDict(extra="allow")

    latest: dict[str, str] = {}
    versions: list[VersionIndexEntry]

    def to_json(self) -> dict[str, Any]:
        dumped = super().to_json()
        dumped["versions"] = [entry.to_json() for entry in self.versions]
        return dumped
