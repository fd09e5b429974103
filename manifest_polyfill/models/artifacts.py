"""Maven coordinates and resolved artifact descriptors."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from manifest_polyfill.errors import ShapeError


class ArtifactDescriptor(BaseModel):
    """A downloadable file as the launcher sees it.

    ``path`` is the Maven-relative path, ``sha1`` the hex digest of the
    file bytes.  Field order is the on-the-wire key order.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    url: str
    size: int
    sha1: str

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class MavenCoordinate(BaseModel):
    """``group:artifact:version`` as used in library ``name`` fields."""

    model_config = ConfigDict(frozen=True)

    group: str
    artifact: str
    version: str

    @classmethod
    def parse(cls, name: str) -> MavenCoordinate:
        """Parse a library name.  Parts past the third are ignored."""
        parts = name.split(":")
        if len(parts) < 3:
            raise ShapeError(f"Library name is not group:artifact:version: {name!r}")
        return cls(group=parts[0], artifact=parts[1], version=parts[2])

    def with_version(self, version: str) -> MavenCoordinate:
        return self.model_copy(update={"version": version})

    def artifact_path(self, classifier: str | None = None) -> str:
        """Maven repository layout path for this coordinate's jar.

        Layout: group/with/slashes/artifact/version/artifact-version[-classifier].jar
        """
        suffix = f"-{classifier}" if classifier else ""
        return (
            f"{self.group.replace('.', '/')}/{self.artifact}/{self.version}/"
            f"{self.artifact}-{self.version}{suffix}.jar"
        )

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"
