"""Server archive index models (one record per archived server build)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from manifest_polyfill.errors import ShapeError


class ServerFormat(BaseModel):
    """One downloadable packaging of a server build (``jar``, ``zip``, ...)."""

    model_config = ConfigDict(frozen=True, extra="allow")

    format: str
    sha1: str
    size: int
    url: str


class ServerBuildRecord(BaseModel):
    """A server build and the client versions it can serve."""

    model_config = ConfigDict(frozen=True, extra="allow")

    available_formats: tuple[ServerFormat, ...]
    compatible_clients: tuple[str, ...]

    def jar_format(self) -> ServerFormat:
        """Return the single ``jar`` format.

        Raises
        ------
        ShapeError
            If the record lists no jar, or more than one.
        """
        jars = [f for f in self.available_formats if f.format == "jar"]
        if len(jars) != 1:
            raise ShapeError(
                f"Expected exactly one jar format, found {len(jars)} "
                f"(clients: {', '.join(self.compatible_clients)})"
            )
        return jars[0]
