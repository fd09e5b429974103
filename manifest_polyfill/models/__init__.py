"""manifest_polyfill data models — all pydantic v2."""

from manifest_polyfill.models.artifacts import ArtifactDescriptor, MavenCoordinate
from manifest_polyfill.models.report import PolyfillReport
from manifest_polyfill.models.server import ServerBuildRecord, ServerFormat
from manifest_polyfill.models.validation import validate_shape
from manifest_polyfill.models.versions import VersionIndexEntry, VersionManifest

__all__ = [
    # artifacts
    "ArtifactDescriptor",
    "MavenCoordinate",
    # server archive
    "ServerBuildRecord",
    "ServerFormat",
    # manifest
    "VersionIndexEntry",
    "VersionManifest",
    # report
    "PolyfillReport",
    "validate_shape",
]
