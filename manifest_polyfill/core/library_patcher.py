"""Rewrite legacy native-library entries to point at the replacement fork.

For every library whose group is the legacy group and whose version starts
with the legacy prefix:

1. an ``allow`` rule scoped to macOS drops the entry (the fork ships its
   own macOS natives, so the upstream macOS override is obsolete).  A drop
   on its own does not mark the list changed;
2. otherwise ``downloads`` and ``rules`` are stripped, ``name`` and ``url``
   are rewritten to the fork, and ``downloads`` is rebuilt from artifacts
   resolved through the ``ArtifactResolutionCache``.

Patching never mutates its input; it returns new lists/documents plus a
``changed`` flag.
"""

from __future__ import annotations

import logging
from typing import Any

from manifest_polyfill.core.artifact_cache import ArtifactResolutionCache
from manifest_polyfill.errors import ShapeError
from manifest_polyfill.models.artifacts import ArtifactDescriptor, MavenCoordinate

logger = logging.getLogger(__name__)

_DROPPED_OS = "osx"


class LibraryPatcher:
    """Swap legacy library entries for the replacement distribution.

    Parameters
    ----------
    cache:
        Resolves replacement artifacts (shared across versions and threads).
    legacy_group_id:
        Maven group of the legacy distribution, e.g. ``org.lwjgl.lwjgl``.
    legacy_version_prefix:
        Only versions starting with this prefix are replaced, e.g. ``2.``.
    replacement_version:
        Version string of the fork, e.g. ``2.9.4-babric.1``.
    replacement_base_url:
        Maven repository root of the fork, ending in ``/``.
    """

    def __init__(
        self,
        cache: ArtifactResolutionCache,
        *,
        legacy_group_id: str,
        legacy_version_prefix: str,
        replacement_version: str,
        replacement_base_url: str,
    ) -> None:
        self._cache = cache
        self.legacy_group_id = legacy_group_id
        self.legacy_version_prefix = legacy_version_prefix
        self.replacement_version = replacement_version
        self.replacement_base_url = replacement_base_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def patch(self, document: dict[str, Any]) -> tuple[dict[str, Any], bool]:
        """Return ``(document, changed)`` with its ``libraries`` rewritten.

        Documents without ``libraries``, or whose only legacy entries are
        macOS drops, come back unchanged.
        """
        libraries = document.get("libraries")
        if libraries is None:
            return document, False
        if not isinstance(libraries, list):
            raise ShapeError("'libraries' must be a list")

        patched, changed = self.patch_libraries(libraries)
        if not changed:
            return document, False
        return {**document, "libraries": patched}, True

    def patch_libraries(
        self, libraries: list[dict[str, Any]]
    ) -> tuple[list[dict[str, Any]], bool]:
        result: list[dict[str, Any]] = []
        changed = False

        for library in libraries:
            if not isinstance(library, dict):
                raise ShapeError(f"Library entry must be an object, got {library!r}")
            coordinate = MavenCoordinate.parse(_library_name(library))

            if not self.is_legacy(coordinate):
                result.append(library)
                continue

            if _allows_dropped_os(library):
                logger.debug("Dropping macOS-specific entry %s", coordinate)
                continue
            result.append(self._rewrite(library, coordinate))
            changed = True

        return result, changed

    def is_legacy(self, coordinate: MavenCoordinate) -> bool:
        return coordinate.group == self.legacy_group_id and coordinate.version.startswith(
            self.legacy_version_prefix
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _rewrite(
        self, library: dict[str, Any], coordinate: MavenCoordinate
    ) -> dict[str, Any]:
        replacement = coordinate.with_version(self.replacement_version)

        rewritten = {k: v for k, v in library.items() if k not in ("downloads", "rules")}
        rewritten["name"] = str(replacement)
        rewritten["url"] = self.replacement_base_url

        natives = library.get("natives")
        if natives is not None:
            if not isinstance(natives, dict):
                raise ShapeError(f"'natives' of {coordinate} must be an object")
            classifiers: dict[str, Any] = {}
            for classifier in natives.values():
                if not isinstance(classifier, str):
                    raise ShapeError(f"Classifier in {coordinate} must be a string")
                classifiers[classifier] = self._resolve(replacement, classifier).to_json()
            rewritten["downloads"] = {"classifiers": classifiers}
        else:
            rewritten["downloads"] = {"artifact": self._resolve(replacement).to_json()}

        return rewritten

    def _resolve(
        self, coordinate: MavenCoordinate, classifier: str | None = None
    ) -> ArtifactDescriptor:
        path = coordinate.artifact_path(classifier)
        return self._cache.resolve(self.replacement_base_url + path, path)


def _library_name(library: dict[str, Any]) -> str:
    name = library.get("name")
    if not isinstance(name, str):
        raise ShapeError(f"Library entry without a string 'name': {library!r}")
    return name


def _allows_dropped_os(library: dict[str, Any]) -> bool:
    rules = library.get("rules") or []
    if not isinstance(rules, list):
        raise ShapeError(f"'rules' of {library.get('name')} must be a list")
    for rule in rules:
        if not isinstance(rule, dict) or not isinstance(rule.get("action"), str):
            raise ShapeError(f"Rule without an 'action' in {library.get('name')}")
        os_rule = rule.get("os")
        if (
            rule["action"] == "allow"
            and isinstance(os_rule, dict)
            and os_rule.get("name") == _DROPPED_OS
        ):
            return True
    return False
