"""Run configuration — env-driven via pydantic-settings.

All settings can be overridden via MANIFEST_POLYFILL_* environment variables
or a .env file in the working directory.  The CLI applies its options on
top of whatever this loads.

Examples
--------
Override via environment::

    export MANIFEST_POLYFILL_OUTPUT_DIRECTORY=site
    export MANIFEST_POLYFILL_MAX_WORKERS=8
    export MANIFEST_POLYFILL_SERVER_MATCH_STRATEGY=newest
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchStrategy(str, Enum):
    """How a client id picks between several server records listing it.

    ``LAST_WRITE`` walks the archive index newest-first and lets every
    record overwrite the previous assignment, so the oldest listing record
    ends up stored.  ``NEWEST`` keeps the first (newest) assignment.
    """

    LAST_WRITE = "last_write"
    NEWEST = "newest"


DEFAULT_ID_SUBSTITUTIONS: dict[str, str] = {
    "1.0": "1.0.0",
    "a1.2.2a": "a1.2.2",
    "a1.2.2b": "a1.2.2",
    "b1.3b": "b1.3",
}


class PolyfillConfig(BaseSettings):
    """Everything one polyfill run needs to know.

    ``id_substitutions`` maps launcher version ids to the id the server
    archive uses for the same release.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MANIFEST_POLYFILL_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream sources
    secondary_index_url: str = "https://betacraft.uk/server-archive/server_index.json"
    top_level_manifest_url: str = (
        "https://launchermeta.mojang.com/mc/game/version_manifest_v2.json"
    )

    # Replacement distribution
    replacement_base_url: str = "https://maven.glass-launcher.net/babric/"
    replacement_version: str = "2.9.4-babric.1"
    legacy_group_id: str = "org.lwjgl.lwjgl"
    legacy_version_prefix: str = "2."

    # Emission
    emission_base_url: str = "https://babric.github.io/manifest-polyfill/"
    output_directory: Path = Path("out")
    local_cache_directory: Path = Path("build/tmp")
    index_file_name: str = "version_manifest_v2.json"

    # Matching policy
    id_substitutions: dict[str, str] = dict(DEFAULT_ID_SUBSTITUTIONS)
    server_match_strategy: MatchStrategy = MatchStrategy.LAST_WRITE

    # Execution
    max_workers: int = 1
    http_timeout_seconds: float = 60.0
    log_level: str = "INFO"

    @field_validator("replacement_base_url", "emission_base_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    @field_validator("max_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_workers must be at least 1")
        return value

    def emission_url(self, version_id: str) -> str:
        """Self-hosted URL an emitted version document is published under."""
        return f"{self.emission_base_url}{version_id}.json"
