"""Client version id → server build lookup, built from the server archive index."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from manifest_polyfill.config import MatchStrategy
from manifest_polyfill.errors import ShapeError
from manifest_polyfill.models.server import ServerBuildRecord
from manifest_polyfill.models.validation import validate_shape

logger = logging.getLogger(__name__)


def strip_qualifier(client_id: str) -> str:
    """Drop a trailing ``-qualifier`` (``a1.2.2-1520`` → ``a1.2.2``)."""
    return client_id.split("-")[0]


class ServerIndexMatcher:
    """Builds the client id lookup from archive records ordered oldest-first.

    Records are walked newest-first.  Under ``MatchStrategy.LAST_WRITE``
    every record listing an id overwrites the previous assignment, so the
    stored record for an id is the *oldest* one listing it.  Under
    ``MatchStrategy.NEWEST`` the first assignment is kept instead.
    """

    def __init__(self, strategy: MatchStrategy = MatchStrategy.LAST_WRITE) -> None:
        self.strategy = strategy

    @staticmethod
    def parse_records(data: Any, *, source: str = "server index") -> list[ServerBuildRecord]:
        """Validate the raw archive index JSON (a list of records)."""
        if not isinstance(data, list):
            raise ShapeError(f"{source} must be a JSON array, got {type(data).__name__}")
        return [validate_shape(ServerBuildRecord, item, source=source) for item in data]

    def build_index(
        self, records: Sequence[ServerBuildRecord]
    ) -> dict[str, ServerBuildRecord]:
        index: dict[str, ServerBuildRecord] = {}
        for record in reversed(records):
            for client_id in self._client_ids(record):
                if self.strategy is MatchStrategy.NEWEST and client_id in index:
                    continue
                index[client_id] = record

        logger.debug(
            "Indexed %d client ids from %d server records (%s)",
            len(index),
            len(records),
            self.strategy.value,
        )
        return index

    @staticmethod
    def _client_ids(record: ServerBuildRecord) -> Iterable[str]:
        return (strip_qualifier(client) for client in record.compatible_clients)
