"""
Error and saved-query journal shared by ConnectionManager and QueryEngine.

Both lists are append-only and chronological; they are emptied only on request.
"""

import logging
from typing import Any

from dbquery.models import ErrorRecord, SavedConnection, SavedQuery

logger = logging.getLogger(__name__)


def elapsed(start: float, end: float) -> float:
    """Elapsed seconds rounded to microsecond resolution."""
    return round(end - start, 6)


class QueryJournal:
    def __init__(self) -> None:
        self._errors: list[ErrorRecord] = []
        self._saved: list[SavedQuery | SavedConnection] = []

    # --- errors ---

    def add_error(self, record: ErrorRecord) -> None:
        self._errors.append(record)
        logger.warning(
            "Query failed: %s | %s",
            record.query,
            record.query_error.message if record.query_error else record.driver_error,
        )

    @property
    def errors(self) -> list[ErrorRecord]:
        return list(self._errors)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    def last_error(self) -> ErrorRecord | None:
        return self._errors[-1] if self._errors else None

    def clear_errors(self) -> None:
        self._errors = []

    # --- saved queries ---

    def add_query(self, query: str, parameters: dict[str, Any], time: float) -> None:
        self._saved.append(SavedQuery(query=query, parameters=dict(parameters), time=time))

    def add_connection(self, time: float) -> None:
        self._saved.append(SavedConnection(time=time))

    @property
    def saved_queries(self) -> list[SavedQuery | SavedConnection]:
        return list(self._saved)

    def clear_saved_queries(self) -> None:
        self._saved = []
