"""
Lazily created single connection owned by one QueryEngine.

Opens the connection through the Configurator on first use, records the
connection time and connection failures in the journal, and closes quietly.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from dbquery.core.connection.connect import driver_error
from dbquery.core.errors import ConnectionFailedError
from dbquery.core.journal import QueryJournal, elapsed
from dbquery.models import ErrorRecord

if TYPE_CHECKING:
    from dbquery.core.configurator import Configurator

_log = logging.getLogger(__name__)


class ConnectionManager:
    """Owns at most one driver connection at a time."""

    def __init__(self, configurator: Configurator, journal: QueryJournal) -> None:
        self._configurator = configurator
        self._journal = journal
        self._conn: Any = None

    def get_handle(self) -> Any:
        return self._conn

    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> Any:
        """
        Open a new connection, replacing (and closing) the current one.

        Raises ConnectionFailedError after journaling the failure.
        """
        if self._conn is not None:
            self.disconnect()

        start = time.perf_counter()
        try:
            conn = self._configurator.create_connection()
        except Exception as e:
            self._journal.add_error(
                ErrorRecord(
                    query=self._configurator.dsn,
                    query_error=None,
                    driver_error=driver_error(e),
                    dump_params=repr(self._configurator.connection_parameters()),
                )
            )
            raise ConnectionFailedError("Error Connecting Database") from e
        end = time.perf_counter()

        if self._configurator.has_save_queries():
            self._journal.add_connection(elapsed(start, end))
        _log.debug("Connected to %s in %.6fs", self._configurator.dsn, end - start)
        self._conn = conn
        return conn

    def ensure_connected(self) -> Any:
        if self._conn is None:
            return self.connect()
        return self._conn

    def disconnect(self) -> None:
        """Close and forget the connection. Idempotent."""
        conn, self._conn = self._conn, None
        if conn is not None:
            self._close_quiet(conn)
            _log.debug("Disconnected from %s", self._configurator.dsn)

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            _log.debug("Closing connection failed", exc_info=True)
