"""
Prepared statement: a driver cursor, the SQL text and its bound parameters.
"""

from typing import Any

from dbquery.core.connection.connect import column_names, cursor_to_dicts
from dbquery.engines.sql.binding import dump_params
from dbquery.models import BoundValue


class Statement:
    """
    One executable query scoped to a single verb call.

    ``query`` is the text as given (``:name`` placeholders); ``driver_query`` is
    the form handed to the driver. Close it once results have been read.
    """

    def __init__(self, query: str, driver_query: str, cursor: Any, parameters: dict[str, Any]) -> None:
        self.query = query
        self.driver_query = driver_query
        self.cursor = cursor
        self.parameters = dict(parameters)
        self.bindings: dict[str, BoundValue] = {}
        self.closed = False

    def bind_value(self, name: str, bound: BoundValue) -> None:
        self.bindings[name] = bound

    def execute(self) -> None:
        if self.parameters:
            values = {name: b.value for name, b in self.bindings.items()}
            self.cursor.execute(self.driver_query, values)
        else:
            self.cursor.execute(self.query)

    @property
    def columns(self) -> list[str]:
        return column_names(self.cursor)

    @property
    def rowcount(self) -> int:
        rc = self.cursor.rowcount
        return rc if rc is not None and rc >= 0 else 0

    def fetch_one(self, *, as_tuple: bool = False) -> dict[str, Any] | tuple | None:
        """Next row as a column -> value dict, or a positional tuple with as_tuple."""
        if not self.columns:
            return None
        row = self.cursor.fetchone()
        if row is None:
            return None
        if as_tuple:
            return tuple(row)
        return dict(zip(self.columns, row, strict=True))

    def fetch_all(self, *, as_tuple: bool = False) -> list[dict[str, Any]] | list[tuple]:
        if as_tuple:
            if not self.columns:
                return []
            return [tuple(row) for row in self.cursor.fetchall()]
        return cursor_to_dicts(self.cursor)

    def fetch_column(self) -> list[Any]:
        if not self.columns:
            return []
        return [row[0] for row in self.cursor.fetchall()]

    def dump_params(self) -> str:
        return dump_params(self.query, self.parameters)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self.cursor.close()
        except Exception:
            pass

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
