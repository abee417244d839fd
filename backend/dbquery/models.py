"""
Core value types: engines, error policy, parameter types, journal records.

Entities: ErrorRecord, SavedQuery, SavedConnection, Diagnostic, BoundValue.
"""

from enum import Enum
from typing import Any, NamedTuple

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EngineEnum(str, Enum):
    """Supported database engines (mysql, pgsql, sqlite)."""

    MYSQL = "mysql"
    POSTGRES = "pgsql"
    SQLITE = "sqlite"


class ReportErrorEnum(str, Enum):
    """Error policy: raise on failure, or record it and return a neutral value."""

    EXCEPTION = "exception"
    SILENT = "silent"


class TransactionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class ParamType(str, Enum):
    """Binding type inferred from a parameter value."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    STR = "str"
    LOB = "lob"


# ---------------------------------------------------------------------------
# Journal records
# ---------------------------------------------------------------------------


class Diagnostic(NamedTuple):
    """(sqlstate, code, message) extracted from a driver exception."""

    sqlstate: str | None
    code: int | str | None
    message: str


class ErrorRecord(NamedTuple):
    query: str
    query_error: Diagnostic | None
    driver_error: str
    dump_params: str


class SavedQuery(NamedTuple):
    query: str
    parameters: dict[str, Any]
    time: float

    def as_dict(self) -> dict[str, Any]:
        return {"query": self.query, "parameters": self.parameters, "time": self.time}


class SavedConnection(NamedTuple):
    """Connection-establishment timing, recorded alongside saved queries."""

    time: float

    def as_dict(self) -> dict[str, Any]:
        return {"Connection": self.time}


class BoundValue(NamedTuple):
    param_type: ParamType
    value: Any
