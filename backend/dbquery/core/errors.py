"""
Exception hierarchy.

QueryError subclasses follow the configured report_error policy: they are raised
in "exception" mode and turned into a neutral return value in "silent" mode.
Every other DatabaseError is always raised.
"""

from __future__ import annotations


class DatabaseError(Exception):
    """Base class for all dbquery errors."""

    pass


class QueryError(DatabaseError):
    """A failure that has been recorded in the error journal."""

    pass


class ConnectionFailedError(QueryError):
    pass


class PrepareStatementError(QueryError):
    pass


class BindValueError(QueryError):
    pass


class ExecuteError(QueryError):
    pass


class SqlFileNotFoundError(DatabaseError, FileNotFoundError):
    """Raised by use_sql_file when the path is not a readable file."""

    pass


class InstanceAlreadyExistsError(DatabaseError):
    """Raised when a named instance is registered twice."""

    pass


class ConfiguratorError(DatabaseError, ValueError):
    """Raised when connection settings are invalid."""

    pass
