"""
DB connection helpers for the supported engines.

Uses sqlite3 (SQLite), psycopg (PostgreSQL) or pymysql (MySQL family) based on engine.
Connections are opened in autocommit mode; transactions are started explicitly.
"""

import sqlite3
from typing import Any

import psycopg
import pymysql
from pymysql.constants import CLIENT

from dbquery.models import Diagnostic, EngineEnum

DEFAULT_PORTS = {
    EngineEnum.MYSQL: 3306,
    EngineEnum.POSTGRES: 5432,
}


def connect(
    engine: EngineEnum,
    *,
    host: str,
    port: int | None,
    database: str,
    user: str,
    password: str,
    charset: str | None = None,
    timeout: int | None = None,
    parameters: dict[str, Any] | None = None,
) -> Any:
    """
    Open a connection to the database described by the arguments.

    - parameters: extra keyword arguments forwarded to the driver connect().
    Driver exceptions are not wrapped; the caller records them.
    """
    extra = dict(parameters or {})

    if engine == EngineEnum.SQLITE:
        if timeout is not None:
            extra.setdefault("timeout", timeout)
        return sqlite3.connect(database, isolation_level=None, **extra)

    port = int(port or DEFAULT_PORTS[engine])

    if engine == EngineEnum.POSTGRES:
        if charset:
            extra.setdefault("client_encoding", charset)
        if timeout is not None:
            extra.setdefault("connect_timeout", timeout)
        return psycopg.connect(
            host=host,
            port=port,
            dbname=database,
            user=user,
            password=password,
            autocommit=True,
            **extra,
        )
    if engine == EngineEnum.MYSQL:
        if charset:
            extra.setdefault("charset", charset)
        if timeout is not None:
            extra.setdefault("connect_timeout", timeout)
        extra["client_flag"] = extra.get("client_flag", 0) | CLIENT.MULTI_STATEMENTS
        return pymysql.connect(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            autocommit=True,
            **extra,
        )
    raise ValueError(f"Unsupported engine: {engine}")


def column_names(cursor: Any) -> list[str]:
    desc = cursor.description
    if not desc:
        return []
    return [d[0] for d in desc]


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for sqlite3, psycopg and pymysql."""
    names = column_names(cursor)
    if not names:
        return []
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]


def describe_error(exc: BaseException) -> Diagnostic:
    """
    Extract (sqlstate, code, message) from a driver exception.

    psycopg exposes ``sqlstate``; pymysql puts the numeric code in ``args[0]``;
    sqlite3 exposes ``sqlite_errorcode`` (Python 3.11+).
    """
    sqlstate = getattr(exc, "sqlstate", None)
    code: int | str | None = getattr(exc, "sqlite_errorcode", None)
    message = str(exc)
    if code is None and exc.args and isinstance(exc.args[0], int):
        code = exc.args[0]
        if len(exc.args) > 1:
            message = str(exc.args[1])
    if code is None:
        code = sqlstate
    return Diagnostic(sqlstate=sqlstate or "HY000", code=code, message=message)


def driver_error(exc: BaseException) -> str:
    return f"{type(exc).__module__}.{type(exc).__name__}: {exc}"
