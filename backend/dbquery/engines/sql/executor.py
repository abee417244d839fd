"""
QueryEngine: the single point through which SQL execution, parameter binding,
result extraction, error journaling and transaction control flow.

Internals always raise a QueryError after the failure has been journaled; the
public verbs are wrapped by ``_reported`` which re-raises in "exception" mode
and returns the verb's neutral value in "silent" mode.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from dbquery.core.configurator import Configurator
from dbquery.core.connection import ConnectionManager, describe_error, driver_error
from dbquery.core.errors import (
    BindValueError,
    ExecuteError,
    PrepareStatementError,
    QueryError,
    SqlFileNotFoundError,
)
from dbquery.core.journal import QueryJournal, elapsed
from dbquery.engines.sql.binding import bind_value, dump_params
from dbquery.engines.sql.dialect import get_dialect
from dbquery.engines.sql.parser import split_statements
from dbquery.engines.sql.statement import Statement
from dbquery.models import (
    ErrorRecord,
    SavedConnection,
    SavedQuery,
    TransactionState,
)

_log = logging.getLogger(__name__)

Parameters = Mapping[str, Any] | None


def _reported(
    neutral: Any = None,
    *,
    factory: Callable[[dict[str, Any]], Any] | None = None,
) -> Callable:
    """Apply the report_error policy to a public verb.

    neutral: value returned on failure in silent mode.
    factory: builds that value from the call's keyword arguments instead.
    """

    def decorator(method: Callable) -> Callable:
        @functools.wraps(method)
        def wrapper(self: QueryEngine, *args: Any, **kwargs: Any) -> Any:
            try:
                return method(self, *args, **kwargs)
            except QueryError:
                if self._configurator.has_throw_on_error():
                    raise
                return factory(kwargs) if factory is not None else neutral

        return wrapper

    return decorator


def _empty_list(kwargs: dict[str, Any]) -> list[Any]:
    return []


def _flag_result(flag: str) -> Callable[[dict[str, Any]], Any]:
    """None when the caller asked for a number, False when it asked for success only."""

    def neutral(kwargs: dict[str, Any]) -> Any:
        return None if kwargs.get(flag) else False

    return neutral


class QueryEngine:
    """
    Execute SQL with named parameters against one database.

    - Connects lazily on the first statement (or explicitly via connect()).
    - Failures are appended to the error journal; report_error decides whether
      they are also raised.
    - Executed queries are timed and saved when save_queries is enabled.
    """

    def __init__(self, configurator: Configurator) -> None:
        self._configurator = configurator
        self._dialect = get_dialect(configurator.engine)
        self._journal = QueryJournal()
        self._connection = ConnectionManager(configurator, self._journal)
        self._transaction_state = TransactionState.IDLE
        self._transaction_error_mark = 0

    @property
    def configurator(self) -> Configurator:
        return self._configurator

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @_reported(False)
    def connect(self) -> bool:
        self._connection.connect()
        self._transaction_state = TransactionState.IDLE
        return True

    def disconnect(self) -> None:
        self._connection.disconnect()
        self._transaction_state = TransactionState.IDLE

    def get_connection(self) -> Any:
        """Raw driver connection, or None when not connected."""
        return self._connection.get_handle()

    # ------------------------------------------------------------------
    # Prepare / bind / execute
    # ------------------------------------------------------------------

    @_reported()
    def prepare_bind(self, sql: str, parameters: Parameters = None) -> Statement:
        return self._prepare_bind(sql, parameters)

    @_reported(False)
    def execute_statement(self, statement: Statement) -> bool:
        self._execute_statement(statement)
        return True

    def _prepare_bind(self, sql: str, parameters: Parameters) -> Statement:
        params = dict(parameters or {})
        conn = self._connection.ensure_connected()

        try:
            driver_query = self._dialect.prepare_sql(sql) if params else sql
            cursor = conn.cursor()
        except Exception as e:
            self._journal.add_error(
                ErrorRecord(
                    query=sql,
                    query_error=None,
                    driver_error=driver_error(e),
                    dump_params=dump_params(sql, params),
                )
            )
            raise PrepareStatementError("Error Prepare Statement") from e

        statement = Statement(sql, driver_query, cursor, params)
        for key, value in params.items():
            try:
                statement.bind_value(key, bind_value(value, self._dialect))
            except Exception as e:
                self._journal.add_error(
                    ErrorRecord(
                        query=sql,
                        query_error=None,
                        driver_error=driver_error(e),
                        dump_params=statement.dump_params(),
                    )
                )
                if self._configurator.has_throw_on_error():
                    statement.close()
                    raise BindValueError("Error Bind Value") from e
        return statement

    def _execute_statement(self, statement: Statement) -> None:
        start = time.perf_counter()
        try:
            statement.execute()
        except Exception as e:
            self._journal.add_error(
                ErrorRecord(
                    query=statement.query,
                    query_error=describe_error(e),
                    driver_error=driver_error(e),
                    dump_params=statement.dump_params(),
                )
            )
            statement.close()
            raise ExecuteError("Error Execute") from e
        spent = elapsed(start, time.perf_counter())

        if self._configurator.has_save_queries():
            self._journal.add_query(statement.query, statement.parameters, spent)
        _log.debug("Executed in %.6fs: %s", spent, statement.query)

    def _run(self, sql: str, parameters: Parameters) -> Statement:
        statement = self._prepare_bind(sql, parameters)
        self._execute_statement(statement)
        return statement

    def _execute_raw(self, sql: str) -> Any:
        """Run a parameterless control statement (not saved); return its first row."""
        conn = self._connection.ensure_connected()
        cursor = None
        try:
            cursor = conn.cursor()
            cursor.execute(sql)
            return cursor.fetchone() if cursor.description else None
        except Exception as e:
            self._journal.add_error(
                ErrorRecord(
                    query=sql,
                    query_error=describe_error(e),
                    driver_error=driver_error(e),
                    dump_params=dump_params(sql, {}),
                )
            )
            raise ExecuteError(f"Error Execute: {sql}") from e
        finally:
            if cursor is not None:
                try:
                    cursor.close()
                except Exception:
                    pass

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    @_reported()
    def select(self, sql: str, parameters: Parameters = None) -> Statement:
        """Execute a query and return the live statement; read it with read()/read_all()."""
        return self._run(sql, parameters)

    def read(self, statement: Statement, *, as_tuple: bool = False) -> dict[str, Any] | tuple | None:
        """Next row of a select() statement; positional when as_tuple is set."""
        return statement.fetch_one(as_tuple=as_tuple)

    def read_all(
        self, statement: Statement, *, as_tuple: bool = False
    ) -> list[dict[str, Any]] | list[tuple]:
        return statement.fetch_all(as_tuple=as_tuple)

    @_reported(factory=_flag_result("get_last_insert_id"))
    def insert(
        self,
        sql: str,
        parameters: Parameters = None,
        *,
        get_last_insert_id: bool = False,
    ) -> int | bool:
        """Execute an INSERT; return the new row id if asked, else True."""
        statement = self._run(sql, parameters)
        try:
            if not get_last_insert_id:
                return True
            if self._dialect.last_insert_id_sql is None:
                return int(statement.cursor.lastrowid or 0)
        finally:
            statement.close()
        row = self._execute_raw(self._dialect.last_insert_id_sql)
        return int(row[0]) if row and row[0] is not None else 0

    @_reported(factory=_flag_result("get_affected_rows_count"))
    def update(
        self,
        sql: str,
        parameters: Parameters = None,
        *,
        get_affected_rows_count: bool = False,
    ) -> int | bool:
        return self._affected(sql, parameters, get_affected_rows_count)

    @_reported(factory=_flag_result("get_affected_rows_count"))
    def delete(
        self,
        sql: str,
        parameters: Parameters = None,
        *,
        get_affected_rows_count: bool = False,
    ) -> int | bool:
        return self._affected(sql, parameters, get_affected_rows_count)

    def _affected(self, sql: str, parameters: Parameters, want_count: bool) -> int | bool:
        statement = self._run(sql, parameters)
        try:
            return statement.rowcount if want_count else True
        finally:
            statement.close()

    @_reported()
    def count(self, sql: str, parameters: Parameters = None) -> int:
        """Integer value of the first column of the first row (0 when no row)."""
        with self._run(sql, parameters) as statement:
            row = statement.fetch_one()
        value = next(iter(row.values()), None) if row else None
        return int(value) if value is not None else 0

    @_reported(False)
    def exec(self, sql: str, parameters: Parameters = None) -> bool:
        self._exec(sql, parameters)
        return True

    def _exec(self, sql: str, parameters: Parameters = None) -> None:
        self._run(sql, parameters).close()

    @_reported(factory=_empty_list)
    def select_all(self, sql: str, parameters: Parameters = None) -> list[dict[str, Any]]:
        with self._run(sql, parameters) as statement:
            return statement.fetch_all()

    @_reported()
    def select_row(self, sql: str, parameters: Parameters = None) -> dict[str, Any] | None:
        with self._run(sql, parameters) as statement:
            return statement.fetch_one()

    @_reported(factory=_empty_list)
    def select_col(self, sql: str, parameters: Parameters = None) -> list[Any]:
        with self._run(sql, parameters) as statement:
            return statement.fetch_column()

    @_reported()
    def select_var(self, sql: str, parameters: Parameters = None) -> Any:
        with self._run(sql, parameters) as statement:
            row = statement.fetch_one()
        if row is None:
            return None
        return next(iter(row.values()), None)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def in_transaction(self) -> bool:
        return self._transaction_state == TransactionState.ACTIVE

    @_reported(False)
    def start_transaction(self) -> bool:
        if self.in_transaction():
            _log.debug("start_transaction: a transaction is already active")
            return False
        self._execute_raw(self._dialect.begin_sql)
        self._transaction_state = TransactionState.ACTIVE
        self._transaction_error_mark = self._journal.error_count
        return True

    @_reported(False)
    def commit_transaction(self) -> bool:
        if not self.in_transaction():
            _log.debug("commit_transaction: no active transaction")
            return False
        self._end_transaction("COMMIT")
        return True

    @_reported(False)
    def rollback_transaction(self) -> bool:
        if not self.in_transaction():
            _log.debug("rollback_transaction: no active transaction")
            return False
        self._end_transaction("ROLLBACK")
        return True

    @_reported(False)
    def complete_transaction(self) -> bool:
        """Commit if no error was journaled since start_transaction(), else roll back."""
        if not self.in_transaction():
            _log.debug("complete_transaction: no active transaction")
            return False
        if self._journal.error_count > self._transaction_error_mark:
            _log.info(
                "Rolling back transaction after %d error(s)",
                self._journal.error_count - self._transaction_error_mark,
            )
            self._end_transaction("ROLLBACK")
        else:
            self._end_transaction("COMMIT")
        return True

    def _end_transaction(self, sql: str) -> None:
        """
        Run COMMIT or ROLLBACK; the state returns to IDLE only once the driver
        has left the transaction.

        A failed COMMIT may leave the transaction open (SQLite deferred
        constraints), so it is followed by a ROLLBACK. If that fails too the
        state stays ACTIVE and rollback_transaction() can be retried.
        """
        try:
            self._execute_raw(sql)
        except QueryError:
            if sql != "ROLLBACK":
                _log.info("%s failed, rolling back", sql)
                self._execute_raw("ROLLBACK")
                self._transaction_state = TransactionState.IDLE
            raise
        self._transaction_state = TransactionState.IDLE

    # ------------------------------------------------------------------
    # Errors and saved queries
    # ------------------------------------------------------------------

    def has_errors(self) -> bool:
        return self._journal.error_count > 0

    def get_errors(self) -> list[ErrorRecord]:
        return self._journal.errors

    def get_last_error(self) -> ErrorRecord | None:
        return self._journal.last_error()

    def clean_errors(self) -> None:
        self._journal.clear_errors()
        self._transaction_error_mark = 0

    def has_save_queries(self) -> bool:
        return self._configurator.has_save_queries()

    def enable_save_queries(self) -> None:
        self._configurator.enable_save_queries()

    def disable_save_queries(self) -> None:
        self._configurator.disable_save_queries()

    def get_saved_queries(self) -> list[SavedQuery | SavedConnection]:
        return self._journal.saved_queries

    def clean_saved_queries(self) -> None:
        self._journal.clear_saved_queries()

    # ------------------------------------------------------------------
    # Schema utilities
    # ------------------------------------------------------------------

    def truncate_table(self, table: str) -> bool:
        return self.truncate_tables(table)

    @_reported(False)
    def truncate_tables(self, table: str, *tables: str) -> bool:
        for sql in self._dialect.truncate_statements([table, *tables]):
            self._exec(sql)
        return True

    def drop_table(self, table: str) -> bool:
        return self.drop_tables(table)

    @_reported(False)
    def drop_tables(self, table: str, *tables: str) -> bool:
        for sql in self._dialect.drop_statements([table, *tables]):
            self._exec(sql)
        return True

    def optimize_table(self, table: str) -> bool:
        return self.optimize_tables(table)

    @_reported(False)
    def optimize_tables(self, table: str, *tables: str) -> bool:
        for sql in self._dialect.optimize_statements([table, *tables]):
            self._exec(sql)
        return True

    # ------------------------------------------------------------------
    # SQL files
    # ------------------------------------------------------------------

    def use_sql_file(self, filepath: str | Path) -> bool:
        """
        Execute the content of an SQL file.

        Raises SqlFileNotFoundError whatever the report_error policy.
        On SQLite the file is run one statement at a time.
        """
        path = Path(filepath)
        if not path.is_file():
            raise SqlFileNotFoundError(f"File missing for use_sql_file method: {filepath}")
        return self._run_script(path.read_text(encoding="utf-8"))

    @_reported(False)
    def _run_script(self, script: str) -> bool:
        if self._dialect.split_sql_files:
            for sql in split_statements(script):
                self._exec(sql)
        else:
            self._exec(script)
        return True
