"""
Per-engine SQL strategies, resolved once per QueryEngine.

Differences covered: placeholder style, string escapes, identifier quoting,
transaction start, truncate/drop/optimize DDL, last-insert-id lookup, bool
adaptation and whether SQL files must be split into single statements.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from dbquery.engines.sql.parser import to_pyformat
from dbquery.models import EngineEnum


def _bool_to_int(value: bool) -> int:
    return 1 if value else 0


def _bool_to_text(value: bool) -> str:
    # psycopg sends str with the "unknown" type, so "1"/"0" fit text and boolean columns
    return "1" if value else "0"


@dataclass(frozen=True)
class Dialect:
    engine: EngineEnum
    paramstyle: str
    quote_char: str
    begin_sql: str
    truncate_template: str
    drop_per_table: bool
    optimize_template: str
    optimize_per_table: bool
    split_sql_files: bool
    adapt_bool: Callable[[bool], Any]
    last_insert_id_sql: str | None = None
    backslash_escapes: bool = False

    def prepare_sql(self, sql: str) -> str:
        """Return the driver form of an SQL text using ``:name`` placeholders."""
        if self.paramstyle == "pyformat":
            return to_pyformat(sql, backslash_escapes=self.backslash_escapes)
        return sql

    def quote_identifier(self, name: str) -> str:
        cleaned = name.replace(self.quote_char, "")
        return f"{self.quote_char}{cleaned}{self.quote_char}"

    def truncate_statements(self, tables: Sequence[str]) -> list[str]:
        return [
            self.truncate_template.format(tables=self.quote_identifier(t)) for t in tables
        ]

    def drop_statements(self, tables: Sequence[str]) -> list[str]:
        template = "DROP TABLE IF EXISTS {tables}"
        return self._statements(template, tables, per_table=self.drop_per_table)

    def optimize_statements(self, tables: Sequence[str]) -> list[str]:
        return self._statements(
            self.optimize_template, tables, per_table=self.optimize_per_table
        )

    def _statements(
        self, template: str, tables: Sequence[str], *, per_table: bool
    ) -> list[str]:
        quoted = [self.quote_identifier(t) for t in tables]
        if per_table:
            return [template.format(tables=q) for q in quoted]
        return [template.format(tables=", ".join(quoted))]


DIALECTS: dict[EngineEnum, Dialect] = {
    EngineEnum.MYSQL: Dialect(
        engine=EngineEnum.MYSQL,
        paramstyle="pyformat",
        quote_char="`",
        begin_sql="START TRANSACTION",
        truncate_template="TRUNCATE TABLE {tables}",
        drop_per_table=False,
        optimize_template="OPTIMIZE TABLE {tables}",
        optimize_per_table=False,
        split_sql_files=False,
        adapt_bool=_bool_to_int,
        backslash_escapes=True,
    ),
    EngineEnum.POSTGRES: Dialect(
        engine=EngineEnum.POSTGRES,
        paramstyle="pyformat",
        quote_char='"',
        begin_sql="BEGIN",
        truncate_template="TRUNCATE TABLE {tables}",
        drop_per_table=False,
        optimize_template="VACUUM ANALYZE {tables}",
        optimize_per_table=False,
        split_sql_files=False,
        adapt_bool=_bool_to_text,
        last_insert_id_sql="SELECT LASTVAL()",
    ),
    EngineEnum.SQLITE: Dialect(
        engine=EngineEnum.SQLITE,
        paramstyle="named",
        quote_char='"',
        begin_sql="BEGIN",
        truncate_template="DELETE FROM {tables}",
        drop_per_table=True,
        optimize_template="ANALYZE {tables}",
        optimize_per_table=True,
        split_sql_files=True,
        adapt_bool=_bool_to_int,
    ),
}


def get_dialect(engine: EngineEnum | str) -> Dialect:
    return DIALECTS[EngineEnum(engine)]
