"""
SQL execution engine.

Exports: QueryEngine, Statement, split_statements, to_pyformat, get_dialect.
"""

from dbquery.engines.sql.dialect import Dialect, get_dialect
from dbquery.engines.sql.executor import QueryEngine
from dbquery.engines.sql.parser import split_statements, to_pyformat
from dbquery.engines.sql.statement import Statement

__all__ = [
    "QueryEngine",
    "Statement",
    "Dialect",
    "get_dialect",
    "split_statements",
    "to_pyformat",
]
