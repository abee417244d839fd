"""
Engines: SQL execution (QueryEngine).
"""

from dbquery.engines.sql import QueryEngine, Statement

__all__ = [
    "QueryEngine",
    "Statement",
]
