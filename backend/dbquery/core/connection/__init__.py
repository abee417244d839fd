"""
Driver connections (sqlite3, psycopg, pymysql) and the per-engine ConnectionManager.
"""

from .connect import connect, cursor_to_dicts, describe_error, driver_error
from .manager import ConnectionManager

__all__ = [
    "connect",
    "cursor_to_dicts",
    "describe_error",
    "driver_error",
    "ConnectionManager",
]
