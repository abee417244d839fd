"""
dbquery: uniform CRUD helpers, named-parameter binding, error journaling,
query timing and transaction control over sqlite3, psycopg and pymysql.
"""

from dbquery.core.configurator import Configurator
from dbquery.core.errors import (
    BindValueError,
    ConfiguratorError,
    ConnectionFailedError,
    DatabaseError,
    ExecuteError,
    InstanceAlreadyExistsError,
    PrepareStatementError,
    QueryError,
    SqlFileNotFoundError,
)
from dbquery.engines.sql import QueryEngine, Statement
from dbquery.models import (
    EngineEnum,
    ErrorRecord,
    ReportErrorEnum,
    SavedConnection,
    SavedQuery,
)
from dbquery.registry import (
    InstanceRegistry,
    get_instance,
    get_registry,
    has_instance,
    set_instance,
)

__all__ = [
    "Configurator",
    "QueryEngine",
    "Statement",
    "InstanceRegistry",
    "get_registry",
    "set_instance",
    "get_instance",
    "has_instance",
    "EngineEnum",
    "ReportErrorEnum",
    "ErrorRecord",
    "SavedQuery",
    "SavedConnection",
    "DatabaseError",
    "QueryError",
    "ConnectionFailedError",
    "PrepareStatementError",
    "BindValueError",
    "ExecuteError",
    "SqlFileNotFoundError",
    "InstanceAlreadyExistsError",
    "ConfiguratorError",
]
