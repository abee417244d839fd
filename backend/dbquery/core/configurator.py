"""
Connection configurator: validated settings, DSN and driver connection factory.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from dbquery.core.config import Settings, settings
from dbquery.core.connection.connect import DEFAULT_PORTS, connect
from dbquery.core.errors import ConfiguratorError
from dbquery.models import EngineEnum, ReportErrorEnum
from dbquery.schemas import (
    ConnectionSettings,
    describe_validation_error,
    parse_report_error,
)

DEFAULT_CHARSETS = {
    EngineEnum.MYSQL: "utf8mb4",
    EngineEnum.POSTGRES: "UTF8",
}

_DSN_FORMATS = {
    EngineEnum.SQLITE: "{engine}:{database}",
}
_DEFAULT_DSN = "{engine}:host={host};dbname={database}"


class Configurator:
    """
    Holds the connection settings of one database and opens connections to it.

    Settings keys: engine, host, user, password, database (mandatory),
    port, save_queries, report_error, charset, parameters (optional).
    """

    def __init__(self, conf: Mapping[str, Any]) -> None:
        if not isinstance(conf, Mapping):
            raise ConfiguratorError("settings must be a mapping")
        try:
            parsed = ConnectionSettings.model_validate(dict(conf))
        except ValidationError as e:
            raise ConfiguratorError(describe_validation_error(e)) from None

        self._engine = parsed.engine
        self._host = parsed.host
        self._user = parsed.user
        self._password = parsed.password
        self._database = parsed.database
        self._port = parsed.port
        self._parameters: dict[str, Any] = dict(parsed.parameters)
        self._save_queries = (
            parsed.save_queries
            if parsed.save_queries is not None
            else settings.DEFAULT_SAVE_QUERIES
        )
        self._report_error = parsed.report_error or ReportErrorEnum(
            settings.DEFAULT_REPORT_ERROR
        )
        if "charset" in conf:
            self._charset = parsed.charset
        else:
            self._charset = DEFAULT_CHARSETS.get(self._engine)

    @classmethod
    def from_settings(cls, s: Settings | None = None, **overrides: Any) -> "Configurator":
        """Build a Configurator from DB_* environment settings."""
        s = s or settings
        conf: dict[str, Any] = {
            "engine": s.DB_ENGINE,
            "host": s.DB_HOST,
            "user": s.DB_USER,
            "password": s.DB_PASSWORD,
            "database": s.DB_DATABASE,
            "port": s.DB_PORT,
        }
        if s.DB_CHARSET is not None:
            conf["charset"] = s.DB_CHARSET
        conf.update(overrides)
        return cls(conf)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def engine(self) -> EngineEnum:
        return self._engine

    @property
    def host(self) -> str:
        return self._host

    @property
    def user(self) -> str:
        return self._user

    @property
    def password(self) -> str:
        return self._password

    @property
    def database(self) -> str:
        return self._database

    @property
    def port(self) -> int | None:
        if self._port is None:
            return DEFAULT_PORTS.get(self._engine)
        return self._port

    @property
    def charset(self) -> str | None:
        return self._charset

    @charset.setter
    def charset(self, value: str | None) -> None:
        self._charset = value

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self._parameters)

    @parameters.setter
    def parameters(self, value: Mapping[str, Any]) -> None:
        if not isinstance(value, Mapping):
            raise ConfiguratorError('"parameters" settings is not a mapping')
        self._parameters = dict(value)

    def set_parameter(self, key: str, value: Any) -> None:
        self._parameters[key] = value

    @property
    def report_error(self) -> ReportErrorEnum:
        return self._report_error

    @report_error.setter
    def report_error(self, value: str) -> None:
        try:
            self._report_error = parse_report_error(value)
        except ValueError as e:
            raise ConfiguratorError(str(e)) from None

    def has_throw_on_error(self) -> bool:
        return self._report_error == ReportErrorEnum.EXCEPTION

    def has_save_queries(self) -> bool:
        return self._save_queries

    def enable_save_queries(self) -> None:
        self._save_queries = True

    def disable_save_queries(self) -> None:
        self._save_queries = False

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @property
    def dsn(self) -> str:
        fmt = _DSN_FORMATS.get(self._engine, _DEFAULT_DSN)
        return fmt.format(
            engine=self._engine.value, host=self._host, database=self._database
        )

    def connection_parameters(self) -> dict[str, Any]:
        """Driver keyword arguments with the password masked (for error dumps)."""
        out: dict[str, Any] = {"database": self._database}
        if self._engine != EngineEnum.SQLITE:
            out.update(
                host=self._host,
                port=self.port,
                user=self._user,
                password="***" if self._password else "",
                charset=self._charset,
            )
        out.update(self._parameters)
        return out

    def create_connection(self) -> Any:
        """Open a new driver connection. Driver exceptions propagate unchanged."""
        return connect(
            self._engine,
            host=self._host,
            port=self._port,
            database=self._database,
            user=self._user,
            password=self._password,
            charset=self._charset,
            timeout=settings.DB_CONNECT_TIMEOUT,
            parameters=self._parameters,
        )
