"""
Environment configuration (pydantic-settings).

Defaults for the error policy, query saving and driver timeouts, plus an optional
connection description used by Configurator.from_settings().
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    DEFAULT_REPORT_ERROR: Literal["exception", "silent"] = "exception"
    DEFAULT_SAVE_QUERIES: bool = False

    # Passed to the driver: connect_timeout (psycopg, pymysql), timeout (sqlite3)
    DB_CONNECT_TIMEOUT: int = 10

    DB_ENGINE: str = "sqlite"
    DB_HOST: str = "localhost"
    DB_PORT: int | None = None
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_DATABASE: str = ":memory:"
    DB_CHARSET: str | None = None


settings = Settings()
