"""
Pydantic schema for connection settings accepted by Configurator.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dbquery.models import EngineEnum, ReportErrorEnum

MANDATORY_SETTINGS = ("engine", "host", "user", "password", "database")


class ConnectionSettings(BaseModel):
    """Settings mapping passed to Configurator(...)."""

    model_config = ConfigDict(extra="forbid")

    engine: EngineEnum
    host: str = Field(..., strict=True)
    user: str = Field(..., strict=True)
    password: str = Field(..., strict=True)
    database: str = Field(..., strict=True)
    port: int | None = Field(default=None, ge=1, le=65535)
    save_queries: bool | None = None
    report_error: ReportErrorEnum | None = None
    charset: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("engine", mode="before")
    @classmethod
    def engine_is_known(cls, v: Any) -> EngineEnum:
        if not isinstance(v, str):
            raise ValueError('"engine" settings is not defined or not a string')
        try:
            return EngineEnum(v)
        except ValueError:
            raise ValueError(f'The engine "{v}" is not available') from None

    @field_validator("report_error", mode="before")
    @classmethod
    def report_error_is_known(cls, v: Any) -> ReportErrorEnum | None:
        if v is None:
            return None
        return parse_report_error(v)


def parse_report_error(value: Any) -> ReportErrorEnum:
    try:
        return ReportErrorEnum(value)
    except ValueError:
        raise ValueError(
            f'The report error "{value}" is incorrect. (silent , exception)'
        ) from None


def describe_validation_error(exc: ValidationError) -> str:
    """Turn the first pydantic error into a settings message (unknown keys first)."""
    errors = sorted(exc.errors(), key=lambda e: e["type"] != "extra_forbidden")
    err = errors[0]
    key = str(err["loc"][0]) if err["loc"] else "settings"
    if err["type"] == "extra_forbidden":
        return f'"{key}" settings is not recognized'
    if key in MANDATORY_SETTINGS and err["type"] in ("missing", "string_type"):
        return f'"{key}" settings is not defined or not a string'
    if err["type"] == "value_error":
        return str(err["msg"]).removeprefix("Value error, ")
    if key == "parameters":
        return '"parameters" settings is not a mapping'
    return f'"{key}" settings is invalid: {err["msg"]}'
