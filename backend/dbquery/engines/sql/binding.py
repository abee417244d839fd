"""
Parameter typing and conversion for named-parameter binding.

The accepted value kinds form a closed set:

    None -> NULL, bool -> BOOL, int -> INT, str -> STR,
    float -> STR (decimal text, avoids driver float quirks),
    bytes / bytearray / memoryview / readable binary stream -> LOB

Any other value is rejected with UnsupportedValueError.
"""

from __future__ import annotations

from typing import Any

from dbquery.engines.sql.dialect import Dialect
from dbquery.models import BoundValue, ParamType


class UnsupportedValueError(TypeError):
    """Raised when a parameter value has no binding type."""

    pass


def infer_param_type(value: Any) -> ParamType | None:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return ParamType.BOOL
    if value is None:
        return ParamType.NULL
    if isinstance(value, int):
        return ParamType.INT
    if isinstance(value, (str, float)):
        return ParamType.STR
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ParamType.LOB
    if callable(getattr(value, "read", None)):
        return ParamType.LOB
    return None


def bind_value(value: Any, dialect: Dialect) -> BoundValue:
    """Return the typed driver value for *value* on *dialect*."""
    param_type = infer_param_type(value)
    if param_type is None:
        raise UnsupportedValueError(
            f"Unsupported parameter type: {type(value).__name__}"
        )

    if param_type == ParamType.BOOL:
        return BoundValue(param_type, dialect.adapt_bool(value))
    if param_type == ParamType.STR and isinstance(value, float):
        return BoundValue(param_type, repr(value))
    if param_type == ParamType.LOB:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return BoundValue(param_type, bytes(value))
        data = value.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        return BoundValue(param_type, data)
    return BoundValue(param_type, value)


def dump_params(query: str, parameters: dict[str, Any]) -> str:
    """Text dump of a statement and its parameters, recorded with errors."""
    lines = [f"SQL: [{len(query)}] {query}", f"Params:  {len(parameters)}"]
    for key, value in parameters.items():
        name = f":{key}"
        param_type = infer_param_type(value)
        lines.append(f"Key: Name: [{len(name)}] {name}")
        lines.append(f"param_type={param_type.name if param_type else 'UNSUPPORTED'}")
        if param_type == ParamType.LOB:
            lines.append("value=<lob>")
        else:
            lines.append(f"value={value!r}")
    return "\n".join(lines)
