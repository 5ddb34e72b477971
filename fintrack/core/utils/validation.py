"""Input validation helpers."""

from __future__ import annotations

from typing import Any, TypeVar, Union

from pydantic import BaseModel, ValidationError

from fintrack.core.errors import ValidationFailed

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def first_error_message(exc: ValidationError) -> str:
    """Render the first pydantic error as ``"field: message"``."""
    errors = exc.errors()
    if not errors:
        return ValidationFailed.default_message
    err = errors[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


def validate_payload(schema: type[SchemaT], data: Union[BaseModel, dict, None]) -> Any:
    """Coerce ``data`` into ``schema``; raises ValidationFailed naming the offending field."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data or {})
    except ValidationError as exc:
        raise ValidationFailed(first_error_message(exc)) from exc
