# Todo input schema and validation.
# Created: 2026-10-18
#
# parse_todo_input() is a pure function: raw decoded JSON in, TodoInput out,
# or ValidationFailed listing every violated field. The API layer runs it after
# authentication and before the handler.

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr
from pydantic import ValidationError as PydanticValidationError

from todoapi.errors import ValidationFailed

_MESSAGES = {
    "missing": "Title is required",
    "string_too_short": "Title is required",
    "string_type": "Expected string",
    "bool_type": "Expected boolean",
}


class TodoInput(BaseModel):
    """Body accepted by create and update. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    title: StrictStr = Field(
        ..., min_length=1, description="Title of the todo", examples=["Buy groceries"]
    )
    status: StrictBool | None = Field(
        default=None, description="Status of the todo (completed or not)", examples=[False]
    )


def _field_errors(exc: PydanticValidationError) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "body"
        errors.append({"field": loc, "message": _MESSAGES.get(err["type"], err["msg"])})
    return errors


def parse_todo_input(raw: Any) -> TodoInput:
    """Validate a decoded request body against the todo schema.

    Raises:
        ValidationFailed: with one ``{"field", "message"}`` entry per problem.
    """
    if not isinstance(raw, dict):
        raise ValidationFailed([{"field": "body", "message": "Expected a JSON object"}])
    try:
        return TodoInput.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationFailed(_field_errors(e)) from e
