# API response schemas (used for response validation and the OpenAPI docs).
# Created: 2026-10-18

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TodoResponse(BaseModel):
    """A todo as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Todo ID")
    title: str
    status: bool
    user_id: str = Field(..., alias="userId", description="Owner (token subject)")
    created_at: str = Field(..., alias="createdAt", description="ISO 8601 timestamp")
    updated_at: str = Field(..., alias="updatedAt", description="ISO 8601 timestamp")


class MessageResponse(BaseModel):
    """Plain message response (also the shape of 401 and 404 errors)."""

    message: str


class FieldError(BaseModel):
    """A single schema violation."""

    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """400 response listing every violated field."""

    message: str = "Validation failed"
    errors: list[FieldError]


class ServerErrorResponse(BaseModel):
    """500 response for unexpected failures."""

    error: str = "Something went wrong"
    message: str
