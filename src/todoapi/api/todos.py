# Todos router: list, get, create, update, toggle status, delete.
# Created: 2026-10-18
#
# Every route requires a valid bearer token (router-level dependency).
# Every route except the status toggle also filters by owner, so another
# user's todo is indistinguishable from a missing one (404, never 403).
# The collection routes answer with and without a trailing slash.

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from todoapi.api.deps import CurrentUser, Store, ValidTodo, require_user
from todoapi.api.schemas import (
    MessageResponse,
    TodoResponse,
    ValidationErrorResponse,
)
from todoapi.errors import NotFound
from todoapi.todos.models import Todo
from todoapi.todos.schemas import TodoInput

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Todos"], dependencies=[Depends(require_user)])

# The body is read by the validated_todo dependency, so describe it explicitly
_TODO_BODY: dict[str, Any] = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": TodoInput.model_json_schema()}},
    }
}

_UNAUTHORIZED = {401: {"model": MessageResponse, "description": "Unauthorized"}}
_NOT_FOUND = {404: {"model": MessageResponse, "description": "Todo not found"}}
_INVALID = {400: {"model": ValidationErrorResponse, "description": "Invalid input"}}


@router.get(
    "",
    response_model=list[TodoResponse],
    summary="Get all Todos for the authenticated user",
    responses=_UNAUTHORIZED,
)
@router.get("/", response_model=list[TodoResponse], include_in_schema=False)
async def list_todos(user_id: CurrentUser, store: Store):
    """Retrieve all Todo items for the authenticated user."""
    todos = await store.list_todos(user_id)
    return [t.to_dict() for t in todos]


@router.get(
    "/{todo_id}",
    response_model=TodoResponse,
    summary="Get a Todo by ID",
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
)
async def get_todo(todo_id: str, user_id: CurrentUser, store: Store):
    """Retrieve a single Todo item by its ID for the authenticated user."""
    todo = await store.get_todo(todo_id, user_id)
    if todo is None:
        raise NotFound()
    return todo.to_dict()


@router.post(
    "",
    status_code=201,
    response_model=TodoResponse,
    summary="Create a new Todo",
    responses={**_INVALID, **_UNAUTHORIZED},
    openapi_extra=_TODO_BODY,
)
@router.post("/", status_code=201, response_model=TodoResponse, include_in_schema=False)
async def create_todo(user_id: CurrentUser, body: ValidTodo, store: Store):
    """Create a new Todo item for the authenticated user.

    The owner is always the caller; any ``userId`` in the body is ignored.
    """
    todo = Todo(title=body.title, status=bool(body.status), user_id=user_id)
    todo = await store.insert_todo(todo)
    logger.info("Created todo %s for %s", todo.id, user_id)
    return todo.to_dict()


@router.put(
    "/{todo_id}",
    response_model=TodoResponse,
    summary="Update a Todo by ID",
    responses={**_INVALID, **_UNAUTHORIZED, **_NOT_FOUND},
    openapi_extra=_TODO_BODY,
)
async def update_todo(todo_id: str, user_id: CurrentUser, body: ValidTodo, store: Store):
    """Update the Todo item with the specified ID for the authenticated user.

    ``status`` is left unchanged when omitted.
    """
    todo = await store.update_todo(todo_id, user_id, title=body.title, status=body.status)
    if todo is None:
        raise NotFound()
    logger.info("Updated todo %s", todo_id)
    return todo.to_dict()


@router.put(
    "/{todo_id}/status",
    response_model=TodoResponse,
    summary="Toggle a Todo's completion status",
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
)
async def toggle_todo_status(todo_id: str, user_id: CurrentUser, store: Store):
    """Flip the status of the Todo with the specified ID.

    Looks the todo up by ID only: any authenticated caller who knows the ID
    can toggle it, whoever owns it.
    """
    todo = await store.toggle_status(todo_id)
    if todo is None:
        raise NotFound()
    if todo.user_id != user_id:
        logger.warning("User %s toggled todo %s owned by %s", user_id, todo_id, todo.user_id)
    return todo.to_dict()


@router.delete(
    "/{todo_id}",
    response_model=MessageResponse,
    summary="Delete a Todo by ID",
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
)
async def delete_todo(todo_id: str, user_id: CurrentUser, store: Store):
    """Delete the Todo item with the specified ID for the authenticated user."""
    deleted = await store.delete_todo(todo_id, user_id)
    if not deleted:
        raise NotFound()
    logger.info("Deleted todo %s", todo_id)
    return MessageResponse(message="Todo deleted")
