# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-18
#
# Order on every mutating route is auth -> validation -> handler:
# validated_todo depends on require_user, so an unauthenticated request is
# rejected before its body is even read.

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from todoapi.errors import Unauthenticated, ValidationFailed
from todoapi.security.tokens import TokenVerifier
from todoapi.todos.protocol import TodoStoreProtocol
from todoapi.todos.schemas import TodoInput, parse_todo_input

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through our own 401 body
bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth", bearerFormat="JWT")


def get_store(request: Request) -> TodoStoreProtocol:
    """The store handle built by the app factory."""
    return request.app.state.todo_store


def get_verifier(request: Request) -> TokenVerifier:
    """The token verifier built by the app factory."""
    return request.app.state.token_verifier


async def require_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> str:
    """Authenticate the request and return the caller's user id.

    The id is the verified token's ``sub`` claim; it is also stashed on
    ``request.state.user_id``.
    """
    if credentials is None:
        raise Unauthenticated("No authorization token found")

    try:
        claims = await verifier.verify(credentials.credentials)
    except Unauthenticated as e:
        logger.debug("Rejected token on %s %s: %s", request.method, request.url.path, e)
        raise

    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub:
        raise Unauthenticated("Invalid token or missing user ID")

    request.state.user_id = sub
    return sub


async def validated_todo(
    request: Request,
    _user_id: Annotated[str, Depends(require_user)],
) -> TodoInput:
    """Read the JSON body and validate it against the todo schema."""
    try:
        raw = await request.json()
    except ValueError as e:
        raise ValidationFailed([{"field": "body", "message": "Malformed JSON"}]) from e
    return parse_todo_input(raw)


CurrentUser = Annotated[str, Depends(require_user)]
Store = Annotated[TodoStoreProtocol, Depends(get_store)]
ValidTodo = Annotated[TodoInput, Depends(validated_todo)]
