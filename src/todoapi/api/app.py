"""FastAPI application factory (the composition root).

``create_app()`` builds the store handle and token verifier (unless given
ones, as tests do), keeps them on ``app.state``, and ties their lifecycle to
the app lifespan: connect the store before serving, close everything on
shutdown. In the ``test`` environment the store is never connected or closed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todoapi.api import todos
from todoapi.config import Settings, get_settings
from todoapi.errors import StoreConnectionError, TodoAPIError, Unauthenticated
from todoapi.security.tokens import TokenVerifier, create_token_verifier
from todoapi.todos.protocol import TodoStoreProtocol
from todoapi.todos.store import create_todo_store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

API_PREFIX = "/api/todos"

CORS_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"]


def create_app(
    settings: Settings | None = None,
    *,
    store: TodoStoreProtocol | None = None,
    verifier: TokenVerifier | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings to use. Defaults to ``get_settings()``.
        store: Todo store handle. Built from settings when omitted.
        verifier: Bearer token verifier. Built from settings when omitted.
    """
    settings = settings or get_settings()
    if store is None:
        store = create_todo_store(settings)
    if verifier is None:
        verifier = create_token_verifier(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.is_test:
            logger.debug("Test environment: skipping store connection")
        else:
            try:
                await store.connect()
            except StoreConnectionError:
                logger.exception("MongoDB connection error")
                await verifier.aclose()
                raise

        try:
            yield
        finally:
            logger.info("Shutting down todo API")
            if not settings.is_test:
                await store.close()
            await verifier.aclose()

    app = FastAPI(
        title="Todo API",
        description="API documentation for Todo app",
        version="1.0.0",
        docs_url="/api-docs",
        redoc_url=None,
        openapi_url="/api-docs.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.todo_store = store
    app.state.token_verifier = verifier

    _register_error_handlers(app)

    # Added before CORS so it runs inside it and 500s carry CORS headers too
    app.middleware("http")(catch_unexpected_errors)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    app.include_router(todos.router, prefix=API_PREFIX)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TodoAPIError)
    async def handle_api_error(request: Request, exc: TodoAPIError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    # Last resort for failures outside the catch_unexpected_errors middleware
    app.exception_handler(Exception)(_server_error)


async def _server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Something went wrong", "message": str(exc)},
    )


async def catch_unexpected_errors(request: Request, call_next):
    """Render any exception a route lets escape as the uniform 500 body."""
    try:
        return await call_next(request)
    except Exception as exc:
        return await _server_error(request, exc)
