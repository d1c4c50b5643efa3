# Shared fixtures for the todo API tests.
# Created: 2026-10-18

from typing import Any

import pytest
from fastapi.testclient import TestClient

from todoapi.api.app import create_app
from todoapi.config import Settings
from todoapi.errors import Unauthenticated
from todoapi.todos import MemoryTodoStore


class FakeVerifier:
    """Token verifier that knows a fixed set of tokens.

    ``token-<user>`` verifies with ``sub=<user>``; anything registered via
    ``claims`` verifies with those claims; everything else is rejected.
    """

    def __init__(self, claims: dict[str, dict[str, Any]] | None = None):
        self.claims = claims or {}
        self.calls: list[str] = []
        self.closed = False

    async def verify(self, token: str) -> dict[str, Any]:
        self.calls.append(token)
        if token in self.claims:
            return self.claims[token]
        if token.startswith("token-"):
            return {"sub": token.removeprefix("token-")}
        raise Unauthenticated("Invalid token")

    async def aclose(self) -> None:
        self.closed = True


def auth(user: str) -> dict[str, str]:
    """Authorization header for ``user``."""
    return {"Authorization": f"Bearer token-{user}"}


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        auth0_domain="todo-test.eu.auth0.com",
        auth0_audience="https://todo-api.test",
        client_url="http://localhost:3000",
    )


@pytest.fixture
def store():
    return MemoryTodoStore()


@pytest.fixture
def verifier():
    return FakeVerifier(claims={"token-nosub": {"scope": "openid"}})


@pytest.fixture
def test_app(settings, store, verifier):
    return create_app(settings, store=store, verifier=verifier)


@pytest.fixture
def client(test_app):
    return TestClient(test_app)
