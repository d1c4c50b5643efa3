"""Todo storage backends.

Created: 2026-10-18
Implements TodoStoreProtocol twice:

- MongoTodoStore: one MongoDB collection, one document per todo, accessed
  through pymongo's asyncio client. Ownership is part of every filter, so a
  todo owned by someone else is simply "no match".
- MemoryTodoStore: a dict keyed by ObjectId. Same semantics, no persistence.
  Used by the test suite and by ``STORE_BACKEND=memory`` for local runs.

Design notes:
- Handles are built by the app factory and live on ``app.state``; nothing
  here is a module-level singleton.
- Mutations are single round trips (find_one_and_update /
  find_one_and_delete) and rely on MongoDB's per-document atomicity.
"""

import dataclasses
import logging
from typing import Any

from pymongo import AsyncMongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from todoapi.config import Settings
from todoapi.errors import StoreConnectionError
from todoapi.todos.models import Todo, parse_object_id, utcnow
from todoapi.todos.protocol import TodoStoreProtocol

logger = logging.getLogger(__name__)


class MongoTodoStore:
    """MongoDB implementation of todo storage."""

    def __init__(
        self,
        uri: str,
        database: str = "todos",
        collection: str = "todos",
        client: AsyncMongoClient | None = None,
    ):
        """Initialize the store.

        The client is created lazily by pymongo: no network I/O happens until
        ``connect()`` or the first query.

        Args:
            uri: MongoDB connection string. A database named in the URI wins
                over ``database``.
            database: Database name used when the URI names none.
            collection: Collection holding the todo documents.
            client: Pre-built client (mainly for tests).
        """
        self._client: AsyncMongoClient = client or AsyncMongoClient(uri, tz_aware=True)
        self._db = self._client.get_default_database(default=database)
        self._collection = self._db[collection]

    async def connect(self) -> None:
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            raise StoreConnectionError(f"Could not reach MongoDB: {e}") from e
        logger.info("MongoDB connected (database=%s)", self._db.name)

    async def close(self) -> None:
        await self._client.close()
        logger.info("MongoDB connection closed")

    # =========================================================================
    # Todo Operations
    # =========================================================================

    async def list_todos(self, user_id: str) -> list[Todo]:
        return [Todo.from_document(doc) async for doc in self._collection.find({"userId": user_id})]

    async def get_todo(self, todo_id: str, user_id: str) -> Todo | None:
        oid = parse_object_id(todo_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid, "userId": user_id})
        return Todo.from_document(doc) if doc else None

    async def insert_todo(self, todo: Todo) -> Todo:
        await self._collection.insert_one(todo.to_document())
        return todo

    async def update_todo(
        self, todo_id: str, user_id: str, title: str, status: bool | None = None
    ) -> Todo | None:
        oid = parse_object_id(todo_id)
        if oid is None:
            return None

        changes: dict[str, Any] = {"title": title, "updatedAt": utcnow()}
        if status is not None:
            changes["status"] = status

        doc = await self._collection.find_one_and_update(
            {"_id": oid, "userId": user_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return Todo.from_document(doc) if doc else None

    async def toggle_status(self, todo_id: str) -> Todo | None:
        oid = parse_object_id(todo_id)
        if oid is None:
            return None

        # Pipeline update so the read-flip-write happens server-side in one step
        doc = await self._collection.find_one_and_update(
            {"_id": oid},
            [{"$set": {"status": {"$not": ["$status"]}, "updatedAt": utcnow()}}],
            return_document=ReturnDocument.AFTER,
        )
        return Todo.from_document(doc) if doc else None

    async def delete_todo(self, todo_id: str, user_id: str) -> bool:
        oid = parse_object_id(todo_id)
        if oid is None:
            return False
        doc = await self._collection.find_one_and_delete({"_id": oid, "userId": user_id})
        return doc is not None


class MemoryTodoStore:
    """In-process implementation of todo storage.

    Returns copies so callers can never mutate stored state by accident.
    """

    def __init__(self) -> None:
        self._todos: dict[Any, Todo] = {}

    async def connect(self) -> None:
        logger.info("Using in-memory todo store (data is lost on restart)")

    async def close(self) -> None:
        self._todos.clear()

    def _find(self, todo_id: str, user_id: str | None = None) -> Todo | None:
        oid = parse_object_id(todo_id)
        if oid is None:
            return None
        todo = self._todos.get(oid)
        if todo is None or (user_id is not None and todo.user_id != user_id):
            return None
        return todo

    async def list_todos(self, user_id: str) -> list[Todo]:
        return [dataclasses.replace(t) for t in self._todos.values() if t.user_id == user_id]

    async def get_todo(self, todo_id: str, user_id: str) -> Todo | None:
        todo = self._find(todo_id, user_id)
        return dataclasses.replace(todo) if todo else None

    async def insert_todo(self, todo: Todo) -> Todo:
        self._todos[todo.id] = dataclasses.replace(todo)
        return todo

    async def update_todo(
        self, todo_id: str, user_id: str, title: str, status: bool | None = None
    ) -> Todo | None:
        todo = self._find(todo_id, user_id)
        if todo is None:
            return None
        todo.title = title
        if status is not None:
            todo.status = status
        todo.updated_at = utcnow()
        return dataclasses.replace(todo)

    async def toggle_status(self, todo_id: str) -> Todo | None:
        todo = self._find(todo_id)
        if todo is None:
            return None
        todo.status = not todo.status
        todo.updated_at = utcnow()
        return dataclasses.replace(todo)

    async def delete_todo(self, todo_id: str, user_id: str) -> bool:
        todo = self._find(todo_id, user_id)
        if todo is None:
            return False
        del self._todos[todo.id]
        return True


def create_todo_store(settings: Settings) -> TodoStoreProtocol:
    """Build the store backend selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        return MemoryTodoStore()
    return MongoTodoStore(
        settings.mongo_uri,
        database=settings.mongo_db,
        collection=settings.mongo_collection,
    )
