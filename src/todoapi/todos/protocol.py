"""Todo storage protocol.

Created: 2026-10-18
Defines the interface for todo storage backends:
- MongoTodoStore: MongoDB collection (production)
- MemoryTodoStore: process-local dict (tests, throwaway dev servers)

Every lookup takes the id as the raw string from the URL. Backends treat an
id that is not a valid ObjectId exactly like an id that matches nothing, so
callers never have to distinguish the two.
"""

from typing import Protocol, runtime_checkable

from todoapi.todos.models import Todo


@runtime_checkable
class TodoStoreProtocol(Protocol):
    """Protocol defining the interface for todo storage."""

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self) -> None:
        """Open the connection and verify the store is reachable."""
        ...

    async def close(self) -> None:
        """Release the connection."""
        ...

    # =========================================================================
    # Todo Operations
    # =========================================================================

    async def list_todos(self, user_id: str) -> list[Todo]:
        """List every todo owned by ``user_id`` in store order."""
        ...

    async def get_todo(self, todo_id: str, user_id: str) -> Todo | None:
        """Get a todo matching both id and owner."""
        ...

    async def insert_todo(self, todo: Todo) -> Todo:
        """Persist a new todo and return it."""
        ...

    async def update_todo(
        self, todo_id: str, user_id: str, title: str, status: bool | None = None
    ) -> Todo | None:
        """Set title (and status, when given) on a todo matching id and owner.

        Returns the updated todo, or None if nothing matched.
        """
        ...

    async def toggle_status(self, todo_id: str) -> Todo | None:
        """Flip the status of the todo with this id, whoever owns it.

        Returns the updated todo, or None if nothing matched.
        """
        ...

    async def delete_todo(self, todo_id: str, user_id: str) -> bool:
        """Delete a todo matching id and owner. Returns True if deleted."""
        ...
