"""Todos - the single domain resource of the API.

Usage:
    from todoapi.todos import MongoTodoStore, Todo

    store = MongoTodoStore("mongodb://localhost:27017/todos")
    await store.connect()

    todo = await store.insert_todo(Todo(title="Buy milk", user_id="auth0|u1"))
    await store.toggle_status(str(todo.id))
"""

from todoapi.todos.models import Todo, parse_object_id
from todoapi.todos.protocol import TodoStoreProtocol
from todoapi.todos.schemas import TodoInput, parse_todo_input
from todoapi.todos.store import MemoryTodoStore, MongoTodoStore, create_todo_store

__all__ = [
    # Models
    "Todo",
    "parse_object_id",
    # Validation
    "TodoInput",
    "parse_todo_input",
    # Store
    "TodoStoreProtocol",
    "MongoTodoStore",
    "MemoryTodoStore",
    "create_todo_store",
]
