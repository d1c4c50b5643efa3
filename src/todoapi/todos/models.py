"""Todo data model.

Created: 2026-10-18

A Todo has three representations:
- the ``Todo`` dataclass used inside the process
- the MongoDB document (``_id`` as ObjectId, native datetimes)
- the JSON form returned by the API (``_id`` as hex string, ISO 8601 timestamps)

Field names on the wire and in the store are camelCase (``userId``,
``createdAt``, ``updatedAt``) so existing documents and clients keep working.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId


def generate_id() -> ObjectId:
    """Generate a new store identifier."""
    return ObjectId()


def utcnow() -> datetime:
    """Get current UTC time (millisecond precision, as MongoDB stores it)."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def parse_object_id(value: str) -> ObjectId | None:
    """Parse a hex id from a URL, returning None when it is not a valid ObjectId."""
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass
class Todo:
    """
    A single todo item owned by one user.

    Attributes:
        title: What needs doing (non-empty)
        user_id: Owner identifier (the token subject of the creator)
        status: Completion flag
        id: Store identifier, assigned on creation and never changed
        created_at: When the todo was created
        updated_at: Last modification time
    """

    title: str
    user_id: str
    status: bool = False
    id: ObjectId = field(default_factory=generate_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape returned by the API."""
        return {
            "_id": str(self.id),
            "title": self.title,
            "status": self.status,
            "userId": self.user_id,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def to_document(self) -> dict[str, Any]:
        """Convert to a MongoDB document."""
        return {
            "_id": self.id,
            "title": self.title,
            "status": self.status,
            "userId": self.user_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Todo":
        """Create from a MongoDB document."""
        now = utcnow()
        return cls(
            id=doc["_id"],
            title=doc.get("title", ""),
            status=bool(doc.get("status", False)),
            user_id=doc.get("userId", ""),
            created_at=_as_utc(doc.get("createdAt") or now),
            updated_at=_as_utc(doc.get("updatedAt") or now),
        )
