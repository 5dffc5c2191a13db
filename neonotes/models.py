"""Data models for neonotes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_TITLE = "Untitled"
DEFAULT_COLOR = "#ffffff"


class Category(Enum):
    """Note categories."""

    GENERAL = "general"
    PERSONAL = "personal"
    WORK = "work"
    IDEAS = "ideas"

    @classmethod
    def normalize(cls, value: object) -> Category:
        """Coerce any value to a category, falling back to GENERAL."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.GENERAL

    @classmethod
    def values(cls) -> list[str]:
        """Return the allowed category strings."""
        return [c.value for c in cls]


@dataclass
class Note:
    """A short text note.

    ``created_at`` and ``updated_at`` are ISO-8601 UTC strings with
    millisecond precision, matching the JSON file format.
    """

    id: int  # Creation time in epoch milliseconds
    title: str
    text: str
    category: Category
    color: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape."""
        return {
            "id": self.id,
            "title": self.title,
            "text": self.text,
            "category": self.category.value,
            "color": self.color,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Note:
        """Build a note from a stored record, applying defaults to gaps."""
        title = data.get("title")
        text = data.get("text")
        color = data.get("color")
        created_at = data.get("createdAt") or ""
        return cls(
            id=int(data["id"]),
            title=title if isinstance(title, str) and title else DEFAULT_TITLE,
            text=text if isinstance(text, str) else "",
            category=Category.normalize(data.get("category")),
            color=color if isinstance(color, str) and color else DEFAULT_COLOR,
            created_at=created_at,
            updated_at=data.get("updatedAt") or created_at,
        )
