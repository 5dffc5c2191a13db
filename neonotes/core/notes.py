"""Note operations for neonotes.

Every operation reloads the full collection from the store; mutations
rewrite it. Input fields are coerced to defaults rather than rejected.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from neonotes.config import get_config
from neonotes.core.store import read_records, write_records
from neonotes.models import DEFAULT_COLOR, DEFAULT_TITLE, Category, Note

_logger = logging.getLogger(__name__)

PREVIEW_CHARS = 160
ELLIPSIS = "..."


def _now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with milliseconds, e.g. 2026-01-02T03:04:05.678Z."""
    return (
        dt.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _data_path(data_file: Path | None) -> Path:
    if data_file is None:
        return get_config().data_path
    return data_file


def _load(path: Path) -> list[Note | Any]:
    """Load every stored entry in order.

    Records that do not parse as notes stay in the list unchanged, so a
    rewrite puts them back exactly where they were.
    """
    entries: list[Note | Any] = []
    for record in read_records(path):
        try:
            entries.append(Note.from_dict(record))
        except (AttributeError, KeyError, TypeError, ValueError):
            _logger.warning("Ignoring malformed note record in %s: %r", path, record)
            entries.append(record)
    return entries


def _notes(entries: list[Note | Any]) -> list[Note]:
    return [e for e in entries if isinstance(e, Note)]


def _save(path: Path, entries: list[Note | Any]) -> None:
    write_records(
        path, [e.to_dict() if isinstance(e, Note) else e for e in entries]
    )


def _clean_title(value: object) -> str:
    if not isinstance(value, str):
        return DEFAULT_TITLE
    return value.strip() or DEFAULT_TITLE


def _clean_text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _clean_color(value: object) -> str:
    return value if isinstance(value, str) and value else DEFAULT_COLOR


def _next_id(notes: list[Note], now: datetime) -> int:
    """Epoch-millisecond id, bumped past existing ids on collision."""
    candidate = int(now.timestamp() * 1000)
    existing = {n.id for n in notes}
    if candidate in existing:
        candidate = max(existing) + 1
    return candidate


def list_notes(data_file: Path | None = None) -> list[Note]:
    """Return all notes in storage order."""
    return _notes(_load(_data_path(data_file)))


def get_note(note_id: int, data_file: Path | None = None) -> Note | None:
    """Get a note by id.

    Returns:
        The note, or None if no note has that id.
    """
    for note in list_notes(data_file):
        if note.id == note_id:
            return note
    return None


def create_note(payload: dict[str, Any], data_file: Path | None = None) -> Note:
    """Create a note from a payload of optional fields.

    Missing or invalid fields take defaults: title "Untitled", empty text,
    category general, color #ffffff. Title and text are trimmed.
    """
    path = _data_path(data_file)
    entries = _load(path)
    now = _now()
    stamp = format_timestamp(now)

    note = Note(
        id=_next_id(_notes(entries), now),
        title=_clean_title(payload.get("title")),
        text=_clean_text(payload.get("text")),
        category=Category.normalize(payload.get("category")),
        color=_clean_color(payload.get("color")),
        created_at=stamp,
        updated_at=stamp,
    )
    entries.append(note)
    _save(path, entries)
    _logger.info("Created note %d (%s)", note.id, note.title)
    return note


def update_note(
    note_id: int, payload: dict[str, Any], data_file: Path | None = None
) -> Note | None:
    """Apply a partial update to a note.

    Only fields present in ``payload`` with a usable value change: a title,
    text or color that is not a string is ignored, and so is an empty
    color. A blank title becomes "Untitled" and an unknown category becomes
    general. ``updated_at`` is always refreshed; ``created_at`` never changes.

    Returns:
        The updated note, or None if no note has that id.
    """
    path = _data_path(data_file)
    entries = _load(path)

    note = next((n for n in _notes(entries) if n.id == note_id), None)
    if note is None:
        return None

    title = payload.get("title")
    text = payload.get("text")
    category = payload.get("category")
    color = payload.get("color")

    if isinstance(title, str):
        note.title = _clean_title(title)
    if isinstance(text, str):
        note.text = _clean_text(text)
    if category is not None:
        note.category = Category.normalize(category)
    if isinstance(color, str) and color:
        note.color = color
    note.updated_at = format_timestamp(_now())

    _save(path, entries)
    _logger.info("Updated note %d", note.id)
    return note


def delete_note(note_id: int, data_file: Path | None = None) -> bool:
    """Delete a note by id.

    Returns:
        True if a note was removed, False if no note has that id.
    """
    path = _data_path(data_file)
    entries = _load(path)
    index = next(
        (i for i, e in enumerate(entries) if isinstance(e, Note) and e.id == note_id),
        None,
    )
    if index is None:
        return False
    del entries[index]
    _save(path, entries)
    _logger.info("Deleted note %d", note_id)
    return True


def search_notes(query: str, data_file: Path | None = None) -> list[Note]:
    """Case-insensitive substring search over title or text.

    An empty query matches every note.
    """
    needle = (query or "").lower()
    notes = list_notes(data_file)
    if not needle.strip():
        return notes
    return [n for n in notes if needle in n.title.lower() or needle in n.text.lower()]


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Truncate text to ``limit`` characters, marking truncation with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + ELLIPSIS


def summarize_note(note: Note, limit: int = PREVIEW_CHARS) -> dict[str, Any]:
    """Compact projection of a note for listings."""
    return {
        "id": note.id,
        "title": note.title,
        "category": note.category.value,
        "updatedAt": note.updated_at,
        "preview": preview(note.text, limit),
    }
