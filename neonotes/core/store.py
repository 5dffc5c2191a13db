"""Flat-file JSON store for the note collection.

The whole collection lives in one pretty-printed JSON array. Every read
loads the full file and every write replaces it; the last writer wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

_logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The data file exists but does not hold a JSON array."""


def init_data_file(path: Path) -> None:
    """Create the data file (and its directory) as an empty array if absent."""
    if path.exists():
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("[]", encoding="utf-8")
    _logger.info("Created note store at %s", path)


def read_records(path: Path) -> list[Any]:
    """Read every stored entry, in storage order.

    Entries are returned as decoded, including ones that are not objects.

    Raises:
        StoreError: If the file is not valid JSON or not an array.
    """
    init_data_file(path)
    raw = path.read_text(encoding="utf-8")
    try:
        data = json.loads(raw) if raw.strip() else []
    except json.JSONDecodeError as e:
        raise StoreError(f"Corrupt note store {path}: {e}") from e
    if not isinstance(data, list):
        raise StoreError(f"Note store {path} must contain a JSON array")
    return data


def write_records(path: Path, records: list[Any]) -> None:
    """Replace the stored collection with ``records``."""
    init_data_file(path)
    path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    _logger.debug("Wrote %d notes to %s", len(records), path)
