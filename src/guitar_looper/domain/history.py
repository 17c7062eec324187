"""
Recently opened videos.

The history list lives under one global key, newest first. Cached stats
(duration, loop/chapter counts) let the history view show a video without
reopening it.
"""

import json
import uuid
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

from guitar_looper.core.errors import StorageError
from guitar_looper.core.storage import KeyValueStore

HISTORY_KEY = "video-history"


@dataclass(frozen=True)
class HistoryEntry:
    """A previously opened video."""

    id: str
    display_name: str
    file_ref: str
    last_opened: str  # ISO-8601 timestamp
    duration: Optional[float] = None
    loop_count: Optional[int] = None
    chapter_count: Optional[int] = None
    thumbnail: Optional[str] = None


def load_history(kv: KeyValueStore) -> list[HistoryEntry]:
    """Load the history list; corrupt or unreadable data yields an empty list."""
    try:
        payload = kv.get(HISTORY_KEY)
    except StorageError:
        logger.exception("Failed to read video history")
        return []

    if payload is None:
        return []

    try:
        data = json.loads(payload)
        return [HistoryEntry(**item) for item in data]
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        logger.warning(f"Ignoring corrupt video history: {e}")
        return []


def save_history(kv: KeyValueStore, entries: list[HistoryEntry]) -> bool:
    try:
        kv.set(HISTORY_KEY, json.dumps([asdict(entry) for entry in entries]))
    except StorageError:
        logger.exception("Failed to save video history")
        return False
    return True


def record_opened(
    kv: KeyValueStore,
    file_ref: str,
    max_entries: int = 20,
    now: Optional[datetime] = None,
) -> HistoryEntry:
    """
    Move a video to the top of the history, creating an entry if needed.

    Args:
        kv: Key/value store
        file_ref: Video key of the opened video
        max_entries: Oldest entries beyond this are dropped
        now: Timestamp override (for tests)

    Returns:
        The updated entry
    """
    opened_at = (now or datetime.now()).isoformat(timespec="seconds")
    entries = load_history(kv)

    existing = next((e for e in entries if e.file_ref == file_ref), None)
    if existing:
        entry = replace(existing, last_opened=opened_at)
    else:
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            display_name=Path(file_ref).name or file_ref,
            file_ref=file_ref,
            last_opened=opened_at,
        )

    others = [e for e in entries if e.file_ref != file_ref]
    save_history(kv, ([entry] + others)[:max_entries])
    return entry


def update_cached_stats(
    kv: KeyValueStore,
    file_ref: str,
    duration: Optional[float] = None,
    loop_count: Optional[int] = None,
    chapter_count: Optional[int] = None,
) -> None:
    """Refresh the cached stats of a history entry; unknown videos are ignored."""
    entries = load_history(kv)
    changed = False
    updated = []
    for entry in entries:
        if entry.file_ref == file_ref:
            new_entry = replace(
                entry,
                duration=duration if duration is not None else entry.duration,
                loop_count=loop_count if loop_count is not None else entry.loop_count,
                chapter_count=(
                    chapter_count if chapter_count is not None else entry.chapter_count
                ),
            )
            changed = changed or new_entry != entry
            entry = new_entry
        updated.append(entry)

    if changed:
        save_history(kv, updated)


def remove_from_history(kv: KeyValueStore, file_ref: str) -> bool:
    entries = load_history(kv)
    remaining = [e for e in entries if e.file_ref != file_ref]
    if len(remaining) == len(entries):
        return False
    return save_history(kv, remaining)
