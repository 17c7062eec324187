"""
Loop persistence and collection helpers.

Each video's loops are stored as one JSON list under `loops:<video_key>`.
Writes always replace the full collection, so there is nothing to merge.
"""

import json
from typing import Optional, Sequence

from loguru import logger

from guitar_looper.core.errors import StorageError, ValidationError
from guitar_looper.core.storage import KeyValueStore

from .models import Loop

LOOP_KEY_PREFIX = "loops:"


def loop_storage_key(video_key: str) -> str:
    return f"{LOOP_KEY_PREFIX}{video_key}"


def serialize_loops(loops: Sequence[Loop]) -> str:
    return json.dumps([loop.to_dict() for loop in loops])


def deserialize_loops(payload: str) -> list[Loop]:
    """Parse a stored loop collection.

    Raises:
        ValidationError: If the payload is not a list of valid loop records
    """
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        raise ValidationError(f"Loop payload is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ValidationError("Loop payload is not a list")

    loops = []
    for item in data:
        if not isinstance(item, dict):
            raise ValidationError(f"Loop record is not an object: {item!r}")
        loops.append(Loop.from_dict(item))
    return loops


class LoopStore:
    """Loads and saves per-video loop collections through a key/value store."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def load_loops(self, video_key: str) -> list[Loop]:
        """
        Load saved loops for a video.

        Missing, unreadable or corrupt data degrades to an empty list.

        Args:
            video_key: Resolved file path or URL of the video

        Returns:
            Loops in saved order
        """
        try:
            payload = self.kv.get(loop_storage_key(video_key))
        except StorageError:
            logger.exception(f"Failed to read loops for {video_key}")
            return []

        if payload is None:
            return []

        try:
            loops = deserialize_loops(payload)
        except ValidationError as e:
            logger.warning(f"Ignoring corrupt loop data for {video_key}: {e}")
            return []

        logger.debug(f"Loaded {len(loops)} loops for {video_key}")
        return loops

    def save_loops(self, video_key: str, loops: Sequence[Loop]) -> bool:
        """
        Persist the full loop collection for a video.

        Failures are logged and swallowed; the caller's in-memory loops stay
        authoritative for the session.

        Returns:
            True if the write succeeded
        """
        try:
            self.kv.set(loop_storage_key(video_key), serialize_loops(loops))
        except StorageError:
            logger.exception(f"Failed to save {len(loops)} loops for {video_key}")
            return False

        logger.debug(f"Saved {len(loops)} loops for {video_key}")
        return True

    def clear_loops(self, video_key: str) -> bool:
        """Forget all loops saved for a video."""
        try:
            self.kv.remove(loop_storage_key(video_key))
        except StorageError:
            logger.exception(f"Failed to clear loops for {video_key}")
            return False
        return True


def find_loop(loops: Sequence[Loop], loop_id: Optional[str]) -> Optional[Loop]:
    if loop_id is None:
        return None
    for loop in loops:
        if loop.id == loop_id:
            return loop
    return None


def append_loop(loops: Sequence[Loop], loop: Loop) -> tuple[Loop, ...]:
    return tuple(loops) + (loop,)


def remove_loop(loops: Sequence[Loop], loop_id: str) -> tuple[Loop, ...]:
    return tuple(loop for loop in loops if loop.id != loop_id)


def replace_loop(loops: Sequence[Loop], updated: Loop) -> tuple[Loop, ...]:
    """Swap the loop with `updated.id` for `updated`, keeping its position."""
    return tuple(updated if loop.id == updated.id else loop for loop in loops)
