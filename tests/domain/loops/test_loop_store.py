"""Tests for loop persistence."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from guitar_looper.core.errors import StorageError
from guitar_looper.core.storage import MemoryKeyValueStore, SqliteKeyValueStore
from guitar_looper.domain.loops.models import Loop
from guitar_looper.domain.loops.store import (
    LoopStore,
    append_loop,
    find_loop,
    loop_storage_key,
    remove_loop,
    replace_loop,
)

VIDEO = "/videos/lesson.mp4"


@pytest.fixture
def loops() -> list[Loop]:
    return [
        Loop(id="a", name="Intro riff", start=0.0, end=12.0, color="#3b82f6"),
        Loop(id="b", name="Solo", start=10.0, end=40.0, color="#10b981", source="chapter"),
    ]


class TestLoopStore:
    """Tests for LoopStore load/save."""

    def test_missing_video_loads_empty(self) -> None:
        assert LoopStore(MemoryKeyValueStore()).load_loops(VIDEO) == []

    def test_save_then_load_preserves_order(self, loops: list[Loop]) -> None:
        store = LoopStore(MemoryKeyValueStore())
        assert store.save_loops(VIDEO, loops)
        assert store.load_loops(VIDEO) == loops

    def test_sqlite_backend(self, tmp_path: Path, loops: list[Loop]) -> None:
        db_path = tmp_path / "looper.db"
        LoopStore(SqliteKeyValueStore(db_path)).save_loops(VIDEO, loops)

        # A fresh store instance reads what the first one wrote
        assert LoopStore(SqliteKeyValueStore(db_path)).load_loops(VIDEO) == loops

    def test_videos_are_isolated(self, loops: list[Loop]) -> None:
        store = LoopStore(MemoryKeyValueStore())
        store.save_loops(VIDEO, loops)
        assert store.load_loops("/videos/other.mp4") == []

    def test_corrupt_payload_loads_empty(self) -> None:
        kv = MemoryKeyValueStore({loop_storage_key(VIDEO): "{not json"})
        assert LoopStore(kv).load_loops(VIDEO) == []

    def test_invalid_record_loads_empty(self) -> None:
        kv = MemoryKeyValueStore(
            {loop_storage_key(VIDEO): '[{"id": "x", "name": "", "start": 0, "end": 1}]'}
        )
        assert LoopStore(kv).load_loops(VIDEO) == []

    def test_non_finite_bounds_load_empty(self) -> None:
        payload = (
            '[{"id": "x", "name": "A", "start": NaN, "end": 5.0},'
            ' {"id": "y", "name": "B", "start": 1.0, "end": Infinity}]'
        )
        kv = MemoryKeyValueStore({loop_storage_key(VIDEO): payload})
        assert LoopStore(kv).load_loops(VIDEO) == []

    def test_deeply_nested_payload_loads_empty(self) -> None:
        kv = MemoryKeyValueStore({loop_storage_key(VIDEO): "[" * 100000 + "]" * 100000})
        assert LoopStore(kv).load_loops(VIDEO) == []

    def test_read_failure_loads_empty(self) -> None:
        kv = MagicMock()
        kv.get.side_effect = StorageError("disk gone")
        assert LoopStore(kv).load_loops(VIDEO) == []

    def test_write_failure_returns_false(self, loops: list[Loop]) -> None:
        kv = MagicMock()
        kv.set.side_effect = StorageError("read-only")
        assert LoopStore(kv).save_loops(VIDEO, loops) is False

    def test_clear_loops(self, loops: list[Loop]) -> None:
        store = LoopStore(MemoryKeyValueStore())
        store.save_loops(VIDEO, loops)
        assert store.clear_loops(VIDEO)
        assert store.load_loops(VIDEO) == []


class TestCollectionHelpers:
    """Tests for the pure loop collection helpers."""

    def test_find_loop(self, loops: list[Loop]) -> None:
        assert find_loop(loops, "b") is loops[1]
        assert find_loop(loops, "missing") is None
        assert find_loop(loops, None) is None

    def test_append_keeps_order(self, loops: list[Loop]) -> None:
        extra = Loop(id="c", name="Outro", start=50.0, end=60.0, color="#000000")
        assert [loop.id for loop in append_loop(loops, extra)] == ["a", "b", "c"]

    def test_remove_unknown_id_is_noop(self, loops: list[Loop]) -> None:
        assert remove_loop(loops, "missing") == tuple(loops)

    def test_remove_loop(self, loops: list[Loop]) -> None:
        assert [loop.id for loop in remove_loop(loops, "a")] == ["b"]

    def test_replace_keeps_position(self, loops: list[Loop]) -> None:
        renamed = Loop(id="a", name="Intro", start=0.0, end=12.0, color="#3b82f6")
        result = replace_loop(loops, renamed)
        assert result[0].name == "Intro"
        assert result[1] is loops[1]
