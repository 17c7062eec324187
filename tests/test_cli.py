"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest

from guitar_looper.cli import build_parser, normalize_argv, run_check, run_history, run_loops
from guitar_looper.context import AppContext
from guitar_looper.core.config import Config
from guitar_looper.core.errors import ChapterToolUnavailable
from guitar_looper.core.storage import MemoryKeyValueStore
from guitar_looper.domain import history
from guitar_looper.domain.loops.models import Loop

VIDEO = "/videos/lesson.mp4"


@pytest.fixture
def ctx() -> AppContext:
    return AppContext.create(Config(), kv=MemoryKeyValueStore())


class TestArgs:
    """Tests for argument handling."""

    def test_bare_path_means_play(self) -> None:
        assert normalize_argv(["lesson.mp4"]) == ["play", "lesson.mp4"]

    def test_subcommands_untouched(self) -> None:
        assert normalize_argv(["history"]) == ["history"]
        assert normalize_argv(["--help"]) == ["--help"]

    def test_loops_clear_flag(self) -> None:
        args = build_parser().parse_args(["loops", "lesson.mp4", "--clear"])
        assert args.subcommand == "loops"
        assert args.clear


class TestRunLoops:
    """Tests for the loops subcommand."""

    def test_clear(self, ctx: AppContext) -> None:
        solo = Loop(id="s", name="Solo", start=10.0, end=40.0, color="#3b82f6")
        ctx.loop_store.save_loops(VIDEO, [solo])
        history.record_opened(ctx.kv, VIDEO)

        assert run_loops(ctx, VIDEO, clear=True) == 0

        assert ctx.loop_store.load_loops(VIDEO) == []
        assert history.load_history(ctx.kv)[0].loop_count == 0

    def test_list_empty(self, ctx: AppContext) -> None:
        assert run_loops(ctx, VIDEO) == 0


class TestRunHistory:
    """Tests for the history subcommand."""

    def test_remove(self, ctx: AppContext) -> None:
        history.record_opened(ctx.kv, VIDEO)
        assert run_history(ctx, remove=VIDEO) == 0
        assert history.load_history(ctx.kv) == []

    def test_remove_unknown(self, ctx: AppContext) -> None:
        assert run_history(ctx, remove=VIDEO) == 1

    def test_list(self, ctx: AppContext) -> None:
        history.record_opened(ctx.kv, VIDEO)
        assert run_history(ctx) == 0


class TestRunCheck:
    """Tests for the check subcommand."""

    def test_all_tools_present(self, ctx: AppContext) -> None:
        with (
            patch("guitar_looper.cli.check_mpv_available", return_value=True),
            patch("guitar_looper.cli.check_ffprobe", return_value="ffprobe version 6.1"),
        ):
            assert run_check(ctx) == 0

    def test_missing_ffprobe(self, ctx: AppContext) -> None:
        with (
            patch("guitar_looper.cli.check_mpv_available", return_value=True),
            patch(
                "guitar_looper.cli.check_ffprobe",
                side_effect=ChapterToolUnavailable("ffprobe command not found."),
            ),
        ):
            assert run_check(ctx) == 1
