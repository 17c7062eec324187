"""Tests for chapter detection state and promotion to loops."""

import threading
from unittest.mock import patch

import pytest

from guitar_looper.core.config import ChapterConfig
from guitar_looper.core.errors import (
    ChapterExtractionError,
    ChapterToolUnavailable,
    ValidationError,
)
from guitar_looper.domain.chapters import bridge
from guitar_looper.domain.chapters.bridge import ChapterState, ChapterWorker
from guitar_looper.domain.loops.models import Chapter, Loop

INTRO = Chapter(id="c1", title="Intro", start=0.0, end=30.0)


class TestDetectionCycle:
    """Tests for begin_detection / apply_result / apply_failure."""

    def test_begin_sets_loading_and_new_request(self) -> None:
        state, request_id = bridge.begin_detection(ChapterState(), "/videos/a.mp4")
        assert state.status == bridge.STATUS_LOADING
        assert request_id == 1
        assert state.request_id == 1

    def test_result_for_latest_request(self) -> None:
        state, request_id = bridge.begin_detection(ChapterState(), "/videos/a.mp4")
        state = bridge.apply_result(state, request_id, [INTRO])
        assert state.status == bridge.STATUS_SUCCESS
        assert state.chapters == (INTRO,)

    def test_stale_result_is_ignored(self) -> None:
        state, first = bridge.begin_detection(ChapterState(), "/videos/a.mp4")
        state, second = bridge.begin_detection(state, "/videos/a.mp4")

        after = bridge.apply_result(state, first, [INTRO])
        assert after is state
        assert after.status == bridge.STATUS_LOADING

        after = bridge.apply_result(after, second, [])
        assert after.status == bridge.STATUS_SUCCESS

    def test_failure_clears_chapters(self) -> None:
        state = ChapterState(status=bridge.STATUS_SUCCESS, chapters=(INTRO,), request_id=1)
        state, request_id = bridge.begin_detection(state, "/videos/a.mp4")
        state = bridge.apply_failure(state, request_id, "ffprobe failed")
        assert state.status == bridge.STATUS_ERROR
        assert state.chapters == ()
        assert state.error == "ffprobe failed"

    def test_stale_failure_is_ignored(self) -> None:
        state, first = bridge.begin_detection(ChapterState(), "/videos/a.mp4")
        state, _ = bridge.begin_detection(state, "/videos/a.mp4")
        assert bridge.apply_failure(state, first, "boom") is state

    @pytest.mark.parametrize("file_ref", [None, "", "blob:abc", "data:video/mp4;base64,AA"])
    def test_unprobeable_source_succeeds_empty(self, file_ref) -> None:
        state, request_id = bridge.begin_detection(ChapterState(), file_ref)
        assert request_id is None
        assert state.status == bridge.STATUS_SUCCESS
        assert state.chapters == ()

    def test_reset_makes_pending_results_stale(self) -> None:
        state, request_id = bridge.begin_detection(ChapterState(), "/videos/a.mp4")
        state = bridge.reset_chapters(state)
        assert state.status == bridge.STATUS_IDLE
        assert bridge.apply_result(state, request_id, [INTRO]) is state


class TestAutoDetect:
    """Tests for should_auto_detect."""

    def test_short_clip_skipped(self) -> None:
        assert not bridge.should_auto_detect(5.0, 10.0)

    def test_long_video_scanned(self) -> None:
        assert bridge.should_auto_detect(10.0, 10.0)

    def test_unknown_duration_skipped(self) -> None:
        assert not bridge.should_auto_detect(0.0, 0.0)


class TestPromoteChapter:
    """Tests for promote_chapter_to_loop."""

    def test_uses_chapter_bounds(self) -> None:
        loop = bridge.promote_chapter_to_loop(INTRO, [])
        assert (loop.name, loop.start, loop.end) == ("Intro", 0.0, 30.0)
        assert loop.source == "chapter"

    def test_open_ended_chapter_gets_default_span(self) -> None:
        chapter = Chapter(id="c2", title="Outro", start=200.0)
        loop = bridge.promote_chapter_to_loop(chapter, [])
        assert loop.end == 200.0 + bridge.DEFAULT_CHAPTER_SPAN

    def test_default_span_capped_at_duration(self) -> None:
        chapter = Chapter(id="c9", title="Outro", start=290.0)
        loop = bridge.promote_chapter_to_loop(chapter, [], duration=300.0)
        assert (loop.start, loop.end) == (290.0, 300.0)

    def test_chapter_end_capped_at_duration(self) -> None:
        chapter = Chapter(id="c9", title="Outro", start=280.0, end=310.0)
        assert bridge.chapter_end(chapter, duration=300.0) == 300.0

    def test_unknown_duration_not_capped(self) -> None:
        chapter = Chapter(id="c9", title="Outro", start=290.0)
        assert bridge.chapter_end(chapter) == 320.0

    def test_chapter_starting_at_video_end_rejected(self) -> None:
        chapter = Chapter(id="c9", title="Credits", start=300.0, end=320.0)
        with pytest.raises(ValidationError):
            bridge.promote_chapter_to_loop(chapter, [], duration=300.0)

    def test_color_follows_existing_loops(self) -> None:
        existing = [Loop(id="x", name="X", start=0.0, end=1.0, color="#3b82f6")]
        loop = bridge.promote_chapter_to_loop(INTRO, existing)
        assert loop.color != existing[0].color

    def test_blank_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            bridge.promote_chapter_to_loop(Chapter(id="c3", title=" ", start=0.0), [])


class TestChapterWorker:
    """Tests for the background ffprobe runner."""

    def _run_worker(self, **patch_kwargs):
        results = []
        done = threading.Event()

        def on_done(request_id, chapters, error):
            results.append((request_id, chapters, error))
            done.set()

        with patch(
            "guitar_looper.domain.chapters.bridge.extract_chapters", **patch_kwargs
        ):
            thread = ChapterWorker(ChapterConfig(), on_done).start(7, "/videos/a.mp4")
            thread.join(timeout=5)

        assert done.is_set()
        return results[0]

    def test_reports_chapters(self) -> None:
        assert self._run_worker(return_value=[INTRO]) == (7, [INTRO], None)

    def test_reports_error(self) -> None:
        request_id, chapters, error = self._run_worker(
            side_effect=ChapterExtractionError("ffprobe timed out")
        )
        assert request_id == 7
        assert chapters is None
        assert error == "ffprobe timed out"

    def test_preflight_failure_reported_as_error(self) -> None:
        results = []
        with (
            patch(
                "guitar_looper.domain.chapters.bridge.check_ffprobe",
                side_effect=ChapterToolUnavailable("ffprobe command not found."),
            ),
            patch("guitar_looper.domain.chapters.bridge.extract_chapters") as mock_extract,
        ):
            worker = ChapterWorker(
                ChapterConfig(), lambda *args: results.append(args), preflight=True
            )
            worker.start(8, "/videos/a.mp4").join(timeout=5)

        assert results == [(8, None, "ffprobe command not found.")]
        mock_extract.assert_not_called()

    def test_preflight_success_runs_scan(self) -> None:
        results = []
        with (
            patch(
                "guitar_looper.domain.chapters.bridge.check_ffprobe",
                return_value="ffprobe version 6.1",
            ),
            patch(
                "guitar_looper.domain.chapters.bridge.extract_chapters",
                return_value=[INTRO],
            ),
        ):
            worker = ChapterWorker(
                ChapterConfig(), lambda *args: results.append(args), preflight=True
            )
            worker.start(9, "/videos/a.mp4").join(timeout=5)

        assert results == [(9, [INTRO], None)]
