"""Tests for ffprobe chapter extraction."""

import json
import subprocess
from unittest.mock import patch

import pytest

from guitar_looper.core.config import ChapterConfig
from guitar_looper.core.errors import ChapterExtractionError, ChapterToolUnavailable
from guitar_looper.domain.chapters.extractor import (
    check_ffprobe,
    extract_chapters,
    parse_ffprobe_chapters,
)

RUN = "guitar_looper.domain.chapters.extractor.subprocess.run"

FFPROBE_OUTPUT = {
    "chapters": [
        {
            "id": 0,
            "time_base": "1/1000",
            "start": 0,
            "start_time": "0.000000",
            "end": 30000,
            "end_time": "30.000000",
            "tags": {"title": "Intro"},
        },
        {
            "id": 1,
            "time_base": "1/1000",
            "start": 30000,
            "start_time": "30.000000",
            "end": 95500,
            "end_time": "95.500000",
            "tags": {},
        },
    ]
}


def completed(stdout: bytes = b"", returncode: int = 0, stderr: bytes = b""):
    return subprocess.CompletedProcess(
        args=["ffprobe"], returncode=returncode, stdout=stdout, stderr=stderr
    )


class TestParseFfprobeChapters:
    """Tests for parse_ffprobe_chapters."""

    def test_parses_times_and_titles(self) -> None:
        chapters = parse_ffprobe_chapters(FFPROBE_OUTPUT)
        assert [c.id for c in chapters] == ["chapter-0", "chapter-1"]
        assert chapters[0].title == "Intro"
        assert (chapters[0].start, chapters[0].end) == (0.0, 30.0)
        assert chapters[1].end == 95.5

    def test_untitled_chapter_gets_numbered_title(self) -> None:
        assert parse_ffprobe_chapters(FFPROBE_OUTPUT)[1].title == "Chapter 2"

    def test_missing_times(self) -> None:
        chapters = parse_ffprobe_chapters({"chapters": [{"tags": {"title": "Solo"}}]})
        assert chapters[0].start == 0.0
        assert chapters[0].end is None

    def test_no_chapters_key(self) -> None:
        assert parse_ffprobe_chapters({}) == []


class TestExtractChapters:
    """Tests for extract_chapters."""

    def test_runs_ffprobe_and_parses(self) -> None:
        config = ChapterConfig(ffprobe_path="/opt/ffprobe")
        stdout = json.dumps(FFPROBE_OUTPUT).encode("utf-8")

        with patch(RUN, return_value=completed(stdout)) as mock_run:
            chapters = extract_chapters("/videos/lesson.mp4", config)

        cmd = mock_run.call_args.args[0]
        assert cmd == [
            "/opt/ffprobe",
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_chapters",
            "/videos/lesson.mp4",
        ]
        assert len(chapters) == 2

    def test_video_without_chapters(self) -> None:
        with patch(RUN, return_value=completed(b'{"chapters": []}')):
            assert extract_chapters("/videos/plain.mp4", ChapterConfig()) == []

    def test_missing_tool(self) -> None:
        with patch(RUN, side_effect=FileNotFoundError("ffprobe")):
            with pytest.raises(ChapterToolUnavailable):
                extract_chapters("/videos/lesson.mp4", ChapterConfig())

    def test_timeout(self) -> None:
        with patch(RUN, side_effect=subprocess.TimeoutExpired("ffprobe", 15)):
            with pytest.raises(ChapterExtractionError, match="timed out"):
                extract_chapters("/videos/lesson.mp4", ChapterConfig())

    def test_non_zero_exit(self) -> None:
        with patch(RUN, return_value=completed(returncode=1, stderr=b"No such file")):
            with pytest.raises(ChapterExtractionError, match="No such file"):
                extract_chapters("/videos/missing.mp4", ChapterConfig())

    def test_invalid_json(self) -> None:
        with patch(RUN, return_value=completed(b"garbage")):
            with pytest.raises(ChapterExtractionError):
                extract_chapters("/videos/lesson.mp4", ChapterConfig())

    def test_missing_tool_is_extraction_error(self) -> None:
        """Callers catching ChapterExtractionError also see a missing tool."""
        assert issubclass(ChapterToolUnavailable, ChapterExtractionError)


class TestCheckFfprobe:
    """Tests for check_ffprobe."""

    def test_returns_first_version_line(self) -> None:
        result = subprocess.CompletedProcess(
            args=["ffprobe", "-version"],
            returncode=0,
            stdout="ffprobe version 6.1.1\nbuilt with gcc\n",
            stderr="",
        )
        with patch(RUN, return_value=result):
            assert check_ffprobe(ChapterConfig()) == "ffprobe version 6.1.1"

    def test_not_installed(self) -> None:
        with patch(RUN, side_effect=FileNotFoundError("ffprobe")):
            with pytest.raises(ChapterToolUnavailable):
                check_ffprobe(ChapterConfig())
