"""
Chapter extraction via ffprobe.

ffprobe reports chapter times as decimal strings, e.g.:

    {"chapters": [{"id": 0, "start_time": "0.000000", "end_time": "30.000000",
                   "tags": {"title": "Intro"}}]}
"""

import json
import subprocess
from typing import Any

from loguru import logger

from guitar_looper.core.config import ChapterConfig
from guitar_looper.core.errors import ChapterExtractionError, ChapterToolUnavailable
from guitar_looper.domain.loops.models import Chapter


def check_ffprobe(config: ChapterConfig) -> str:
    """
    Check that ffprobe can be executed.

    Returns:
        First line of `ffprobe -version`

    Raises:
        ChapterToolUnavailable: If ffprobe is missing or fails to run
    """
    try:
        result = subprocess.run(
            [config.ffprobe_path, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.SubprocessError, FileNotFoundError, OSError) as e:
        raise ChapterToolUnavailable(
            f"{config.ffprobe_path} command not found. "
            "Make sure FFmpeg is installed and in your PATH."
        ) from e

    if result.returncode != 0:
        raise ChapterToolUnavailable(
            f"ffprobe execution failed: {result.stderr.strip()}"
        )

    lines = result.stdout.splitlines()
    return lines[0] if lines else "Unknown version"


def _parse_time(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_ffprobe_chapters(payload: dict[str, Any]) -> list[Chapter]:
    """Convert ffprobe's `-show_chapters` JSON into Chapter objects, in order."""
    chapters = []
    raw_chapters = payload.get("chapters")
    if not isinstance(raw_chapters, list):
        return chapters

    for index, raw in enumerate(raw_chapters):
        if not isinstance(raw, dict):
            continue
        start = _parse_time(raw.get("start_time"))
        end = _parse_time(raw.get("end_time"))

        tags = raw.get("tags") if isinstance(raw.get("tags"), dict) else {}
        title = tags.get("title")
        if not isinstance(title, str) or not title.strip():
            title = f"Chapter {index + 1}"

        chapters.append(
            Chapter(
                id=f"chapter-{index}",
                title=title,
                start=start if start is not None else 0.0,
                end=end,
            )
        )

    return chapters


def extract_chapters(file_path: str, config: ChapterConfig) -> list[Chapter]:
    """
    Read embedded chapters from a video file.

    Args:
        file_path: Resolvable path (or URL) of the video
        config: Chapter detection settings

    Returns:
        Chapters in file order (empty if the video has none)

    Raises:
        ChapterToolUnavailable: If ffprobe cannot be started
        ChapterExtractionError: If ffprobe fails or its output cannot be parsed
    """
    logger.info(f"Extracting chapters from: {file_path}")

    cmd = [
        config.ffprobe_path,
        "-v",
        "quiet",
        "-print_format",
        "json",
        "-show_chapters",
        file_path,
    ]

    try:
        result = subprocess.run(
            cmd, capture_output=True, timeout=config.timeout_seconds
        )
    except FileNotFoundError as e:
        raise ChapterToolUnavailable(
            f"Failed to run {config.ffprobe_path}: {e}. Make sure FFmpeg is installed."
        ) from e
    except subprocess.TimeoutExpired as e:
        raise ChapterExtractionError(
            f"ffprobe timed out after {config.timeout_seconds}s"
        ) from e
    except (subprocess.SubprocessError, OSError) as e:
        raise ChapterExtractionError(f"Failed to run ffprobe: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ChapterExtractionError(
            f"ffprobe failed with status {result.returncode}: {stderr}"
        )

    try:
        payload = json.loads(result.stdout.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ChapterExtractionError(f"Invalid UTF-8 output from ffprobe: {e}") from e
    except json.JSONDecodeError as e:
        raise ChapterExtractionError(f"Failed to parse JSON from ffprobe: {e}") from e

    if not isinstance(payload, dict):
        raise ChapterExtractionError("Unexpected ffprobe output")

    chapters = parse_ffprobe_chapters(payload)
    logger.info(f"Found {len(chapters)} chapters")
    return chapters
