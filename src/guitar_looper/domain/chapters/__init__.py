"""Chapters domain - ffprobe extraction and detection bookkeeping."""

from .extractor import check_ffprobe, extract_chapters, parse_ffprobe_chapters
from .bridge import (
    DEFAULT_CHAPTER_SPAN,
    STATUS_IDLE,
    STATUS_LOADING,
    STATUS_SUCCESS,
    STATUS_ERROR,
    ChapterState,
    ChapterWorker,
    apply_failure,
    apply_result,
    begin_detection,
    is_probeable,
    promote_chapter_to_loop,
    reset_chapters,
    should_auto_detect,
)

__all__ = [
    "check_ffprobe",
    "extract_chapters",
    "parse_ffprobe_chapters",
    "DEFAULT_CHAPTER_SPAN",
    "STATUS_IDLE",
    "STATUS_LOADING",
    "STATUS_SUCCESS",
    "STATUS_ERROR",
    "ChapterState",
    "ChapterWorker",
    "apply_failure",
    "apply_result",
    "begin_detection",
    "is_probeable",
    "promote_chapter_to_loop",
    "reset_chapters",
    "should_auto_detect",
]
