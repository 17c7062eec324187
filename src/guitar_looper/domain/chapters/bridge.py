"""Chapter detection state and chapter -> loop promotion.

Detection requests are tagged with an increasing request id. A completion is
applied only when its id matches the latest request, so a slow earlier scan
can never overwrite a newer one.
"""

import threading
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from loguru import logger

from guitar_looper.core.config import ChapterConfig
from guitar_looper.core.errors import ChapterExtractionError, ValidationError
from guitar_looper.domain.loops.models import Chapter, Loop, build_loop

from .extractor import check_ffprobe, extract_chapters

# Length given to a loop promoted from a chapter that has no end time
DEFAULT_CHAPTER_SPAN = 30.0

# File references that only exist in memory and cannot be handed to ffprobe
UNPROBEABLE_PREFIXES = ("blob:", "data:", "memory:")

STATUS_IDLE = "idle"
STATUS_LOADING = "loading"
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class ChapterState:
    """Chapter list for the current video and the state of its detection."""

    status: str = STATUS_IDLE  # 'idle' | 'loading' | 'success' | 'error'
    chapters: tuple[Chapter, ...] = ()
    request_id: int = 0  # Tag of the most recently started request
    error: Optional[str] = None


def is_probeable(file_ref: Optional[str]) -> bool:
    if not file_ref:
        return False
    return not file_ref.startswith(UNPROBEABLE_PREFIXES)


def should_auto_detect(duration: float, min_duration: float) -> bool:
    """Whether a freshly loaded video is long enough to be worth scanning."""
    return duration > 0 and duration >= min_duration


def reset_chapters(state: ChapterState) -> ChapterState:
    """Clear chapters for a new video.

    The request counter keeps increasing so completions for the previous
    video are recognised as stale.
    """
    return ChapterState(request_id=state.request_id + 1)


def begin_detection(
    state: ChapterState, file_ref: Optional[str]
) -> tuple[ChapterState, Optional[int]]:
    """
    Start a new detection cycle, superseding any request in flight.

    Args:
        state: Current chapter state
        file_ref: Resolvable path of the video, or None for in-memory sources

    Returns:
        Tuple of (updated state, request id to run or None if nothing to run)
    """
    request_id = state.request_id + 1

    if not is_probeable(file_ref):
        logger.debug(f"Skipping chapter detection for unprobeable source: {file_ref!r}")
        return ChapterState(status=STATUS_SUCCESS, request_id=request_id), None

    return (
        replace(state, status=STATUS_LOADING, request_id=request_id, error=None),
        request_id,
    )


def apply_result(
    state: ChapterState, request_id: int, chapters: Sequence[Chapter]
) -> ChapterState:
    """Replace the chapter list with a finished detection's result."""
    if request_id != state.request_id:
        logger.debug(
            f"Ignoring stale chapter result {request_id} (latest {state.request_id})"
        )
        return state
    return ChapterState(
        status=STATUS_SUCCESS, chapters=tuple(chapters), request_id=request_id
    )


def apply_failure(state: ChapterState, request_id: int, message: str) -> ChapterState:
    """Record a failed detection; the chapter list is cleared, not left stale."""
    if request_id != state.request_id:
        logger.debug(
            f"Ignoring stale chapter failure {request_id} (latest {state.request_id})"
        )
        return state
    return ChapterState(status=STATUS_ERROR, request_id=request_id, error=message)


def chapter_end(chapter: Chapter, duration: float = 0.0) -> float:
    """End of the loop a chapter becomes, capped at the video's end when known."""
    if chapter.end is not None and chapter.end > chapter.start:
        end = chapter.end
    else:
        end = chapter.start + DEFAULT_CHAPTER_SPAN
    if duration > 0:
        end = min(end, duration)
    return end


def promote_chapter_to_loop(
    chapter: Chapter, existing_loops: Sequence[Loop], duration: float = 0.0
) -> Loop:
    """
    Build a loop covering a chapter.

    Chapters without an end get DEFAULT_CHAPTER_SPAN seconds. Once the video
    duration is known the loop never extends past it.

    Args:
        chapter: Detected chapter to promote
        existing_loops: Loops already saved for the video
        duration: Video duration in seconds (0.0 = unknown)

    Raises:
        ValidationError: If the chapter title is blank or it starts at or
            after the end of the video
    """
    if duration > 0 and chapter.start >= duration:
        raise ValidationError(f"Chapter '{chapter.title}' starts after the end of the video")
    return build_loop(
        chapter.title,
        chapter.start,
        chapter_end(chapter, duration),
        existing_loops,
        source="chapter",
    )


ChapterCallback = Callable[[int, Optional[list[Chapter]], Optional[str]], None]


class ChapterWorker:
    """Runs ffprobe off the main thread and reports back through a callback.

    The callback receives (request_id, chapters, error); exactly one of
    chapters/error is set. It is called from the worker thread, so it should
    only enqueue the result for the main loop.

    With `preflight` set, `ffprobe -version` runs first and a missing tool is
    reported through the same error path as a failed scan.
    """

    def __init__(
        self, config: ChapterConfig, on_done: ChapterCallback, preflight: bool = False
    ) -> None:
        self.config = config
        self.on_done = on_done
        self.preflight = preflight

    def _run(self, request_id: int, file_ref: str) -> None:
        try:
            if self.preflight:
                logger.debug(f"ffprobe available: {check_ffprobe(self.config)}")
            chapters = extract_chapters(file_ref, self.config)
        except ChapterExtractionError as e:
            logger.warning(f"Chapter detection {request_id} failed: {e}")
            self.on_done(request_id, None, str(e))
            return
        self.on_done(request_id, chapters, None)

    def start(self, request_id: int, file_ref: str) -> threading.Thread:
        thread = threading.Thread(
            target=self._run,
            args=(request_id, file_ref),
            daemon=True,
            name=f"ChapterDetect-{request_id}",
        )
        thread.start()
        return thread
