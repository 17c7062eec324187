"""Loop & chapter playback controller - immutable state updates.

Every operation takes the current SessionState and returns a new state plus
a list of Intents (seek, persist, detect...) for the app to carry out. Nothing
here talks to mpv, ffprobe or storage directly.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from guitar_looper.core.config import Config
from guitar_looper.core.errors import ValidationError
from guitar_looper.domain.chapters import bridge
from guitar_looper.domain.chapters.bridge import ChapterState
from guitar_looper.domain.loops import markers as marker_ops
from guitar_looper.domain.loops.engine import loop_seek_target
from guitar_looper.domain.loops.markers import MarkerState
from guitar_looper.domain.loops.models import Chapter, Loop
from guitar_looper.domain.loops.store import (
    append_loop,
    find_loop,
    remove_loop,
    replace_loop,
)
from guitar_looper.domain.playback.player import clamp_position

from . import intents as ix
from .intents import Event, Intent

# Fixed tab rotation for the C key
TABS = ("loops", "chapters", "info")

Result = tuple["SessionState", list[Intent]]


@dataclass(frozen=True)
class VideoSource:
    """The current video: what the player opens and where it lives on disk.

    `file_ref` is None for sources with no resolvable path (nothing to probe).
    """

    handle: str
    file_ref: Optional[str] = None


def resolve_video_key(file_ref: str) -> str:
    """Persistence key for a video: its resolved path, or the URL unchanged."""
    if "://" in file_ref or file_ref.startswith(bridge.UNPROBEABLE_PREFIXES):
        return file_ref
    return str(Path(file_ref).expanduser().resolve())


@dataclass(frozen=True)
class SessionState:
    """Everything the controller tracks for the open video."""

    video: Optional[VideoSource] = None
    video_key: Optional[str] = None

    # Time source mirror
    position: float = 0.0
    duration: float = 0.0  # 0.0 = unknown
    is_playing: bool = False

    # Loops
    loops: tuple[Loop, ...] = ()
    loops_loaded: bool = False
    active_loop_id: Optional[str] = None
    is_looping: bool = False

    # A/B markers and naming dialog
    markers: MarkerState = field(default_factory=MarkerState)

    # Chapters
    chapters: ChapterState = field(default_factory=ChapterState)
    auto_detect_chapters: bool = True
    min_chapter_duration: float = 10.0

    # View
    active_tab: str = "loops"
    selected_index: int = 0
    status_message: Optional[tuple[str, str]] = None  # (text, color)

    @property
    def active_loop(self) -> Optional[Loop]:
        return find_loop(self.loops, self.active_loop_id)

    @property
    def has_video(self) -> bool:
        return self.video is not None


def create_initial_state(config: Optional[Config] = None) -> SessionState:
    if config is None:
        return SessionState()
    return SessionState(
        auto_detect_chapters=config.chapters.auto_detect,
        min_chapter_duration=config.chapters.min_duration,
    )


def set_status(state: SessionState, message: str, color: str = "white") -> SessionState:
    return replace(state, status_message=(message, color))


def clear_status(state: SessionState) -> SessionState:
    return replace(state, status_message=None)


# ============================================================================
# VIDEO LIFECYCLE
# ============================================================================


def open_video(state: SessionState, source: VideoSource) -> Result:
    """
    Make `source` the current video.

    Markers, the active loop, looping and chapters are reset no matter what
    they held before; loops for the new video are requested from storage.
    """
    key = resolve_video_key(source.file_ref or source.handle)
    logger.info(f"Opening video: {key}")

    new_state = replace(
        state,
        video=source,
        video_key=key,
        position=0.0,
        duration=0.0,
        is_playing=False,
        loops=(),
        loops_loaded=False,
        active_loop_id=None,
        is_looping=False,
        markers=MarkerState(),
        chapters=bridge.reset_chapters(state.chapters),
        active_tab="loops",
        selected_index=0,
        status_message=None,
    )
    return new_state, [
        Intent(ix.LOAD_VIDEO, {"handle": source.handle}),
        Intent(ix.LOAD_LOOPS, {"video_key": key}),
        Intent(ix.RECORD_HISTORY, {"video_key": key}),
    ]


def on_loops_loaded(state: SessionState, video_key: str, loops: Sequence[Loop]) -> Result:
    """Install loops read from storage; results for another video are dropped."""
    if video_key != state.video_key:
        logger.debug(f"Dropping loops loaded for stale video {video_key}")
        return state, []

    loaded_ids = {loop.id for loop in loops}
    # Keep anything created before the read finished
    created_meanwhile = tuple(loop for loop in state.loops if loop.id not in loaded_ids)
    new_state = replace(
        state, loops=tuple(loops) + created_meanwhile, loops_loaded=True
    )
    intents = [_persist(new_state)] if created_meanwhile else []
    intents.append(_loop_count_intent(new_state))
    return new_state, intents


# ============================================================================
# TIME SOURCE UPDATES
# ============================================================================


def on_position(state: SessionState, position: float) -> Result:
    """Track the playback position and enforce the active loop's bounds."""
    target = loop_seek_target(position, state.active_loop, state.is_looping)
    if target is None:
        return replace(state, position=position), []
    return replace(state, position=target), [Intent(ix.SEEK, {"position": target})]


def on_duration(state: SessionState, duration: float) -> Result:
    """Record the duration; the first time it is known, kick off chapter detection."""
    was_unknown = state.duration <= 0
    new_state = replace(state, duration=max(duration, 0.0))
    intents: list[Intent] = []

    if not (was_unknown and new_state.duration > 0 and state.video_key):
        return new_state, intents

    intents.append(
        Intent(
            ix.UPDATE_HISTORY_STATS,
            {"video_key": state.video_key, "duration": new_state.duration},
        )
    )

    if (
        new_state.auto_detect_chapters
        and new_state.chapters.status == bridge.STATUS_IDLE
        and bridge.should_auto_detect(new_state.duration, new_state.min_chapter_duration)
    ):
        new_state, detect_intents = rescan_chapters(new_state)
        intents.extend(detect_intents)

    return new_state, intents


def on_play_state(state: SessionState, is_playing: bool) -> Result:
    return replace(state, is_playing=is_playing), []


def toggle_play(state: SessionState) -> Result:
    return state, [Intent(ix.TOGGLE_PLAY)]


def seek_by(state: SessionState, delta: float) -> Result:
    target = clamp_position(state.position + delta, state.duration)
    return replace(state, position=target), [Intent(ix.SEEK, {"position": target})]


# ============================================================================
# LOOP STORE OPERATIONS
# ============================================================================


def _persist(state: SessionState) -> Intent:
    return Intent(ix.PERSIST_LOOPS, {"video_key": state.video_key, "loops": state.loops})


def _loop_count_intent(state: SessionState) -> Intent:
    return Intent(
        ix.UPDATE_HISTORY_STATS,
        {"video_key": state.video_key, "loop_count": len(state.loops)},
    )


def add_loop(state: SessionState, loop: Loop) -> Result:
    """Append a loop and persist the whole collection right away."""
    new_state = replace(state, loops=append_loop(state.loops, loop))
    return new_state, [_persist(new_state), _loop_count_intent(new_state)]


def delete_loop(state: SessionState, loop_id: str) -> Result:
    """Remove a loop by id; deleting the active loop also stops looping."""
    if find_loop(state.loops, loop_id) is None:
        return state, []

    loops = remove_loop(state.loops, loop_id)
    new_state = replace(
        state,
        loops=loops,
        selected_index=min(state.selected_index, max(len(loops) - 1, 0)),
    )
    if state.active_loop_id == loop_id:
        new_state = replace(new_state, active_loop_id=None, is_looping=False)

    return new_state, [_persist(new_state), _loop_count_intent(new_state)]


def rename_loop(state: SessionState, loop_id: str, name: str) -> Result:
    """Replace a loop by id with a renamed copy; blank names are rejected."""
    loop = find_loop(state.loops, loop_id)
    if loop is None:
        return state, []

    clean_name = name.strip()
    if not clean_name:
        return set_status(state, "Loop name cannot be empty", "red"), []

    new_state = replace(state, loops=replace_loop(state.loops, replace(loop, name=clean_name)))
    return set_status(new_state, f"Renamed loop to '{clean_name}'", "green"), [
        _persist(new_state)
    ]


def begin_rename(state: SessionState) -> Result:
    """Open the naming dialog for the loop selected in the loops tab."""
    if state.active_tab != "loops" or state.selected_index >= len(state.loops):
        return state, []
    loop = state.loops[state.selected_index]
    return replace(state, markers=marker_ops.begin_rename(state.markers, loop)), []


def _confirm_rename(state: SessionState, name: str) -> Result:
    if not name.strip():
        markers = replace(state.markers, error="Loop name cannot be empty")
        return replace(state, markers=markers), []

    new_state, intents = rename_loop(state, state.markers.rename_id, name)
    return replace(new_state, markers=marker_ops.close_naming(state.markers)), intents


# ============================================================================
# LOOP PLAYBACK
# ============================================================================


def activate_loop(state: SessionState, loop_id: str) -> Result:
    """Select a loop, engage looping and jump to its start. Unknown ids are ignored."""
    loop = find_loop(state.loops, loop_id)
    if loop is None:
        return state, []

    new_state = replace(
        state, active_loop_id=loop.id, is_looping=True, position=loop.start
    )
    return new_state, [Intent(ix.SEEK, {"position": loop.start})]


def stop_loop(state: SessionState) -> Result:
    """Disengage looping without moving the playhead."""
    return replace(state, active_loop_id=None, is_looping=False), []


# ============================================================================
# A/B MARKERS
# ============================================================================


def mark_start(state: SessionState) -> Result:
    position = clamp_position(state.position, state.duration)
    return replace(state, markers=marker_ops.mark_start(state.markers, position)), []


def mark_end(state: SessionState) -> Result:
    position = clamp_position(state.position, state.duration)
    return replace(state, markers=marker_ops.mark_end(state.markers, position)), []


def request_commit(state: SessionState) -> Result:
    return replace(state, markers=marker_ops.request_commit(state.markers)), []


def confirm_name(state: SessionState, name: Optional[str] = None) -> Result:
    """Save the pending A/B points as a loop named `name` (or the typed input).

    When the dialog was opened by `begin_rename`, renames that loop instead.
    """
    typed = state.markers.name_input if name is None else name
    if state.markers.rename_id is not None:
        return _confirm_rename(state, typed)

    markers, loop = marker_ops.confirm_name(state.markers, typed, state.loops)
    new_state = replace(state, markers=markers)
    if loop is None:
        return new_state, []

    new_state, intents = add_loop(new_state, loop)
    return set_status(new_state, f"Saved loop '{loop.name}'", "green"), intents


def cancel_all(state: SessionState) -> Result:
    """Drop pending markers, close the naming dialog and stop any active loop."""
    return (
        replace(
            clear_status(state),
            markers=marker_ops.cancel_markers(),
            active_loop_id=None,
            is_looping=False,
        ),
        [],
    )


# ============================================================================
# CHAPTERS
# ============================================================================


def rescan_chapters(state: SessionState) -> Result:
    """Start a fresh detection cycle, superseding any scan in flight."""
    if state.video is None:
        return state, []

    chapters, request_id = bridge.begin_detection(state.chapters, state.video.file_ref)
    new_state = replace(state, chapters=chapters)
    if request_id is None:
        return new_state, []
    return new_state, [
        Intent(
            ix.DETECT_CHAPTERS,
            {"request_id": request_id, "file_ref": state.video.file_ref},
        )
    ]


def on_chapters_detected(
    state: SessionState, request_id: int, chapters: Sequence[Chapter]
) -> Result:
    new_chapters = bridge.apply_result(state.chapters, request_id, chapters)
    if new_chapters is state.chapters:
        return state, []

    new_state = replace(state, chapters=new_chapters)
    if state.active_tab == "chapters":
        new_state = replace(new_state, selected_index=0)
    return new_state, [
        Intent(
            ix.UPDATE_HISTORY_STATS,
            {"video_key": state.video_key, "chapter_count": len(chapters)},
        )
    ]


def on_chapter_detection_failed(
    state: SessionState, request_id: int, message: str
) -> Result:
    new_chapters = bridge.apply_failure(state.chapters, request_id, message)
    if new_chapters is state.chapters:
        return state, []
    return set_status(replace(state, chapters=new_chapters), message, "red"), []


def promote_chapter(state: SessionState, chapter_id: str) -> Result:
    """Turn a detected chapter into a saved loop."""
    chapter = next((c for c in state.chapters.chapters if c.id == chapter_id), None)
    if chapter is None:
        return state, []

    try:
        loop = bridge.promote_chapter_to_loop(chapter, state.loops, state.duration)
    except ValidationError as e:
        return set_status(state, str(e), "red"), []

    new_state, intents = add_loop(state, loop)
    return set_status(new_state, f"Added loop from chapter '{loop.name}'", "green"), intents


# ============================================================================
# VIEW
# ============================================================================


def cycle_tab(state: SessionState) -> Result:
    index = TABS.index(state.active_tab) if state.active_tab in TABS else -1
    return replace(state, active_tab=TABS[(index + 1) % len(TABS)], selected_index=0), []


def visible_items(state: SessionState) -> tuple:
    if state.active_tab == "loops":
        return state.loops
    if state.active_tab == "chapters":
        return state.chapters.chapters
    return ()


def move_selection(state: SessionState, delta: int) -> Result:
    items = visible_items(state)
    if not items:
        return replace(state, selected_index=0), []
    index = max(0, min(state.selected_index + delta, len(items) - 1))
    return replace(state, selected_index=index), []


def activate_selection(state: SessionState) -> Result:
    """Enter on the list: play the selected loop or promote the selected chapter."""
    items = visible_items(state)
    if not items or state.selected_index >= len(items):
        return state, []

    item = items[state.selected_index]
    if state.active_tab == "loops":
        return activate_loop(state, item.id)
    return promote_chapter(state, item.id)


def delete_selection(state: SessionState) -> Result:
    if state.active_tab != "loops" or not state.loops:
        return state, []
    if state.selected_index >= len(state.loops):
        return state, []
    return delete_loop(state, state.loops[state.selected_index].id)


# ============================================================================
# EVENT DISPATCH
# ============================================================================


def dispatch(state: SessionState, event: Event) -> Result:
    """Route an incoming event to the matching state update."""
    data = event.data
    match event.type:
        case ix.POSITION_CHANGED:
            return on_position(state, data["position"])
        case ix.DURATION_CHANGED:
            return on_duration(state, data["duration"])
        case ix.PLAY_STATE_CHANGED:
            return on_play_state(state, data["is_playing"])
        case ix.LOOPS_LOADED:
            return on_loops_loaded(state, data["video_key"], data["loops"])
        case ix.CHAPTERS_DETECTED:
            return on_chapters_detected(state, data["request_id"], data["chapters"])
        case ix.CHAPTER_DETECTION_FAILED:
            return on_chapter_detection_failed(
                state, data["request_id"], data["message"]
            )
        case _:
            logger.warning(f"Unhandled controller event: {event.type}")
            return state, []
