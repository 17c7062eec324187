"""Loops domain - practice loop model, A/B markers, persistence and repeat rule.

This domain handles:
- Loop and Chapter data structures
- The mark A / mark B / name / save workflow
- Per-video loop persistence through the key/value store
- Seeking back to the loop start once playback passes its end
"""

from .models import (
    LOOP_PALETTE,
    Loop,
    Chapter,
    build_loop,
    next_color,
    palette_color,
)
from .markers import (
    MarkerState,
    marker_phase,
    mark_start,
    mark_end,
    request_commit,
    confirm_name,
    cancel_markers,
    append_name_char,
    delete_name_char,
)
from .store import (
    LoopStore,
    find_loop,
    append_loop,
    remove_loop,
    replace_loop,
)
from .engine import loop_seek_target, loop_progress

__all__ = [
    # Models
    "LOOP_PALETTE",
    "Loop",
    "Chapter",
    "build_loop",
    "next_color",
    "palette_color",
    # Markers
    "MarkerState",
    "marker_phase",
    "mark_start",
    "mark_end",
    "request_commit",
    "confirm_name",
    "cancel_markers",
    "append_name_char",
    "delete_name_char",
    # Store
    "LoopStore",
    "find_loop",
    "append_loop",
    "remove_loop",
    "replace_loop",
    # Engine
    "loop_seek_target",
    "loop_progress",
]
