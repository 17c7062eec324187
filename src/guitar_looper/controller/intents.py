"""Messages exchanged between the controller and the outside world.

Intents flow out of the controller (side effects for the app to perform);
events flow back in (things that happened: player updates, async results).
"""

from dataclasses import dataclass, field
from typing import Any

# Intent actions
SEEK = "seek"
TOGGLE_PLAY = "toggle_play"
LOAD_VIDEO = "load_video"
LOAD_LOOPS = "load_loops"
PERSIST_LOOPS = "persist_loops"
DETECT_CHAPTERS = "detect_chapters"
RECORD_HISTORY = "record_history"
UPDATE_HISTORY_STATS = "update_history_stats"
QUIT = "quit"

# Event types
LOOPS_LOADED = "loops_loaded"
CHAPTERS_DETECTED = "chapters_detected"
CHAPTER_DETECTION_FAILED = "chapter_detection_failed"
POSITION_CHANGED = "position_changed"
DURATION_CHANGED = "duration_changed"
PLAY_STATE_CHANGED = "play_state_changed"


@dataclass
class Intent:
    """A side effect requested by the controller."""

    action: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class Event:
    """Something the controller must react to."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)
