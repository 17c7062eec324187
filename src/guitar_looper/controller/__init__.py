"""Playback controller - session state, intents and the event dispatcher."""

from .intents import Event, Intent
from .session import (
    TABS,
    SessionState,
    VideoSource,
    create_initial_state,
    dispatch,
    resolve_video_key,
)

__all__ = [
    "Event",
    "Intent",
    "TABS",
    "SessionState",
    "VideoSource",
    "create_initial_state",
    "dispatch",
    "resolve_video_key",
]
