"""Playback domain - mpv integration.

This domain handles:
- mpv process lifecycle and JSON IPC
- Position / duration polling (the controller's time source)
- Clamped seeking and play/pause
"""

from .player import (
    PlayerState,
    check_mpv_available,
    start_mpv,
    stop_mpv,
    is_mpv_running,
    send_mpv_command,
    get_mpv_property,
    load_file,
    pause_playback,
    resume_playback,
    toggle_pause,
    clamp_position,
    seek_to_position,
    update_player_status,
    format_time,
    format_precise_time,
)

__all__ = [
    "PlayerState",
    "check_mpv_available",
    "start_mpv",
    "stop_mpv",
    "is_mpv_running",
    "send_mpv_command",
    "get_mpv_property",
    "load_file",
    "pause_playback",
    "resume_playback",
    "toggle_pause",
    "clamp_position",
    "seek_to_position",
    "update_player_status",
    "format_time",
    "format_precise_time",
]
