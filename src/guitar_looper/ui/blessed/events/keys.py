"""Keyboard command router.

Maps key events onto controller operations. Keys are fixed (not remappable):

    Space   toggle play/pause
    A       mark loop start at the current position
    B       mark loop end at the current position
    N       name and save the pending A/B loop
    C       cycle tabs: loops -> chapters -> info
    Escape  clear markers, stop the active loop and close the naming dialog

Extra navigation keys: Up/Down select, Enter play loop / add chapter as loop,
E rename loop, D delete loop, S stop loop, R rescan chapters, Left/Right seek,
Q quit.

While the naming dialog is open every printable key is text input, so typing
a loop name never triggers commands.
"""

from dataclasses import replace
from typing import Optional

from blessed.keyboard import Keystroke

from guitar_looper.controller import session
from guitar_looper.controller.intents import QUIT, Intent
from guitar_looper.controller.session import SessionState
from guitar_looper.domain.loops import markers as marker_ops

DEFAULT_SEEK_STEP = 5.0


def parse_key(key: Keystroke) -> dict:
    """
    Parse keystroke into event dictionary.

    Args:
        key: blessed Keystroke

    Returns:
        Event dictionary describing the key press
    """
    event = {
        "type": "unknown",
        "key": key,
        "name": key.name if hasattr(key, "name") else None,
        "char": str(key) if key and key.isprintable() else None,
    }

    if key.name == "KEY_ENTER" or key == "\n" or key == "\r":
        event["type"] = "enter"
    elif key.name == "KEY_ESCAPE" or key == "\x1b":
        event["type"] = "escape"
    elif key.name == "KEY_BACKSPACE" or key == "\x7f" or key == "\x08":
        event["type"] = "backspace"
    elif key.name == "KEY_DELETE":
        event["type"] = "delete"
    elif key.name == "KEY_UP":
        event["type"] = "arrow_up"
    elif key.name == "KEY_DOWN":
        event["type"] = "arrow_down"
    elif key.name == "KEY_LEFT":
        event["type"] = "arrow_left"
    elif key.name == "KEY_RIGHT":
        event["type"] = "arrow_right"
    elif key == "\x03":  # Ctrl+C
        event["type"] = "ctrl_c"
    elif key == " ":
        event["type"] = "space"
    elif key and key.isprintable():
        event["type"] = "char"

    return event


def _handle_naming_key(
    state: SessionState, event: dict
) -> tuple[SessionState, list[Intent]]:
    """Keys while the loop-name field has focus."""
    if event["type"] == "escape":
        return session.cancel_all(state)

    if event["type"] == "enter":
        return session.confirm_name(state)

    if event["type"] == "backspace":
        return replace(state, markers=marker_ops.delete_name_char(state.markers)), []

    if event["char"]:
        return (
            replace(state, markers=marker_ops.append_name_char(state.markers, event["char"])),
            [],
        )

    return state, []


def handle_key(
    state: SessionState, event: dict, seek_step: float = DEFAULT_SEEK_STEP
) -> tuple[SessionState, list[Intent]]:
    """
    Handle one key event and return updated state plus intents.

    Args:
        state: Current session state
        event: Parsed key event (see parse_key)
        seek_step: Seconds to jump for Left/Right

    Returns:
        Tuple of (updated state, intents to execute)
    """
    if event["type"] == "ctrl_c":
        return state, [Intent(QUIT)]

    # Inactive until a video is loaded
    if not state.has_video:
        if event["char"] and event["char"].lower() == "q":
            return state, [Intent(QUIT)]
        return state, []

    if state.markers.naming:
        return _handle_naming_key(state, event)

    match event["type"]:
        case "space":
            return session.toggle_play(state)
        case "escape":
            return session.cancel_all(state)
        case "enter":
            return session.activate_selection(state)
        case "arrow_up":
            return session.move_selection(state, -1)
        case "arrow_down":
            return session.move_selection(state, 1)
        case "arrow_left":
            return session.seek_by(state, -seek_step)
        case "arrow_right":
            return session.seek_by(state, seek_step)
        case "delete":
            return session.delete_selection(state)
        case "char":
            return _handle_command_char(state, event["char"].lower())

    return state, []


def _handle_command_char(
    state: SessionState, char: str
) -> tuple[SessionState, list[Intent]]:
    handlers = {
        "a": session.mark_start,
        "b": session.mark_end,
        "n": session.request_commit,
        "c": session.cycle_tab,
        "d": session.delete_selection,
        "e": session.begin_rename,
        "s": session.stop_loop,
        "r": session.rescan_chapters,
    }
    handler = handlers.get(char)
    if handler:
        return handler(state)
    if char == "q":
        return state, [Intent(QUIT)]
    return state, []


def describe_key_help(state: Optional[SessionState] = None) -> str:
    """One-line key reference for the footer."""
    if state is not None and state.markers.naming:
        return "Type a name · Enter save · Esc cancel"
    return (
        "Space play/pause · A/B mark · N save loop · C tab · ↑↓ select · "
        "Enter play/add · E rename · D delete · S stop · R rescan · Esc clear · Q quit"
    )
