"""Dashboard rendering functions (header, progress bar, marker status)."""

import os
from typing import Optional

from blessed import Terminal

from guitar_looper.controller.session import SessionState
from guitar_looper.domain.loops.engine import loop_progress
from guitar_looper.domain.loops.markers import marker_phase
from guitar_looper.domain.loops.models import Loop
from guitar_looper.domain.playback.player import format_precise_time, format_time

ICONS = {
    "guitar": "🎸",
    "loop": "🔁",
    "play": "▶",
    "pause": "⏸",
    "marker": "◆",
}

BAR_WIDTH = 60


def hex_color(term: Terminal, hex_value: str):
    """Blessed formatter for a '#rrggbb' color (falls back to white)."""
    try:
        value = hex_value.lstrip("#")
        r, g, b = int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except (ValueError, IndexError):
        return term.white
    return term.color_rgb(r, g, b)


def bar_column(position: float, duration: float, width: int = BAR_WIDTH) -> int:
    """Column (0..width-1) of `position` on a progress bar."""
    if duration <= 0:
        return 0
    ratio = min(max(position / duration, 0.0), 1.0)
    return min(int(ratio * width), width - 1)


def create_progress_bar(
    term: Terminal,
    position: float,
    duration: float,
    active_loop: Optional[Loop] = None,
    pending: tuple[Optional[float], Optional[float]] = (None, None),
    width: int = BAR_WIDTH,
) -> str:
    """Progress bar with the active loop range and pending A/B points highlighted."""
    if duration <= 0:
        return term.white("─" * width) + term.white(" --:-- / --:--")

    cursor = bar_column(position, duration, width)
    loop_cols = None
    if active_loop is not None:
        loop_cols = (
            bar_column(active_loop.start, duration, width),
            bar_column(active_loop.end, duration, width),
        )
    marker_cols = {
        bar_column(point, duration, width) for point in pending if point is not None
    }

    parts = []
    for col in range(width):
        if col in marker_cols:
            parts.append(term.bold_yellow("◆"))
            continue
        in_loop = loop_cols is not None and loop_cols[0] <= col <= loop_cols[1]
        char = "█" if col <= cursor else "░"
        if in_loop:
            parts.append(hex_color(term, active_loop.color)(char))
        elif col <= cursor:
            parts.append(term.cyan(char))
        else:
            parts.append(term.white(char))

    parts.append(term.white(f" {format_time(position)} / {format_time(duration)}"))
    return "".join(parts)


def format_marker_line(state: SessionState, term: Terminal) -> str:
    """Describe pending A/B points."""
    phase = marker_phase(state.markers)
    a = state.markers.pending_start
    b = state.markers.pending_end
    a_text = format_precise_time(a) if a is not None else "--"
    b_text = format_precise_time(b) if b is not None else "--"
    line = f"A: {a_text}   B: {b_text}"

    if phase == "ready":
        return term.bold_green(line + "   (press N to save)")
    if phase == "naming":
        return term.bold_yellow(line + "   naming...")
    if phase == "empty":
        return term.white(line)
    return term.yellow(line)


def render_dashboard(term: Terminal, state: SessionState) -> list[str]:
    """
    Build dashboard lines.

    Args:
        term: blessed Terminal instance
        state: Current session state

    Returns:
        Lines to draw at the top of the screen
    """
    lines = []

    title = "GUITAR LOOPER"
    lines.append(term.bold_magenta(ICONS["guitar"]) + " " + term.bold_cyan(title))
    lines.append(term.cyan("━" * max(min(term.width - 2, 80), 10)))

    if state.video is None:
        lines.append(term.white("No video loaded"))
        return lines

    name = os.path.basename(state.video_key or state.video.handle)
    play_icon = ICONS["play"] if state.is_playing else ICONS["pause"]
    lines.append(term.bold_white(f"{play_icon} {name}"))

    active = state.active_loop
    lines.append(
        create_progress_bar(
            term,
            state.position,
            state.duration,
            active,
            (state.markers.pending_start, state.markers.pending_end),
        )
    )

    if active is not None and state.is_looping:
        lines.append(
            hex_color(term, active.color)(
                f"{ICONS['loop']} Looping '{active.name}' "
                f"{format_precise_time(active.start)} → {format_precise_time(active.end)} "
                f"({loop_progress(state.position, active):.0%})"
            )
        )
    else:
        lines.append(term.white("Loop off"))

    lines.append(format_marker_line(state, term))
    return lines
