"""Tab panels (loops, chapters, info), naming dialog and footer."""

from blessed import Terminal

from guitar_looper.controller.session import TABS, SessionState
from guitar_looper.domain.chapters import bridge
from guitar_looper.domain.playback.player import format_precise_time, format_time
from guitar_looper.ui.blessed.events.keys import describe_key_help

from .dashboard import hex_color

TAB_LABELS = {"loops": "Loops", "chapters": "Chapters", "info": "Info"}


def render_tab_bar(term: Terminal, state: SessionState) -> str:
    counts = {
        "loops": f" ({len(state.loops)})",
        "chapters": f" ({len(state.chapters.chapters)})",
        "info": "",
    }
    parts = []
    for tab in TABS:
        label = f" {TAB_LABELS[tab]}{counts[tab]} "
        if tab == state.active_tab:
            parts.append(term.black_on_cyan(label))
        else:
            parts.append(term.white(label))
    return " ".join(parts)


def _visible_window(selected: int, total: int, height: int) -> tuple[int, int]:
    """Slice [start, end) that keeps `selected` on screen."""
    if total <= height:
        return 0, total
    start = min(max(selected - height // 2, 0), total - height)
    return start, start + height


def render_loops(term: Terminal, state: SessionState, height: int) -> list[str]:
    if not state.loops:
        return [term.white("No loops yet. Mark A and B, then press N to save one.")]

    lines = []
    start, end = _visible_window(state.selected_index, len(state.loops), height)
    for index in range(start, end):
        loop = state.loops[index]
        pointer = "›" if index == state.selected_index else " "
        active = "🔁" if loop.id == state.active_loop_id and state.is_looping else "  "
        swatch = hex_color(term, loop.color)("■")
        text = (
            f"{pointer} {swatch} {active} {loop.name}  "
            f"{format_precise_time(loop.start)} → {format_precise_time(loop.end)}"
        )
        lines.append(term.bold(text) if index == state.selected_index else text)
    return lines


def render_chapters(term: Terminal, state: SessionState, height: int) -> list[str]:
    chapters = state.chapters
    if chapters.status == bridge.STATUS_LOADING:
        return [term.yellow("Scanning for chapters...")]
    if chapters.status == bridge.STATUS_ERROR:
        return [
            term.red(f"Chapter scan failed: {chapters.error}"),
            term.white("Press R to try again."),
        ]
    if chapters.status == bridge.STATUS_IDLE:
        return [term.white("Chapters not scanned. Press R to scan.")]
    if not chapters.chapters:
        return [term.white("No chapters found in this video.")]

    lines = []
    start, end = _visible_window(state.selected_index, len(chapters.chapters), height)
    for index in range(start, end):
        chapter = chapters.chapters[index]
        pointer = "›" if index == state.selected_index else " "
        end_text = format_precise_time(chapter.end) if chapter.end is not None else "…"
        text = (
            f"{pointer} {chapter.title}  "
            f"{format_precise_time(chapter.start)} → {end_text}"
        )
        lines.append(term.bold(text) if index == state.selected_index else text)
    return lines


def render_info(term: Terminal, state: SessionState) -> list[str]:
    return [
        f"File:      {state.video_key or '-'}",
        f"Duration:  {format_time(state.duration) if state.duration > 0 else 'unknown'}",
        f"Loops:     {len(state.loops)}",
        f"Chapters:  {len(state.chapters.chapters)} ({state.chapters.status})",
    ]


def render_naming_dialog(term: Terminal, state: SessionState) -> list[str]:
    markers = state.markers
    title = "Rename loop:" if markers.rename_id is not None else "Name this loop:"
    lines = [
        term.bold_yellow(title),
        term.white("> ") + term.bold_white(markers.name_input) + term.reverse(" "),
    ]
    if markers.error:
        lines.append(term.red(markers.error))
    return lines


def render_panel(term: Terminal, state: SessionState, height: int) -> list[str]:
    """Tab bar plus the active tab's content (or the naming dialog)."""
    lines = [render_tab_bar(term, state), ""]
    body_height = max(height - len(lines), 1)

    if state.markers.naming:
        lines.extend(render_naming_dialog(term, state))
    elif state.active_tab == "loops":
        lines.extend(render_loops(term, state, body_height))
    elif state.active_tab == "chapters":
        lines.extend(render_chapters(term, state, body_height))
    else:
        lines.extend(render_info(term, state))
    return lines[:height]


def render_footer(term: Terminal, state: SessionState) -> list[str]:
    lines = []
    if state.status_message:
        text, color = state.status_message
        lines.append(getattr(term, color, term.white)(text))
    else:
        lines.append("")
    lines.append(term.dim(describe_key_help(state)))
    return lines
