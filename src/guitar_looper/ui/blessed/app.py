"""Main event loop and entry point for the blessed UI."""

import queue
import sys

from blessed import Terminal
from loguru import logger

from guitar_looper.context import AppContext
from guitar_looper.controller import intents as ix
from guitar_looper.controller.intents import Event
from guitar_looper.controller.session import (
    SessionState,
    VideoSource,
    create_initial_state,
    dispatch,
    open_video,
    set_status,
)
from guitar_looper.core.output import (
    clear_blessed_mode,
    drain_pending_messages,
    log,
    set_blessed_mode,
)
from guitar_looper.domain.playback import player

from .components import render_dashboard, render_footer, render_panel
from .events.keys import handle_key, parse_key
from .executor import execute_intents
from .helpers import write_lines

# Redraw when the playhead moved at least this far (seconds)
POSITION_UPDATE_THRESHOLD = 0.1


def poll_player(ctx: AppContext, state: SessionState) -> tuple[AppContext, list[Event]]:
    """
    Refresh the player status and report what changed as controller events.

    Args:
        ctx: Application context
        state: Current session state (to compare against)

    Returns:
        Tuple of (updated context, events)
    """
    player_state = player.update_player_status(ctx.player_state)
    ctx = ctx.with_player_state(player_state)

    events = []
    if player_state.duration != state.duration:
        events.append(Event(ix.DURATION_CHANGED, {"duration": player_state.duration}))
    if player_state.is_playing != state.is_playing:
        events.append(
            Event(ix.PLAY_STATE_CHANGED, {"is_playing": player_state.is_playing})
        )
    if player_state.current_position != state.position:
        events.append(
            Event(ix.POSITION_CHANGED, {"position": player_state.current_position})
        )
    return ctx, events


def drain_events(ctx: AppContext) -> list[Event]:
    """Collect events posted by background work since the last frame."""
    events = []
    while True:
        try:
            events.append(ctx.events.get_nowait())
        except queue.Empty:
            return events


def apply_events(
    ctx: AppContext, state: SessionState, events: list[Event]
) -> tuple[AppContext, SessionState, bool]:
    """Dispatch events one at a time, executing each one's intents before the next."""
    should_quit = False
    for event in events:
        state, intents = dispatch(state, event)
        ctx, quit_requested = execute_intents(ctx, intents)
        should_quit = should_quit or quit_requested
    return ctx, state, should_quit


def render(term: Terminal, state: SessionState) -> None:
    """Full redraw of the screen."""
    dashboard = render_dashboard(term, state)
    footer = render_footer(term, state)
    panel_height = max(term.height - len(dashboard) - len(footer) - 1, 3)
    panel = render_panel(term, state, panel_height)

    write_lines(term, 0, dashboard + [""], len(dashboard) + 1)
    write_lines(term, len(dashboard) + 1, panel, panel_height)
    write_lines(term, term.height - len(footer), footer, len(footer))
    sys.stdout.flush()


def main_loop(term: Terminal, ctx: AppContext, state: SessionState) -> AppContext:
    """Poll the player, route keys and background events, redraw on change."""
    last_rendered = None
    last_rendered_position = -1.0

    while True:
        if not player.is_mpv_running(ctx.player_state):
            logger.info("MPV exited - leaving main loop")
            break

        ctx, player_events = poll_player(ctx, state)
        ctx, state, should_quit = apply_events(
            ctx, state, player_events + drain_events(ctx)
        )
        if should_quit:
            break

        for message, color in drain_pending_messages():
            state = set_status(state, message, color)

        position_moved = (
            abs(state.position - last_rendered_position) >= POSITION_UPDATE_THRESHOLD
        )
        if position_moved or state != last_rendered:
            render(term, state)
            last_rendered = state
            last_rendered_position = state.position

        key = term.inkey(timeout=ctx.config.player.poll_interval)
        if not key:
            continue

        state, intents = handle_key(
            state, parse_key(key), seek_step=ctx.config.ui.seek_step
        )
        ctx, should_quit = execute_intents(ctx, intents)
        if should_quit:
            break

    return ctx


def run_player(ctx: AppContext, source: VideoSource) -> int:
    """
    Start mpv, open `source` and run the interactive UI until the user quits.

    Returns:
        Process exit code
    """
    player_state = player.start_mpv(ctx.config)
    if player_state is None:
        log("Could not start mpv. Is it installed and on your PATH?", "error")
        return 1

    ctx = ctx.with_player_state(player_state)
    state, intents = open_video(create_initial_state(ctx.config), source)
    ctx, _ = execute_intents(ctx, intents)

    term = Terminal()
    set_blessed_mode()
    try:
        with term.fullscreen(), term.cbreak(), term.hidden_cursor():
            ctx = main_loop(term, ctx, state)
    except KeyboardInterrupt:
        logger.info("Ctrl+C detected - cleaning up")
    finally:
        clear_blessed_mode()
        player.stop_mpv(ctx.player_state)

    return 0
