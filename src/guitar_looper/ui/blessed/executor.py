"""Intent execution.

Carries out the side effects the controller asks for. Completions that the
controller must hear about (loaded loops, chapter results) are posted back
onto `ctx.events` and dispatched by the main loop, never applied here.
"""

from dataclasses import replace
from typing import Callable

from loguru import logger

from guitar_looper.context import AppContext
from guitar_looper.controller import intents as ix
from guitar_looper.controller.intents import Event, Intent
from guitar_looper.core.output import log
from guitar_looper.domain import history
from guitar_looper.domain.chapters.bridge import ChapterWorker
from guitar_looper.domain.playback import player

IntentHandler = Callable[[AppContext, dict], tuple[AppContext, bool]]


def _seek(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    player_state, ok = player.seek_to_position(ctx.player_state, data["position"])
    if not ok:
        logger.warning(f"Seek to {data['position']:.2f}s failed")
    return ctx.with_player_state(player_state), False


def _toggle_play(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    player_state, _ = player.toggle_pause(ctx.player_state)
    return ctx.with_player_state(player_state), False


def _load_video(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    player_state, ok = player.load_file(ctx.player_state, data["handle"])
    if not ok:
        log(f"Could not load video: {data['handle']}", level="error")
    return ctx.with_player_state(player_state), False


def _load_loops(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    video_key = data["video_key"]
    loops = ctx.loop_store.load_loops(video_key)
    ctx.events.put(Event(ix.LOOPS_LOADED, {"video_key": video_key, "loops": loops}))
    return ctx, False


def _persist_loops(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    if not ctx.loop_store.save_loops(data["video_key"], data["loops"]):
        log("Could not save loops - changes only last until the video is closed", "warning")
    return ctx, False


def _detect_chapters(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    def on_done(request_id, chapters, error):
        if error is not None:
            ctx.events.put(
                Event(
                    ix.CHAPTER_DETECTION_FAILED,
                    {"request_id": request_id, "message": error},
                )
            )
        else:
            ctx.events.put(
                Event(
                    ix.CHAPTERS_DETECTED,
                    {"request_id": request_id, "chapters": chapters},
                )
            )

    worker = ChapterWorker(
        ctx.config.chapters, on_done, preflight=not ctx.ffprobe_checked
    )
    worker.start(data["request_id"], data["file_ref"])
    return replace(ctx, ffprobe_checked=True), False


def _record_history(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    history.record_opened(
        ctx.kv, data["video_key"], max_entries=ctx.config.history.max_entries
    )
    return ctx, False


def _update_history_stats(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    history.update_cached_stats(
        ctx.kv,
        data["video_key"],
        duration=data.get("duration"),
        loop_count=data.get("loop_count"),
        chapter_count=data.get("chapter_count"),
    )
    return ctx, False


def _quit(ctx: AppContext, data: dict) -> tuple[AppContext, bool]:
    return ctx, True


INTENT_HANDLERS: dict[str, IntentHandler] = {
    ix.SEEK: _seek,
    ix.TOGGLE_PLAY: _toggle_play,
    ix.LOAD_VIDEO: _load_video,
    ix.LOAD_LOOPS: _load_loops,
    ix.PERSIST_LOOPS: _persist_loops,
    ix.DETECT_CHAPTERS: _detect_chapters,
    ix.RECORD_HISTORY: _record_history,
    ix.UPDATE_HISTORY_STATS: _update_history_stats,
    ix.QUIT: _quit,
}


def execute_intents(
    ctx: AppContext, intents: list[Intent]
) -> tuple[AppContext, bool]:
    """
    Execute intents in order.

    Returns:
        Tuple of (updated context, should_quit)
    """
    should_quit = False
    for intent in intents:
        handler = INTENT_HANDLERS.get(intent.action)
        if handler is None:
            logger.warning(f"No handler for intent: {intent.action}")
            continue
        ctx, quit_requested = handler(ctx, intent.data)
        should_quit = should_quit or quit_requested
    return ctx, should_quit
