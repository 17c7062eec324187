"""
Guitar Looper - command line entry point

`guitar-looper VIDEO` opens the interactive player. The other subcommands
inspect saved data or the external tools without starting mpv.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.table import Table

from guitar_looper.context import AppContext
from guitar_looper.controller.session import VideoSource, resolve_video_key
from guitar_looper.core import config as config_module
from guitar_looper.core.output import echo, get_console
from guitar_looper.core.errors import ChapterExtractionError, ChapterToolUnavailable
from guitar_looper.core.output import get_log_file_path, setup_loguru
from guitar_looper.domain import history
from guitar_looper.domain.chapters.extractor import check_ffprobe, extract_chapters
from guitar_looper.domain.playback.player import (
    check_mpv_available,
    format_precise_time,
    format_time,
)

SUBCOMMANDS = ("play", "history", "chapters", "check", "loops")

VIDEO_EXTENSIONS = (".mp4", ".mkv", ".mov", ".webm")


def run_play(ctx: AppContext, video: str) -> int:
    """Open a video in the interactive player."""
    from guitar_looper.ui.blessed.app import run_player

    path = Path(video).expanduser()
    if "://" not in video and not path.exists():
        echo(f"Error: file not found: {video}", "red")
        return 1
    if path.suffix.lower() not in VIDEO_EXTENSIONS and "://" not in video:
        echo(
            f"Warning: {path.suffix or 'no extension'} is not a known video type, trying anyway",
            "yellow",
        )

    file_ref = str(path.resolve()) if "://" not in video else video
    return run_player(ctx, VideoSource(handle=file_ref, file_ref=file_ref))


def run_history(ctx: AppContext, remove: Optional[str] = None) -> int:
    """Print recently opened videos, or forget one with --remove."""
    if remove:
        if history.remove_from_history(ctx.kv, resolve_video_key(remove)):
            echo(f"Removed {remove} from history", "green")
            return 0
        echo(f"{remove} is not in the history", "yellow")
        return 1

    entries = history.load_history(ctx.kv)
    if not entries:
        echo("No videos opened yet. Run: guitar-looper VIDEO", "yellow")
        return 0

    table = Table(title="Recent videos")
    table.add_column("Video", style="bold")
    table.add_column("Last opened")
    table.add_column("Duration", justify="right")
    table.add_column("Loops", justify="right")
    table.add_column("Chapters", justify="right")

    for entry in entries:
        table.add_row(
            escape(entry.display_name),
            entry.last_opened.replace("T", " "),
            format_time(entry.duration) if entry.duration else "-",
            str(entry.loop_count) if entry.loop_count is not None else "-",
            str(entry.chapter_count) if entry.chapter_count is not None else "-",
        )

    get_console().print(table)
    return 0


def run_chapters(ctx: AppContext, video: str) -> int:
    """Print chapters embedded in a video."""
    try:
        chapters = extract_chapters(video, ctx.config.chapters)
    except ChapterExtractionError as e:
        echo(f"Error: {e}", "red")
        return 1

    if not chapters:
        echo("No chapters found.", "yellow")
        return 0

    for chapter in chapters:
        end = format_precise_time(chapter.end) if chapter.end is not None else "…"
        echo(f"{format_precise_time(chapter.start)} → {end}  {escape(chapter.title)}")
    return 0


def run_loops(ctx: AppContext, video: str, clear: bool = False) -> int:
    """Print loops saved for a video, or delete them all with --clear."""
    video_key = resolve_video_key(video)
    if clear:
        if not ctx.loop_store.clear_loops(video_key):
            echo("Error: could not clear loops (see log)", "red")
            return 1
        history.update_cached_stats(ctx.kv, video_key, loop_count=0)
        echo(f"Cleared loops for {video}", "green")
        return 0

    loops = ctx.loop_store.load_loops(video_key)
    if not loops:
        echo("No loops saved for this video.", "yellow")
        return 0

    for loop in loops:
        echo(
            f"[{loop.color}]■[/] {escape(loop.name)}  "
            f"{format_precise_time(loop.start)} → {format_precise_time(loop.end)}"
        )
    return 0


def run_check(ctx: AppContext) -> int:
    """Report whether mpv and ffprobe are usable."""
    ok = True

    if check_mpv_available():
        echo("✓ mpv found", "green")
    else:
        echo("✗ mpv not found - playback is unavailable", "red")
        ok = False

    try:
        version = check_ffprobe(ctx.config.chapters)
        echo(f"✓ {version}", "green")
    except ChapterToolUnavailable as e:
        echo(f"✗ {e} Chapter detection is unavailable.", "red")
        ok = False

    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guitar-looper",
        description="Guitar Looper - practice along with videos using A/B loops",
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Open a video in the player")
    play_parser.add_argument("video", help="Video file to open")

    history_parser = subparsers.add_parser("history", help="List recently opened videos")
    history_parser.add_argument(
        "--remove", metavar="VIDEO", help="Forget a video instead of listing"
    )

    chapters_parser = subparsers.add_parser(
        "chapters", help="Show chapters embedded in a video"
    )
    chapters_parser.add_argument("video", help="Video file to scan")

    loops_parser = subparsers.add_parser("loops", help="Show loops saved for a video")
    loops_parser.add_argument("video", help="Video file")
    loops_parser.add_argument(
        "--clear", action="store_true", help="Delete every loop saved for the video"
    )

    subparsers.add_parser("check", help="Check that mpv and ffprobe are installed")
    return parser


def normalize_argv(argv: list[str]) -> list[str]:
    """Treat `guitar-looper VIDEO` as `guitar-looper play VIDEO`."""
    if argv and argv[0] not in SUBCOMMANDS and not argv[0].startswith("-"):
        return ["play"] + argv
    return argv


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the guitar-looper command."""
    parser = build_parser()
    args = parser.parse_args(normalize_argv(sys.argv[1:] if argv is None else argv))

    if not args.subcommand:
        parser.print_help()
        sys.exit(0)

    cfg = config_module.load_config()
    config_module.ensure_directories()

    log_file = Path(cfg.logging.log_file) if cfg.logging.log_file else get_log_file_path()
    setup_loguru(log_file, cfg.logging.level, cfg.logging.console_output)

    ctx = AppContext.create(cfg)

    if args.subcommand == "play":
        sys.exit(run_play(ctx, args.video))
    elif args.subcommand == "history":
        sys.exit(run_history(ctx, args.remove))
    elif args.subcommand == "chapters":
        sys.exit(run_chapters(ctx, args.video))
    elif args.subcommand == "loops":
        sys.exit(run_loops(ctx, args.video, args.clear))
    elif args.subcommand == "check":
        sys.exit(run_check(ctx))


if __name__ == "__main__":
    main()
