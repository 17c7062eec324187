"""
mpv playback for Guitar Looper.

mpv runs as a separate process with its video window; we talk to it over
the JSON IPC socket. The player is the controller's time source: the UI loop
polls position/duration/pause and turns changes into controller events.
"""

import itertools
import json
import os
import shutil
import socket
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, NamedTuple, Optional

from loguru import logger

from guitar_looper.core.config import Config

SOCKET_WAIT_SECONDS = 5.0
IPC_TIMEOUT_SECONDS = 2.0

_request_ids = itertools.count(1)


class PlayerState(NamedTuple):
    """Immutable player state."""

    socket_path: Optional[str] = None
    process: Optional[subprocess.Popen] = None
    current_file: Optional[str] = None
    is_playing: bool = False
    current_position: float = 0.0
    duration: float = 0.0  # 0.0 until mpv reports it


def check_mpv_available() -> bool:
    return shutil.which("mpv") is not None


def _default_socket_path() -> str:
    return str(Path(tempfile.gettempdir()) / f"guitar-looper-mpv-{os.getpid()}")


def _mpv_command_line(config: Config, socket_path: str) -> list[str]:
    args = [
        "mpv",
        "--idle=yes",
        "--force-window=yes",
        "--keep-open=yes",
        "--no-terminal",
        "--hr-seek=yes",  # loop starts must land on the exact frame
        f"--volume={config.player.volume}",
        f"--input-ipc-server={socket_path}",
    ]
    if config.player.fullscreen:
        args.append("--fullscreen")
    return args


def _wait_for_socket(process: subprocess.Popen, socket_path: str) -> bool:
    deadline = time.monotonic() + SOCKET_WAIT_SECONDS
    while time.monotonic() < deadline:
        if process.poll() is not None:
            logger.error(f"mpv exited during startup (code {process.returncode})")
            return False
        if os.path.exists(socket_path):
            return True
        time.sleep(0.05)
    logger.error(f"mpv did not open its IPC socket within {SOCKET_WAIT_SECONDS}s")
    return False


def start_mpv(config: Config) -> Optional[PlayerState]:
    """
    Launch an idle mpv window controlled through JSON IPC.

    Returns:
        Initial PlayerState, or None if mpv could not be started
    """
    socket_path = config.player.mpv_socket_path or _default_socket_path()
    logger.info(f"Starting mpv (socket {socket_path})")

    try:
        Path(socket_path).unlink(missing_ok=True)
        process = subprocess.Popen(
            _mpv_command_line(config, socket_path),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.error(f"Failed to start mpv: {e}")
        return None

    if not _wait_for_socket(process, socket_path) or get_mpv_property(
        socket_path, "idle-active"
    ) is None:
        process.kill()
        return None

    logger.info("mpv ready")
    return PlayerState(socket_path=socket_path, process=process)


def stop_mpv(state: PlayerState) -> None:
    """Terminate mpv and remove its socket."""
    if state.process is not None and state.process.poll() is None:
        state.process.terminate()
        try:
            state.process.wait(timeout=2.0)
        except subprocess.TimeoutExpired:
            logger.warning("mpv ignored terminate - killing it")
            state.process.kill()

    if state.socket_path:
        try:
            Path(state.socket_path).unlink(missing_ok=True)
        except OSError as e:
            logger.debug(f"Could not remove mpv socket: {e}")


def is_mpv_running(state: PlayerState) -> bool:
    """True while the mpv process is alive and its socket exists (polled every frame)."""
    return (
        state.process is not None
        and state.process.poll() is None
        and bool(state.socket_path)
        and os.path.exists(state.socket_path)
    )


def _ipc_request(socket_path: Optional[str], command: list[Any]) -> Optional[dict]:
    """
    Send one command and wait for the reply carrying the same request_id.

    Event lines and replies to other requests are skipped.
    """
    if not socket_path or not os.path.exists(socket_path):
        return None

    request_id = next(_request_ids)
    payload = json.dumps({"command": command, "request_id": request_id}) + "\n"

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(IPC_TIMEOUT_SECONDS)
            sock.connect(socket_path)
            sock.sendall(payload.encode("utf-8"))
            with sock.makefile("rb") as stream:
                for raw in stream:
                    try:
                        reply = json.loads(raw)
                    except json.JSONDecodeError:
                        continue
                    if isinstance(reply, dict) and reply.get("request_id") == request_id:
                        return reply
    except OSError as e:
        logger.debug(f"mpv IPC {command[0]} failed: {e}")
    return None


def send_mpv_command(socket_path: Optional[str], *command: Any) -> bool:
    """Run an mpv command; True if mpv reported success."""
    reply = _ipc_request(socket_path, list(command))
    return reply is not None and reply.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], name: str) -> Any:
    """Read an mpv property; None if unavailable (e.g. no file loaded yet)."""
    reply = _ipc_request(socket_path, ["get_property", name])
    if reply is None or reply.get("error") != "success":
        return None
    return reply.get("data")


def load_file(state: PlayerState, handle: str) -> tuple[PlayerState, bool]:
    """
    Replace the current video and start playing it.

    Position resets to 0 and the duration is unknown until mpv reports it.

    Returns:
        Tuple of (updated state, success)
    """
    if not is_mpv_running(state):
        return state, False

    if not send_mpv_command(state.socket_path, "loadfile", handle, "replace"):
        logger.warning(f"mpv refused to load {handle}")
        return state, False

    logger.info(f"Loaded video: {handle}")
    state = state._replace(current_file=handle, current_position=0.0, duration=0.0)
    state, _ = resume_playback(state)
    return state, True


def pause_playback(state: PlayerState) -> tuple[PlayerState, bool]:
    """Pause playback and return updated state."""
    if not is_mpv_running(state):
        return state, False
    if send_mpv_command(state.socket_path, "set_property", "pause", True):
        return state._replace(is_playing=False), True
    return state, False


def resume_playback(state: PlayerState) -> tuple[PlayerState, bool]:
    """Resume playback and return updated state."""
    if not is_mpv_running(state):
        return state, False
    if send_mpv_command(state.socket_path, "set_property", "pause", False):
        return state._replace(is_playing=True), True
    return state, False


def toggle_pause(state: PlayerState) -> tuple[PlayerState, bool]:
    """Pause if playing, otherwise resume (play state comes from the last poll)."""
    if state.is_playing:
        return pause_playback(state)
    return resume_playback(state)


def clamp_position(position: float, duration: float) -> float:
    """Clamp a seek target into [0, duration]; unknown duration only clamps at 0."""
    position = max(0.0, position)
    if duration > 0:
        position = min(position, duration)
    return position


def seek_to_position(state: PlayerState, position: float) -> tuple[PlayerState, bool]:
    """Seek to an absolute position in seconds (clamped to the video)."""
    if not is_mpv_running(state):
        return state, False

    target = clamp_position(position, state.duration)
    if not send_mpv_command(state.socket_path, "seek", target, "absolute+exact"):
        return state, False
    # Report the target right away; the next poll reads the real position
    return state._replace(current_position=target), True


def update_player_status(state: PlayerState) -> PlayerState:
    """Poll position, duration and pause state.

    A property that cannot be read (mid-seek, no file yet) keeps its last value.
    """
    if not is_mpv_running(state):
        return state

    position = get_mpv_property(state.socket_path, "time-pos")
    duration = get_mpv_property(state.socket_path, "duration")
    paused = get_mpv_property(state.socket_path, "pause")

    return state._replace(
        current_position=state.current_position if position is None else float(position),
        duration=state.duration if duration is None else float(duration),
        is_playing=state.is_playing if paused is None else not paused,
    )


def format_time(seconds: float) -> str:
    """MM:SS"""
    if seconds < 0:
        return "00:00"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def format_precise_time(seconds: float) -> str:
    """MM:SS.s, used for loop bounds."""
    seconds = max(seconds, 0.0)
    minutes = int(seconds // 60)
    return f"{minutes:02d}:{seconds - minutes * 60:04.1f}"
