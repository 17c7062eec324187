"""
Unified output system using Loguru.
Routes user-facing messages to the log file and to either stdout or the blessed UI.
"""

import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console

# Set while the blessed UI owns the terminal
_blessed_mode_active = False
_blessed_mode_lock = threading.Lock()

# Lazily created rich console for output outside the blessed UI
_console: Optional[Console] = None

# Messages logged while the blessed UI is active, drained by the main loop
_pending_messages: list[tuple[str, str]] = []
_pending_messages_lock = threading.Lock()


def get_log_file_path() -> Path:
    """Get the default path to the log file."""
    from .config import get_data_dir

    return get_data_dir() / "guitar-looper.log"


def setup_loguru(
    log_file: Path, level: str = "INFO", console_output: bool = False
) -> None:
    """
    Configure loguru for file logging (blessed UI handles console display).

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Also log to stderr (only useful outside the blessed UI)
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console(highlight=False)
    return _console


def echo(message: str, style: Optional[str] = None) -> None:
    """Print to the terminal through rich (markup allowed)."""
    get_console().print(message, style=style)


def set_blessed_mode() -> None:
    """Enable blessed mode - suppresses stdout printing, queues messages for the UI."""
    global _blessed_mode_active
    with _blessed_mode_lock:
        _blessed_mode_active = True
        logger.debug("Blessed mode enabled - log() will queue messages for the UI")


def clear_blessed_mode() -> None:
    """Disable blessed mode - restores stdout printing."""
    global _blessed_mode_active
    with _blessed_mode_lock:
        _blessed_mode_active = False
        logger.debug("Blessed mode disabled - log() will print to stdout")


def drain_pending_messages() -> list[tuple[str, str]]:
    """
    Get and clear all pending UI messages.

    Returns:
        List of (message, color) tuples
    """
    global _pending_messages
    with _pending_messages_lock:
        messages = _pending_messages[:]
        _pending_messages = []
        return messages


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to file AND shows the message to the user.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    with _blessed_mode_lock:
        if _blessed_mode_active:
            color_map = {
                "debug": "cyan",
                "info": "white",
                "warning": "yellow",
                "error": "red",
            }
            with _pending_messages_lock:
                _pending_messages.append((message, color_map.get(level, "white")))
        else:
            echo(message, {"warning": "yellow", "error": "red"}.get(level))
