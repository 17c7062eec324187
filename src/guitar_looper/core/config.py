"""
Configuration management for Guitar Looper
"""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional


@dataclass
class PlayerConfig:
    """Configuration for the mpv player."""

    mpv_socket_path: Optional[str] = None
    volume: int = 70
    poll_interval: float = 0.05  # Seconds between position polls (loop overshoot bound)
    fullscreen: bool = False


@dataclass
class ChapterConfig:
    """Configuration for chapter detection."""

    ffprobe_path: str = "ffprobe"
    timeout_seconds: float = 15.0
    min_duration: float = 10.0  # Clips shorter than this are not scanned
    auto_detect: bool = True


@dataclass
class HistoryConfig:
    """Configuration for the recently opened videos list."""

    max_entries: int = 20


@dataclass
class UIConfig:
    """Configuration for user interface."""

    seek_step: float = 5.0


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/guitar-looper/guitar-looper.log)
    )
    console_output: bool = False


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    chapters: ChapterConfig = field(default_factory=ChapterConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# TOML table name -> section class
SECTIONS = {
    "player": PlayerConfig,
    "chapters": ChapterConfig,
    "history": HistoryConfig,
    "ui": UIConfig,
    "logging": LoggingConfig,
}


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "guitar-looper"
    return Path.home() / ".config" / "guitar-looper"


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Current working directory
    2. XDG_CONFIG_HOME/guitar-looper (or ~/.config/guitar-looper)
    """
    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "guitar-looper"
    return Path.home() / ".local" / "share" / "guitar-looper"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Guitar Looper Configuration

[player]
# Custom mpv IPC socket path (default: temp dir)
# mpv_socket_path = "/tmp/guitar-looper-mpv"

# Startup volume (0-100)
volume = 70

# Seconds between playback position polls.
# Loops may overshoot their end point by up to this much before seeking back.
poll_interval = 0.05

# Open the video window fullscreen
fullscreen = false

[chapters]
# ffprobe executable used to read embedded chapters
ffprobe_path = "ffprobe"

# Give up on ffprobe after this many seconds
timeout_seconds = 15.0

# Videos shorter than this (seconds) are not scanned automatically
min_duration = 10.0

# Scan for chapters as soon as a video's duration is known
auto_detect = true

[history]
# Number of recently opened videos to remember
max_entries = 20

[ui]
# Seconds to jump with the left/right arrow keys
seek_step = 5.0

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/guitar-looper/guitar-looper.log)
# log_file = "/path/to/custom/guitar-looper.log"

# Also output logs to console (useful for debugging)
console_output = false
""".strip()


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - GUITAR_LOOPER_FFPROBE
    - GUITAR_LOOPER_MPV_SOCKET
    """
    # Load .env file from config directory if it exists
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        config = Config()
    else:
        try:
            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
            config = parse_config(toml_data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            print(f"Error loading configuration from {config_path}: {e}")
            print("Using default configuration.")
            config = Config()

    ffprobe_path = os.environ.get("GUITAR_LOOPER_FFPROBE")
    mpv_socket = os.environ.get("GUITAR_LOOPER_MPV_SOCKET")

    if ffprobe_path:
        config.chapters.ffprobe_path = ffprobe_path
    if mpv_socket:
        config.player.mpv_socket_path = mpv_socket

    return config


def _build_section(cls: type, table: dict[str, Any]) -> Any:
    """Instantiate one config section from its TOML table.

    Unknown keys are ignored and missing keys keep their defaults. Numbers are
    coerced to the type of the default, so `seek_step = 2` reads as 2.0.
    """
    defaults = cls()
    values = {}
    for f in fields(cls):
        if f.name not in table:
            continue
        value = table[f.name]
        default = getattr(defaults, f.name)
        if isinstance(default, bool):
            value = bool(value)
        elif isinstance(default, int):
            value = int(value)
        elif isinstance(default, float):
            value = float(value)
        values[f.name] = value
    return cls(**values)


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, falling back to defaults per key."""
    config = Config()
    for name, cls in SECTIONS.items():
        table = toml_data.get(name)
        if isinstance(table, dict):
            setattr(config, name, _build_section(cls, table))

    if config.logging.log_file:
        config.logging.log_file = str(Path(config.logging.log_file).expanduser())
    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
