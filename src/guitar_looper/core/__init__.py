"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Key/value persistence (SQLite)
- Output and logging (Loguru, Rich)
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)
from .errors import (
    GuitarLooperError,
    StorageError,
    ValidationError,
    ChapterExtractionError,
    ChapterToolUnavailable,
)
from .storage import (
    KeyValueStore,
    SqliteKeyValueStore,
    MemoryKeyValueStore,
    get_database_path,
)
from .output import echo, get_console, log, setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Errors
    "GuitarLooperError",
    "StorageError",
    "ValidationError",
    "ChapterExtractionError",
    "ChapterToolUnavailable",
    # Storage
    "KeyValueStore",
    "SqliteKeyValueStore",
    "MemoryKeyValueStore",
    "get_database_path",
    # Output
    "echo",
    "get_console",
    "log",
    "setup_loguru",
]
