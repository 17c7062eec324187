"""Exception types shared across Guitar Looper."""


class GuitarLooperError(Exception):
    """Base class for application errors."""


class StorageError(GuitarLooperError):
    """Raised when the key/value store cannot be read or written."""


class ValidationError(GuitarLooperError):
    """Raised when a loop cannot be built from the given input."""


class ChapterExtractionError(GuitarLooperError):
    """Raised when chapters cannot be read from a video file."""


class ChapterToolUnavailable(ChapterExtractionError):
    """Raised when the ffprobe executable is missing or broken."""
