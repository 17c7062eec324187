"""
Loop domain models.

Contains the data structures for practice loops and detected chapters, plus
the JSON-ready (de)serialization used by the loop store.
"""

import math
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from guitar_looper.core.errors import ValidationError

# Display colors assigned to loops in creation order
LOOP_PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#10b981",  # green
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#14b8a6",  # teal
    "#f97316",  # orange
)

LOOP_SOURCES = ("manual", "chapter")


@dataclass(frozen=True)
class Loop:
    """A named, bounded, repeatable playback interval within a video.

    Loops are never mutated in place - edits produce a new Loop with the same id.
    """

    id: str
    name: str
    start: float
    end: float
    color: str
    source: str = "manual"  # 'manual' | 'chapter'

    @property
    def length(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "color": self.color,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Loop":
        """Rebuild a loop from its stored form.

        Raises:
            ValidationError: If required fields are missing or bounds are invalid
        """
        try:
            loop = cls(
                id=str(data["id"]),
                name=str(data["name"]),
                start=float(data["start"]),
                end=float(data["end"]),
                color=str(data.get("color") or LOOP_PALETTE[0]),
                source=str(data.get("source", "manual")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed loop record: {e}") from e

        if not (math.isfinite(loop.start) and math.isfinite(loop.end)):
            raise ValidationError(f"Non-finite loop bounds: {data!r}")
        if not loop.name.strip() or loop.start < 0 or loop.start >= loop.end:
            raise ValidationError(f"Invalid loop bounds or name: {data!r}")
        if loop.source not in LOOP_SOURCES:
            raise ValidationError(f"Unknown loop source: {loop.source!r}")
        return loop


@dataclass(frozen=True)
class Chapter:
    """An externally detected chapter marker (end is optional)."""

    id: str
    title: str
    start: float
    end: Optional[float] = None


def palette_color(index: int) -> str:
    """Color for the loop created at position `index` (wraps around the palette)."""
    return LOOP_PALETTE[index % len(LOOP_PALETTE)]


def next_color(existing_loops: Sequence[Loop]) -> str:
    """Color for the next loop appended to `existing_loops`."""
    return palette_color(len(existing_loops))


def new_loop_id() -> str:
    return uuid.uuid4().hex


def build_loop(
    name: str,
    point_a: float,
    point_b: float,
    existing_loops: Sequence[Loop],
    source: str = "manual",
) -> Loop:
    """
    Build a new loop from two marked points.

    Points may be given in either order; the loop always spans min..max.

    Args:
        name: User-supplied label (trimmed)
        point_a: First marked position in seconds
        point_b: Second marked position in seconds
        existing_loops: Loops already saved for the video (for color assignment)
        source: How the loop was created ('manual' or 'chapter')

    Returns:
        New Loop with a fresh id and the next palette color

    Raises:
        ValidationError: If the name is blank or the interval has zero length
    """
    clean_name = name.strip()
    if not clean_name:
        raise ValidationError("Loop name cannot be empty")

    start = max(0.0, min(point_a, point_b))
    end = max(point_a, point_b)
    if end - start <= 0:
        raise ValidationError("Loop start and end must be different points")

    return Loop(
        id=new_loop_id(),
        name=clean_name,
        start=start,
        end=end,
        color=next_color(existing_loops),
        source=source,
    )
