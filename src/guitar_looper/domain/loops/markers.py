"""Temporary A/B marker workflow - immutable state updates.

A and B points are independent: either may be set first or re-marked at any
time. Ordering is only applied when the loop is committed.

    empty -> has_start / has_end -> ready -> naming -> empty (save or cancel)
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from guitar_looper.core.errors import ValidationError

from .models import Loop, build_loop


@dataclass(frozen=True)
class MarkerState:
    """Pending A/B points and the naming dialog that commits them."""

    pending_start: Optional[float] = None
    pending_end: Optional[float] = None
    naming: bool = False
    name_input: str = ""
    error: Optional[str] = None  # Validation message shown in the naming dialog
    rename_id: Optional[str] = None  # Set while the dialog renames an existing loop

    @property
    def is_ready(self) -> bool:
        return self.pending_start is not None and self.pending_end is not None

    @property
    def is_empty(self) -> bool:
        return self.pending_start is None and self.pending_end is None and not self.naming


def marker_phase(markers: MarkerState) -> str:
    """Name the workflow phase: 'empty', 'has_start', 'has_end', 'ready' or 'naming'."""
    if markers.naming:
        return "naming"
    if markers.is_ready:
        return "ready"
    if markers.pending_start is not None:
        return "has_start"
    if markers.pending_end is not None:
        return "has_end"
    return "empty"


def mark_start(markers: MarkerState, position: float) -> MarkerState:
    return replace(markers, pending_start=position, error=None)


def mark_end(markers: MarkerState, position: float) -> MarkerState:
    return replace(markers, pending_end=position, error=None)


def request_commit(markers: MarkerState) -> MarkerState:
    """Open the naming dialog; ignored unless both points are set."""
    if not markers.is_ready or markers.naming:
        return markers
    return replace(markers, naming=True, name_input="", error=None)


def begin_rename(markers: MarkerState, loop: Loop) -> MarkerState:
    """Open the naming dialog prefilled with an existing loop's name.

    Pending A/B points are left untouched.
    """
    return replace(
        markers, naming=True, name_input=loop.name, error=None, rename_id=loop.id
    )


def close_naming(markers: MarkerState) -> MarkerState:
    return replace(markers, naming=False, name_input="", error=None, rename_id=None)


def append_name_char(markers: MarkerState, char: str) -> MarkerState:
    if not markers.naming:
        return markers
    return replace(markers, name_input=markers.name_input + char, error=None)


def delete_name_char(markers: MarkerState) -> MarkerState:
    if not markers.naming:
        return markers
    return replace(markers, name_input=markers.name_input[:-1])


def confirm_name(
    markers: MarkerState, name: str, existing_loops: Sequence[Loop]
) -> tuple[MarkerState, Optional[Loop]]:
    """
    Commit the pending points as a named loop.

    Inverted points are swapped. A blank name or a zero-length interval is
    rejected: the dialog stays open with `error` set and no loop is built.

    Args:
        markers: Current marker state (must be naming)
        name: Name entered by the user
        existing_loops: Loops already saved for the video

    Returns:
        Tuple of (updated markers, new loop or None)
    """
    if not markers.naming or not markers.is_ready or markers.rename_id is not None:
        return markers, None

    try:
        loop = build_loop(
            name, markers.pending_start, markers.pending_end, existing_loops
        )
    except ValidationError as e:
        return replace(markers, error=str(e)), None

    return MarkerState(), loop


def cancel_markers() -> MarkerState:
    return MarkerState()
