"""
Bounded repeat-playback rule.

The player is polled every `config.player.poll_interval` seconds, so playback
can run past a loop's end by up to one poll before the seek back happens.
That overshoot is not compensated.
"""

from typing import Optional

from .models import Loop


def loop_seek_target(
    position: float, active_loop: Optional[Loop], is_looping: bool
) -> Optional[float]:
    """
    Decide whether a position update must jump back to the loop start.

    Args:
        position: Current playback position in seconds
        active_loop: Loop currently selected, if any
        is_looping: Whether repeat playback is engaged

    Returns:
        Position to seek to, or None if playback may continue
    """
    if not is_looping or active_loop is None:
        return None
    if position >= active_loop.end:
        return active_loop.start
    return None


def loop_progress(position: float, loop: Loop) -> float:
    """Fraction (0.0-1.0) of the loop already played at `position`."""
    if loop.length <= 0:
        return 0.0
    return min(max((position - loop.start) / loop.length, 0.0), 1.0)
