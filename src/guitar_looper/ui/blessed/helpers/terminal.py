"""Screen region drawing for the blessed UI."""

import sys

from blessed import Terminal


def write_lines(term: Terminal, y_start: int, lines: list[str], height: int) -> None:
    """
    Draw `lines` into the rows [y_start, y_start + height).

    Each row is cleared to end of line before drawing so shorter content never
    leaves stale characters behind; rows past the end of `lines` are blanked.
    The region goes out in a single write.
    """
    rows = []
    for offset in range(height):
        content = lines[offset] if offset < len(lines) else ""
        rows.append(term.move_xy(0, y_start + offset) + term.clear_eol + content)
    sys.stdout.write("".join(rows))
