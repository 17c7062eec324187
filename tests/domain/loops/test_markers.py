"""Tests for the temporary A/B marker workflow."""

from guitar_looper.domain.loops import markers as m
from guitar_looper.domain.loops.markers import MarkerState, marker_phase


def ready_markers(start: float = 10.0, end: float = 40.0) -> MarkerState:
    return m.mark_end(m.mark_start(MarkerState(), start), end)


class TestMarking:
    """Tests for setting A/B points."""

    def test_initial_state_is_empty(self) -> None:
        markers = MarkerState()
        assert markers.is_empty
        assert marker_phase(markers) == "empty"

    def test_either_point_first(self) -> None:
        assert marker_phase(m.mark_start(MarkerState(), 5.0)) == "has_start"
        assert marker_phase(m.mark_end(MarkerState(), 5.0)) == "has_end"

    def test_both_points_make_ready(self) -> None:
        assert marker_phase(ready_markers()) == "ready"

    def test_remark_overwrites(self) -> None:
        markers = m.mark_start(ready_markers(), 12.0)
        assert markers.pending_start == 12.0
        assert markers.pending_end == 40.0


class TestCommit:
    """Tests for the naming dialog."""

    def test_request_commit_ignored_until_ready(self) -> None:
        markers = m.mark_start(MarkerState(), 5.0)
        assert m.request_commit(markers) == markers

    def test_request_commit_opens_dialog(self) -> None:
        markers = m.request_commit(ready_markers())
        assert markers.naming
        assert marker_phase(markers) == "naming"

    def test_typing_edits_name(self) -> None:
        markers = m.request_commit(ready_markers())
        for char in "Solx":
            markers = m.append_name_char(markers, char)
        markers = m.delete_name_char(markers)
        markers = m.append_name_char(markers, "o")
        assert markers.name_input == "Solo"

    def test_typing_ignored_when_not_naming(self) -> None:
        markers = ready_markers()
        assert m.append_name_char(markers, "x") == markers

    def test_confirm_builds_loop_and_resets(self) -> None:
        markers = m.request_commit(ready_markers())
        new_markers, loop = m.confirm_name(markers, "Solo", [])
        assert loop is not None
        assert (loop.name, loop.start, loop.end) == ("Solo", 10.0, 40.0)
        assert new_markers.is_empty

    def test_confirm_swaps_inverted_points(self) -> None:
        markers = m.request_commit(ready_markers(start=40.0, end=10.0))
        _, loop = m.confirm_name(markers, "Riff", [])
        assert (loop.start, loop.end) == (10.0, 40.0)

    def test_zero_length_keeps_dialog_open(self) -> None:
        markers = m.request_commit(ready_markers(start=12.5, end=12.5))
        new_markers, loop = m.confirm_name(markers, "Solo", [])
        assert loop is None
        assert new_markers.naming
        assert new_markers.error

    def test_blank_name_keeps_dialog_open(self) -> None:
        markers = m.request_commit(ready_markers())
        new_markers, loop = m.confirm_name(markers, "   ", [])
        assert loop is None
        assert new_markers.naming
        assert new_markers.pending_start == 10.0
        assert "empty" in new_markers.error

    def test_confirm_without_dialog_is_noop(self) -> None:
        markers = ready_markers()
        assert m.confirm_name(markers, "Solo", []) == (markers, None)

    def test_cancel_clears_everything(self) -> None:
        assert m.cancel_markers().is_empty
