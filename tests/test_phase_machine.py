# Area: Core Tests
"""Tests for the session phase state machine."""

from gameshow_sync._core.enums import GamePhase, SegmentCode
from gameshow_sync._core.phase_machine import (
    PHASE_TRANSITIONS,
    can_transition,
    is_terminal,
    next_segment,
)


class TestCanTransition:
    """Tests for can_transition."""

    def test_config_to_lobby_and_playing(self):
        assert can_transition(GamePhase.CONFIG, GamePhase.LOBBY)
        assert can_transition(GamePhase.CONFIG, GamePhase.PLAYING)

    def test_config_cannot_complete(self):
        assert not can_transition(GamePhase.CONFIG, GamePhase.COMPLETED)

    def test_lobby_cannot_complete(self):
        assert not can_transition(GamePhase.LOBBY, GamePhase.COMPLETED)

    def test_playing_can_return_to_config(self):
        assert can_transition(GamePhase.PLAYING, GamePhase.CONFIG)
        assert can_transition(GamePhase.PLAYING, GamePhase.COMPLETED)

    def test_same_phase_is_accepted(self):
        """Re-entering a phase is idempotent."""
        for phase in (GamePhase.CONFIG, GamePhase.LOBBY, GamePhase.PLAYING):
            assert can_transition(phase, phase)

    def test_completed_is_terminal(self):
        """Nothing leaves COMPLETED, not even COMPLETED itself."""
        for phase in GamePhase:
            assert not can_transition(GamePhase.COMPLETED, phase)
        assert is_terminal(GamePhase.COMPLETED)
        assert not is_terminal(GamePhase.PLAYING)

    def test_every_phase_has_an_entry(self):
        assert set(PHASE_TRANSITIONS) == set(GamePhase)


class TestNextSegment:
    """Tests for next_segment."""

    def test_none_starts_at_first_segment(self):
        assert next_segment(None) == SegmentCode.WSHA

    def test_follows_play_order(self):
        assert next_segment(SegmentCode.WSHA) == SegmentCode.AUCT
        assert next_segment(SegmentCode.AUCT) == SegmentCode.BELL
        assert next_segment(SegmentCode.BELL) == SegmentCode.SING
        assert next_segment(SegmentCode.SING) == SegmentCode.REMO

    def test_past_last_segment_is_none(self):
        assert next_segment(SegmentCode.REMO) is None
