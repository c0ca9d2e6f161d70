# Area: Core Tests
"""Tests for field-wise delta merge and diff."""

from dataclasses import replace

from gameshow_sync._core.actions import AddStrike, PushScoreEvent, UpdateScore
from gameshow_sync._core.delta import diff_states, merge_delta
from gameshow_sync._core.enums import GamePhase, PlayerId, SegmentCode, SpecialButton
from gameshow_sync._core.reducer import reduce
from gameshow_sync._core.state import ScoreEvent, initial_game_state, state_to_dict

A = PlayerId.PLAYER_A
B = PlayerId.PLAYER_B


class TestMergeDelta:
    """Tests for merge_delta."""

    def test_empty_delta_returns_same_state(self):
        state = initial_game_state()
        assert merge_delta(state, {}) is state

    def test_full_snapshot_round_trips(self):
        """Merging a full snapshot over the initial state rebuilds it."""
        state = reduce(initial_game_state(), UpdateScore(A, 25))
        state = replace(state, phase=GamePhase.PLAYING, current_segment=SegmentCode.BELL, timer=9)
        rebuilt = merge_delta(initial_game_state(), state_to_dict(state))
        assert rebuilt == state

    def test_player_fields_merge_leaf_by_leaf(self):
        """A score-only delta keeps the player's other fields."""
        state = merge_delta(initial_game_state(), {"players": {"playerA": {"name": "Avi", "strikes": 2}}})
        state = merge_delta(state, {"players": {"playerA": {"score": 10}}})
        player = state.players[A]
        assert (player.name, player.strikes, player.score) == ("Avi", 2, 10)

    def test_special_buttons_merge_per_button(self):
        state = merge_delta(
            initial_game_state(),
            {"players": {"playerB": {"special_buttons": {"PIT_BUTTON": False}}}},
        )
        buttons = state.players[B].special_buttons
        assert buttons[SpecialButton.PIT_BUTTON] is False
        assert buttons[SpecialButton.LOCK_BUTTON] is True

    def test_unknown_keys_and_slots_are_ignored(self):
        state = merge_delta(
            initial_game_state(),
            {"mystery": 1, "players": {"playerC": {"score": 5}}, "timer": 4},
        )
        assert state.timer == 4
        assert set(state.players) == set(PlayerId)

    def test_bad_values_are_skipped(self):
        """Unparseable fields keep their local value."""
        state = merge_delta(
            initial_game_state(),
            {"phase": "HALFTIME", "timer": "soon", "is_timer_running": "yes", "host_name": "Dana"},
        )
        assert state.phase == GamePhase.CONFIG
        assert state.timer == 0
        assert state.is_timer_running is False
        assert state.host_name == "Dana"

    def test_negative_values_clamp_to_zero(self):
        state = merge_delta(initial_game_state(), {"timer": -4, "players": {"host": {"strikes": 8}}})
        assert state.timer == 0
        assert state.players[PlayerId.HOST].strikes == 3

    def test_playing_without_segment_selects_first(self):
        state = merge_delta(initial_game_state(), {"phase": "PLAYING"})
        assert state.current_segment == SegmentCode.WSHA

    def test_score_events_append_once(self):
        event = {"player_id": "playerA", "points": 10, "timestamp": 100}
        state = merge_delta(initial_game_state(), {"score_events": [event]})
        state = merge_delta(state, {"score_events": [event]})
        assert len(state.score_history) == 1

    def test_score_events_with_ids_are_distinct(self):
        """Equal-valued events with different ids are both kept."""
        first = {"player_id": "playerA", "points": 10, "timestamp": 100, "event_id": "e1"}
        second = dict(first, event_id="e2")
        state = merge_delta(initial_game_state(), {"score_events": [first]})
        state = merge_delta(state, {"score_events": [second, first]})
        assert [e.event_id for e in state.score_history] == ["e1", "e2"]

    def test_score_history_replaces(self):
        first = ScoreEvent(player_id=A, points=1, timestamp=1)
        state = reduce(initial_game_state(), PushScoreEvent(first))
        state = merge_delta(state, {"score_history": []})
        assert state.score_history == ()


class TestDiffStates:
    """Tests for diff_states."""

    def test_equal_states_give_empty_delta(self):
        state = initial_game_state()
        assert diff_states(state, state) == {}
        assert diff_states(state, initial_game_state()) == {}

    def test_diff_carries_only_changed_leaves(self):
        prev = initial_game_state()
        nxt = reduce(prev, AddStrike(B))
        assert diff_states(prev, nxt) == {"players": {"playerB": {"strikes": 1}}}

    def test_diff_of_appended_event(self):
        event = ScoreEvent(player_id=A, points=5, timestamp=7, reason="bonus")
        prev = initial_game_state()
        nxt = reduce(prev, PushScoreEvent(event))
        assert diff_states(prev, nxt) == {
            "score_events": [
                {"player_id": "playerA", "points": 5, "timestamp": 7, "reason": "bonus", "event_id": None}
            ]
        }

    def test_diff_after_reset_replaces_history(self):
        event = ScoreEvent(player_id=A, points=5, timestamp=7)
        prev = reduce(initial_game_state(), PushScoreEvent(event))
        assert diff_states(prev, initial_game_state())["score_history"] == []

    def test_enum_fields_are_rendered_as_values(self):
        prev = initial_game_state()
        nxt = replace(prev, phase=GamePhase.PLAYING, current_segment=SegmentCode.AUCT)
        delta = diff_states(prev, nxt)
        assert delta["phase"] == "PLAYING"
        assert delta["current_segment"] == "AUCT"

    def test_merge_of_diff_reaches_target(self):
        """Applying diff(prev, next) over prev yields next."""
        prev = reduce(initial_game_state(), UpdateScore(A, 3))
        nxt = replace(reduce(prev, AddStrike(A)), timer=12, is_timer_running=True)
        assert merge_delta(prev, diff_states(prev, nxt)) == nxt

    def test_concurrent_leaf_deltas_commute(self):
        """Deltas from two clients touching different leaves converge."""
        base = initial_game_state()
        from_host = diff_states(base, reduce(base, UpdateScore(A, 10)))
        from_player = diff_states(base, reduce(base, AddStrike(B)))

        one = merge_delta(merge_delta(base, from_host), from_player)
        two = merge_delta(merge_delta(base, from_player), from_host)
        assert one == two
        assert one.players[A].score == 10
        assert one.players[B].strikes == 1
