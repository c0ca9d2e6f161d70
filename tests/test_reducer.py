# Area: Core Tests
"""Tests for the game state reducer."""

from dataclasses import replace

import pytest

from gameshow_sync._core.actions import (
    AddPlayer,
    AddStrike,
    CompleteGame,
    Init,
    NextQuestion,
    NextSegment,
    PushScoreEvent,
    ResetGame,
    ResetStrikes,
    SetCurrentSegment,
    SetPhase,
    StartTimer,
    StopTimer,
    TickTimer,
    UpdateHostName,
    UpdatePlayer,
    UpdateScore,
    UpdateSegmentSettings,
    UpdateTimer,
    UseSpecialButton,
)
from gameshow_sync._core.enums import GamePhase, PlayerId, SegmentCode, SpecialButton
from gameshow_sync._core.reducer import reduce, validate_action
from gameshow_sync._core.state import (
    GameState,
    Player,
    ScoreEvent,
    initial_game_state,
    state_to_dict,
)

A = PlayerId.PLAYER_A
B = PlayerId.PLAYER_B


def run(state, *actions):
    for action in actions:
        state = reduce(state, action)
    return state


@pytest.fixture
def playing():
    """State in PLAYING with the first segment selected."""
    return run(initial_game_state(), SetPhase(GamePhase.PLAYING))


class TestScenarios:
    """End-to-end action sequences."""

    def test_timer_counts_down_and_stops_at_zero(self):
        """START_TIMER(30) then 31 ticks ends at 0 with the timer stopped."""
        state = initial_game_state()
        assert state.timer == 0 and not state.is_timer_running

        state = reduce(state, StartTimer(30))
        assert state.timer == 30
        assert state.is_timer_running is True

        for _ in range(30):
            state = reduce(state, TickTimer())
        assert state.timer == 0
        assert state.is_timer_running is False

        state = reduce(state, TickTimer())
        assert state.timer == 0

    def test_strikes_reset_on_next_question(self, playing):
        """Three strikes, then NEXT_QUESTION zeroes every player's strikes."""
        state = run(playing, AddStrike(A), AddStrike(A), AddStrike(A), AddStrike(B))
        assert state.players[A].strikes == 3
        assert state.players[B].strikes == 1

        state = reduce(state, NextQuestion())
        assert state.players[A].strikes == 0
        assert state.players[B].strikes == 0

    def test_score_accumulates_without_history(self):
        """UPDATE_SCORE adds points and never touches the score history."""
        state = run(initial_game_state(), UpdateScore(A, 10), UpdateScore(A, 5))
        assert state.players[A].score == 15
        assert state.score_history == ()

    def test_partial_init_merges_over_state(self):
        """A partial INIT changes only the fields it carries."""
        local = replace(
            initial_game_state(),
            timer=30,
            phase=GamePhase.PLAYING,
            current_segment=SegmentCode.WSHA,
        )
        merged = reduce(local, Init({"timer": 12}))
        assert merged.timer == 12
        assert merged.phase == GamePhase.PLAYING
        assert merged.players == local.players

    def test_reset_returns_initial_state(self, playing):
        """RESET_GAME from a busy state equals the initial state."""
        event = ScoreEvent(player_id=A, points=10, timestamp=1000)
        busy = run(
            playing,
            UpdateScore(A, 10),
            PushScoreEvent(event),
            AddStrike(B),
            StartTimer(20),
            UpdateHostName("Dana"),
        )
        assert reduce(busy, ResetGame()) == initial_game_state()


class TestProperties:
    """Invariants that hold for any action sequence."""

    SEQUENCE = [
        SetPhase(GamePhase.LOBBY),
        SetPhase(GamePhase.PLAYING),
        StartTimer(3),
        TickTimer(),
        AddStrike(A),
        UpdateScore(B, -5),
        UseSpecialButton(A, SpecialButton.PIT_BUTTON),
        NextSegment(),
        UpdatePlayer(B, {"name": "Bella", "strikes": 9}),
        TickTimer(),
        StopTimer(),
        UpdateScore("nobody", 3),
        NextSegment(),
        CompleteGame(),
        AddStrike(A),
    ]

    def test_reduce_is_deterministic(self):
        """Same state and action always give the same result."""
        state = initial_game_state()
        for action in self.SEQUENCE:
            assert reduce(state, action) == reduce(state, action)
            state = reduce(state, action)

    def test_players_keep_three_fixed_keys(self):
        """Every intermediate state has exactly host, playerA and playerB."""
        state = initial_game_state()
        for action in self.SEQUENCE:
            state = reduce(state, action)
            assert set(state.players) == set(PlayerId)

    def test_timer_never_negative(self):
        """timer >= 0 and strikes within 0..3 after every action."""
        state = initial_game_state()
        for action in self.SEQUENCE + [UpdateTimer(0, True), TickTimer(), TickTimer()]:
            state = reduce(state, action)
            assert state.timer >= 0
            assert all(0 <= p.strikes <= 3 for p in state.players.values())

    def test_input_state_not_mutated(self, playing):
        """reduce never changes the state it is given."""
        before = state_to_dict(playing)
        for action in self.SEQUENCE:
            reduce(playing, action)
        assert state_to_dict(playing) == before

    def test_init_is_idempotent(self, playing):
        """Applying the same partial INIT twice equals applying it once."""
        payload = {
            "timer": 7,
            "players": {"playerA": {"score": 4, "special_buttons": {"LOCK_BUTTON": False}}},
            "score_events": [{"player_id": "playerA", "points": 4, "timestamp": 5}],
        }
        once = reduce(playing, Init(payload))
        twice = reduce(once, Init(payload))
        assert once == twice
        assert len(twice.score_history) == 1


class TestInvalidActions:
    """Contract violations leave the state untouched."""

    def test_unknown_player_is_rejected(self):
        """Actions for a player slot outside the fixed set are violations."""
        state = initial_game_state()
        violations = validate_action(state, UpdateScore("playerC", 10))
        assert violations
        assert "unknown player id" in violations[0]
        assert reduce(state, UpdateScore("playerC", 10)) is state

    def test_completed_session_rejects_mutations(self, playing):
        """After COMPLETE_GAME only INIT and RESET_GAME apply."""
        done = reduce(playing, CompleteGame())
        assert done.phase == GamePhase.COMPLETED

        assert reduce(done, UpdateScore(A, 5)) is done
        assert reduce(done, StartTimer(10)) is done
        assert reduce(done, SetPhase(GamePhase.PLAYING)) is done

        assert reduce(done, Init({"host_name": "X"})).host_name == "X"
        assert reduce(done, ResetGame()) == initial_game_state()

    def test_illegal_phase_change(self):
        """CONFIG cannot jump straight to COMPLETED."""
        state = initial_game_state()
        assert validate_action(state, SetPhase(GamePhase.COMPLETED))
        assert validate_action(state, CompleteGame())
        assert reduce(state, CompleteGame()) is state

    def test_negative_timer_duration(self):
        state = initial_game_state()
        assert validate_action(state, StartTimer(-1))
        assert reduce(state, StartTimer(-1)) is state

    def test_navigation_requires_playing(self):
        """NEXT_QUESTION and NEXT_SEGMENT are rejected before the game starts."""
        state = initial_game_state()
        assert reduce(state, NextQuestion()) is state
        assert reduce(state, NextSegment()) is state

    def test_clearing_segment_while_playing(self, playing):
        assert validate_action(playing, SetCurrentSegment(None))

    def test_invalid_segment_settings(self):
        state = initial_game_state()
        assert validate_action(state, UpdateSegmentSettings({SegmentCode.WSHA: -1}))
        assert validate_action(state, UpdateSegmentSettings({"WSHA": 3}))


class TestPhaseAndSegments:
    """Phase changes and segment navigation."""

    def test_entering_playing_selects_first_segment(self, playing):
        assert playing.phase == GamePhase.PLAYING
        assert playing.current_segment == SegmentCode.WSHA

    def test_entering_config_clears_segment(self, playing):
        state = reduce(playing, SetPhase(GamePhase.CONFIG))
        assert state.phase == GamePhase.CONFIG
        assert state.current_segment is None

    def test_set_current_segment_resets_progress(self, playing):
        state = run(playing, NextQuestion(), StartTimer(15), SetCurrentSegment(SegmentCode.BELL))
        assert state.current_segment == SegmentCode.BELL
        assert state.current_question_index == 0
        assert state.timer == 0
        assert state.is_timer_running is False

    def test_next_question_increments_and_stops_timer(self, playing):
        state = run(playing, StartTimer(10), NextQuestion())
        assert state.current_question_index == 1
        assert state.timer == 0
        assert state.is_timer_running is False

    def test_next_segment_walks_the_order(self, playing):
        state = run(playing, NextQuestion(), NextSegment())
        assert state.current_segment == SegmentCode.AUCT
        assert state.current_question_index == 0

        state = run(state, NextSegment(), NextSegment(), NextSegment())
        assert state.current_segment == SegmentCode.REMO

    def test_next_segment_past_last_completes_game(self, playing):
        state = run(playing, SetCurrentSegment(SegmentCode.REMO), AddStrike(A), NextSegment())
        assert state.phase == GamePhase.COMPLETED
        assert state.players[A].strikes == 0

    def test_complete_game_stops_timer(self, playing):
        state = run(playing, StartTimer(9), CompleteGame())
        assert state.phase == GamePhase.COMPLETED
        assert state.is_timer_running is False


class TestPlayerActions:
    """Player slot actions."""

    def test_add_player_overwrites_slot(self):
        state = reduce(initial_game_state(), AddPlayer(Player(id=A, name="Avi", score=3)))
        assert state.players[A].name == "Avi"
        assert state.players[A].score == 3

    def test_add_player_clamps_strikes(self):
        state = reduce(initial_game_state(), AddPlayer(Player(id=B, strikes=7)))
        assert state.players[B].strikes == 3

    def test_update_player_merges_partial(self):
        state = run(
            initial_game_state(),
            UpdatePlayer(A, {"name": "Avi", "flag": "IL"}),
            UpdatePlayer(A, {"club": "Hapoel"}),
        )
        player = state.players[A]
        assert (player.name, player.flag, player.club) == ("Avi", "IL", "Hapoel")

    def test_add_strike_saturates(self):
        state = run(initial_game_state(), *[AddStrike(A)] * 5)
        assert state.players[A].strikes == 3

    def test_use_special_button_once(self):
        state = reduce(initial_game_state(), UseSpecialButton(A, SpecialButton.LOCK_BUTTON))
        assert state.players[A].special_buttons[SpecialButton.LOCK_BUTTON] is False
        assert state.players[A].special_buttons[SpecialButton.PIT_BUTTON] is True
        assert reduce(state, UseSpecialButton(A, SpecialButton.LOCK_BUTTON)) is state

    def test_reset_strikes(self):
        state = run(initial_game_state(), AddStrike(A), AddStrike(B), ResetStrikes())
        assert all(p.strikes == 0 for p in state.players.values())

    def test_push_score_event_appends(self):
        first = ScoreEvent(player_id=A, points=10, timestamp=1)
        second = ScoreEvent(player_id=B, points=-5, timestamp=2, reason="penalty")
        state = run(initial_game_state(), PushScoreEvent(first), PushScoreEvent(second))
        assert state.score_history == (first, second)


class TestTimerAndSettings:
    """Timer variants and session settings."""

    def test_start_timer_zero_does_not_run(self):
        state = reduce(initial_game_state(), StartTimer(0))
        assert state.is_timer_running is False

    def test_tick_when_stopped_is_noop(self):
        state = reduce(initial_game_state(), UpdateTimer(5, False))
        assert reduce(state, TickTimer()) is state

    def test_stop_timer_zeroes(self):
        state = run(initial_game_state(), StartTimer(10), TickTimer(), StopTimer())
        assert state.timer == 0
        assert state.is_timer_running is False

    def test_update_host_name(self):
        assert reduce(initial_game_state(), UpdateHostName("Dana")).host_name == "Dana"

    def test_update_segment_settings_merges(self):
        state = reduce(initial_game_state(), UpdateSegmentSettings({SegmentCode.BELL: 4}))
        assert state.segment_settings[SegmentCode.BELL] == 4
        assert state.segment_settings[SegmentCode.WSHA] == 10

    def test_initial_state_defaults(self):
        state = initial_game_state()
        assert isinstance(state, GameState)
        assert state.phase == GamePhase.CONFIG
        assert state.current_segment is None
        assert state.score_history == ()
        assert all(p.is_connected is False for p in state.players.values())
