# Area: Core
"""
gameshow_sync._core.reducer — Game state transition function
============================================================

``reduce(state, action)`` is total and pure: it never raises, never
mutates its input and always returns a complete state. Actions that
violate the contract (unknown player slot, illegal phase change,
mutation after COMPLETED, negative durations) come back from
``validate_action`` as violations, and ``reduce`` returns the input
state unchanged for them. Whether a violation is an error is decided
once, by the store (see store.GameStore).

Handlers are registered per action class in ``_HANDLERS``; the module
refuses to import if any action kind lacks a handler.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Callable, Dict, List

from .actions import (
    ACTION_CLASSES,
    Action,
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
from .delta import merge_delta, merge_player, normalize
from .enums import GamePhase, PlayerId, SegmentCode
from .phase_machine import PRE_GAME_PHASES, can_transition, next_segment
from .state import MAX_STRIKES, GameState, initial_game_state


# ══════════════════════════════════════════════════════════════
# VALIDATION
# ══════════════════════════════════════════════════════════════

_PLAYER_ACTIONS = (AddPlayer, UpdatePlayer, UpdateScore, AddStrike, UseSpecialButton, PushScoreEvent)


def _addressed_player(action: Action):
    if isinstance(action, AddPlayer):
        return action.player.id
    if isinstance(action, PushScoreEvent):
        return action.event.player_id
    if isinstance(action, (UpdatePlayer, UpdateScore, AddStrike, UseSpecialButton)):
        return action.player_id
    return None


def validate_action(state: GameState, action: Action) -> List[str]:
    """
    Check an action against the reducer contract.

    Args:
        state: The state the action would apply to
        action: The action to check

    Returns:
        List of violation messages, empty if the action is valid
    """
    if type(action) not in _HANDLERS:
        return [f"unknown action {type(action).__name__}"]

    if isinstance(action, (Init, ResetGame)):
        return []

    errors: List[str] = []

    if state.phase == GamePhase.COMPLETED:
        errors.append(f"{action.type} not allowed: session is COMPLETED")

    if isinstance(action, _PLAYER_ACTIONS):
        player_id = _addressed_player(action)
        if not isinstance(player_id, PlayerId) or player_id not in state.players:
            errors.append(f"unknown player id: {player_id!r}")

    if isinstance(action, SetPhase):
        if not isinstance(action.phase, GamePhase):
            errors.append(f"unknown phase: {action.phase!r}")
        elif not can_transition(state.phase, action.phase):
            errors.append(f"illegal phase change {state.phase.value} -> {action.phase.value}")
    elif isinstance(action, CompleteGame):
        if not can_transition(state.phase, GamePhase.COMPLETED):
            errors.append(f"cannot complete game from {state.phase.value}")
    elif isinstance(action, SetCurrentSegment):
        if action.segment is None and state.phase not in PRE_GAME_PHASES:
            errors.append(f"segment cannot be cleared during {state.phase.value}")
        elif action.segment is not None and not isinstance(action.segment, SegmentCode):
            errors.append(f"unknown segment: {action.segment!r}")
    elif isinstance(action, (NextQuestion, NextSegment)):
        if state.phase != GamePhase.PLAYING:
            errors.append(f"{action.type} requires PLAYING, not {state.phase.value}")
    elif isinstance(action, StartTimer):
        if action.duration < 0:
            errors.append(f"negative timer duration: {action.duration}")
    elif isinstance(action, UpdateTimer):
        if action.timer < 0:
            errors.append(f"negative timer value: {action.timer}")
    elif isinstance(action, UpdateSegmentSettings):
        bad = [
            c for c, n in action.settings.items()
            if not isinstance(c, SegmentCode) or not isinstance(n, int) or n < 0
        ]
        if bad:
            errors.append(f"invalid segment settings: {bad!r}")

    return errors


# ══════════════════════════════════════════════════════════════
# HANDLERS
# ══════════════════════════════════════════════════════════════

def _stopped_timer(state: GameState, **changes) -> GameState:
    return replace(state, timer=0, is_timer_running=False, **changes)


def _reset_strikes(state: GameState):
    return {pid: replace(p, strikes=0) for pid, p in state.players.items()}


def _with_player(state: GameState, player_id: PlayerId, **changes) -> GameState:
    players = dict(state.players)
    players[player_id] = replace(players[player_id], **changes)
    return replace(state, players=players)


def _init(state: GameState, action: Init) -> GameState:
    return merge_delta(state, action.payload)


def _set_phase(state: GameState, action: SetPhase) -> GameState:
    if action.phase == GamePhase.CONFIG:
        return replace(state, phase=action.phase, current_segment=None)
    return normalize(replace(state, phase=action.phase))


def _set_current_segment(state: GameState, action: SetCurrentSegment) -> GameState:
    return _stopped_timer(state, current_segment=action.segment, current_question_index=0)


def _next_question(state: GameState, action: NextQuestion) -> GameState:
    return _stopped_timer(
        state,
        current_question_index=state.current_question_index + 1,
        players=_reset_strikes(state),
    )


def _next_segment(state: GameState, action: NextSegment) -> GameState:
    following = next_segment(state.current_segment)
    if following is None:
        # Past the last segment: the game is over
        return _stopped_timer(
            state,
            phase=GamePhase.COMPLETED,
            current_question_index=0,
            players=_reset_strikes(state),
        )
    return _stopped_timer(
        state,
        current_segment=following,
        current_question_index=0,
        players=_reset_strikes(state),
    )


def _add_player(state: GameState, action: AddPlayer) -> GameState:
    player = action.player
    if not 0 <= player.strikes <= MAX_STRIKES:
        player = replace(player, strikes=max(0, min(MAX_STRIKES, player.strikes)))
    players = dict(state.players)
    players[player.id] = player
    return replace(state, players=players)


def _update_player(state: GameState, action: UpdatePlayer) -> GameState:
    players = dict(state.players)
    players[action.player_id] = merge_player(players[action.player_id], action.partial)
    return replace(state, players=players)


def _update_score(state: GameState, action: UpdateScore) -> GameState:
    player = state.players[action.player_id]
    return _with_player(state, action.player_id, score=player.score + action.points)


def _add_strike(state: GameState, action: AddStrike) -> GameState:
    player = state.players[action.player_id]
    return _with_player(state, action.player_id, strikes=min(MAX_STRIKES, player.strikes + 1))


def _use_special_button(state: GameState, action: UseSpecialButton) -> GameState:
    player = state.players[action.player_id]
    if player.special_buttons.get(action.button) is False:
        return state
    buttons = dict(player.special_buttons)
    buttons[action.button] = False
    return _with_player(state, action.player_id, special_buttons=buttons)


def _start_timer(state: GameState, action: StartTimer) -> GameState:
    return replace(state, timer=action.duration, is_timer_running=action.duration > 0)


def _stop_timer(state: GameState, action: StopTimer) -> GameState:
    return _stopped_timer(state)


def _tick_timer(state: GameState, action: TickTimer) -> GameState:
    if not state.is_timer_running:
        return state
    remaining = max(0, state.timer - 1)
    return replace(state, timer=remaining, is_timer_running=remaining > 0)


def _update_timer(state: GameState, action: UpdateTimer) -> GameState:
    return replace(state, timer=action.timer, is_timer_running=action.is_running)


def _push_score_event(state: GameState, action: PushScoreEvent) -> GameState:
    return replace(state, score_history=state.score_history + (action.event,))


def _reset_strikes_action(state: GameState, action: ResetStrikes) -> GameState:
    return replace(state, players=_reset_strikes(state))


def _update_host_name(state: GameState, action: UpdateHostName) -> GameState:
    return replace(state, host_name=action.host_name)


def _update_segment_settings(state: GameState, action: UpdateSegmentSettings) -> GameState:
    return replace(state, segment_settings={**state.segment_settings, **action.settings})


def _complete_game(state: GameState, action: CompleteGame) -> GameState:
    return replace(state, phase=GamePhase.COMPLETED, is_timer_running=False)


def _reset_game(state: GameState, action: ResetGame) -> GameState:
    return initial_game_state()


_HANDLERS: Dict[type, Callable[[GameState, Action], GameState]] = {
    Init: _init,
    SetPhase: _set_phase,
    SetCurrentSegment: _set_current_segment,
    NextQuestion: _next_question,
    NextSegment: _next_segment,
    AddPlayer: _add_player,
    UpdatePlayer: _update_player,
    UpdateScore: _update_score,
    AddStrike: _add_strike,
    UseSpecialButton: _use_special_button,
    StartTimer: _start_timer,
    StopTimer: _stop_timer,
    TickTimer: _tick_timer,
    UpdateTimer: _update_timer,
    PushScoreEvent: _push_score_event,
    ResetStrikes: _reset_strikes_action,
    UpdateHostName: _update_host_name,
    UpdateSegmentSettings: _update_segment_settings,
    CompleteGame: _complete_game,
    ResetGame: _reset_game,
}

_missing = set(ACTION_CLASSES) - set(_HANDLERS)
if _missing:
    raise RuntimeError(f"Reducer has no handler for: {sorted(c.__name__ for c in _missing)}")


def reduce(state: GameState, action: Action) -> GameState:
    """
    Compute the next state.

    Args:
        state: Current state (never modified)
        action: One action from the closed action set

    Returns:
        The next state; ``state`` itself when the action is invalid
    """
    if validate_action(state, action):
        return state
    return _HANDLERS[type(action)](state, action)
