# Area: Core
"""
Core game state: model, actions, reducer, delta merge and store.

This package holds everything that runs synchronously on one client:
- State model (state, enums)
- Closed action set (actions)
- Phase state machine (phase_machine)
- Pure reducer (reducer)
- Field-wise delta merge/diff (delta)
- Explicit state handle (store)
"""

from .actions import (
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
    action_from_dict,
    action_to_dict,
)
from .delta import diff_states, merge_delta
from .enums import (
    GamePhase,
    HOST_KINDS,
    ParticipantKind,
    PlayerId,
    SEGMENT_ORDER,
    SegmentCode,
    SpecialButton,
)
from .reducer import reduce, validate_action
from .state import (
    GameState,
    MAX_STRIKES,
    Player,
    ScoreEvent,
    default_players,
    initial_game_state,
    state_to_dict,
)
from .store import GameStore

__all__ = [
    # Actions
    "Action",
    "AddPlayer",
    "AddStrike",
    "CompleteGame",
    "Init",
    "NextQuestion",
    "NextSegment",
    "PushScoreEvent",
    "ResetGame",
    "ResetStrikes",
    "SetCurrentSegment",
    "SetPhase",
    "StartTimer",
    "StopTimer",
    "TickTimer",
    "UpdateHostName",
    "UpdatePlayer",
    "UpdateScore",
    "UpdateSegmentSettings",
    "UpdateTimer",
    "UseSpecialButton",
    "action_from_dict",
    "action_to_dict",
    # Delta
    "diff_states",
    "merge_delta",
    # Enums
    "GamePhase",
    "HOST_KINDS",
    "ParticipantKind",
    "PlayerId",
    "SEGMENT_ORDER",
    "SegmentCode",
    "SpecialButton",
    # Reducer / store
    "reduce",
    "validate_action",
    "GameStore",
    # State
    "GameState",
    "MAX_STRIKES",
    "Player",
    "ScoreEvent",
    "default_players",
    "initial_game_state",
    "state_to_dict",
]
