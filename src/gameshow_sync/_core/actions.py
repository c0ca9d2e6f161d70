# Area: Core
"""
gameshow_sync._core.actions — Reducer action types
==================================================

The closed set of actions the reducer understands. Each action kind is
a frozen dataclass carrying a ``type`` tag; ``Action`` is their union.
Adding a kind here without a reducer handler fails at import time
(see reducer._HANDLERS).
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Union

from .enums import GamePhase, PlayerId, SegmentCode, SpecialButton
from .state import Player, ScoreEvent, player_to_dict, score_event_from_dict, score_event_to_dict


@dataclass(frozen=True)
class Init:
    """Full or partial replacement; partial payloads merge field by field."""
    type: ClassVar[str] = "INIT"
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SetPhase:
    type: ClassVar[str] = "SET_PHASE"
    phase: GamePhase


@dataclass(frozen=True)
class SetCurrentSegment:
    type: ClassVar[str] = "SET_CURRENT_SEGMENT"
    segment: Optional[SegmentCode]


@dataclass(frozen=True)
class NextQuestion:
    type: ClassVar[str] = "NEXT_QUESTION"


@dataclass(frozen=True)
class NextSegment:
    type: ClassVar[str] = "NEXT_SEGMENT"


@dataclass(frozen=True)
class AddPlayer:
    type: ClassVar[str] = "ADD_PLAYER"
    player: Player


@dataclass(frozen=True)
class UpdatePlayer:
    """Shallow-merge ``partial`` (Player attribute names) into one player."""
    type: ClassVar[str] = "UPDATE_PLAYER"
    player_id: PlayerId
    partial: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateScore:
    type: ClassVar[str] = "UPDATE_SCORE"
    player_id: PlayerId
    points: int


@dataclass(frozen=True)
class AddStrike:
    type: ClassVar[str] = "ADD_STRIKE"
    player_id: PlayerId


@dataclass(frozen=True)
class UseSpecialButton:
    type: ClassVar[str] = "USE_SPECIAL_BUTTON"
    player_id: PlayerId
    button: SpecialButton


@dataclass(frozen=True)
class StartTimer:
    type: ClassVar[str] = "START_TIMER"
    duration: int


@dataclass(frozen=True)
class StopTimer:
    type: ClassVar[str] = "STOP_TIMER"


@dataclass(frozen=True)
class TickTimer:
    type: ClassVar[str] = "TICK_TIMER"


@dataclass(frozen=True)
class UpdateTimer:
    """Set both timer fields at once (used when adopting a remote countdown)."""
    type: ClassVar[str] = "UPDATE_TIMER"
    timer: int
    is_running: bool


@dataclass(frozen=True)
class PushScoreEvent:
    type: ClassVar[str] = "PUSH_SCORE_EVENT"
    event: ScoreEvent


@dataclass(frozen=True)
class ResetStrikes:
    type: ClassVar[str] = "RESET_STRIKES"


@dataclass(frozen=True)
class UpdateHostName:
    type: ClassVar[str] = "UPDATE_HOST_NAME"
    host_name: str


@dataclass(frozen=True)
class UpdateSegmentSettings:
    type: ClassVar[str] = "UPDATE_SEGMENT_SETTINGS"
    settings: Mapping[SegmentCode, int]


@dataclass(frozen=True)
class CompleteGame:
    type: ClassVar[str] = "COMPLETE_GAME"


@dataclass(frozen=True)
class ResetGame:
    type: ClassVar[str] = "RESET_GAME"


Action = Union[
    Init, SetPhase, SetCurrentSegment, NextQuestion, NextSegment,
    AddPlayer, UpdatePlayer, UpdateScore, AddStrike, UseSpecialButton,
    StartTimer, StopTimer, TickTimer, UpdateTimer, PushScoreEvent,
    ResetStrikes, UpdateHostName, UpdateSegmentSettings, CompleteGame,
    ResetGame,
]

ACTION_CLASSES = Action.__args__

ACTIONS_BY_TYPE = {cls.type: cls for cls in ACTION_CLASSES}


# ── Dict conversion (CLI replay, error logs) ─────────────────

def action_to_dict(action: Action) -> Dict[str, Any]:
    """Render an action as a JSON-safe dict with a ``type`` key."""
    data: Dict[str, Any] = {"type": action.type}
    for f in fields(action):
        data[f.name] = _to_jsonable(getattr(action, f.name))
    return data


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Player):
        return player_to_dict(value)
    if isinstance(value, ScoreEvent):
        return score_event_to_dict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {_to_jsonable(k): _to_jsonable(v) for k, v in value.items()}
    return value


def action_from_dict(data: Mapping[str, Any]) -> Action:
    """
    Build an action from its dict form.

    Args:
        data: Dict with a ``type`` key plus the action's fields

    Returns:
        The matching action instance

    Raises:
        ValueError: If the type is unknown or a field cannot be parsed
    """
    action_type = data.get("type", "")
    if action_type not in ACTIONS_BY_TYPE:
        raise ValueError(f"Unknown action type: {action_type!r}")

    try:
        if action_type == "INIT":
            return Init(payload=dict(data.get("payload") or {}))
        if action_type == "SET_PHASE":
            return SetPhase(phase=GamePhase(data["phase"]))
        if action_type == "SET_CURRENT_SEGMENT":
            segment = data.get("segment")
            return SetCurrentSegment(segment=SegmentCode(segment) if segment else None)
        if action_type == "ADD_PLAYER":
            raw = dict(data["player"])
            player_id = PlayerId(raw.pop("id"))
            buttons = {SpecialButton(k): bool(v) for k, v in (raw.pop("special_buttons", None) or {}).items()}
            player = Player(id=player_id, **raw)
            if buttons:
                merged = {**player.special_buttons, **buttons}
                player = replace(player, special_buttons=merged)
            return AddPlayer(player=player)
        if action_type == "UPDATE_PLAYER":
            return UpdatePlayer(player_id=PlayerId(data["player_id"]), partial=dict(data.get("partial") or {}))
        if action_type == "UPDATE_SCORE":
            return UpdateScore(player_id=PlayerId(data["player_id"]), points=int(data["points"]))
        if action_type == "ADD_STRIKE":
            return AddStrike(player_id=PlayerId(data["player_id"]))
        if action_type == "USE_SPECIAL_BUTTON":
            return UseSpecialButton(player_id=PlayerId(data["player_id"]), button=SpecialButton(data["button"]))
        if action_type == "START_TIMER":
            return StartTimer(duration=int(data["duration"]))
        if action_type == "UPDATE_TIMER":
            return UpdateTimer(timer=int(data["timer"]), is_running=bool(data["is_running"]))
        if action_type == "PUSH_SCORE_EVENT":
            return PushScoreEvent(event=score_event_from_dict(data["event"]))
        if action_type == "UPDATE_HOST_NAME":
            return UpdateHostName(host_name=str(data["host_name"]))
        if action_type == "UPDATE_SEGMENT_SETTINGS":
            return UpdateSegmentSettings(
                settings={SegmentCode(k): int(v) for k, v in data["settings"].items()}
            )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed {action_type} action: {e}") from e

    # Remaining kinds carry no fields
    return ACTIONS_BY_TYPE[action_type]()
