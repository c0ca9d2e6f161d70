# Area: Persistence
"""
gameshow_sync._persistence.records — Stored records and the load contract
=========================================================================

Pydantic models for the rows the persistence collaborator hands back,
plus the two conversions between records and game state:

- ``load_state(record, players, score_events)`` builds a GameState from
  stored records. Absent fields fall back to the initial state; the
  player map is always the three fixed default slots, with stored rows
  for those slots overlaid and any other rows ignored.
- ``split_delta(delta)`` splits a game state delta into the partial
  writes the persistence collaborator understands.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .._core.delta import merge_delta
from .._core.enums import PlayerId
from .._core.state import GameState, initial_game_state

_GAME_FIELDS = (
    "host_code",
    "host_name",
    "phase",
    "current_segment",
    "current_question_index",
    "timer",
    "is_timer_running",
    "segment_settings",
    "video_room_url",
    "video_room_created",
)

_PLAYER_FIELDS = ("name", "score", "strikes", "special_buttons", "flag", "club", "is_connected")

_PLAYER_SLOTS = frozenset(pid.value for pid in PlayerId)


def _decode_json_object(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value) if value else {}
        except ValueError:
            return None
    return value


class GameRecord(BaseModel):
    """A stored session row. Every field but ``id`` may be missing."""
    model_config = ConfigDict(extra="ignore")

    id: str
    host_code: str = ""
    host_name: Optional[str] = None
    phase: Optional[str] = None
    current_segment: Optional[str] = None
    current_question_index: Optional[int] = None
    timer: Optional[int] = None
    is_timer_running: Optional[bool] = None
    segment_settings: Optional[Dict[str, int]] = None
    video_room_url: Optional[str] = None
    video_room_created: Optional[bool] = None

    @field_validator("segment_settings", mode="before")
    @classmethod
    def _parse_settings(cls, value: Any) -> Any:
        return _decode_json_object(value)


class PlayerRecord(BaseModel):
    """A stored player slot row."""
    model_config = ConfigDict(extra="ignore")

    game_id: str
    player_id: str
    name: str = ""
    score: int = 0
    strikes: int = 0
    special_buttons: Dict[str, bool] = Field(default_factory=dict)
    flag: Optional[str] = None
    club: Optional[str] = None
    is_connected: bool = False
    role: Optional[str] = None

    @field_validator("special_buttons", mode="before")
    @classmethod
    def _parse_buttons(cls, value: Any) -> Any:
        decoded = _decode_json_object(value)
        return {} if decoded is None else decoded


class ScoreEventRecord(BaseModel):
    """A stored score event."""
    model_config = ConfigDict(extra="ignore")

    game_id: str
    player_id: str
    points: int
    timestamp: int
    reason: Optional[str] = None
    event_id: Optional[str] = None


# ══════════════════════════════════════════════════════════════
# LOAD CONTRACT
# ══════════════════════════════════════════════════════════════

def load_state(
    record: GameRecord,
    players: Iterable[PlayerRecord] = (),
    score_events: Iterable[ScoreEventRecord] = (),
) -> GameState:
    """
    Map stored records into a complete GameState.

    Args:
        record: The session row
        players: Stored player rows (rows for unknown slots are ignored)
        score_events: Stored score events in recorded order

    Returns:
        A new state built over the canonical initial state
    """
    delta: Dict[str, Any] = {"game_id": record.id}
    for name in _GAME_FIELDS:
        value = getattr(record, name)
        if value is not None:
            delta[name] = value

    player_delta: Dict[str, Dict[str, Any]] = {}
    for row in players:
        if row.player_id not in _PLAYER_SLOTS:
            continue
        player_delta[row.player_id] = {name: getattr(row, name) for name in _PLAYER_FIELDS}
    if player_delta:
        delta["players"] = player_delta

    delta["score_history"] = [
        {
            "player_id": event.player_id,
            "points": event.points,
            "timestamp": event.timestamp,
            "reason": event.reason,
            "event_id": event.event_id,
        }
        for event in score_events
    ]
    return merge_delta(initial_game_state(), delta)


# ══════════════════════════════════════════════════════════════
# DELTA -> WRITES
# ══════════════════════════════════════════════════════════════

def split_delta(
    delta: Dict[str, Any],
) -> Tuple[Dict[str, Any], Dict[str, Dict[str, Any]], List[Dict[str, Any]], bool]:
    """
    Split a game state delta into persistence writes.

    Args:
        delta: A delta as produced by diff_states

    Returns:
        (game partial, player partials by slot, score events to add,
        whether the stored history must be cleared first)
    """
    game_partial = {k: delta[k] for k in _GAME_FIELDS if k in delta}

    player_partials: Dict[str, Dict[str, Any]] = {}
    for player_id, partial in (delta.get("players") or {}).items():
        if player_id in _PLAYER_SLOTS and partial:
            player_partials[player_id] = {k: partial[k] for k in _PLAYER_FIELDS if k in partial}

    if "score_history" in delta:
        return game_partial, player_partials, list(delta["score_history"]), True
    return game_partial, player_partials, list(delta.get("score_events") or []), False
