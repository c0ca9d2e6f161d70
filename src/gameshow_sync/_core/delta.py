# Area: Core
"""
gameshow_sync._core.delta — Field-wise delta merge and diff
===========================================================

A delta is a JSON-safe partial rendering of GameState (the same shape
as state_to_dict, with every key optional). Two operations:

- merge_delta(state, delta): apply a delta over a state, field by field.
  Absent fields keep their local value; player entries merge leaf by
  leaf; unknown keys, unknown player slots and unparseable values are
  skipped. Merging the same delta twice equals merging it once.
- diff_states(prev, next): the finest-grained delta that turns ``prev``
  into ``next`` (single player leaves, single buttons, appended events).

Extra delta key ``score_events`` appends events not already present
(matched by ``event_id``, or by value for events without one);
``score_history`` replaces the history outright (used after a reset).
"""

from __future__ import annotations
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .enums import GamePhase, PlayerId, SegmentCode, SpecialButton, SEGMENT_ORDER
from .phase_machine import PRE_GAME_PHASES
from .state import (
    GameState,
    MAX_STRIKES,
    Player,
    ScoreEvent,
    player_to_dict,
    score_event_from_dict,
    score_event_to_dict,
)

_PLAYER_LEAVES = ("name", "score", "strikes", "special_buttons", "flag", "club", "is_connected")


# ══════════════════════════════════════════════════════════════
# COERCION
# ══════════════════════════════════════════════════════════════

def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("bool is not an int field")
    return max(0, int(value))


def _phase(value: Any) -> GamePhase:
    return value if isinstance(value, GamePhase) else GamePhase(value)


def _segment(value: Any) -> Optional[SegmentCode]:
    if value is None or isinstance(value, SegmentCode):
        return value
    return SegmentCode(value)


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected bool, got {type(value).__name__}")
    return value


# Scalar top-level fields: name -> parser
_SCALAR_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "game_id": str,
    "host_code": str,
    "host_name": _opt_str,
    "phase": _phase,
    "current_segment": _segment,
    "current_question_index": _non_negative_int,
    "timer": _non_negative_int,
    "is_timer_running": _bool,
    "video_room_url": _opt_str,
    "video_room_created": _bool,
}


def _player_key(key: Any) -> Optional[PlayerId]:
    if isinstance(key, PlayerId):
        return key
    try:
        return PlayerId(key)
    except ValueError:
        return None


def _score_event(value: Any) -> Optional[ScoreEvent]:
    if isinstance(value, ScoreEvent):
        return value
    try:
        return score_event_from_dict(value)
    except (KeyError, TypeError, ValueError):
        return None


def _event_key(event: ScoreEvent) -> Any:
    # Events without an id fall back to value equality
    return ("id", event.event_id) if event.event_id else ("value", event)


# ══════════════════════════════════════════════════════════════
# MERGE
# ══════════════════════════════════════════════════════════════

def merge_player(player: Player, partial: Mapping[str, Any]) -> Player:
    """Shallow-merge leaf fields into a player, skipping bad values."""
    changes: Dict[str, Any] = {}
    for key, value in partial.items():
        try:
            if key == "name":
                changes["name"] = str(value)
            elif key == "score":
                if isinstance(value, bool):
                    continue
                changes["score"] = int(value)
            elif key == "strikes":
                changes["strikes"] = min(MAX_STRIKES, _non_negative_int(value))
            elif key == "special_buttons":
                buttons = dict(player.special_buttons)
                for button, available in dict(value).items():
                    button = button if isinstance(button, SpecialButton) else SpecialButton(button)
                    buttons[button] = _bool(available)
                changes["special_buttons"] = buttons
            elif key in ("flag", "club"):
                changes[key] = _opt_str(value)
            elif key == "is_connected":
                changes["is_connected"] = _bool(value)
        except (TypeError, ValueError):
            continue
    return replace(player, **changes) if changes else player


def merge_delta(state: GameState, delta: Mapping[str, Any]) -> GameState:
    """
    Merge a (possibly partial) delta over ``state``.

    Args:
        state: Current local state
        delta: Partial state in dict form

    Returns:
        A new GameState; ``state`` itself is untouched
    """
    changes: Dict[str, Any] = {}

    for key, parser in _SCALAR_FIELDS.items():
        if key not in delta:
            continue
        try:
            changes[key] = parser(delta[key])
        except (TypeError, ValueError):
            continue

    players_delta = delta.get("players")
    if isinstance(players_delta, Mapping):
        players = dict(state.players)
        for key, partial in players_delta.items():
            pid = _player_key(key)
            if pid is None or not isinstance(partial, Mapping):
                continue
            players[pid] = merge_player(players[pid], partial)
        changes["players"] = players

    settings_delta = delta.get("segment_settings")
    if isinstance(settings_delta, Mapping):
        settings = dict(state.segment_settings)
        for code, count in settings_delta.items():
            try:
                settings[_segment(code)] = _non_negative_int(count)
            except (TypeError, ValueError):
                continue
        changes["segment_settings"] = settings

    history = state.score_history
    if isinstance(delta.get("score_history"), list):
        history = tuple(e for e in map(_score_event, delta["score_history"]) if e is not None)
    if isinstance(delta.get("score_events"), list):
        appended = list(history)
        seen = {_event_key(e) for e in appended}
        for event in map(_score_event, delta["score_events"]):
            if event is None or _event_key(event) in seen:
                continue
            seen.add(_event_key(event))
            appended.append(event)
        history = tuple(appended)
    if history is not state.score_history:
        changes["score_history"] = history

    merged = replace(state, **changes) if changes else state
    return normalize(merged)


def normalize(state: GameState) -> GameState:
    """Restore the segment invariant after a merge: no null segment once playing."""
    if state.current_segment is None and state.phase not in PRE_GAME_PHASES:
        return replace(state, current_segment=SEGMENT_ORDER[0])
    return state


# ══════════════════════════════════════════════════════════════
# DIFF
# ══════════════════════════════════════════════════════════════

def _player_diff(prev: Player, nxt: Player) -> Dict[str, Any]:
    before, after = player_to_dict(prev), player_to_dict(nxt)
    diff: Dict[str, Any] = {}
    for leaf in _PLAYER_LEAVES:
        if leaf == "special_buttons":
            buttons = {
                b: v for b, v in after[leaf].items() if before[leaf].get(b) != v
            }
            if buttons:
                diff[leaf] = buttons
        elif before[leaf] != after[leaf]:
            diff[leaf] = after[leaf]
    return diff


def _history_diff(
    prev: Tuple[ScoreEvent, ...], nxt: Tuple[ScoreEvent, ...]
) -> Dict[str, List[Dict[str, Any]]]:
    if prev == nxt:
        return {}
    if nxt[:len(prev)] == prev:
        return {"score_events": [score_event_to_dict(e) for e in nxt[len(prev):]]}
    return {"score_history": [score_event_to_dict(e) for e in nxt]}


def diff_states(prev: GameState, nxt: GameState) -> Dict[str, Any]:
    """
    Build the finest-grained delta from ``prev`` to ``nxt``.

    Returns:
        Delta dict, empty when the states are equal
    """
    if prev is nxt:
        return {}

    delta: Dict[str, Any] = {}
    for key in _SCALAR_FIELDS:
        before, after = getattr(prev, key), getattr(nxt, key)
        if before != after:
            delta[key] = after.value if isinstance(after, (GamePhase, SegmentCode)) else after

    players: Dict[str, Any] = {}
    for pid, player in nxt.players.items():
        leaf_diff = _player_diff(prev.players[pid], player)
        if leaf_diff:
            players[pid.value] = leaf_diff
    if players:
        delta["players"] = players

    settings = {
        code.value: count
        for code, count in nxt.segment_settings.items()
        if prev.segment_settings.get(code) != count
    }
    if settings:
        delta["segment_settings"] = settings

    delta.update(_history_diff(prev.score_history, nxt.score_history))
    return delta
