# Area: Core
"""
gameshow_sync._core.state — Game state model
=============================================

Immutable value types for one session's complete game state.
Every transition builds a new GameState with dataclasses.replace;
nothing here is ever mutated in place.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .enums import GamePhase, PlayerId, SegmentCode, SpecialButton

MAX_STRIKES = 3
DEFAULT_QUESTIONS_PER_SEGMENT = 10


def _all_buttons_available() -> Dict[SpecialButton, bool]:
    return {button: True for button in SpecialButton}


@dataclass(frozen=True)
class Player:
    """One of the three fixed player slots."""
    id: PlayerId
    name: str = ""
    score: int = 0
    strikes: int = 0
    special_buttons: Mapping[SpecialButton, bool] = field(default_factory=_all_buttons_available)
    flag: Optional[str] = None
    club: Optional[str] = None
    is_connected: bool = False


@dataclass(frozen=True)
class ScoreEvent:
    """
    A signed score change, recorded in the append-only history.

    ``event_id`` identifies one award across every client; two awards
    with equal values stay distinct as long as their ids differ.
    """
    player_id: PlayerId
    points: int
    timestamp: int                  # epoch milliseconds
    reason: Optional[str] = None
    event_id: Optional[str] = None


@dataclass(frozen=True)
class GameState:
    """
    Full state of one session.

    Attributes:
        game_id: Session identifier
        host_code: Admission code for the host
        host_name: Display name of the host, if known
        phase: Top-level session stage
        current_segment: Active round, None only in CONFIG/LOBBY
        current_question_index: Progress within the segment
        timer: Seconds remaining on the shared countdown
        is_timer_running: Whether the countdown is advancing
        players: Fixed mapping host/playerA/playerB -> Player
        score_history: Append-only score events
        segment_settings: Question count per segment
        video_room_url: Opaque, owned by the video collaborator
        video_room_created: Opaque, owned by the video collaborator
    """
    game_id: str = ""
    host_code: str = ""
    host_name: Optional[str] = None
    phase: GamePhase = GamePhase.CONFIG
    current_segment: Optional[SegmentCode] = None
    current_question_index: int = 0
    timer: int = 0
    is_timer_running: bool = False
    players: Mapping[PlayerId, Player] = field(default_factory=lambda: default_players())
    score_history: Tuple[ScoreEvent, ...] = ()
    segment_settings: Mapping[SegmentCode, int] = field(
        default_factory=lambda: default_segment_settings()
    )
    video_room_url: Optional[str] = None
    video_room_created: bool = False


def default_players() -> Dict[PlayerId, Player]:
    """Return the canonical three-slot player map."""
    return {pid: Player(id=pid) for pid in PlayerId}


def default_segment_settings() -> Dict[SegmentCode, int]:
    return {code: DEFAULT_QUESTIONS_PER_SEGMENT for code in SegmentCode}


def initial_game_state() -> GameState:
    """Return the canonical pre-session state."""
    return GameState()


# ── Serialization (JSON-safe snapshots) ─────────────────────

def player_to_dict(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id.value,
        "name": player.name,
        "score": player.score,
        "strikes": player.strikes,
        "special_buttons": {b.value: v for b, v in player.special_buttons.items()},
        "flag": player.flag,
        "club": player.club,
        "is_connected": player.is_connected,
    }


def score_event_to_dict(event: ScoreEvent) -> Dict[str, Any]:
    return {
        "player_id": event.player_id.value,
        "points": event.points,
        "timestamp": event.timestamp,
        "reason": event.reason,
        "event_id": event.event_id,
    }


def score_event_from_dict(data: Mapping[str, Any]) -> ScoreEvent:
    """Build a ScoreEvent from its dict form. Raises ValueError/KeyError on bad input."""
    return ScoreEvent(
        player_id=PlayerId(data["player_id"]),
        points=int(data["points"]),
        timestamp=int(data["timestamp"]),
        reason=data.get("reason"),
        event_id=data.get("event_id"),
    )


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Snapshot the full state as a JSON-safe dict (a complete delta)."""
    return {
        "game_id": state.game_id,
        "host_code": state.host_code,
        "host_name": state.host_name,
        "phase": state.phase.value,
        "current_segment": state.current_segment.value if state.current_segment else None,
        "current_question_index": state.current_question_index,
        "timer": state.timer,
        "is_timer_running": state.is_timer_running,
        "players": {pid.value: player_to_dict(p) for pid, p in state.players.items()},
        "score_history": [score_event_to_dict(e) for e in state.score_history],
        "segment_settings": {c.value: n for c, n in state.segment_settings.items()},
        "video_room_url": state.video_room_url,
        "video_room_created": state.video_room_created,
    }
