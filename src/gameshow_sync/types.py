"""
gameshow_sync.types — TypedDict schemas for sync payloads
==========================================================

This module documents the exact structure of the dictionaries that
cross the sync channel and the presence / video seams. Deltas
themselves are partial renderings of ``state_to_dict`` output and are
described by ``GameStateDelta``.

All types are exported from the main package:

    from gameshow_sync import PresenceDescriptor, GameStateDelta, ...

Use __annotations__ to inspect fields:

    >>> PresenceDescriptor.__annotations__
    {'participant_id': str, 'kind': str, 'name': str, ...}
"""

from typing import Dict, List, Optional, TypedDict


# ============================================
# Game state deltas
# ============================================

class PlayerDelta(TypedDict, total=False):
    """Leaf fields of one player; every key optional."""
    name: str
    score: int
    strikes: int                     # 0..3
    special_buttons: Dict[str, bool]  # e.g., {"LOCK_BUTTON": False}
    flag: Optional[str]
    club: Optional[str]
    is_connected: bool


class ScoreEventData(TypedDict):
    """One entry of the score history."""
    player_id: str      # "host", "playerA" or "playerB"
    points: int         # signed
    timestamp: int      # epoch milliseconds
    reason: Optional[str]
    event_id: Optional[str]  # unique per award; None for legacy events


class GameStateDelta(TypedDict, total=False):
    """Partial game state as carried by GAME_STATE_UPDATE.

    Fields
    ------
    players : Dict[str, PlayerDelta]
        Keyed by player slot; only changed leaves are present.
    score_events : List[ScoreEventData]
        Events to append (skipped if their event_id is already present).
    score_history : List[ScoreEventData]
        Full replacement of the history (after a reset).
    """
    game_id: str
    host_code: str
    host_name: Optional[str]
    phase: str
    current_segment: Optional[str]
    current_question_index: int
    timer: int
    is_timer_running: bool
    players: Dict[str, PlayerDelta]
    score_events: List[ScoreEventData]
    score_history: List[ScoreEventData]
    segment_settings: Dict[str, int]
    video_room_url: Optional[str]
    video_room_created: bool


# ============================================
# Presence
# ============================================

class PresenceDescriptor(TypedDict, total=False):
    """Liveness announcement for one participant.

    Fields
    ------
    participant_id : str
        Stable id of the client, e.g., "host-desktop-1".
    kind : str
        "host-desktop", "host-mobile", "playerA" or "playerB".
    name : str
        Display name.
    player_id : str
        Player slot this participant controls, if any.
    connected : bool
        False announces a graceful leave.
    """
    participant_id: str
    kind: str
    name: str
    player_id: Optional[str]
    flag: Optional[str]
    club: Optional[str]
    connected: bool


class VideoParticipant(TypedDict, total=False):
    """Participant as reported by the video collaborator."""
    participant_id: str
    user_name: str
    connected: bool


# ============================================
# Player join
# ============================================

class PlayerJoinData(TypedDict, total=False):
    """Data a player supplies when taking a slot."""
    name: str
    flag: Optional[str]
    club: Optional[str]
