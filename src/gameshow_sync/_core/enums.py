# Area: Core
"""
gameshow_sync._core.enums — Game State Enums
============================================

Closed code sets used by the game state: phases, segments, player
slots, special buttons and participant kinds.
"""

from enum import Enum


class GamePhase(Enum):
    """
    Top-level session stage.

    Phase transitions (see phase_machine.PHASE_TRANSITIONS):
    CONFIG -> LOBBY, PLAYING
    LOBBY -> CONFIG, PLAYING
    PLAYING -> CONFIG, COMPLETED
    COMPLETED -> (nothing; only RESET_GAME leaves it)
    """
    CONFIG = "CONFIG"
    LOBBY = "LOBBY"
    PLAYING = "PLAYING"
    COMPLETED = "COMPLETED"


class SegmentCode(Enum):
    """Round codes, declared in play order."""
    WSHA = "WSHA"
    AUCT = "AUCT"
    BELL = "BELL"
    SING = "SING"
    REMO = "REMO"


SEGMENT_ORDER = tuple(SegmentCode)


class PlayerId(Enum):
    """The three fixed player slots of a session."""
    HOST = "host"
    PLAYER_A = "playerA"
    PLAYER_B = "playerB"


class SpecialButton(Enum):
    """One-shot capabilities each player may spend once per session."""
    LOCK_BUTTON = "LOCK_BUTTON"
    TRAVELER_BUTTON = "TRAVELER_BUTTON"
    PIT_BUTTON = "PIT_BUTTON"


class ParticipantKind(Enum):
    """Kind of client announcing presence."""
    HOST_DESKTOP = "host-desktop"
    HOST_MOBILE = "host-mobile"
    PLAYER_A = "playerA"
    PLAYER_B = "playerB"


HOST_KINDS = frozenset({ParticipantKind.HOST_DESKTOP, ParticipantKind.HOST_MOBILE})
