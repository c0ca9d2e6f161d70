# Area: Core
"""
gameshow_sync._core.phase_machine — Session phase state machine
===============================================================

Defines which phase changes are legal. The reducer consults this table
for SET_PHASE, COMPLETE_GAME and NEXT_SEGMENT; RESET_GAME bypasses it
because a full reset replaces the whole state.
"""

from typing import Optional

from .enums import GamePhase, SegmentCode, SEGMENT_ORDER


# Valid phase transitions: {current_phase: {allowed next phases}}
PHASE_TRANSITIONS = {
    GamePhase.CONFIG: {GamePhase.LOBBY, GamePhase.PLAYING},
    GamePhase.LOBBY: {GamePhase.CONFIG, GamePhase.PLAYING},
    GamePhase.PLAYING: {GamePhase.CONFIG, GamePhase.COMPLETED},
    GamePhase.COMPLETED: set(),
}

# Phases in which no segment has been chosen yet
PRE_GAME_PHASES = frozenset({GamePhase.CONFIG, GamePhase.LOBBY})


def can_transition(current: GamePhase, target: GamePhase) -> bool:
    """
    Check if moving from ``current`` to ``target`` is legal.

    Re-entering the current phase is always accepted (idempotent
    SET_PHASE), except for COMPLETED which is terminal.

    Args:
        current: The phase the session is in
        target: The requested phase

    Returns:
        True if the transition is valid, False otherwise
    """
    if current == target:
        return current != GamePhase.COMPLETED
    return target in PHASE_TRANSITIONS.get(current, set())


def is_terminal(phase: GamePhase) -> bool:
    return not PHASE_TRANSITIONS.get(phase)


def next_segment(current: Optional[SegmentCode]) -> Optional[SegmentCode]:
    """Return the segment after ``current``, or None past the last one."""
    if current is None:
        return SEGMENT_ORDER[0]
    idx = SEGMENT_ORDER.index(current) + 1
    return SEGMENT_ORDER[idx] if idx < len(SEGMENT_ORDER) else None
