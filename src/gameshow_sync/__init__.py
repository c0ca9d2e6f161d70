"""
gameshow_sync — Game Show Session Core
======================================

Authoritative game state, its pure reducer, and the multi-client
synchronization that keeps four independent clients (host console,
host camera, two players) converging on one shared session.

Quick Start (single process, in-memory transport):
    from gameshow_sync import (
        GameSession, InMemoryHub, InMemorySyncChannel, SessionConfig,
    )
    hub = InMemoryHub()
    config = SessionConfig(game_id="G1", participant_id="host-desktop")
    session = GameSession(config, InMemorySyncChannel(hub, "G1", "host-desktop"))
    await session.start()
    await session.start_session("HOST-42", host_name="Dana")
    session.start_game()

Pure reducer only:
    from gameshow_sync import GameStore, StartTimer, TickTimer
    store = GameStore(strict=True)
    store.dispatch(StartTimer(duration=30))
    store.dispatch(TickTimer())

Type Definitions
----------------
Sync payload types are available for import:

    from gameshow_sync import GameStateDelta, PresenceDescriptor, PlayerJoinData
"""

from ._core import (
    Action,
    AddPlayer,
    AddStrike,
    CompleteGame,
    GamePhase,
    GameState,
    GameStore,
    Init,
    MAX_STRIKES,
    NextQuestion,
    NextSegment,
    ParticipantKind,
    Player,
    PlayerId,
    PushScoreEvent,
    ResetGame,
    ResetStrikes,
    ScoreEvent,
    SegmentCode,
    SetCurrentSegment,
    SetPhase,
    SpecialButton,
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
    diff_states,
    initial_game_state,
    merge_delta,
    reduce,
    state_to_dict,
    validate_action,
)
from ._persistence import (
    GameRecord,
    Persistence,
    PlayerRecord,
    ScoreEventRecord,
    SqlitePersistence,
    load_state,
)
from ._shared import PRESENCE_TIMEOUT_SECONDS, SessionConfig, load_config, setup_logging
from ._sync import (
    InMemoryHub,
    InMemorySyncChannel,
    PresenceEntry,
    PresenceTracker,
    Reconciler,
    SyncCallbacks,
    SyncChannel,
    TimerCoordinator,
)
from .errors import (
    ConfigError,
    GameShowError,
    InvalidActionError,
    PersistenceError,
    SyncError,
    VideoRoomError,
)
from .session import GameSession
from .types import (
    GameStateDelta,
    PlayerDelta,
    PlayerJoinData,
    PresenceDescriptor,
    ScoreEventData,
    VideoParticipant,
)
from .video import LocalVideoProvider, VideoResult, VideoRoomProvider

__all__ = [
    # Session
    "GameSession",
    "SessionConfig",
    "load_config",
    "setup_logging",
    # State and reducer
    "GameState",
    "GameStore",
    "GamePhase",
    "SegmentCode",
    "PlayerId",
    "SpecialButton",
    "ParticipantKind",
    "Player",
    "ScoreEvent",
    "MAX_STRIKES",
    "initial_game_state",
    "state_to_dict",
    "reduce",
    "validate_action",
    "merge_delta",
    "diff_states",
    # Actions
    "Action",
    "Init",
    "SetPhase",
    "SetCurrentSegment",
    "NextQuestion",
    "NextSegment",
    "AddPlayer",
    "UpdatePlayer",
    "UpdateScore",
    "AddStrike",
    "UseSpecialButton",
    "StartTimer",
    "StopTimer",
    "TickTimer",
    "UpdateTimer",
    "PushScoreEvent",
    "ResetStrikes",
    "UpdateHostName",
    "UpdateSegmentSettings",
    "CompleteGame",
    "ResetGame",
    "action_from_dict",
    "action_to_dict",
    # Sync
    "SyncChannel",
    "SyncCallbacks",
    "InMemoryHub",
    "InMemorySyncChannel",
    "Reconciler",
    "PresenceTracker",
    "PresenceEntry",
    "PRESENCE_TIMEOUT_SECONDS",
    "TimerCoordinator",
    # Persistence
    "Persistence",
    "SqlitePersistence",
    "GameRecord",
    "PlayerRecord",
    "ScoreEventRecord",
    "load_state",
    # Video
    "VideoRoomProvider",
    "VideoResult",
    "LocalVideoProvider",
    # Errors
    "GameShowError",
    "InvalidActionError",
    "SyncError",
    "PersistenceError",
    "VideoRoomError",
    "ConfigError",
    # Types
    "GameStateDelta",
    "PlayerDelta",
    "PlayerJoinData",
    "PresenceDescriptor",
    "ScoreEventData",
    "VideoParticipant",
]
__version__ = "1.0.0"
