"""
gameshow_sync.session — Game session facade
===========================================

One GameSession per client. It wires the store, reconciler, presence
tracker, timer coordinator, persistence and video collaborators
together and exposes the game's operations as plain methods.

Every state-changing operation dispatches locally first (the return
value is already the new truth), then the reconciler persists and
broadcasts the change in the background.

Usage:
    hub = InMemoryHub()
    channel = InMemorySyncChannel(hub, "G1", "host-desktop")
    session = GameSession(config, channel, persistence=SqlitePersistence())
    await session.start()
    await session.start_session("H-1234", host_name="Dana")
    session.start_game()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from ._core.actions import (
    AddStrike,
    CompleteGame,
    Init,
    NextQuestion,
    NextSegment,
    PushScoreEvent,
    ResetGame,
    SetPhase,
    UpdateHostName,
    UpdatePlayer,
    UpdateScore,
    UpdateSegmentSettings,
    UseSpecialButton,
)
from ._core.enums import GamePhase, ParticipantKind, PlayerId, SegmentCode, SpecialButton
from ._core.state import GameState, ScoreEvent, default_segment_settings, state_to_dict
from ._core.store import GameStore
from ._persistence.persistence import Persistence
from ._persistence.records import GameRecord, load_state
from ._shared.config import SessionConfig
from ._shared.protocol import MessageKind, generate_event_id, now_ms
from ._sync.channel import SyncChannel
from ._sync.presence import PresenceEntry, PresenceTracker
from ._sync.reconciler import Reconciler, WarningCallback
from ._sync.timer import TimerCoordinator
from .errors import GameShowError, PersistenceError
from .types import PlayerJoinData, PresenceDescriptor, VideoParticipant
from .video import VideoResult, VideoRoomProvider

logger = logging.getLogger("gameshow_sync.session")

DRAIN_TIMEOUT_SECONDS = 5.0

PlayerRef = Union[PlayerId, str]


def _player(player_id: PlayerRef) -> PlayerId:
    return player_id if isinstance(player_id, PlayerId) else PlayerId(player_id)


class GameSession:
    """
    Facade over one client's copy of a session.

    Args:
        config: Client configuration
        channel: Realtime transport scoped to this session
        persistence: Durable storage (optional; writes are skipped without it)
        video: Video room provider (optional)
        store: Existing store to use instead of a fresh one
        on_warning: Called with every non-fatal sync/persistence failure
    """

    def __init__(
        self,
        config: SessionConfig,
        channel: SyncChannel,
        persistence: Optional[Persistence] = None,
        video: Optional[VideoRoomProvider] = None,
        store: Optional[GameStore] = None,
        on_warning: Optional[WarningCallback] = None,
    ):
        self.config = config
        self.channel = channel
        self.persistence = persistence
        self.video = video
        self.store = store if store is not None else GameStore(strict=config.strict_actions)
        self.presence = PresenceTracker(timeout_seconds=config.presence_timeout_seconds)
        self.reconciler = Reconciler(
            self.store,
            channel,
            persistence=persistence,
            presence=self.presence,
            on_warning=on_warning,
        )
        self.timer = TimerCoordinator(self.reconciler, tick_interval=config.tick_interval_seconds)
        self._presence_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> GameState:
        return self.store.state

    @property
    def game_id(self) -> str:
        return self.channel.game_id

    @property
    def warnings(self) -> Sequence[GameShowError]:
        return self.reconciler.warnings

    def own_descriptor(self) -> PresenceDescriptor:
        """Presence descriptor for this client, built from config."""
        kind = ParticipantKind(self.config.participant_kind)
        descriptor: PresenceDescriptor = {
            "participant_id": self.config.participant_id,
            "kind": kind.value,
            "name": self.config.display_name,
            "connected": True,
        }
        if kind == ParticipantKind.PLAYER_A:
            descriptor["player_id"] = PlayerId.PLAYER_A.value
        elif kind == ParticipantKind.PLAYER_B:
            descriptor["player_id"] = PlayerId.PLAYER_B.value
        return descriptor

    # ══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════

    async def start(self) -> None:
        """Connect, start the loops, announce presence. Safe to call repeatedly."""
        if self.reconciler.running:
            return
        await self.reconciler.start()
        if self.config.drives_timer:
            self.timer.start_driver()
        self._presence_task = asyncio.create_task(
            self._presence_loop(), name=f"presence-{self.config.participant_id}"
        )
        self._log_startup()

    async def stop(self) -> None:
        """Flush queued changes, then release every task. Safe to call repeatedly."""
        task, self._presence_task = self._presence_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.timer.stop_driver()
        if self.reconciler.running:
            try:
                await asyncio.wait_for(self.reconciler.drain(), DRAIN_TIMEOUT_SECONDS)
            except asyncio.TimeoutError:
                logger.warning("Stopping with undelivered changes")
        await self.reconciler.stop()

    def _log_startup(self) -> None:
        logger.info("=" * 60)
        logger.info("  Game Show Session — Started")
        logger.info(f"  Game:        {self.game_id or 'N/A'}")
        logger.info(f"  Participant: {self.config.participant_id} ({self.config.participant_kind})")
        logger.info(f"  Timer:       {'driving' if self.config.drives_timer else 'following'}")
        logger.info("=" * 60)

    async def _presence_loop(self) -> None:
        while True:
            try:
                self.track_presence(self.own_descriptor())
                self.check_presence()
            except (GameShowError, ValueError) as e:
                logger.warning(f"Presence heartbeat failed: {e}")
            await asyncio.sleep(self.config.presence_interval_seconds)

    # ══════════════════════════════════════════════════════════
    # SESSION SETUP
    # ══════════════════════════════════════════════════════════

    async def start_session(
        self,
        host_code: str,
        host_name: Optional[str] = None,
        segment_settings: Optional[Mapping[Union[SegmentCode, str], int]] = None,
    ) -> GameState:
        """
        Create the session record and broadcast the initial state.

        A storage failure is reported as a warning; the session still
        starts locally.
        """
        settings = {
            SegmentCode(getattr(k, "value", k)).value: int(v)
            for k, v in (segment_settings or {}).items()
        }
        settings = {**{c.value: n for c, n in default_segment_settings().items()}, **settings}

        record = GameRecord(
            id=self.game_id,
            host_code=host_code,
            host_name=host_name,
            segment_settings=settings,
        )
        if self.persistence is not None:
            try:
                record = await asyncio.to_thread(
                    self.persistence.create_game, self.game_id, host_code, host_name, settings,
                )
            except PersistenceError as e:
                self.reconciler.warn(e)

        initial = load_state(record)
        logger.info(f"Session {self.game_id} started (host code {host_code})")
        return self.reconciler.apply_local(ResetGame(), Init(payload=state_to_dict(initial)))

    async def load_game(self, game_id: Optional[str] = None) -> Optional[GameState]:
        """
        Replace local state with the stored session (not broadcast).

        Returns:
            The loaded state, or None if the session is not stored

        Raises:
            PersistenceError: If storage is unavailable
        """
        game_id = game_id or self.game_id
        if self.persistence is None:
            raise PersistenceError("load_game", "no persistence configured")

        record = await asyncio.to_thread(self.persistence.get_game, game_id)
        if record is None:
            logger.warning(f"Game {game_id} not found")
            return None
        players = await asyncio.to_thread(self.persistence.get_players, game_id)
        events = await asyncio.to_thread(self.persistence.get_score_events, game_id)

        loaded = load_state(record, players, events)
        self.store.dispatch(ResetGame())
        state = self.store.dispatch(Init(payload=state_to_dict(loaded)))
        logger.info(f"Loaded game {game_id} in phase {state.phase.value}")
        return state

    def start_game(self) -> GameState:
        return self.reconciler.apply_local(SetPhase(phase=GamePhase.PLAYING))

    def join_game(self, player_id: PlayerRef, data: PlayerJoinData) -> GameState:
        """Take a player slot (name, flag, club) and mark it connected."""
        pid = _player(player_id)
        partial = {k: data[k] for k in ("name", "flag", "club") if k in data}
        return self.reconciler.apply_local(
            UpdatePlayer(player_id=pid, partial={**partial, "is_connected": True}),
            kind=MessageKind.PLAYER_JOIN,
            payload={"player_id": pid.value, "data": partial},
        )

    def leave_game(self, player_id: PlayerRef) -> GameState:
        pid = _player(player_id)
        return self.reconciler.apply_local(
            UpdatePlayer(player_id=pid, partial={"is_connected": False}),
            kind=MessageKind.PLAYER_LEAVE,
            payload={"player_id": pid.value},
        )

    def update_host_name(self, name: str) -> GameState:
        return self.reconciler.apply_local(
            UpdateHostName(host_name=name),
            kind=MessageKind.HOST_UPDATE,
            payload={"host_name": name},
        )

    def update_segment_settings(self, settings: Mapping[Union[SegmentCode, str], int]) -> GameState:
        parsed = {SegmentCode(getattr(k, "value", k)): v for k, v in settings.items()}
        return self.reconciler.apply_local(UpdateSegmentSettings(settings=parsed))

    # ══════════════════════════════════════════════════════════
    # GAMEPLAY
    # ══════════════════════════════════════════════════════════

    def next_question(self) -> GameState:
        return self.reconciler.apply_local(NextQuestion())

    def next_segment(self) -> GameState:
        return self.reconciler.apply_local(NextSegment())

    def award_points(self, player_id: PlayerRef, points: int, reason: Optional[str] = None) -> GameState:
        """Change a score and record the change in the score history."""
        pid = _player(player_id)
        event = ScoreEvent(
            player_id=pid,
            points=points,
            timestamp=now_ms(),
            reason=reason,
            event_id=generate_event_id(),
        )
        return self.reconciler.apply_local(
            UpdateScore(player_id=pid, points=points),
            PushScoreEvent(event=event),
        )

    def update_score(self, player_id: PlayerRef, points: int) -> GameState:
        """Change a score without recording a score event."""
        return self.reconciler.apply_local(UpdateScore(player_id=_player(player_id), points=points))

    def add_strike(self, player_id: PlayerRef) -> GameState:
        return self.reconciler.apply_local(AddStrike(player_id=_player(player_id)))

    def use_special_button(self, player_id: PlayerRef, button: Union[SpecialButton, str]) -> GameState:
        button = button if isinstance(button, SpecialButton) else SpecialButton(button)
        return self.reconciler.apply_local(UseSpecialButton(player_id=_player(player_id), button=button))

    def start_timer(self, duration: int) -> GameState:
        return self.timer.start(duration)

    def stop_timer(self) -> GameState:
        return self.timer.stop()

    def complete_game(self) -> GameState:
        return self.reconciler.apply_local(CompleteGame())

    def reset_game(self) -> GameState:
        """Reset to the initial state, keeping the session identity."""
        current = self.store.state
        identity = {
            "game_id": current.game_id,
            "host_code": current.host_code,
            "host_name": current.host_name,
        }
        logger.info(f"Resetting game {current.game_id}")
        return self.reconciler.apply_local(ResetGame(), Init(payload=identity))

    # ══════════════════════════════════════════════════════════
    # PRESENCE
    # ══════════════════════════════════════════════════════════

    def track_presence(self, descriptor: PresenceDescriptor) -> PresenceEntry:
        """Record a participant locally and announce it to peers."""
        entry = self.presence.track(descriptor)
        self.reconciler.announce_presence(descriptor)
        return entry

    def check_presence(self) -> List[PresenceEntry]:
        """
        Downgrade silent participants and mark their player slots
        disconnected.

        Returns:
            Entries that timed out in this sweep
        """
        downgraded = self.presence.sweep()
        for entry in downgraded:
            if entry.player_id is None:
                continue
            if self.store.state.players[entry.player_id].is_connected:
                self.leave_game(entry.player_id)
        return downgraded

    def host_connected(self, video_participants: Iterable[VideoParticipant]) -> bool:
        return self.presence.host_connected(video_participants)

    # ══════════════════════════════════════════════════════════
    # VIDEO
    # ══════════════════════════════════════════════════════════

    async def create_video_room(self) -> VideoResult:
        """Create the session's video room and share its URL."""
        if self.video is None:
            return VideoResult(success=False, error="no video provider configured")
        try:
            url = await asyncio.to_thread(self.video.create_room, self.game_id)
        except Exception as e:
            logger.warning(f"Video room creation failed: {e}")
            return VideoResult(success=False, error=str(e) or "create failed")

        self.reconciler.apply_local(
            Init(payload={"video_room_url": url, "video_room_created": True}),
            kind=MessageKind.VIDEO_ROOM_UPDATE,
            payload={"video_room_url": url, "video_room_created": True},
        )
        return VideoResult(success=True, room_url=url)

    async def end_video_room(self) -> VideoResult:
        """Delete the session's video room and clear its URL."""
        if self.video is None:
            return VideoResult(success=False, error="no video provider configured")
        try:
            await asyncio.to_thread(self.video.delete_room, self.game_id)
        except Exception as e:
            logger.warning(f"Video room deletion failed: {e}")
            return VideoResult(success=False, error=str(e) or "delete failed")

        self.reconciler.apply_local(
            Init(payload={"video_room_url": None, "video_room_created": False}),
            kind=MessageKind.VIDEO_ROOM_UPDATE,
            payload={"video_room_url": None, "video_room_created": False},
        )
        return VideoResult(success=True)

    async def generate_video_token(self, user: str, is_host: bool = False) -> VideoResult:
        """Request an access token for one participant of the room."""
        if self.video is None:
            return VideoResult(success=False, error="no video provider configured")
        try:
            token = await asyncio.to_thread(self.video.create_token, self.game_id, user, is_host)
        except Exception as e:
            logger.warning(f"Video token generation failed: {e}")
            return VideoResult(success=False, error=str(e) or "no token")
        return VideoResult(success=True, token=token)
