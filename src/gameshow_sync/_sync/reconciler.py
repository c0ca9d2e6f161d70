# Area: Sync
"""
gameshow_sync._sync.reconciler — Local/remote state reconciliation
==================================================================

Bridges one client's GameStore with its SyncChannel and persistence.

Two queues, two tasks:
    inbound   peer messages (filled by the channel callbacks) drained by
              a single reconciliation loop that merges each one into the
              store through INIT. Last write wins per field, in the
              order this client processes them.
    outbound  local deltas (filled by ``apply_local``) drained by a
              sender task that persists, then broadcasts.

Local dispatch never waits for I/O, and a failed write or broadcast
never rolls local state back: failures become warnings.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

from .._core.actions import Action, Init
from .._core.delta import diff_states
from .._core.state import GameState
from .._core.store import GameStore
from .._persistence.persistence import Persistence
from .._shared.protocol import MessageKind
from ..errors import GameShowError, SyncError
from ..types import GameStateDelta, PlayerJoinData, PresenceDescriptor
from .channel import SyncChannel
from .presence import PresenceTracker

logger = logging.getLogger("gameshow_sync.sync.reconciler")

WarningCallback = Callable[[GameShowError], None]

# Oldest warnings are dropped beyond this many
MAX_WARNINGS = 100


@dataclass
class OutboundItem:
    """One local change waiting to be persisted and broadcast."""
    kind: MessageKind
    delta: GameStateDelta = field(default_factory=dict)
    payload: Optional[Dict[str, Any]] = None
    game_id: str = ""


class Reconciler:
    """
    Owns the inbound and outbound queues of one client.

    Implements the SyncCallbacks surface, so it attaches itself to the
    channel it is given.

    Attributes:
        warnings: Latest non-fatal sync and persistence failures, oldest
            first (at most MAX_WARNINGS)
        applied_remote: Number of peer messages merged into the store
    """

    def __init__(
        self,
        store: GameStore,
        channel: SyncChannel,
        persistence: Optional[Persistence] = None,
        presence: Optional[PresenceTracker] = None,
        on_warning: Optional[WarningCallback] = None,
    ):
        self.store = store
        self.channel = channel
        self.persistence = persistence
        self.presence = presence
        self.on_warning = on_warning
        self.warnings: Deque[GameShowError] = deque(maxlen=MAX_WARNINGS)
        self.applied_remote = 0

        self._inbound: "asyncio.Queue[tuple]" = asyncio.Queue()
        self._outbound: "asyncio.Queue[OutboundItem]" = asyncio.Queue()
        self._tasks: List[asyncio.Task] = []

        channel.attach(self)

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    # ══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════

    async def start(self) -> None:
        """Connect the channel and start both loops. Safe to call repeatedly."""
        if self._tasks:
            return
        await self.channel.connect()
        pid = self.channel.participant_id
        self._tasks = [
            asyncio.create_task(self._inbound_loop(), name=f"reconcile-{pid}"),
            asyncio.create_task(self._sender_loop(), name=f"sender-{pid}"),
        ]
        logger.info(f"Reconciler started for {pid}")

    async def stop(self) -> None:
        """Cancel both loops and disconnect. Safe to call repeatedly."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.channel.disconnect()
        if tasks:
            logger.info(f"Reconciler stopped for {self.channel.participant_id}")

    async def drain(self) -> None:
        """Wait until every queued inbound and outbound item was handled."""
        await self._outbound.join()
        await self._inbound.join()

    # ══════════════════════════════════════════════════════════
    # LOCAL CHANGES
    # ══════════════════════════════════════════════════════════

    def apply_local(
        self,
        *actions: Action,
        kind: MessageKind = MessageKind.GAME_STATE_UPDATE,
        payload: Optional[Dict[str, Any]] = None,
    ) -> GameState:
        """
        Dispatch actions locally and queue the resulting delta.

        The store is updated before this returns. Whatever was applied
        is queued even if a later action raises (strict stores). A narrow
        announcement (join, leave, host name, video room) goes out only
        when every action was accepted; otherwise peers get the plain
        delta, if any.

        Args:
            *actions: Actions dispatched in order
            kind: How peers are told about the change
            payload: Kind-specific payload for narrow announcements

        Returns:
            The store's state after the actions
        """
        prev = self.store.state
        rejected = self.store.rejected
        accepted = False
        try:
            for action in actions:
                self.store.dispatch(action)
            accepted = self.store.rejected == rejected
        finally:
            current = self.store.state
            delta = diff_states(prev, current)
            # A rejected action must not reach peers through a narrow message
            narrow = accepted and kind != MessageKind.GAME_STATE_UPDATE and payload is not None
            if delta or narrow:
                self._outbound.put_nowait(OutboundItem(
                    kind=kind if narrow else MessageKind.GAME_STATE_UPDATE,
                    delta=delta,
                    payload=payload if narrow else None,
                    game_id=current.game_id,
                ))
        return current

    def announce_presence(self, descriptor: PresenceDescriptor) -> None:
        """Queue a presence announcement (nothing is persisted). Skipped while disconnected."""
        if not self.channel.connected:
            logger.debug("Presence announcement skipped: channel not connected")
            return
        self._outbound.put_nowait(OutboundItem(
            kind=MessageKind.PRESENCE,
            payload={"descriptor": dict(descriptor)},
            game_id=self.store.state.game_id,
        ))

    # ══════════════════════════════════════════════════════════
    # INBOUND CALLBACKS (invoked by the channel)
    # ══════════════════════════════════════════════════════════

    def on_game_state_update(self, delta: GameStateDelta) -> None:
        self._inbound.put_nowait((MessageKind.GAME_STATE_UPDATE, delta))

    def on_player_join(self, player_id: str, data: PlayerJoinData) -> None:
        partial = {k: data[k] for k in ("name", "flag", "club") if k in data}
        partial["is_connected"] = True
        self._inbound.put_nowait((MessageKind.PLAYER_JOIN, {"players": {player_id: partial}}))

    def on_player_leave(self, player_id: str) -> None:
        self._inbound.put_nowait(
            (MessageKind.PLAYER_LEAVE, {"players": {player_id: {"is_connected": False}}})
        )

    def on_host_update(self, host_name: str) -> None:
        self._inbound.put_nowait((MessageKind.HOST_UPDATE, {"host_name": host_name}))

    def on_video_room_update(self, video_room_url: Optional[str], created: bool) -> None:
        self._inbound.put_nowait((
            MessageKind.VIDEO_ROOM_UPDATE,
            {"video_room_url": video_room_url, "video_room_created": created},
        ))

    def on_presence(self, descriptor: PresenceDescriptor) -> None:
        self._inbound.put_nowait((MessageKind.PRESENCE, descriptor))

    # ══════════════════════════════════════════════════════════
    # LOOPS
    # ══════════════════════════════════════════════════════════

    async def _inbound_loop(self) -> None:
        while True:
            kind, body = await self._inbound.get()
            try:
                self._apply_remote(kind, body)
            except Exception as e:
                self.warn(SyncError(f"apply_{kind.value.lower()}", f"{type(e).__name__}: {e}", body))
            finally:
                self._inbound.task_done()

    def _apply_remote(self, kind: MessageKind, body: Dict[str, Any]) -> None:
        if kind == MessageKind.PRESENCE:
            if self.presence is not None:
                self.presence.track(body)
            return
        # Remote deltas merge through INIT; they are not re-broadcast or persisted here
        self.store.dispatch(Init(payload=body))
        self.applied_remote += 1
        logger.debug(f"Merged remote {kind.value}: {sorted(body)}")

    async def _sender_loop(self) -> None:
        while True:
            item = await self._outbound.get()
            try:
                await self._persist(item)
                await self._broadcast(item)
            finally:
                self._outbound.task_done()

    async def _persist(self, item: OutboundItem) -> None:
        if self.persistence is None or not item.delta or not item.game_id:
            return
        try:
            await asyncio.to_thread(
                self.persistence.apply_delta,
                item.game_id,
                item.delta,
                item.kind == MessageKind.PLAYER_JOIN,
            )
        except GameShowError as e:
            self.warn(e)
        except Exception as e:
            self.warn(SyncError("persist", f"{type(e).__name__}: {e}", item.delta))

    async def _broadcast(self, item: OutboundItem) -> None:
        payload = item.payload or {}
        try:
            if item.kind == MessageKind.GAME_STATE_UPDATE:
                await self.channel.broadcast_game_state(item.delta)
            elif item.kind == MessageKind.PLAYER_JOIN:
                await self.channel.broadcast_player_join(payload["player_id"], payload.get("data") or {})
            elif item.kind == MessageKind.PLAYER_LEAVE:
                await self.channel.broadcast_player_leave(payload["player_id"])
            elif item.kind == MessageKind.HOST_UPDATE:
                await self.channel.broadcast_host_update(payload["host_name"])
            elif item.kind == MessageKind.VIDEO_ROOM_UPDATE:
                await self.channel.broadcast_video_room_update(
                    payload.get("video_room_url"), bool(payload.get("video_room_created")),
                )
            elif item.kind == MessageKind.PRESENCE:
                await self.channel.track_presence(payload["descriptor"])
        except GameShowError as e:
            self.warn(e)
        except Exception as e:
            self.warn(SyncError(item.kind.value, f"{type(e).__name__}: {e}", payload))

    # ══════════════════════════════════════════════════════════
    # WARNINGS
    # ══════════════════════════════════════════════════════════

    def warn(self, error: GameShowError) -> None:
        self.warnings.append(error)
        logger.warning(f"Non-fatal {error.__class__.__name__}: {error}")
        if self.on_warning is None:
            return
        try:
            self.on_warning(error)
        except Exception as e:
            logger.error(f"Warning callback failed: {e}", exc_info=True)
