# Area: Sync
"""
gameshow_sync._sync.channel — Sync channel base class
=====================================================

Abstract realtime transport between the clients of one session.

Subclasses implement three hooks:
    _open()   acquire subscriptions / tasks
    _close()  release everything _open() may have acquired (must
              tolerate a partially completed _open())
    _send()   publish one encoded envelope to the other clients

and feed raw inbound envelopes to ``_deliver()``. The base class
provides idempotent connect/disconnect, envelope building, origin and
session filtering, and routing into the attached callbacks.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .._shared.protocol import (
    MessageKind,
    build_envelope,
    decode_envelope,
    encode_envelope,
)
from ..errors import SyncError
from ..types import GameStateDelta, PlayerJoinData, PresenceDescriptor
from .inbound_router import InboundRouter, SyncCallbacks

logger = logging.getLogger("gameshow_sync.sync.channel")


class SyncChannel(ABC):
    """
    Base class for realtime sync transports.

    Attributes:
        game_id: Session this channel is scoped to
        participant_id: Id of the owning client (used as envelope origin)
    """

    def __init__(self, game_id: str, participant_id: str):
        self.game_id = game_id
        self.participant_id = participant_id
        self._router: Optional[InboundRouter] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def attach(self, callbacks: SyncCallbacks) -> None:
        """Set the callbacks that receive inbound messages."""
        self._router = InboundRouter(callbacks)

    # ── Lifecycle ─────────────────────────────────────────────

    async def connect(self) -> None:
        """
        Open the channel. Safe to call repeatedly.

        Raises:
            SyncError: If the transport cannot be opened; anything
                acquired before the failure is released first
        """
        if self._connected:
            return
        try:
            await self._open()
        except Exception as e:
            logger.error(f"Connect failed for {self.participant_id}: {e}")
            await self._close()
            raise SyncError("connect", str(e)) from e
        self._connected = True
        logger.info(f"Channel connected: {self.participant_id} -> {self.game_id}")

    async def disconnect(self) -> None:
        """Close the channel and release every resource. Safe to call repeatedly."""
        was_connected = self._connected
        self._connected = False
        await self._close()
        if was_connected:
            logger.info(f"Channel disconnected: {self.participant_id}")

    # ── Outbound announcements ────────────────────────────────

    async def broadcast_game_state(self, delta: GameStateDelta) -> None:
        await self._publish(MessageKind.GAME_STATE_UPDATE, {"delta": delta})

    async def broadcast_player_join(self, player_id: str, data: PlayerJoinData) -> None:
        await self._publish(MessageKind.PLAYER_JOIN, {"player_id": player_id, "data": data})

    async def broadcast_player_leave(self, player_id: str) -> None:
        await self._publish(MessageKind.PLAYER_LEAVE, {"player_id": player_id})

    async def broadcast_host_update(self, host_name: str) -> None:
        await self._publish(MessageKind.HOST_UPDATE, {"host_name": host_name})

    async def broadcast_video_room_update(self, video_room_url: Optional[str], created: bool) -> None:
        await self._publish(
            MessageKind.VIDEO_ROOM_UPDATE,
            {"video_room_url": video_room_url, "video_room_created": created},
        )

    async def track_presence(self, descriptor: PresenceDescriptor) -> None:
        """Fire-and-forget liveness announcement."""
        await self._publish(MessageKind.PRESENCE, {"descriptor": descriptor})

    async def _publish(self, kind: MessageKind, payload: Dict[str, Any]) -> None:
        if not self._connected:
            raise SyncError(kind.value, "channel is not connected", payload)
        envelope = build_envelope(kind, payload, self.participant_id, self.game_id)
        try:
            await self._send(encode_envelope(envelope))
        except SyncError:
            raise
        except Exception as e:
            raise SyncError(kind.value, f"{type(e).__name__}: {e}", payload) from e

    # ── Inbound ──────────────────────────────────────────────

    def _deliver(self, raw: str) -> bool:
        """
        Decode and route one raw inbound envelope.

        Returns:
            True if the envelope reached a callback
        """
        envelope = decode_envelope(raw)
        if envelope is None:
            logger.warning(f"{self.participant_id}: dropped malformed envelope")
            return False
        if envelope.get("game_id") != self.game_id:
            return False
        if envelope.get("origin") == self.participant_id:
            return False
        if self._router is None:
            logger.warning(f"{self.participant_id}: no callbacks attached, message dropped")
            return False
        return self._router.route(envelope)

    # ── Transport hooks ──────────────────────────────────────

    @abstractmethod
    async def _open(self) -> None:
        ...

    @abstractmethod
    async def _close(self) -> None:
        ...

    @abstractmethod
    async def _send(self, raw: str) -> None:
        ...
