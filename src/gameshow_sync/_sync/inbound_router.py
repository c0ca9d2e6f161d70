# Area: Sync
"""
gameshow_sync._sync.inbound_router — Inbound message router
===========================================================

Routes decoded sync envelopes to the matching method of a
SyncCallbacks implementation, based on the envelope kind.

Delivery is at-least-once, so the router remembers recently seen
message ids and drops repeats before any callback runs.
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Protocol, Set

from .._shared.protocol import MessageKind
from ..types import GameStateDelta, PlayerJoinData, PresenceDescriptor

logger = logging.getLogger("gameshow_sync.sync.router")

DEFAULT_DEDUPE_WINDOW = 1024


class SyncCallbacks(Protocol):
    """Inbound callback surface invoked when a peer message arrives."""

    def on_game_state_update(self, delta: GameStateDelta) -> None:
        ...

    def on_player_join(self, player_id: str, data: PlayerJoinData) -> None:
        ...

    def on_player_leave(self, player_id: str) -> None:
        ...

    def on_host_update(self, host_name: str) -> None:
        ...

    def on_video_room_update(self, video_room_url: Optional[str], created: bool) -> None:
        ...

    def on_presence(self, descriptor: PresenceDescriptor) -> None:
        ...


def _game_state_update(callbacks: SyncCallbacks, payload: Dict[str, Any]) -> None:
    callbacks.on_game_state_update(payload.get("delta") or {})


def _player_join(callbacks: SyncCallbacks, payload: Dict[str, Any]) -> None:
    callbacks.on_player_join(payload["player_id"], payload.get("data") or {})


def _player_leave(callbacks: SyncCallbacks, payload: Dict[str, Any]) -> None:
    callbacks.on_player_leave(payload["player_id"])


def _host_update(callbacks: SyncCallbacks, payload: Dict[str, Any]) -> None:
    callbacks.on_host_update(payload["host_name"])


def _video_room_update(callbacks: SyncCallbacks, payload: Dict[str, Any]) -> None:
    callbacks.on_video_room_update(
        payload.get("video_room_url"), bool(payload.get("video_room_created"))
    )


def _presence(callbacks: SyncCallbacks, payload: Dict[str, Any]) -> None:
    callbacks.on_presence(payload.get("descriptor") or {})


_DISPATCH: Dict[MessageKind, Callable[[SyncCallbacks, Dict[str, Any]], None]] = {
    MessageKind.GAME_STATE_UPDATE: _game_state_update,
    MessageKind.PLAYER_JOIN: _player_join,
    MessageKind.PLAYER_LEAVE: _player_leave,
    MessageKind.HOST_UPDATE: _host_update,
    MessageKind.VIDEO_ROOM_UPDATE: _video_room_update,
    MessageKind.PRESENCE: _presence,
}


class InboundRouter:
    """
    Routes peer envelopes to callbacks, dropping duplicates.

    Usage:
        router = InboundRouter(callbacks)
        router.route(envelope)
    """

    def __init__(self, callbacks: SyncCallbacks, dedupe_window: int = DEFAULT_DEDUPE_WINDOW):
        self._callbacks = callbacks
        self._seen: Set[str] = set()
        self._seen_order: Deque[str] = deque()
        self._window = dedupe_window
        self.duplicates = 0

    def _remember(self, message_id: str) -> bool:
        """Record a message id; returns False if it was already seen."""
        if message_id in self._seen:
            return False
        self._seen.add(message_id)
        self._seen_order.append(message_id)
        if len(self._seen_order) > self._window:
            self._seen.discard(self._seen_order.popleft())
        return True

    def route(self, envelope: Dict[str, Any]) -> bool:
        """
        Route an envelope to its callback.

        Args:
            envelope: A decoded envelope (see protocol.build_envelope)

        Returns:
            True if a callback ran, False for duplicates and malformed input
        """
        message_id = envelope.get("message_id", "")
        if message_id and not self._remember(message_id):
            self.duplicates += 1
            logger.debug(f"Dropped duplicate message {message_id}")
            return False

        try:
            kind = MessageKind(envelope.get("kind"))
        except ValueError:
            logger.warning(f"No handler for message kind: {envelope.get('kind')}")
            return False

        try:
            _DISPATCH[kind](self._callbacks, envelope.get("payload") or {})
        except KeyError as e:
            logger.warning(f"Malformed {kind.value} payload, missing {e}")
            return False

        logger.debug(f"Routed {kind.value} from {envelope.get('origin')}")
        return True
