# Area: Sync
"""
gameshow_sync._sync.presence — Participant presence tracking
============================================================

Tracks which clients are alive, keyed by participant id. Every
presence announcement renews an entry; an entry not renewed within
the liveness window is downgraded to disconnected by ``sweep()``.
A downgrade is a status change, never an error.

The "host connected" signal is derived on demand from the registry
and the video collaborator's participant list; it is never stored.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .._core.enums import HOST_KINDS, ParticipantKind, PlayerId
from .._shared.config import PRESENCE_TIMEOUT_SECONDS
from ..types import PresenceDescriptor, VideoParticipant

logger = logging.getLogger("gameshow_sync.sync.presence")


@dataclass
class PresenceEntry:
    """Registry entry for one participant."""
    participant_id: str
    kind: ParticipantKind
    name: str
    connected: bool
    last_seen: float                 # time.monotonic()
    player_id: Optional[PlayerId] = None

    @property
    def is_host(self) -> bool:
        return self.kind in HOST_KINDS


def _player_for(kind: ParticipantKind, raw: Any) -> Optional[PlayerId]:
    if raw:
        return PlayerId(raw)
    if kind == ParticipantKind.PLAYER_A:
        return PlayerId.PLAYER_A
    if kind == ParticipantKind.PLAYER_B:
        return PlayerId.PLAYER_B
    return None


class PresenceTracker:
    """
    Registry of participant liveness.

    Args:
        timeout_seconds: Liveness window before an entry is downgraded
        on_change: Called with the entry whenever its connected flag flips
    """

    def __init__(
        self,
        timeout_seconds: float = PRESENCE_TIMEOUT_SECONDS,
        on_change: Optional[Callable[[PresenceEntry], None]] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._on_change = on_change
        self._entries: Dict[str, PresenceEntry] = {}

    def track(self, descriptor: PresenceDescriptor) -> PresenceEntry:
        """
        Create or renew an entry from a presence descriptor.

        Args:
            descriptor: PresenceDescriptor dict; ``connected`` defaults to True

        Returns:
            The updated entry

        Raises:
            ValueError: If the descriptor has no id or an unknown kind
        """
        participant_id = descriptor.get("participant_id")
        if not participant_id:
            raise ValueError("presence descriptor has no participant_id")
        kind = ParticipantKind(descriptor.get("kind"))
        connected = bool(descriptor.get("connected", True))
        now = time.monotonic()

        entry = self._entries.get(participant_id)
        if entry is None:
            entry = PresenceEntry(
                participant_id=participant_id,
                kind=kind,
                name=str(descriptor.get("name") or ""),
                connected=connected,
                last_seen=now,
                player_id=_player_for(kind, descriptor.get("player_id")),
            )
            self._entries[participant_id] = entry
            logger.info(
                "Presence: %s (%s) %s",
                participant_id, kind.value, "joined" if connected else "announced offline",
            )
            if connected:
                self._changed(entry)
            return entry

        was_connected = entry.connected
        entry.kind = kind
        entry.name = str(descriptor.get("name") or entry.name)
        entry.connected = connected
        entry.last_seen = now
        entry.player_id = _player_for(kind, descriptor.get("player_id")) or entry.player_id
        if was_connected != connected:
            logger.info(
                "Presence: %s %s", participant_id, "reconnected" if connected else "left",
            )
            self._changed(entry)
        return entry

    def sweep(self) -> List[PresenceEntry]:
        """
        Downgrade entries not renewed within the liveness window.

        Returns:
            Entries that changed from connected to disconnected
        """
        now = time.monotonic()
        downgraded: List[PresenceEntry] = []
        for entry in self._entries.values():
            if entry.connected and now - entry.last_seen > self.timeout_seconds:
                entry.connected = False
                downgraded.append(entry)

        for entry in downgraded:
            logger.info(
                "Presence timeout: %s (%s) silent for %.1fs",
                entry.participant_id, entry.kind.value, now - entry.last_seen,
            )
            self._changed(entry)
        return downgraded

    def get(self, participant_id: str) -> Optional[PresenceEntry]:
        return self._entries.get(participant_id)

    def entries(self) -> List[PresenceEntry]:
        return list(self._entries.values())

    def connected_entries(self) -> List[PresenceEntry]:
        return [e for e in self._entries.values() if e.connected]

    def host_connected(self, video_participants: Iterable[VideoParticipant]) -> bool:
        """
        Derived host signal.

        True while at least one host-kind entry is connected here and is
        also reported connected by the video collaborator (matched by
        participant id, or by display name as ``user_name``).
        """
        video_ids = set()
        video_names = set()
        for participant in video_participants:
            if not participant.get("connected", True):
                continue
            if participant.get("participant_id"):
                video_ids.add(participant["participant_id"])
            if participant.get("user_name"):
                video_names.add(participant["user_name"])

        return any(
            entry.is_host and entry.connected
            and (entry.participant_id in video_ids or (entry.name and entry.name in video_names))
            for entry in self._entries.values()
        )

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Presence registry cleared")

    def _changed(self, entry: PresenceEntry) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(entry)
        except Exception as e:
            logger.error(f"Presence listener failed for {entry.participant_id}: {e}", exc_info=True)
