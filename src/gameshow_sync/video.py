"""
gameshow_sync.video — Video room collaborator interface
=======================================================

The session core never looks inside video rooms: it stores a room URL
and a created flag, and hands tokens through. Providers implement
``VideoRoomProvider`` and raise VideoRoomError on failure; the session
turns every outcome into a ``VideoResult``.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from .errors import VideoRoomError

logger = logging.getLogger("gameshow_sync.video")


@dataclass(frozen=True)
class VideoResult:
    """Outcome of a video operation; never raised, always returned."""
    success: bool
    room_url: Optional[str] = None
    token: Optional[str] = None
    error: Optional[str] = None


class VideoRoomProvider(Protocol):
    """Video-conferencing backend (blocking calls)."""

    def create_room(self, room_name: str) -> str:
        """Create a room and return its URL."""
        ...

    def delete_room(self, room_name: str) -> None:
        ...

    def create_token(self, room_name: str, user_name: str, is_host: bool) -> str:
        """Return an access token for one participant."""
        ...


class LocalVideoProvider:
    """
    In-process provider that fabricates room URLs and tokens.

    Used by the demo CLI and tests where no real backend exists.
    """

    def __init__(self, base_url: str = "https://video.invalid"):
        self.base_url = base_url.rstrip("/")
        self.rooms: Dict[str, str] = {}

    def create_room(self, room_name: str) -> str:
        if not room_name:
            raise VideoRoomError("room name is required")
        url = f"{self.base_url}/{room_name}"
        self.rooms[room_name] = url
        logger.debug(f"Video room created: {url}")
        return url

    def delete_room(self, room_name: str) -> None:
        if self.rooms.pop(room_name, None) is None:
            raise VideoRoomError(f"no such room: {room_name}")

    def create_token(self, room_name: str, user_name: str, is_host: bool) -> str:
        if room_name not in self.rooms:
            raise VideoRoomError(f"no such room: {room_name}")
        prefix = "host" if is_host else "guest"
        return f"{prefix}.{secrets.token_urlsafe(16)}"
