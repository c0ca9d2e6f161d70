# Area: Shared
"""
gameshow_sync._shared.protocol — Sync message envelopes
=======================================================

Helpers for building and parsing the envelopes peers exchange.
The transport decides how envelopes travel; this module only fixes
their shape:

    {
        "protocol": "gameshow-sync.v1",
        "message_id": "<uuid4>",
        "kind": "GAME_STATE_UPDATE",
        "origin": "<participant id>",
        "game_id": "<session id>",
        "timestamp": "<ISO 8601>",
        "payload": {...}
    }
"""

import json
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

SYNC_PROTOCOL = "gameshow-sync.v1"


class MessageKind(Enum):
    """Kinds of messages carried by a sync channel."""
    GAME_STATE_UPDATE = "GAME_STATE_UPDATE"
    PLAYER_JOIN = "PLAYER_JOIN"
    PLAYER_LEAVE = "PLAYER_LEAVE"
    HOST_UPDATE = "HOST_UPDATE"
    VIDEO_ROOM_UPDATE = "VIDEO_ROOM_UPDATE"
    PRESENCE = "PRESENCE"


def generate_message_id() -> str:
    """Generate unique message ID."""
    return str(uuid.uuid4())


def generate_event_id() -> str:
    """Generate unique score event ID."""
    return uuid.uuid4().hex


def current_timestamp() -> str:
    """Generate ISO 8601 timestamp with timezone."""
    return datetime.now(timezone.utc).isoformat()


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds (score event timestamps)."""
    return int(time.time() * 1000)


def build_envelope(
    kind: MessageKind,
    payload: Dict[str, Any],
    origin: str,
    game_id: str,
    message_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a sync envelope.

    Args:
        kind: Message kind
        payload: Kind-specific payload (JSON-safe)
        origin: Participant id of the sender
        game_id: Session the message belongs to
        message_id: Message ID (auto-generated if not provided)

    Returns:
        Complete envelope dict
    """
    if message_id is None:
        message_id = generate_message_id()

    return {
        "protocol": SYNC_PROTOCOL,
        "message_id": message_id,
        "kind": kind.value,
        "origin": origin,
        "game_id": game_id,
        "timestamp": current_timestamp(),
        "payload": payload,
    }


def encode_envelope(envelope: Dict[str, Any]) -> str:
    return json.dumps(envelope, ensure_ascii=False, separators=(",", ":"))


def decode_envelope(raw: str) -> Optional[Dict[str, Any]]:
    """Parse a raw envelope; returns None if it is not a valid envelope."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict) or data.get("protocol") != SYNC_PROTOCOL:
        return None
    try:
        MessageKind(data.get("kind"))
    except ValueError:
        return None
    if not isinstance(data.get("payload"), dict):
        return None
    return data
