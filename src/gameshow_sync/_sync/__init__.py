# Area: Sync
"""
Multi-client synchronization.

This package contains:
- Abstract sync channel and inbound routing
- In-memory reference transport
- Reconciliation of local and remote deltas
- Presence tracking
- Shared countdown coordination
"""

from .channel import SyncChannel
from .inbound_router import InboundRouter, SyncCallbacks
from .memory_transport import InMemoryHub, InMemorySyncChannel
from .presence import PresenceEntry, PresenceTracker
from .reconciler import OutboundItem, Reconciler
from .timer import TimerCoordinator

__all__ = [
    "SyncChannel",
    "InboundRouter",
    "SyncCallbacks",
    "InMemoryHub",
    "InMemorySyncChannel",
    "PresenceEntry",
    "PresenceTracker",
    "OutboundItem",
    "Reconciler",
    "TimerCoordinator",
]
