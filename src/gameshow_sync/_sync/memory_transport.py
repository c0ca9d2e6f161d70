# Area: Sync
"""
gameshow_sync._sync.memory_transport — In-process reference transport
=====================================================================

An InMemoryHub fans published envelopes out to every other subscriber
of the same session. Each subscriber owns one FIFO queue, so messages
from one origin arrive in send order; nothing orders messages across
origins. With ``duplicate_delivery`` every message is enqueued twice
to exercise at-least-once handling.

Used by the demo CLI and the tests; a network transport subclasses
SyncChannel the same way.
"""

import asyncio
import logging
from typing import Dict, Optional

from .channel import SyncChannel

logger = logging.getLogger("gameshow_sync.sync.memory")


class InMemoryHub:
    """
    Message hub shared by the in-memory channels of one process.

    Attributes:
        duplicate_delivery: Deliver every message twice
        offline: Reject publishes (simulates a transport outage)
    """

    def __init__(self, duplicate_delivery: bool = False):
        self.duplicate_delivery = duplicate_delivery
        self.offline = False
        self.published = 0
        # game_id -> participant_id -> queue of raw envelopes
        self._subscribers: Dict[str, Dict[str, "asyncio.Queue[str]"]] = {}

    def subscribe(self, game_id: str, participant_id: str) -> "asyncio.Queue[str]":
        """Register a subscriber; an existing subscription is replaced."""
        queue: "asyncio.Queue[str]" = asyncio.Queue()
        self._subscribers.setdefault(game_id, {})[participant_id] = queue
        logger.debug(f"Subscribed {participant_id} to {game_id}")
        return queue

    def unsubscribe(self, game_id: str, participant_id: str) -> None:
        """Remove a subscriber. No-op if not subscribed."""
        members = self._subscribers.get(game_id)
        if members and members.pop(participant_id, None) is not None:
            logger.debug(f"Unsubscribed {participant_id} from {game_id}")
            if not members:
                del self._subscribers[game_id]

    def subscriber_count(self, game_id: str) -> int:
        return len(self._subscribers.get(game_id, {}))

    async def publish(self, game_id: str, origin: str, raw: str) -> int:
        """
        Fan an envelope out to every subscriber except its origin.

        Returns:
            Number of deliveries enqueued

        Raises:
            ConnectionError: If the hub is offline
        """
        if self.offline:
            raise ConnectionError("hub is offline")
        copies = 2 if self.duplicate_delivery else 1
        delivered = 0
        for participant_id, queue in list(self._subscribers.get(game_id, {}).items()):
            if participant_id == origin:
                continue
            for _ in range(copies):
                queue.put_nowait(raw)
                delivered += 1
        self.published += 1
        return delivered


class InMemorySyncChannel(SyncChannel):
    """SyncChannel backed by an InMemoryHub."""

    def __init__(self, hub: InMemoryHub, game_id: str, participant_id: str):
        super().__init__(game_id, participant_id)
        self._hub = hub
        self._queue: Optional["asyncio.Queue[str]"] = None
        self._pump_task: Optional[asyncio.Task] = None

    async def _open(self) -> None:
        self._queue = self._hub.subscribe(self.game_id, self.participant_id)
        self._pump_task = asyncio.create_task(
            self._pump(self._queue), name=f"sync-pump-{self.participant_id}"
        )

    async def _close(self) -> None:
        self._hub.unsubscribe(self.game_id, self.participant_id)
        task, self._pump_task = self._pump_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._queue = None

    async def _send(self, raw: str) -> None:
        await self._hub.publish(self.game_id, self.participant_id, raw)

    async def _pump(self, queue: "asyncio.Queue[str]") -> None:
        while True:
            raw = await queue.get()
            try:
                self._deliver(raw)
            except Exception as e:
                logger.error(f"{self.participant_id}: inbound delivery failed: {e}", exc_info=True)
            finally:
                queue.task_done()
