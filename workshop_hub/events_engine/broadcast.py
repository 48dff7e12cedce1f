"""In-process fan-out of workshop updates to live stream subscribers."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from workshop_hub.events_engine.publisher import EventPublisher
from workshop_hub.events_engine.schemas import EventEnvelope

LOGGER = logging.getLogger("workshop_hub.events_engine.broadcast")


@dataclass(eq=False)
class Subscription:
    """A single listener bound to the event loop that created it."""

    workshop_id: int
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(repr=False)

    def offer(self, message: Dict[str, Any]) -> None:
        # Runs on the subscriber's loop. Slow readers lose the oldest update.
        if self.queue.full():
            self.queue.get_nowait()
        self.queue.put_nowait(message)

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()


class BroadcastHub:
    """Thread-safe registry of per-workshop subscriptions."""

    def __init__(self, *, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscriptions: Dict[int, Set[Subscription]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, workshop_id: int) -> Subscription:
        """Register a listener; must be called from a running event loop."""

        subscription = Subscription(
            workshop_id=workshop_id,
            loop=asyncio.get_running_loop(),
            queue=asyncio.Queue(maxsize=self._queue_size),
        )
        with self._lock:
            self._subscriptions[workshop_id].add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._subscriptions.get(subscription.workshop_id)
            if listeners is None:
                return
            listeners.discard(subscription)
            if not listeners:
                del self._subscriptions[subscription.workshop_id]

    def subscriber_count(self, workshop_id: int) -> int:
        with self._lock:
            return len(self._subscriptions.get(workshop_id, ()))

    def broadcast(self, workshop_id: int, message: Dict[str, Any]) -> int:
        """Queue ``message`` for every subscriber of ``workshop_id``; callable from any thread."""

        with self._lock:
            listeners = list(self._subscriptions.get(workshop_id, ()))

        delivered = 0
        for subscription in listeners:
            try:
                subscription.loop.call_soon_threadsafe(subscription.offer, message)
            except RuntimeError:
                # Loop already closed; the stream went away without unsubscribing.
                self.unsubscribe(subscription)
                continue
            delivered += 1
        return delivered


class BroadcastEventPublisher(EventPublisher):
    """Pushes workshop events to stream subscribers of the same workshop."""

    def __init__(self, hub: BroadcastHub) -> None:
        self._hub = hub

    def publish(self, envelope: EventEnvelope) -> None:
        if envelope.workshop_id is None:
            return
        message = {
            "event_id": str(envelope.event_id),
            "event_type": envelope.event_type,
            "workshop_id": envelope.workshop_id,
            "occurred_at": envelope.occurred_at.isoformat(),
            "update": envelope.payload,
        }
        delivered = self._hub.broadcast(envelope.workshop_id, message)
        LOGGER.debug(
            "workshop_update_broadcast",
            extra={"workshop_id": envelope.workshop_id, "event_type": envelope.event_type, "subscribers": delivered},
        )


_hub: Optional[BroadcastHub] = None


def get_broadcast_hub() -> BroadcastHub:
    """Return the process-wide broadcast hub."""

    global _hub
    if _hub is None:
        from workshop_hub.core.config import get_settings

        _hub = BroadcastHub(queue_size=get_settings().broadcast_queue_size)
    return _hub


def set_broadcast_hub(hub: Optional[BroadcastHub]) -> None:
    """Override the cached hub (primarily for tests)."""

    global _hub
    _hub = hub
