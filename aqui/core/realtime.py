from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

from aqui.models.live_session import VendorLiveSession
from aqui.schemas.live_session import LiveSessionOut


EVENT_SESSION_STARTED = "live_session.started"
EVENT_SESSION_ENDED = "live_session.ended"


@dataclass(slots=True)
class RealtimeEvent:
    """Payload broadcast to websocket subscribers."""

    type: str
    payload: dict[str, Any]

    def as_json(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @property
    def vendor_id(self) -> str | None:
        return self.payload.get("vendor_id")


class LiveEventBroker:
    """Fans live session changes out to map and vendor-page subscribers.

    A subscriber either follows every vendor (the map) or a single vendor
    (a vendor profile page). Queues are bounded; a slow subscriber loses its
    oldest events rather than blocking publishers.
    """

    def __init__(self, queue_size: int = 128) -> None:
        self._subscribers: dict[asyncio.Queue[dict[str, Any]], str | None] = {}
        self._lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue_size = max(0, queue_size)

    def configure(self, *, queue_size: int | None = None) -> None:
        if queue_size is not None:
            self._queue_size = max(0, queue_size)

    def set_loop(self, loop: asyncio.AbstractEventLoop | None) -> None:
        self._loop = loop

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self, vendor_id: uuid.UUID | None = None) -> asyncio.Queue[dict[str, Any]]:
        maxsize = self._queue_size
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize) if maxsize > 0 else asyncio.Queue()
        async with self._lock:
            self._subscribers[queue] = str(vendor_id) if vendor_id else None
        return queue

    async def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        async with self._lock:
            self._subscribers.pop(queue, None)

    @staticmethod
    def _offer(queue: asyncio.Queue[dict[str, Any]], message: dict[str, Any]) -> None:
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            queue.get_nowait()
            queue.put_nowait(message)

    async def publish(self, event: RealtimeEvent) -> int:
        """Deliver ``event`` to matching subscribers; returns how many got it."""
        async with self._lock:
            targets: Iterable[tuple[asyncio.Queue[dict[str, Any]], str | None]] = tuple(self._subscribers.items())
        message = event.as_json()
        delivered = 0
        for queue, followed_vendor in targets:
            if followed_vendor is not None and followed_vendor != event.vendor_id:
                continue
            self._offer(queue, message)
            delivered += 1
        return delivered

    def publish_from_thread(self, event: RealtimeEvent) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        asyncio.run_coroutine_threadsafe(self.publish(event), loop)


live_event_broker = LiveEventBroker()


def session_event(event_type: str, session: VendorLiveSession) -> RealtimeEvent:
    return RealtimeEvent(event_type, LiveSessionOut.model_validate(session).model_dump(mode="json"))


def notify_session_started(session: VendorLiveSession) -> None:
    live_event_broker.publish_from_thread(session_event(EVENT_SESSION_STARTED, session))


def notify_session_ended(session: VendorLiveSession) -> None:
    live_event_broker.publish_from_thread(session_event(EVENT_SESSION_ENDED, session))


def notify_sessions_expired(sessions: Iterable[VendorLiveSession]) -> None:
    for session in sessions:
        notify_session_ended(session)
