# src/task_board/live/broadcaster.py

from __future__ import annotations

import asyncio
import contextlib
import itertools
import logging
import queue
import threading
from collections.abc import AsyncIterator, Callable, Iterator
from typing import Optional

from ..tasks.task_models import TaskEvent

logger = logging.getLogger(__name__)

EventCallback = Callable[[TaskEvent], None]

_CLOSED = object()
_ids = itertools.count(1)


class SubscriptionClosed(Exception):
    """Raised internally when delivering to a subscription that was closed."""


class Subscription:
    """
    Handle returned by Broadcaster.subscribe().

    Two flavours:
    - queue-backed (default): events are buffered up to max_pending and read
      with get() / iteration / async iteration; a full buffer counts as a
      delivery failure and detaches the subscriber
    - callback-backed: the callback runs on the publishing thread

    close() detaches the subscription; it can be called from any thread,
    including from inside a callback.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        *,
        callback: Optional[EventCallback] = None,
        max_pending: int = 256,
    ) -> None:
        self.id = next(_ids)
        self._broadcaster = broadcaster
        self._callback = callback
        self._queue: Optional["queue.Queue[object]"] = None
        if callback is None:
            self._queue = queue.Queue(maxsize=max(1, int(max_pending)))
        self._closed = False

    def __repr__(self) -> str:
        kind = "callback" if self._callback is not None else "queue"
        return f"<Subscription id={self.id} {kind} closed={self._closed}>"

    @property
    def closed(self) -> bool:
        return self._closed

    # ---- producer side (called by Broadcaster) ----

    def _deliver(self, event: TaskEvent) -> None:
        if self._closed:
            raise SubscriptionClosed(f"subscription {self.id} is closed")
        if self._callback is not None:
            self._callback(event)
        elif self._queue is not None:
            self._queue.put_nowait(event)

    def _mark_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._queue is not None:
            # Wake a blocked reader; if the buffer is full the reader drains it anyway.
            with contextlib.suppress(queue.Full):
                self._queue.put_nowait(_CLOSED)

    # ---- consumer side ----

    def close(self) -> None:
        self._broadcaster.unsubscribe(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def get(self, timeout: float | None = None) -> TaskEvent | None:
        """
        Next buffered event, or None on timeout / once closed and drained.

        Callback subscriptions have no buffer and always return None.
        """
        if self._queue is None:
            return None
        if self._closed and self._queue.empty():
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            return None
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[TaskEvent]:
        while True:
            if self._queue is None or (self._closed and self._queue.empty()):
                return
            event = self.get(timeout=0.5)
            if event is not None:
                yield event

    async def next_event(self, timeout: float | None = None) -> TaskEvent | None:
        """Async variant of get() for asyncio transports (SSE, websockets)."""
        return await asyncio.to_thread(self.get, timeout)

    async def __aiter__(self) -> AsyncIterator[TaskEvent]:
        while True:
            if self._queue is None or (self._closed and self._queue.empty()):
                return
            event = await self.next_event(timeout=0.5)
            if event is not None:
                yield event


class Broadcaster:
    """
    Fan out TaskEvents to live subscribers.

    - every attached subscriber gets every event once, in publish order
    - no replay: late subscribers only see events published after subscribe()
    - subscribe/unsubscribe are safe at any time, including mid-publish
    - a failing subscriber is detached; publish() never raises
    """

    def __init__(self, *, max_pending: int = 256) -> None:
        self._max_pending = max(1, int(max_pending))
        self._lock = threading.Lock()
        # Serializes publishes so all subscribers observe the same order.
        # Re-entrant so a callback may publish without deadlocking.
        self._publish_lock = threading.RLock()
        self._subscribers: dict[int, Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, callback: Optional[EventCallback] = None) -> Subscription:
        sub = Subscription(self, callback=callback, max_pending=self._max_pending)
        with self._lock:
            self._subscribers[sub.id] = sub
        logger.debug("Subscriber %s attached (total=%d)", sub.id, self.subscriber_count)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            removed = self._subscribers.pop(sub.id, None)
        sub._mark_closed()
        if removed is not None:
            logger.debug("Subscriber %s detached (total=%d)", sub.id, self.subscriber_count)

    def publish(self, event: TaskEvent) -> int:
        """Deliver event to every attached subscriber; returns the delivery count."""
        delivered = 0
        with self._publish_lock:
            with self._lock:
                targets = list(self._subscribers.values())

            for sub in targets:
                # Detached while this publish was in progress.
                if sub.closed:
                    continue
                try:
                    sub._deliver(event)
                    delivered += 1
                except SubscriptionClosed:
                    # Detached between the check above and delivery.
                    continue
                except Exception as e:
                    logger.warning(
                        "Delivery to subscriber %s failed (%s); detaching",
                        sub.id,
                        repr(e),
                    )
                    self.unsubscribe(sub)

        logger.debug(
            "Published %s %s/%s to %d subscriber(s)",
            event.kind.value,
            event.list_id,
            event.task_id,
            delivered,
        )
        return delivered

    def close(self) -> None:
        """Detach all subscribers (ends their iteration)."""
        with self._lock:
            subs = list(self._subscribers.values())
        for sub in subs:
            self.unsubscribe(sub)
