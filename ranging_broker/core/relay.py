"""
Event relay between the capability layer and async consumers.

Implements:
- The capability delegate interface
- A distance channel yielding one float per measured object
- A lifecycle channel for start/removal/suspension/invalidation events
- Ordered delivery on a single event loop, whatever thread calls back
"""

import asyncio
import logging
from typing import Callable, Generic, Sequence, TypeVar

from ..capability.base import NearbyObject
from ..observability.metrics import record_distance_sample, record_lifecycle_event
from ..protocol.messages import RemovalReason
from .events import (
    DistanceSample,
    ObjectsRemoved,
    ObjectsUpdated,
    SessionEvent,
    SessionInvalidated,
    SessionResumed,
    SessionStarted,
    SessionSuspended,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """
    Async iterator over one subscriber's view of a channel.

    Ends when the channel closes. Items published before the close are
    still delivered. Use it as an async context manager to unsubscribe
    when leaving an `async for` early.
    """

    def __init__(self, channel: "Channel[T]", queue: asyncio.Queue):
        self._channel = channel
        self._queue = queue
        self._done = False

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        if self._done:
            raise StopAsyncIteration

        item = await self._queue.get()
        if item is _CLOSED:
            self._done = True
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "Subscription[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def active(self) -> bool:
        """Whether the subscription is still attached to its channel."""
        return self._channel.has_subscriber(self._queue)

    def close(self) -> None:
        """Stop receiving items."""
        self._done = True
        self._channel.unsubscribe(self._queue)


class Channel(Generic[T]):
    """Broadcast channel: every subscriber gets every item."""

    def __init__(self, name: str):
        self.name = name
        self._queues: list[asyncio.Queue] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    def subscribe(self) -> Subscription[T]:
        queue: asyncio.Queue = asyncio.Queue()
        if self._closed:
            queue.put_nowait(_CLOSED)
        else:
            self._queues.append(queue)
        return Subscription(self, queue)

    def has_subscriber(self, queue: asyncio.Queue) -> bool:
        return queue in self._queues

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._queues:
            self._queues.remove(queue)

    def publish(self, item: T) -> None:
        if self._closed:
            return
        for queue in self._queues:
            queue.put_nowait(item)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for queue in self._queues:
            queue.put_nowait(_CLOSED)
        self._queues.clear()


class EventRelay:
    """
    Turns capability callbacks into async streams.

    Every callback is marshalled onto the relay's event loop with
    ``call_soon_threadsafe`` so consumers see batches in delivery order.
    A relay belongs to one ranging session: once closed it stays closed.

    Usage:
        relay = EventRelay()
        capability.set_delegate(relay)

        async with relay.distances() as distances:
            async for distance in distances:
                print(f"{distance:.2f} m")
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        on_event: Callable[[SessionEvent], None] | None = None,
    ):
        """
        Initialize relay.

        Args:
            loop: Delivery loop (defaults to the running loop)
            on_event: Hook called on the delivery loop for every event
        """
        self._loop = loop or asyncio.get_running_loop()
        self._on_event = on_event
        self._distances: Channel[float] = Channel("distances")
        self._lifecycle: Channel[SessionEvent] = Channel("lifecycle")
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def distances(self) -> Subscription[float]:
        """Subscribe to distance values in meters."""
        return self._distances.subscribe()

    def lifecycle_events(self) -> Subscription[SessionEvent]:
        """Subscribe to non-distance session events."""
        return self._lifecycle.subscribe()

    def close(self) -> None:
        """End both channels. Safe to call from any thread, more than once."""
        if self._on_loop():
            self._close_now()
        else:
            self._schedule(self._close_now)

    # =========================================================================
    # Capability delegate callbacks
    # =========================================================================

    def session_started(self) -> None:
        logger.info("The session starts or resumes running")
        self._submit(SessionStarted())

    def session_updated(self, objects: Sequence[NearbyObject]) -> None:
        samples = tuple(
            DistanceSample(value=float(obj.distance))
            for obj in objects
            if obj.distance is not None
        )
        logger.debug(
            f"The session updates nearby objects: {len(objects)} objects, "
            f"{len(samples)} with distance"
        )
        self._submit(ObjectsUpdated(samples=samples))

    def session_removed(
        self,
        objects: Sequence[NearbyObject],
        reason: RemovalReason,
    ) -> None:
        try:
            removal_reason = RemovalReason(reason)
        except ValueError:
            logger.warning(f"Unknown removal reason {reason!r}, reporting as unknown")
            removal_reason = RemovalReason.UNKNOWN

        logger.info(
            f"The session removes {len(objects)} nearby objects "
            f"(reason: {removal_reason.value})"
        )
        self._submit(ObjectsRemoved(reason=removal_reason, count=len(objects)))

    def session_suspended(self) -> None:
        logger.info("Suspended session")
        self._submit(SessionSuspended())

    def session_suspension_ended(self) -> None:
        logger.info("The end of a session's suspension")
        self._submit(SessionResumed())

    def session_invalidated(self, error: BaseException | None) -> None:
        logger.info(f"Invalidated session: {error}")
        self._submit(SessionInvalidated(error=error))

    # =========================================================================
    # Delivery
    # =========================================================================

    def _submit(self, event: SessionEvent) -> None:
        self._schedule(self._dispatch, event)

    def _schedule(self, callback: Callable, *args) -> None:
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # Loop already closed; the session is gone with it
            logger.warning(f"Dropped relay callback {callback.__name__}: event loop closed")

    def _dispatch(self, event: SessionEvent) -> None:
        if self._closed:
            logger.debug(f"Relay closed, dropping {event.type.value} event")
            return

        if isinstance(event, ObjectsUpdated):
            for sample in event.samples:
                record_distance_sample(sample.value)
                self._distances.publish(sample.value)
        else:
            record_lifecycle_event(event.type.value)
            self._lifecycle.publish(event)

        if self._on_event is not None:
            self._on_event(event)

        if isinstance(event, SessionInvalidated):
            self._close_now()

    def _close_now(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._distances.close()
        self._lifecycle.close()
        logger.debug("Event relay closed")

    def _on_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False
