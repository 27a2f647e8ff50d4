"""Typed session events produced from capability callbacks."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

from ..protocol.messages import RemovalReason


class EventType(str, Enum):
    """Kinds of session events."""

    STARTED = "started"
    UPDATED = "updated"
    REMOVED = "removed"
    SUSPENDED = "suspended"
    RESUMED = "resumed"
    INVALIDATED = "invalidated"


@dataclass(frozen=True)
class DistanceSample:
    """One distance measurement in meters."""

    value: float
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SessionStarted:
    """The capability started or resumed running."""

    type: ClassVar[EventType] = EventType.STARTED


@dataclass(frozen=True)
class ObjectsUpdated:
    """A batch of measurements, already filtered to objects with a distance."""

    type: ClassVar[EventType] = EventType.UPDATED

    samples: tuple[DistanceSample, ...] = ()


@dataclass(frozen=True)
class ObjectsRemoved:
    type: ClassVar[EventType] = EventType.REMOVED

    reason: RemovalReason
    count: int = 0


@dataclass(frozen=True)
class SessionSuspended:
    type: ClassVar[EventType] = EventType.SUSPENDED


@dataclass(frozen=True)
class SessionResumed:
    type: ClassVar[EventType] = EventType.RESUMED


@dataclass(frozen=True)
class SessionInvalidated:
    """The capability ended the session; ``error`` is its reason if any."""

    type: ClassVar[EventType] = EventType.INVALIDATED

    error: BaseException | None = None


SessionEvent = Union[
    SessionStarted,
    ObjectsUpdated,
    ObjectsRemoved,
    SessionSuspended,
    SessionResumed,
    SessionInvalidated,
]
