"""Core module for session coordination and event relay."""

from .coordinator import SessionCoordinator
from .events import (
    DistanceSample,
    EventType,
    ObjectsRemoved,
    ObjectsUpdated,
    SessionEvent,
    SessionInvalidated,
    SessionResumed,
    SessionStarted,
    SessionSuspended,
)
from .relay import Channel, EventRelay, Subscription

__all__ = [
    "SessionCoordinator",
    "EventRelay",
    "Channel",
    "Subscription",
    "DistanceSample",
    "EventType",
    "SessionEvent",
    "SessionStarted",
    "ObjectsUpdated",
    "ObjectsRemoved",
    "SessionSuspended",
    "SessionResumed",
    "SessionInvalidated",
]
