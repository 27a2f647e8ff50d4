"""
Interfaces for the platform ranging capability.

The capability performs the actual distance measurement. This package only
drives it: it hands over the peer token, starts and invalidates the session,
and receives callbacks through a delegate.
"""

from dataclasses import dataclass
from typing import Protocol, Sequence

from ..protocol.messages import RemovalReason
from ..protocol.tokens import DiscoveryToken


@dataclass(frozen=True)
class NearbyObject:
    """A peer as reported by the capability layer."""

    distance: float | None = None  # meters, None when not measurable
    token: DiscoveryToken | None = None


class CapabilityDelegate(Protocol):
    """
    Callbacks the capability invokes, possibly from its own thread.
    """

    def session_started(self) -> None: ...

    def session_updated(self, objects: Sequence[NearbyObject]) -> None: ...

    def session_removed(
        self,
        objects: Sequence[NearbyObject],
        reason: RemovalReason,
    ) -> None: ...

    def session_suspended(self) -> None: ...

    def session_suspension_ended(self) -> None: ...

    def session_invalidated(self, error: BaseException | None) -> None: ...


class RangingCapability(Protocol):
    """Handle on the opaque ranging engine."""

    def is_supported(self) -> bool:
        """Whether the device can measure distance at all."""
        ...

    def local_token(self) -> DiscoveryToken | None:
        """This device's discovery token, None until the engine has one."""
        ...

    def set_delegate(self, delegate: CapabilityDelegate | None) -> None: ...

    def start(self, peer_token: DiscoveryToken) -> None: ...

    def invalidate(self) -> None: ...
