"""
Session coordination for a single-peer ranging session.

Implements:
- Local token publication and peer token resolution through the directory
- Start/invalidate of the capability once the peer token is known
- State tracking driven by capability lifecycle events
- Epoch checks so late directory completions cannot revive a dead session
"""

import logging
import threading
from typing import TYPE_CHECKING

from ..observability.metrics import record_stale_completion, record_state_transition
from ..protocol.errors import RangingError
from ..protocol.messages import ErrorCode, SessionState
from ..protocol.tokens import DiscoveryToken
from .events import (
    SessionEvent,
    SessionInvalidated,
    SessionResumed,
    SessionStarted,
    SessionSuspended,
)
from .relay import EventRelay, Subscription

if TYPE_CHECKING:
    from ..capability.base import RangingCapability
    from ..directory.client import TokenDirectoryClient

logger = logging.getLogger(__name__)


class SessionCoordinator:
    """
    Drives one ranging session from token exchange to invalidation.

    Every transition is caller driven; nothing is retried automatically.
    Directory errors propagate to the caller and leave the state where the
    failed operation found it (or in AWAITING_PEER_TOKEN for a failed
    resolve). On a device without the capability all operations become
    logged no-ops.

    Usage:
        async with SessionCoordinator(capability, directory) as coordinator:
            my_id = await coordinator.publish_local_token()
            # ... exchange ids out of band ...
            await coordinator.resolve_peer(peer_id)
            coordinator.start()

            async for distance in coordinator.distances():
                print(f"{distance:.2f} m")
    """

    def __init__(
        self,
        capability: "RangingCapability",
        directory: "TokenDirectoryClient",
    ):
        self._capability = capability
        self._directory = directory

        # Guards every field below; never held across an await
        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._epoch = 0
        self._prepared = False
        self._unsupported = False
        self._local_token_id: int | None = None
        self._peer_token: DiscoveryToken | None = None
        self._relay: EventRelay | None = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def unsupported(self) -> bool:
        """True when prepare() found no ranging capability on this device."""
        return self._unsupported

    @property
    def local_token_id(self) -> int | None:
        """Id the directory assigned to our token, shared with the peer."""
        return self._local_token_id

    @property
    def peer_token(self) -> DiscoveryToken | None:
        return self._peer_token

    @property
    def relay(self) -> EventRelay | None:
        return self._relay

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def __aenter__(self) -> "SessionCoordinator":
        self.prepare()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.invalidate()
        await self._directory.close()

    def prepare(self) -> None:
        """
        Acquire the capability and reset the session to IDLE.

        Must be called from the event loop that will consume events.
        Calling it again after invalidate() starts a fresh session with a
        new relay.
        """
        if not self._capability.is_supported():
            # Subscribers get streams that end immediately
            relay = EventRelay()
            relay.close()
            with self._lock:
                old_relay = self._relay
                self._epoch += 1
                self._unsupported = True
                self._prepared = True
                self._local_token_id = None
                self._peer_token = None
                self._relay = relay
                self._set_state(SessionState.IDLE)

            if old_relay is not None:
                old_relay.close()
            logger.warning(
                f"Ranging capability unavailable ({ErrorCode.UNSUPPORTED_PLATFORM.value}), "
                "session operations are disabled"
            )
            return

        with self._lock:
            old_relay = self._relay
            self._epoch += 1
            self._unsupported = False
            self._prepared = True
            self._local_token_id = None
            self._peer_token = None
            self._relay = EventRelay(on_event=self._handle_event)
            self._set_state(SessionState.IDLE)
            relay = self._relay

        if old_relay is not None:
            old_relay.close()
        self._capability.set_delegate(relay)
        logger.info("Session prepared")

    async def publish_local_token(self) -> int | None:
        """
        Publish this device's token and record the assigned id.

        Returns:
            The assigned id, or None if there was nothing to publish or the
            session was invalidated while the request was in flight

        Raises:
            RangingError: Directory failure; state is left unchanged
        """
        if not self._is_active("publish_local_token"):
            return None

        token = self._capability.local_token()
        if token is None:
            logger.warning("Capability has no local token yet, nothing to publish")
            return None

        with self._lock:
            epoch = self._epoch
        try:
            token_id = await self._directory.publish(token)
        except RangingError:
            if self._is_stale(epoch, "publish"):
                return None
            raise

        with self._lock:
            if epoch != self._epoch:
                self._discard_stale("publish")
                return None

            self._local_token_id = token_id
            if self._state == SessionState.IDLE:
                self._set_state(SessionState.LOCAL_TOKEN_PUBLISHED)

        return token_id

    async def resolve_peer(self, token_id: int) -> DiscoveryToken | None:
        """
        Fetch the peer token published under ``token_id``.

        Returns:
            The decoded peer token, or None if the session was invalidated
            before the response arrived

        Raises:
            RangingError: Directory failure; state stays AWAITING_PEER_TOKEN
        """
        if not self._is_active("resolve_peer"):
            return None

        with self._lock:
            if self._state in (SessionState.RUNNING, SessionState.SUSPENDED):
                logger.warning(
                    f"Cannot resolve peer {token_id} while session is {self._state.value}"
                )
                return None
            epoch = self._epoch
            self._peer_token = None
            self._set_state(SessionState.AWAITING_PEER_TOKEN)

        try:
            peer_token = await self._directory.fetch(token_id)
        except RangingError:
            if self._is_stale(epoch, "fetch"):
                return None
            raise

        with self._lock:
            if epoch != self._epoch:
                self._discard_stale("fetch")
                return None

            self._peer_token = peer_token
            self._set_state(SessionState.PEER_TOKEN_RESOLVED)

        logger.info(f"Resolved peer token for id {token_id}")
        return peer_token

    def start(self) -> None:
        """
        Start ranging against the resolved peer.

        Silently does nothing without a peer token or capability.
        """
        if not self._is_active("start"):
            return

        with self._lock:
            if self._peer_token is None:
                logger.debug("No peer token yet, start ignored")
                return
            if self._state != SessionState.PEER_TOKEN_RESOLVED:
                logger.debug(f"Session is {self._state.value}, start ignored")
                return

            self._capability.start(self._peer_token)
            self._set_state(SessionState.RUNNING)

        logger.info("Ranging session started")

    def invalidate(self) -> None:
        """
        End the session. Idempotent and safe in any state.

        In-flight directory calls complete into a discarded epoch.
        """
        with self._lock:
            if self._state == SessionState.INVALIDATED:
                return

            self._epoch += 1
            self._local_token_id = None
            self._peer_token = None
            self._set_state(SessionState.INVALIDATED)
            relay = self._relay
            call_capability = self._prepared and not self._unsupported

        if call_capability:
            self._capability.invalidate()
        if relay is not None:
            relay.close()
        logger.info("Session invalidated")

    # =========================================================================
    # Event streams
    # =========================================================================

    def distances(self) -> Subscription[float]:
        """
        Subscribe to distance samples of the current session.

        Raises:
            RuntimeError: If prepare() has not created a relay
        """
        return self._require_relay().distances()

    def lifecycle_events(self) -> Subscription[SessionEvent]:
        """Subscribe to lifecycle events of the current session."""
        return self._require_relay().lifecycle_events()

    # =========================================================================
    # Internals
    # =========================================================================

    def _handle_event(self, event: SessionEvent) -> None:
        """Apply capability lifecycle events to the session state."""
        with self._lock:
            if self._state == SessionState.INVALIDATED:
                return

            if isinstance(event, SessionSuspended):
                if self._state == SessionState.RUNNING:
                    self._set_state(SessionState.SUSPENDED)
            elif isinstance(event, (SessionResumed, SessionStarted)):
                if self._state in (
                    SessionState.SUSPENDED,
                    SessionState.PEER_TOKEN_RESOLVED,
                ):
                    self._set_state(SessionState.RUNNING)
            elif isinstance(event, SessionInvalidated):
                self._epoch += 1
                self._local_token_id = None
                self._peer_token = None
                self._set_state(SessionState.INVALIDATED)

    def _is_active(self, operation: str) -> bool:
        if self._unsupported:
            logger.debug(f"{operation} ignored: ranging capability unavailable")
            return False
        if not self._prepared:
            logger.debug(f"{operation} ignored: session not prepared")
            return False
        if self._state == SessionState.INVALIDATED:
            logger.debug(f"{operation} ignored: session invalidated")
            return False
        return True

    def _require_relay(self) -> EventRelay:
        if self._relay is None:
            raise RuntimeError("Session not prepared. Call prepare() first.")
        return self._relay

    def _set_state(self, state: SessionState) -> None:
        if state == self._state:
            return
        logger.debug(f"Session state {self._state.value} -> {state.value}")
        self._state = state
        record_state_transition(state.value)

    def _is_stale(self, epoch: int, operation: str) -> bool:
        """Discard a failed completion whose session has since been reset."""
        with self._lock:
            if epoch == self._epoch:
                return False
            self._discard_stale(operation)
            return True

    def _discard_stale(self, operation: str) -> None:
        record_stale_completion(operation)
        logger.info(f"Discarding {operation} completion from an invalidated session")
