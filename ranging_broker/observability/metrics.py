"""
Prometheus metrics for the ranging broker.

Exports:
- Directory request counter and latency histogram
- Distance samples counter and last-distance gauge
- Lifecycle event counter
- Session state transition counter
- Stale completion counter
"""

from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# Directory metrics
# =============================================================================

ranging_directory_requests_total = Counter(
    "ranging_directory_requests_total",
    "Total token directory requests",
    ["operation", "status"],  # publish/fetch, success/<error code>
)

ranging_directory_latency = Histogram(
    "ranging_directory_latency_seconds",
    "Token directory request latency in seconds",
    ["operation"],
    buckets=(0.05, 0.1, 0.2, 0.3, 0.5, 0.75, 1.0, 2.0, 5.0, 10.0),
)

# =============================================================================
# Session metrics
# =============================================================================

ranging_distance_samples_total = Counter(
    "ranging_distance_samples_total",
    "Distance samples emitted to subscribers",
)

ranging_last_distance = Gauge(
    "ranging_last_distance_meters",
    "Most recent distance sample in meters",
)

ranging_lifecycle_events_total = Counter(
    "ranging_lifecycle_events_total",
    "Lifecycle events reported by the capability layer",
    ["event"],
)

ranging_state_transitions_total = Counter(
    "ranging_state_transitions_total",
    "Session state transitions",
    ["state"],
)

ranging_stale_completions_total = Counter(
    "ranging_stale_completions_total",
    "Directory completions discarded because the session epoch changed",
    ["operation"],
)


# =============================================================================
# Helper functions
# =============================================================================


def record_directory_request(
    operation: str,
    status: str,
    latency_seconds: float,
) -> None:
    """
    Record metrics for a completed directory request.

    Args:
        operation: "publish" or "fetch"
        status: "success" or the lowercased error code
        latency_seconds: Wall time of the request
    """
    ranging_directory_requests_total.labels(
        operation=operation,
        status=status,
    ).inc()
    ranging_directory_latency.labels(operation=operation).observe(latency_seconds)


def record_distance_sample(value: float) -> None:
    """Record an emitted distance sample."""
    ranging_distance_samples_total.inc()
    ranging_last_distance.set(value)


def record_lifecycle_event(event: str) -> None:
    """Record a lifecycle event."""
    ranging_lifecycle_events_total.labels(event=event).inc()


def record_state_transition(state: str) -> None:
    """Record a session state transition."""
    ranging_state_transitions_total.labels(state=state).inc()


def record_stale_completion(operation: str) -> None:
    """Record a completion dropped after invalidation."""
    ranging_stale_completions_total.labels(operation=operation).inc()
