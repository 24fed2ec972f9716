"""
Prometheus metrics for the aggregate kernel.

Counts commands by outcome, events by type, and times command handling.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# Command Handling Metrics
# ============================================================================

commands_handled_total = Counter(
    "aggregate_commands_handled_total",
    "Total number of commands handled by behavior engines",
    ["aggregate_type", "command_type", "outcome"],  # accepted, rejected, unhandled, invalid_fold
)

command_duration_seconds = Histogram(
    "aggregate_command_duration_seconds",
    "Duration of command handling in seconds",
    ["aggregate_type"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

# ============================================================================
# Event Metrics
# ============================================================================

events_emitted_total = Counter(
    "aggregate_events_emitted_total",
    "Total number of events emitted by behavior engines",
    ["aggregate_type", "event_type"],
)

# ============================================================================
# Helper Functions
# ============================================================================

def record_command(
    aggregate_type: str,
    command_type: str,
    outcome: str,
    event_types: list[str],
    duration_seconds: float,
) -> None:
    """Record one handled command and the events it emitted."""
    commands_handled_total.labels(
        aggregate_type=aggregate_type, command_type=command_type, outcome=outcome
    ).inc()
    command_duration_seconds.labels(aggregate_type=aggregate_type).observe(
        duration_seconds
    )
    for event_type in event_types:
        events_emitted_total.labels(
            aggregate_type=aggregate_type, event_type=event_type
        ).inc()

