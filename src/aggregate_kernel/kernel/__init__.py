"""
Kernel - Core event sourcing building blocks

The kernel provides the value types every aggregate builds upon: ids,
commands, events with their metadata and tags, the error hierarchy, and
the ambient logging, metrics and settings layers.
"""

from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.errors import (
    BehaviorError,
    CommandRejected,
    IncompleteBehaviorError,
    InvalidFoldStateError,
    KernelError,
    RejectionReason,
    UnhandledCommandError,
)
from aggregate_kernel.kernel.events import Event, EventDraft, Metadata
from aggregate_kernel.kernel.ids import AggregateId, IdFactory, generate_id
from aggregate_kernel.kernel.tags import Tag, aggregate_tag, dependent_view_tag
from aggregate_kernel.kernel.time import RealTimeProvider, TestTimeProvider, TimeProvider

__all__ = [
    # IDs
    "AggregateId",
    "IdFactory",
    "generate_id",
    # Time
    "TimeProvider",
    "RealTimeProvider",
    "TestTimeProvider",
    # State, Commands & Events
    "Aggregate",
    "Command",
    "Event",
    "EventDraft",
    "Metadata",
    # Tags
    "Tag",
    "aggregate_tag",
    "dependent_view_tag",
    # Errors
    "KernelError",
    "BehaviorError",
    "CommandRejected",
    "UnhandledCommandError",
    "InvalidFoldStateError",
    "IncompleteBehaviorError",
    "RejectionReason",
]
