"""
Behavior - the reusable engine that turns commands into events and state

Build a ``Behavior`` from two ``PhaseRules`` tables (constructing and
updating) and call ``handle(prior_state, command)``.
"""

from aggregate_kernel.behavior.emission import EmissionResolver
from aggregate_kernel.behavior.engine import (
    Accepted,
    Behavior,
    CommandFailure,
    CommandResult,
    InvalidFoldState,
    Rejected,
    UnhandledCommand,
)
from aggregate_kernel.behavior.folder import Folder
from aggregate_kernel.behavior.rejection import RejectionEvaluator
from aggregate_kernel.behavior.rules import BehaviorRules, Phase, PhaseRules, phase_of
from aggregate_kernel.behavior.stamper import MetadataStamper

__all__ = [
    # Engine & results
    "Behavior",
    "CommandResult",
    "Accepted",
    "CommandFailure",
    "Rejected",
    "UnhandledCommand",
    "InvalidFoldState",
    # Rules
    "Phase",
    "PhaseRules",
    "BehaviorRules",
    "phase_of",
    # Components
    "RejectionEvaluator",
    "EmissionResolver",
    "Folder",
    "MetadataStamper",
]
