"""
Aggregate Kernel - computational core of event-sourced aggregates

Commands are checked, turned into events, and events are folded into state.
Persistence, transport and read models are left to the caller.

Fun fact: Event sourcing was inspired by accountants - they never erase ledger
entries, they add correcting entries!
"""

from aggregate_kernel.behavior import Behavior, PhaseRules, Phase

__version__ = "0.1.0"
__all__ = ["Behavior", "PhaseRules", "Phase", "__version__"]
