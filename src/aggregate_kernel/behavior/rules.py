"""
Behavior Rules - per-phase rule tables of an aggregate

An aggregate's behavior is two plain tables of rules, one per phase:

- CONSTRUCTING: no prior state. Rules see only the command (or event).
- UPDATING: prior state present. Rules see (state, command) or (state, event).

Each table holds three kinds of rule:

- rejection rules: (command type, guard, reason) - opt-in refusals
- emission rules: (command type, guard, handler) - command to event draft(s)
- fold rules: event type -> function producing the next state

Rules match by isinstance, so a rule registered for a base command class
covers its whole sub-hierarchy. Among several matching rules the first one
registered wins.
"""

from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel

from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.events import Event, EventDraft


class Phase(str, Enum):
    """Lifecycle phase an aggregate is in when a command arrives"""

    CONSTRUCTING = "constructing"  # No state yet
    UPDATING = "updating"  # State present


def phase_of(state: Aggregate | None) -> Phase:
    """Phase selected by the presence of prior state"""
    return Phase.CONSTRUCTING if state is None else Phase.UPDATING


class RejectionRule(BaseModel):
    """Refuse commands of ``command_type`` for which ``when`` holds"""

    command_type: type[Command]
    when: Callable[..., bool]
    reason: str | Callable[..., str]

    model_config = {"frozen": True}


class EmissionRule(BaseModel):
    """Turn commands of ``command_type`` into one draft, or several if ``many``"""

    command_type: type[Command]
    handler: Callable[..., Any]
    when: Callable[..., bool] | None = None
    many: bool = False

    model_config = {"frozen": True}


class PhaseRules:
    """
    Rule table for one phase

    Registration methods return the table so calls can be chained.

    Args:
        phase: Phase these rules apply to
        events: Event types this phase can emit; each needs a fold rule
    """

    def __init__(self, phase: Phase, events: Iterable[type[Event]] = ()) -> None:
        self.phase = phase
        self.events: tuple[type[Event], ...] = tuple(events)
        self.rejections: list[RejectionRule] = []
        self.emissions: list[EmissionRule] = []
        self.folds: dict[type[Event], Callable[..., Aggregate]] = {}

    def arguments(self, state: Aggregate | None, message: Any) -> tuple[Any, ...]:
        """Positional arguments a rule of this phase is called with"""
        if self.phase is Phase.CONSTRUCTING:
            return (message,)
        return (state, message)

    # Registration

    def rejects(
        self,
        command_type: type[Command],
        reason: str | Callable[..., str],
        when: Callable[..., bool] | None = None,
    ) -> "PhaseRules":
        """
        Register a rejection rule

        Args:
            command_type: Command class (or base class) the rule applies to
            reason: Rejection message, or a function building it from the
                rule arguments
            when: Guard; without one every command of the type is rejected
        """
        self.rejections.append(
            RejectionRule(
                command_type=command_type,
                when=when or _always,
                reason=reason,
            )
        )
        return self

    def emits_event(
        self,
        command_type: type[Command],
        handler: Callable[..., EventDraft],
        when: Callable[..., bool] | None = None,
    ) -> "PhaseRules":
        """Register a rule whose handler returns exactly one event draft"""
        self.emissions.append(
            EmissionRule(command_type=command_type, handler=handler, when=when)
        )
        return self

    def emits_events(
        self,
        command_type: type[Command],
        handler: Callable[..., Sequence[EventDraft]],
        when: Callable[..., bool] | None = None,
    ) -> "PhaseRules":
        """Register a rule whose handler returns a sequence of event drafts"""
        self.emissions.append(
            EmissionRule(command_type=command_type, handler=handler, when=when, many=True)
        )
        return self

    def accepts_event(
        self,
        event_type: type[Event],
        handler: Callable[..., Aggregate],
    ) -> "PhaseRules":
        """
        Register the fold rule for an event type

        Raises:
            ValueError: If a fold rule is already registered for the type
        """
        if event_type in self.folds:
            raise ValueError(
                f"Fold rule already registered for {event_type.__name__} "
                f"while {self.phase.value}"
            )
        self.folds[event_type] = handler
        return self

    # Lookup

    def fold_rule_for(self, event_type: type[Event]) -> Callable[..., Aggregate] | None:
        """Fold rule for the event type or its nearest registered base class"""
        for klass in event_type.__mro__:
            if klass in self.folds:
                return self.folds[klass]
        return None


class BehaviorRules:
    """The two rule tables of an aggregate, selected by prior state"""

    def __init__(self, constructing: PhaseRules, updating: PhaseRules) -> None:
        if constructing.phase is not Phase.CONSTRUCTING:
            raise ValueError("constructing rules must be declared for Phase.CONSTRUCTING")
        if updating.phase is not Phase.UPDATING:
            raise ValueError("updating rules must be declared for Phase.UPDATING")
        self.constructing = constructing
        self.updating = updating

    def for_phase(self, phase: Phase) -> PhaseRules:
        return self.constructing if phase is Phase.CONSTRUCTING else self.updating

    def for_state(self, state: Aggregate | None) -> PhaseRules:
        return self.for_phase(phase_of(state))

    def __iter__(self):
        yield self.constructing
        yield self.updating


def _always(*args: Any) -> bool:
    return True
