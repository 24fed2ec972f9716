"""
Folder - applies events to state

Folding is a pure left fold: the same events in the same order always give
the same state. Construction events turn absent state into present state;
update events need present state. Anything else is an invariant violation and
raises InvalidFoldStateError instead of being skipped.
"""

from collections.abc import Iterable

from pydantic import ValidationError

from aggregate_kernel.behavior.rules import BehaviorRules, Phase, phase_of
from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.errors import IncompleteBehaviorError, InvalidFoldStateError
from aggregate_kernel.kernel.events import Event
from aggregate_kernel.kernel.ids import AggregateId


class Folder:
    """
    Applies events using the fold rules of the current phase

    Args:
        rules: Rule tables of the aggregate
        aggregate_id: When given, events stamped for another aggregate
            are refused
    """

    def __init__(self, rules: BehaviorRules, aggregate_id: AggregateId | None = None) -> None:
        self.rules = rules
        self.aggregate_id = aggregate_id

    def fold(self, state: Aggregate | None, event: Event) -> Aggregate:
        """
        Apply one event

        Raises:
            InvalidFoldStateError: If the event belongs to the other phase,
                has no fold rule, belongs to another aggregate, or the rule
                produced no state or a state failing validation
        """
        phase = phase_of(state)
        phase_rules = self.rules.for_phase(phase)

        if self.aggregate_id is not None and event.metadata.aggregate_id != self.aggregate_id:
            raise InvalidFoldStateError(
                event.event_type,
                phase.value,
                f"{event.event_type} belongs to aggregate {event.metadata.aggregate_id}, "
                f"not {self.aggregate_id}",
            )

        handler = phase_rules.fold_rule_for(type(event))
        if handler is None:
            raise InvalidFoldStateError(
                event.event_type, phase.value, self._missing_rule_message(event, phase)
            )

        try:
            new_state = handler(*phase_rules.arguments(state, event))
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "state"
            raise InvalidFoldStateError(
                event.event_type,
                phase.value,
                f"Fold rule for {event.event_type} produced invalid state: "
                f"{field}: {first['msg']}",
            ) from exc

        if not isinstance(new_state, Aggregate):
            raise InvalidFoldStateError(
                event.event_type,
                phase.value,
                f"Fold rule for {event.event_type} returned {type(new_state).__name__}, "
                "expected aggregate state",
            )
        return new_state

    def fold_all(self, state: Aggregate | None, events: Iterable[Event]) -> Aggregate | None:
        """Left fold of events in order; returns the input state for no events"""
        for event in events:
            state = self.fold(state, event)
        return state

    def check_exhaustive(self) -> None:
        """
        Verify every declared event of each phase has a fold rule

        Raises:
            IncompleteBehaviorError: Naming the phase and the uncovered events
        """
        for phase_rules in self.rules:
            missing = [
                event_type.__name__
                for event_type in phase_rules.events
                if phase_rules.fold_rule_for(event_type) is None
            ]
            if missing:
                raise IncompleteBehaviorError(phase_rules.phase.value, missing)

    def _missing_rule_message(self, event: Event, phase: Phase) -> str:
        other = Phase.UPDATING if phase is Phase.CONSTRUCTING else Phase.CONSTRUCTING
        if self.rules.for_phase(other).fold_rule_for(type(event)) is None:
            return f"No fold rule for {event.event_type}"
        if phase is Phase.CONSTRUCTING:
            return f"{event.event_type} is an update event but the aggregate is absent"
        return f"{event.event_type} is a construction event but the aggregate already exists"
