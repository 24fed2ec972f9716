"""
Behavior Engine - the two-phase state machine of an aggregate

Every command goes through the same protocol:

1. Rejection evaluator - refuse early, nothing is produced
2. Emission resolver - command to event draft(s); no match is an error
3. Metadata stamper - each draft becomes an event
4. Folder - events are applied in order to the prior state

``handle`` returns the outcome as a value: rejection, an unmatched command
and an event that cannot be folded (including a fold rule building a state
that fails validation) are results, not exceptions. What still raises is
misuse by the caller (state of another aggregate, ``handle_all`` with
nothing to build an absent aggregate from) and bugs in rule code itself,
such as a guard that throws or a handler returning something other than
drafts.

The engine holds no aggregate state between calls: the caller passes the
prior state in and keeps the returned state. Commands for one aggregate id
must be fed one at a time; distinct aggregates can be handled in parallel.

Fun fact: This is the "decide/evolve" split popularised by functional event
sourcing - decide turns commands into events, evolve folds events into state!
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import ClassVar

from pydantic import BaseModel, SerializeAsAny

from aggregate_kernel.behavior.emission import EmissionResolver
from aggregate_kernel.behavior.folder import Folder
from aggregate_kernel.behavior.rejection import RejectionEvaluator
from aggregate_kernel.behavior.rules import BehaviorRules, Phase, PhaseRules, phase_of
from aggregate_kernel.behavior.stamper import MetadataStamper
from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.errors import (
    BehaviorError,
    CommandRejected,
    InvalidFoldStateError,
    RejectionReason,
    UnhandledCommandError,
)
from aggregate_kernel.kernel.events import Event
from aggregate_kernel.kernel.ids import AggregateId
from aggregate_kernel.kernel.logging import (
    LogOperation,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)
from aggregate_kernel.kernel.metrics import record_command
from aggregate_kernel.kernel.settings import KernelSettings, default_settings
from aggregate_kernel.kernel.tags import Tag, aggregate_tag

logger = get_logger(__name__)


# Results


class Accepted(BaseModel):
    """Command accepted: the new state and the events that produced it"""

    ok: ClassVar[bool] = True
    outcome: ClassVar[str] = "accepted"

    state: SerializeAsAny[Aggregate]
    events: tuple[SerializeAsAny[Event], ...]

    model_config = {"frozen": True}

    def unwrap(self) -> tuple[Aggregate, tuple[Event, ...]]:
        return self.state, self.events


class CommandFailure(BaseModel, ABC):
    """
    Base of all failure results

    ``state`` is the prior state, unchanged (None if the aggregate was absent).
    """

    ok: ClassVar[bool] = False
    outcome: ClassVar[str] = "failure"

    state: SerializeAsAny[Aggregate] | None = None

    model_config = {"frozen": True}

    @property
    def events(self) -> tuple[Event, ...]:
        return ()

    @abstractmethod
    def to_exception(self) -> BehaviorError:
        """Exception equivalent of this failure"""

    def unwrap(self) -> tuple[Aggregate, tuple[Event, ...]]:
        """Raise the exception matching this failure"""
        raise self.to_exception()


class Rejected(CommandFailure):
    """A rejection rule refused the command"""

    outcome: ClassVar[str] = "rejected"

    reason: RejectionReason

    def to_exception(self) -> BehaviorError:
        return CommandRejected(self.reason)


class UnhandledCommand(CommandFailure):
    """No emission rule matched the command in its phase"""

    outcome: ClassVar[str] = "unhandled"

    command_type: str
    phase: Phase

    def to_exception(self) -> BehaviorError:
        return UnhandledCommandError(self.command_type, self.phase.value)


class InvalidFoldState(CommandFailure):
    """An emitted event could not be folded into the state"""

    outcome: ClassVar[str] = "invalid_fold"

    event_type: str
    phase: Phase
    message: str

    def to_exception(self) -> BehaviorError:
        return InvalidFoldStateError(self.event_type, self.phase.value, self.message)


CommandResult = Accepted | Rejected | UnhandledCommand | InvalidFoldState


# Engine


class Behavior:
    """
    Behavior engine of one aggregate instance

    Args:
        aggregate_id: Identity of the instance; stamped on every event
        aggregate_type: Type name, e.g. "product"; its aggregate tag is
            added to every event
        constructing: Rules used while the aggregate is absent
        updating: Rules used once the aggregate exists
        tags: Additional tags for every event (e.g. dependent views)
        stamper: Metadata stamper (a default one if None)
        settings: Kernel settings (module defaults if None)

    Raises:
        IncompleteBehaviorError: If a declared event has no fold rule
            and exhaustiveness checking is enabled
    """

    def __init__(
        self,
        aggregate_id: AggregateId,
        aggregate_type: str,
        constructing: PhaseRules,
        updating: PhaseRules,
        tags: Iterable[Tag] = (),
        stamper: MetadataStamper | None = None,
        settings: KernelSettings | None = None,
    ) -> None:
        self.aggregate_id = aggregate_id
        self.aggregate_type = aggregate_type
        self.rules = BehaviorRules(constructing, updating)
        self.tags = frozenset({aggregate_tag(aggregate_type), *tags})
        self.settings = settings or default_settings

        self.rejection = RejectionEvaluator(self.rules)
        self.emission = EmissionResolver(self.rules)
        self.stamper = stamper or MetadataStamper()
        self.folder = Folder(self.rules, aggregate_id)

        if self.settings.check_exhaustiveness:
            self.folder.check_exhaustive()

    def __repr__(self) -> str:
        return f"Behavior({self.aggregate_type}, {self.aggregate_id})"

    def handle(self, prior_state: Aggregate | None, command: Command) -> CommandResult:
        """
        Run one command through the protocol

        Args:
            prior_state: Latest state of this aggregate, None if absent
            command: Command to handle

        Returns:
            Accepted(state, events), or Rejected / UnhandledCommand /
            InvalidFoldState carrying the unchanged prior state

        Raises:
            ValueError: If prior_state belongs to another aggregate
        """
        if prior_state is not None and prior_state.id != self.aggregate_id:
            raise ValueError(
                f"State of aggregate {prior_state.id} passed to behavior of {self.aggregate_id}"
            )

        log = logger.bind(
            aggregate_type=self.aggregate_type,
            aggregate_id=str(self.aggregate_id),
            command_type=command.command_type,
            command_id=command.command_id,
            phase=phase_of(prior_state).value,
        )

        token = set_correlation_id(command.command_id)
        start = time.perf_counter()
        try:
            result = self._decide_and_evolve(prior_state, command, log)
        finally:
            reset_correlation_id(token)

        if self.settings.metrics_enabled:
            record_command(
                self.aggregate_type,
                command.command_type,
                result.outcome,
                [event.event_type for event in result.events],
                time.perf_counter() - start,
            )
        return result

    def handle_all(
        self, prior_state: Aggregate | None, commands: Sequence[Command]
    ) -> CommandResult:
        """
        Handle commands in order as one unit

        Stops at the first failure and returns it with the original prior
        state; otherwise returns the final state and all events in order.

        Raises:
            ValueError: If the aggregate is absent and there are no commands,
                since there is no state to return
        """
        state = prior_state
        events: list[Event] = []
        for command in commands:
            result = self.handle(state, command)
            if not result.ok:
                return result.model_copy(update={"state": prior_state})
            state = result.state
            events.extend(result.events)

        if state is None:
            raise ValueError("handle_all needs at least one command when the aggregate is absent")
        return Accepted(state=state, events=tuple(events))

    def replay(
        self, events: Iterable[Event], state: Aggregate | None = None
    ) -> Aggregate | None:
        """
        Rebuild state by folding a history

        Args:
            events: Events in the order they were produced
            state: Starting state (absent by default)

        Raises:
            InvalidFoldStateError: If the history is inconsistent
        """
        with LogOperation(
            logger,
            "replay",
            aggregate_type=self.aggregate_type,
            aggregate_id=str(self.aggregate_id),
        ):
            return self.folder.fold_all(state, events)

    def can_handle(self, state: Aggregate | None, command: Command) -> bool:
        """Whether an emission rule exists for the command in the current phase"""
        return self.emission.find_rule(state, command) is not None

    def _decide_and_evolve(
        self, prior_state: Aggregate | None, command: Command, log
    ) -> CommandResult:
        reason = self.rejection.evaluate(prior_state, command)
        if reason is not None:
            log.info("Command rejected", reason=reason.message)
            return Rejected(state=prior_state, reason=reason)

        try:
            drafts = self.emission.resolve(prior_state, command)
        except UnhandledCommandError as exc:
            log.error("No emission rule matched command", error=str(exc))
            return UnhandledCommand(
                state=prior_state,
                command_type=exc.command_type,
                phase=phase_of(prior_state),
            )

        events = self.stamper.stamp_all(
            drafts, self.aggregate_id, command.command_id, self.tags
        )

        try:
            new_state = self.folder.fold_all(prior_state, events)
        except InvalidFoldStateError as exc:
            log.error("Emitted event could not be folded", event_type=exc.event_type, error=str(exc))
            return InvalidFoldState(
                state=prior_state,
                event_type=exc.event_type,
                phase=Phase(exc.phase),
                message=str(exc),
            )

        log.debug(
            "Command accepted",
            event_types=[event.event_type for event in events],
            event_ids=[event.metadata.event_id for event in events],
        )
        return Accepted(state=new_state, events=tuple(events))
