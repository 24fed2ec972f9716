"""
Emission Resolver - maps an accepted command to event drafts

Only runs for commands the rejection evaluator let through. Drafts carry no
metadata; the resolver is deterministic given (state, command).

A command matching no emission rule in the current phase is a configuration
defect and raises UnhandledCommandError - it is never silently dropped. This
is the only signal for "this command makes no sense right now", because
rejection passes unknown commands through.
"""

from collections.abc import Sequence

from aggregate_kernel.behavior.rules import BehaviorRules, EmissionRule, PhaseRules
from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.errors import UnhandledCommandError
from aggregate_kernel.kernel.events import EventDraft


class EmissionResolver:
    """Resolves commands to event drafts using the phase's emission rules"""

    def __init__(self, rules: BehaviorRules) -> None:
        self.rules = rules

    def find_rule(self, state: Aggregate | None, command: Command) -> EmissionRule | None:
        """First emission rule whose command type and guard match"""
        phase_rules = self.rules.for_state(state)
        args = phase_rules.arguments(state, command)

        for rule in phase_rules.emissions:
            if not isinstance(command, rule.command_type):
                continue
            if rule.when is not None and not rule.when(*args):
                continue
            return rule
        return None

    def resolve(self, state: Aggregate | None, command: Command) -> list[EventDraft]:
        """
        Produce the ordered event drafts for a command

        Args:
            state: Prior state (None while constructing)
            command: Command that passed rejection

        Returns:
            One draft for single-event rules, one or more for multi-event rules

        Raises:
            UnhandledCommandError: If no rule matches, or a multi-event rule
                produced nothing
            TypeError: If a handler returns something other than drafts
        """
        phase_rules = self.rules.for_state(state)
        rule = self.find_rule(state, command)
        if rule is None:
            raise UnhandledCommandError(command.command_type, phase_rules.phase.value)

        result = rule.handler(*phase_rules.arguments(state, command))
        drafts = list(result) if rule.many else [result]

        if not drafts:
            raise UnhandledCommandError(command.command_type, phase_rules.phase.value)

        _check_drafts(drafts, command, phase_rules)
        return drafts


def _check_drafts(
    drafts: Sequence[object], command: Command, phase_rules: PhaseRules
) -> None:
    for draft in drafts:
        if not isinstance(draft, EventDraft):
            raise TypeError(
                f"Emission rule for {command.command_type} while "
                f"{phase_rules.phase.value} returned {type(draft).__name__}, "
                "expected an EventDraft (use EventType.draft(...))"
            )
