"""
Rejection Evaluator - decides whether a command fails before any event exists

Rejection is opt-in: a command with no matching rejection rule passes
through. The evaluator only looks at the rules of the current phase, so an
update-only rule never fires for a construction command and vice versa.
"""

from aggregate_kernel.behavior.rules import BehaviorRules
from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.errors import RejectionReason


class RejectionEvaluator:
    """Pure decision function over the phase's rejection rules"""

    def __init__(self, rules: BehaviorRules) -> None:
        self.rules = rules

    def evaluate(
        self, state: Aggregate | None, command: Command
    ) -> RejectionReason | None:
        """
        Return the reason the command is refused, or None if it may proceed

        Args:
            state: Prior state (None while constructing)
            command: Incoming command
        """
        phase_rules = self.rules.for_state(state)
        args = phase_rules.arguments(state, command)

        for rule in phase_rules.rejections:
            if not isinstance(command, rule.command_type):
                continue
            if not rule.when(*args):
                continue
            message = rule.reason(*args) if callable(rule.reason) else rule.reason
            return RejectionReason(message=message, command_type=command.command_type)

        return None
