"""
Given-When-Then helpers for testing aggregate behaviors

Example:
    >>> scenario = BehaviorScenario(product_behavior(number))
    >>> (
    ...     scenario.given_commands(CreateProduct(name="Widget", price=9.99))
    ...     .when(ChangePrice(price=12.5))
    ...     .then_events(PriceChanged)
    ...     .then_state(price=12.5)
    ... )
"""

from typing import Any

from aggregate_kernel.behavior.engine import (
    Accepted,
    Behavior,
    CommandResult,
    Rejected,
    UnhandledCommand,
)
from aggregate_kernel.kernel.aggregate import Aggregate
from aggregate_kernel.kernel.commands import Command
from aggregate_kernel.kernel.events import Event


class BehaviorScenario:
    """Fluent scenario around one behavior engine"""

    __test__ = False

    def __init__(self, behavior: Behavior) -> None:
        self.behavior = behavior
        self.state: Aggregate | None = None
        self.history: list[Event] = []
        self.result: CommandResult | None = None

    def given(self, *events: Event) -> "BehaviorScenario":
        """Fold pre-existing events into the starting state"""
        self.state = self.behavior.replay(events, self.state)
        self.history.extend(events)
        return self

    def given_commands(self, *commands: Command) -> "BehaviorScenario":
        """Reach the starting state by handling commands that must be accepted"""
        for command in commands:
            state, events = self.behavior.handle(self.state, command).unwrap()
            self.state = state
            self.history.extend(events)
        return self

    def when(self, command: Command) -> "BehaviorScenario":
        """Handle the command under test"""
        self.result = self.behavior.handle(self.state, command)
        return self

    def then_events(self, *event_types: type[Event]) -> "BehaviorScenario":
        """Assert the command was accepted with exactly these event types, in order"""
        result = self._require(Accepted)
        actual = [type(event) for event in result.events]
        assert actual == list(event_types), (
            f"Expected events {[t.__name__ for t in event_types]}, "
            f"got {[t.__name__ for t in actual]}"
        )
        return self

    def then_state(self, **fields: Any) -> "BehaviorScenario":
        """Assert fields of the resulting state"""
        result = self._require(Accepted)
        for name, expected in fields.items():
            actual = getattr(result.state, name)
            assert actual == expected, f"state.{name}: expected {expected!r}, got {actual!r}"
        return self

    def then_rejected(self, message: str | None = None) -> "BehaviorScenario":
        """Assert the command was rejected, optionally with this message"""
        result = self._require(Rejected)
        if message is not None:
            assert result.reason.message == message, (
                f"Expected rejection {message!r}, got {result.reason.message!r}"
            )
        assert result.state == self.state, "Rejection must leave state unchanged"
        return self

    def then_unhandled(self) -> "BehaviorScenario":
        """Assert no emission rule matched the command"""
        self._require(UnhandledCommand)
        return self

    def _require(self, result_type: type) -> Any:
        assert self.result is not None, "when() was not called"
        assert isinstance(self.result, result_type), (
            f"Expected {result_type.__name__}, got {type(self.result).__name__}: {self.result!r}"
        )
        return self.result
