"""
Custom exceptions for the aggregate kernel

Well-defined error hierarchy enables precise error handling and
clear error messages for developers and operators.

The behavior engine never lets these escape from ``handle``: the three
per-command errors are converted to result values there. They surface as
exceptions from the individual components and from ``unwrap()``.
"""

from pydantic import BaseModel, Field


class RejectionReason(BaseModel):
    """Why a command was refused by a rejection rule"""

    message: str = Field(..., min_length=1)
    command_type: str

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return self.message


class KernelError(Exception):
    """Base exception for all aggregate kernel errors"""

    pass


class BehaviorError(KernelError):
    """Base class for behavior engine errors"""

    pass


class CommandRejected(BehaviorError):
    """
    Raised when a business rule refuses a command

    Expected and recoverable - the message is meant for the
    command's caller.
    """

    def __init__(self, reason: RejectionReason) -> None:
        self.reason = reason
        super().__init__(reason.message)


class UnhandledCommandError(BehaviorError):
    """
    Raised when no emission rule matches a command in the current phase

    This is a configuration defect, not a user error: a command that
    passes rejection but has nowhere to go would otherwise be dropped.
    """

    def __init__(self, command_type: str, phase: str) -> None:
        self.command_type = command_type
        self.phase = phase
        super().__init__(f"No emission rule for {command_type} while {phase}")


class InvalidFoldStateError(BehaviorError):
    """
    Raised when an event cannot be folded into the given state

    Update events against absent state, construction events against
    present state, and events without a fold rule all end up here.
    """

    def __init__(self, event_type: str, phase: str, message: str = "") -> None:
        self.event_type = event_type
        self.phase = phase
        super().__init__(message or f"Cannot fold {event_type} while {phase}")


class IncompleteBehaviorError(BehaviorError):
    """Raised when declared events of a phase have no fold rule"""

    def __init__(self, phase: str, missing: list[str]) -> None:
        self.phase = phase
        self.missing = missing
        super().__init__(
            f"Events declared for {phase} have no fold rule: {', '.join(missing)}"
        )
