"""
Base Command model for CQRS pattern

Commands represent intentions to change aggregate state.
They are checked against rejection rules, then converted to events.

Fun fact: CQRS (Command Query Responsibility Segregation) was formalized
by Greg Young around 2010, but the concept dates back to Bertrand Meyer's
"Command-Query Separation" principle from 1988!
"""

from pydantic import BaseModel, Field

from aggregate_kernel.kernel.ids import generate_id


class Command(BaseModel):
    """
    Base command class - all aggregate commands inherit from this

    Commands express intent to change an aggregate. They are:
    - Checked against rejection rules before anything happens
    - Converted to events by emission rules
    - Never folded into state directly (only the resulting events are)

    The command_id is supplied by the caller and becomes the causation
    id of every event the command produces.
    """

    command_id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Unique command identifier (causation id of resulting events)",
    )

    model_config = {"frozen": True}

    @property
    def command_type(self) -> str:
        """Variant name of this command, e.g. 'CreateProduct'"""
        return type(self).__name__
