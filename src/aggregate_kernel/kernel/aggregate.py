"""
Base model for aggregate state

An aggregate's state is a value: folding an event never mutates the prior
state, it returns a new one (``model_copy(update=...)``). Absent state -
the aggregate has not been constructed yet - is represented by ``None``.
"""

from pydantic import BaseModel

from aggregate_kernel.kernel.ids import AggregateId


class Aggregate(BaseModel):
    """Base class for aggregate state models"""

    id: AggregateId

    model_config = {"frozen": True}
