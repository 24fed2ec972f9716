"""
Base Event model and event metadata

Events are immutable facts about what happened to an aggregate. They are
the only thing ever folded into aggregate state.

An event is built in two steps. Emission rules produce an EventDraft - the
event class plus its business fields - and the metadata stamper turns the
draft into a real event by attaching Metadata. Keeping ids and timestamps
out of the rules keeps the rules deterministic.

Fun fact: In event sourcing, events are named in past tense because
they represent facts that already happened, not intentions!
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from aggregate_kernel.kernel.ids import AggregateId
from aggregate_kernel.kernel.tags import Tag


class Metadata(BaseModel):
    """
    Provenance and routing information of an event

    event_id and occurred_at are generated at emission time and never
    altered afterwards.
    """

    aggregate_id: AggregateId
    command_id: str = Field(..., description="Command that caused this event")
    event_id: str = Field(..., description="Unique event identifier (UUIDv7-like)")
    occurred_at: datetime = Field(..., description="UTC timestamp of emission")
    tags: frozenset[Tag] = Field(default_factory=frozenset)

    model_config = {"frozen": True}


class Event(BaseModel):
    """
    Base event class - all aggregate events inherit from this

    Subclasses declare their business fields; metadata is attached
    by the stamper.
    """

    metadata: Metadata

    model_config = {"frozen": True}

    @property
    def event_type(self) -> str:
        """Variant name of this event, e.g. 'ProductCreated'"""
        return type(self).__name__

    @classmethod
    def draft(cls, **fields: Any) -> "EventDraft":
        """Build a draft of this event type from its business fields"""
        return EventDraft(event_class=cls, payload=fields)

    def payload(self) -> dict[str, Any]:
        """Business fields of the event (everything except metadata)"""
        return self.model_dump(exclude={"metadata"})


class EventDraft(BaseModel):
    """
    Event payload without metadata

    Produced by emission rules; turned into an Event by the stamper.
    """

    event_class: type[Event]
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def event_type(self) -> str:
        return self.event_class.__name__

    def build(self, metadata: Metadata) -> Event:
        """Instantiate the event with the given metadata"""
        return self.event_class(metadata=metadata, **self.payload)
