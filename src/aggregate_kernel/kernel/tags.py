"""
Tags - routing labels attached to event metadata

A tag names an event stream or category. The aggregate's own type tag is
always present; cross-cutting tags such as a dependent view let downstream
consumers pick up events that concern another aggregate's read side.

The kernel attaches tags but never interprets them - routing by tag is the
event sink's job. A tag serializes to its label, "<kind>:<value>".
"""

from typing import Any

from pydantic import BaseModel, Field, model_serializer, model_validator

AGGREGATE_KIND = "aggregate"
DEPENDENT_VIEW_KIND = "view"


class Tag(BaseModel):
    """A label identifying an event stream or category"""

    kind: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def parse_label(cls, data: Any) -> Any:
        """Accept the "<kind>:<value>" label form"""
        if isinstance(data, str):
            kind, sep, value = data.partition(":")
            if not sep:
                raise ValueError(f"Tag label must look like 'kind:value', got '{data}'")
            return {"kind": kind, "value": value}
        return data

    @model_serializer
    def to_label(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return f"{self.kind}:{self.value}"


def aggregate_tag(name: str) -> Tag:
    """Tag carried by every event of the named aggregate type"""
    return Tag(kind=AGGREGATE_KIND, value=name)


def dependent_view_tag(name: str) -> Tag:
    """Tag marking events that a view owned by another aggregate depends on"""
    return Tag(kind=DEPENDENT_VIEW_KIND, value=name)
