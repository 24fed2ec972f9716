"""
Metadata Stamper - turns event drafts into events

The stamper is the only source of non-determinism in the kernel: it draws a
fresh event id and the current time for every draft. Both come from
injectable providers so tests can pin them.
"""

from collections.abc import Iterable, Sequence

from aggregate_kernel.kernel.events import Event, EventDraft, Metadata
from aggregate_kernel.kernel.ids import AggregateId, IdFactory, default_id_factory
from aggregate_kernel.kernel.tags import Tag
from aggregate_kernel.kernel.time import TimeProvider, default_time_provider


class MetadataStamper:
    """
    Attaches identity, causation, timestamp and tags to drafts

    Args:
        tags: Tags added to every event this stamper produces
        id_factory: Event id source (UUIDv7-like by default)
        time_provider: Clock (system UTC by default)
    """

    def __init__(
        self,
        tags: Iterable[Tag] = (),
        id_factory: IdFactory | None = None,
        time_provider: TimeProvider | None = None,
    ) -> None:
        self.tags = frozenset(tags)
        self.id_factory = id_factory or default_id_factory
        self.time_provider = time_provider or default_time_provider

    def stamp(
        self,
        draft: EventDraft,
        aggregate_id: AggregateId,
        command_id: str,
        tags: Iterable[Tag] | None = None,
    ) -> Event:
        """
        Build the event for a draft

        Args:
            draft: Event class and business fields
            aggregate_id: Aggregate the event belongs to
            command_id: Causation id (the command that produced the draft)
            tags: Extra tags for this event, merged with the stamper's own

        Returns:
            Immutable event with fresh event_id and occurred_at
        """
        metadata = Metadata(
            aggregate_id=aggregate_id,
            command_id=command_id,
            event_id=self.id_factory.generate(),
            occurred_at=self.time_provider.now(),
            tags=self.tags | frozenset(tags or ()),
        )
        return draft.build(metadata)

    def stamp_all(
        self,
        drafts: Sequence[EventDraft],
        aggregate_id: AggregateId,
        command_id: str,
        tags: Iterable[Tag] | None = None,
    ) -> list[Event]:
        """Stamp drafts in order, all with the same causation"""
        extra = frozenset(tags or ())
        return [self.stamp(draft, aggregate_id, command_id, extra) for draft in drafts]
