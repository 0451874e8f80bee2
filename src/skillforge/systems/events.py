"""Events attached to skills, traits, mysteries and gear."""

from dataclasses import dataclass

from skillforge.entities.entity import Entity
from skillforge.entities.kinds import Capability, EntityKind
from skillforge.entities.records import EventRecord, EventSubtype
from skillforge.errors import StructuralAssociationError
from skillforge.pipeline.context import DerivationContext


@dataclass(frozen=True)
class ScheduledEvent:
    """An event as its host sees it after derivation."""

    id: str
    title: str
    subtype: EventSubtype
    script: str = ""
    host_id: str | None = None


def evaluate_event(entity: Entity, context: DerivationContext) -> None:
    """Check the event's container and build its derived description."""
    record: EventRecord = entity.record  # type: ignore[assignment]
    host_id = entity.nested_in

    if host_id is not None:
        host = entity.owner.get(host_id)
        if host is None or not host.has(Capability.EVENT_HOST):
            host_kind = host.kind if host is not None else "missing"
            raise StructuralAssociationError(
                f"Unsupported container kind {host_kind} for nested event {entity.id!r}"
            )

    script = record.script if record.subtype == EventSubtype.SCRIPT_ACTION else ""
    entity.values["event"] = ScheduledEvent(
        id=entity.id,
        title=record.title or entity.name,
        subtype=record.subtype,
        script=script,
        host_id=host_id,
    )


def finalize_event_host(entity: Entity, context: DerivationContext) -> None:
    events: dict[str, ScheduledEvent] = {}
    nested = sorted(entity.owner.nested_under(entity.id), key=lambda e: e.id)
    for child in nested:
        if child.kind != EntityKind.EVENT:
            continue
        event: ScheduledEvent = child.settled_value("event")
        events[event.title] = event
    entity.values["events"] = events
