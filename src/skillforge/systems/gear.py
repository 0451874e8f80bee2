"""Gear: weapons, armor, containers and miscellaneous items."""

from skillforge.entities.entity import Entity
from skillforge.entities.records import GearRecord
from skillforge.pipeline.context import DerivationContext

DURABILITY = "durability"


def initialize_gear(entity: Entity, context: DerivationContext) -> None:
    """Create the durability stack from the persisted durability."""
    record: GearRecord = entity.record  # type: ignore[assignment]
    entity.new_stack(DURABILITY, base=record.durability_base)
    if record.length_base:
        entity.values["length"] = record.length_base
