"""Entity kinds, persisted records, runtime entities and snapshot loading."""

from .entity import Entity, OwnerView
from .kinds import (
    GEAR_KINDS,
    STRIKE_MODE_KINDS,
    Capability,
    EntityKind,
    PhaseState,
    capabilities_for,
)
from .loader import load_owner, load_owner_file
from .records import (
    EntityRecord,
    EventRecord,
    GearRecord,
    MysteryRecord,
    OwnerRecord,
    SkillRecord,
    StrikeModeRecord,
    TraitRecord,
)

__all__ = [
    "Capability",
    "Entity",
    "EntityKind",
    "EntityRecord",
    "EventRecord",
    "GEAR_KINDS",
    "GearRecord",
    "MysteryRecord",
    "OwnerRecord",
    "OwnerView",
    "PhaseState",
    "STRIKE_MODE_KINDS",
    "SkillRecord",
    "StrikeModeRecord",
    "TraitRecord",
    "capabilities_for",
    "load_owner",
    "load_owner_file",
]
