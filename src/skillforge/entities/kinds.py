"""Entity kinds, capabilities and phase states."""

from enum import Enum, IntEnum, StrEnum


class EntityKind(StrEnum):
    """Discriminator carried by every persisted record and entity."""

    SKILL = "skill"
    TRAIT = "trait"
    MYSTERY = "mystery"
    WEAPON_GEAR = "weapon_gear"
    ARMOR_GEAR = "armor_gear"
    MISC_GEAR = "misc_gear"
    CONTAINER_GEAR = "container_gear"
    COMBAT_TECHNIQUE = "combat_technique"
    MELEE_STRIKE_MODE = "melee_strike_mode"
    MISSILE_STRIKE_MODE = "missile_strike_mode"
    EVENT = "event"


GEAR_KINDS = frozenset(
    {
        EntityKind.WEAPON_GEAR,
        EntityKind.ARMOR_GEAR,
        EntityKind.MISC_GEAR,
        EntityKind.CONTAINER_GEAR,
    }
)

STRIKE_MODE_KINDS = frozenset(
    {
        EntityKind.COMBAT_TECHNIQUE,
        EntityKind.MELEE_STRIKE_MODE,
        EntityKind.MISSILE_STRIKE_MODE,
    }
)


class Capability(Enum):
    """A unit of behaviour an entity takes part in.

    Declaration order is the order in which an entity runs its capabilities
    within a single phase.
    """

    MASTERY = "mastery"
    FATE = "fate"
    GEAR = "gear"
    MYSTERY = "mystery"
    STRIKE_MODE = "strike_mode"
    EVENT = "event"
    EVENT_HOST = "event_host"


class PhaseState(IntEnum):
    """Linear lifecycle of an entity within one derivation pass."""

    UNINITIALIZED = 0
    INITIALIZED = 1
    EVALUATED = 2
    FINALIZED = 3


def capabilities_for(kind: EntityKind) -> frozenset[Capability]:
    """Map an entity kind to the capabilities it carries."""
    match kind:
        case EntityKind.SKILL:
            return frozenset({Capability.MASTERY, Capability.FATE, Capability.EVENT_HOST})
        case EntityKind.TRAIT:
            return frozenset({Capability.MASTERY, Capability.EVENT_HOST})
        case EntityKind.MYSTERY:
            return frozenset({Capability.MYSTERY, Capability.EVENT_HOST})
        case (
            EntityKind.WEAPON_GEAR
            | EntityKind.ARMOR_GEAR
            | EntityKind.MISC_GEAR
            | EntityKind.CONTAINER_GEAR
        ):
            return frozenset({Capability.GEAR, Capability.EVENT_HOST})
        case (
            EntityKind.COMBAT_TECHNIQUE
            | EntityKind.MELEE_STRIKE_MODE
            | EntityKind.MISSILE_STRIKE_MODE
        ):
            return frozenset({Capability.STRIKE_MODE})
        case EntityKind.EVENT:
            return frozenset({Capability.EVENT})
    raise ValueError(f"Unknown entity kind: {kind!r}")
