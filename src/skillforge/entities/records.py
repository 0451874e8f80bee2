"""
Persisted record schemas.

These are read-only snapshots of what the persistence layer stores for an
owner (a character) and its child items. They are validated once, when a
snapshot is loaded; the derivation pipeline trusts them.
"""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from skillforge.entities.kinds import EntityKind


class TraitIntensity(StrEnum):
    ATTRIBUTE = "attribute"
    TRAIT = "trait"
    IMPULSE = "impulse"
    DISORDER = "disorder"


class MysterySubtype(StrEnum):
    FATE = "fate"
    FATE_BONUS = "fate_bonus"
    GRACE = "grace"
    PIETY = "piety"


class EventSubtype(StrEnum):
    BASIC = "basic"
    SCRIPT_ACTION = "script_action"


Digit = Annotated[int, Field(ge=0, le=9)]


class ImpactAspect(StrEnum):
    BLUNT = "blunt"
    EDGED = "edged"
    PIERCING = "piercing"
    FIRE = "fire"


class RecordBase(BaseModel):
    """
    Fields shared by every child record.

    Attributes:
        id: Unique identifier within the owner
        name: Display name (skills are matched by this name)
        nested_in: ID of the record this one is nested inside, if any
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Unique record identifier")
    name: str = Field(..., min_length=1, description="Display name")
    nested_in: str | None = Field(default=None, description="Containing record ID")

    @property
    def entity_kind(self) -> EntityKind:
        return EntityKind(self.kind)  # type: ignore[attr-defined]


class MasteryRecordBase(RecordBase):
    """Fields of anything with a mastery level (skills and traits)."""

    abbrev: str = Field(default="", description="Short code, e.g. 'fate' or 'str'")
    skill_base_formula: str = Field(default="", description="e.g. '@str, @dex, hirin:2, 5'")
    mastery_base: int = Field(default=0, ge=0, description="Persisted mastery level")
    boosts: int = Field(default=0, ge=0, description="Number of mastery boosts to apply")
    min_target: int | None = Field(default=None, description="Lowest usable test target")
    max_target: int | None = Field(default=None, description="Cap on boosted mastery")
    magic_mod: int = Field(default=0, description="Magic modifier applied to fate")
    improve_flag: bool = Field(default=False, description="Marked for a development roll")
    success_level_mod: int = Field(default=0, description="Shift applied to test success level")
    crit_success_digits: list[Digit] = Field(default_factory=list)
    crit_failure_digits: list[Digit] = Field(default_factory=list)


class SkillRecord(MasteryRecordBase):
    kind: Literal["skill"] = "skill"


class TraitRecord(MasteryRecordBase):
    kind: Literal["trait"] = "trait"
    intensity: TraitIntensity = TraitIntensity.TRAIT


class MysteryRecord(RecordBase):
    """A mystery (fate, fate bonus, grace, ...). Charges of -1 are unlimited."""

    kind: Literal["mystery"] = "mystery"
    subtype: MysterySubtype
    level_base: int = Field(default=0, description="Mystery level")
    charges_value: int = Field(default=-1, ge=-1, description="Remaining charges")
    charges_max: int = Field(default=-1, ge=-1, description="Maximum charges")
    skills: list[str] | None = Field(
        default=None, description="Skill names this applies to (None = all skills)"
    )


class GearRecord(RecordBase):
    kind: Literal[
        "weapon_gear",
        "armor_gear",
        "misc_gear",
        "container_gear",
    ]
    durability_base: int = Field(default=0, ge=0)
    length_base: int = Field(default=0, ge=0, description="Weapon length")


class ImpactConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    num_dice: int = Field(default=0, ge=0)
    die: int = Field(default=6, ge=0)
    modifier: int = 0
    aspect: ImpactAspect = ImpactAspect.BLUNT

    @property
    def dice(self) -> str:
        if not self.num_dice:
            return ""
        return f"{self.num_dice}d{self.die}"


class StrikeModeRecord(RecordBase):
    kind: Literal[
        "combat_technique",
        "melee_strike_mode",
        "missile_strike_mode",
    ]
    assoc_skill_name: str = Field(default="", description="Skill that drives this strike")
    impact: ImpactConfig = Field(default_factory=ImpactConfig)
    attack_base: int = 0
    block_base: int = 0
    counterstrike_base: int = 0
    length_base: int = Field(default=0, ge=0)
    no_attack: bool = False
    no_block: bool = False


class EventRecord(RecordBase):
    kind: Literal["event"] = "event"
    subtype: EventSubtype = EventSubtype.BASIC
    title: str = ""
    script: str = ""


EntityRecord = Annotated[
    SkillRecord | TraitRecord | MysteryRecord | GearRecord | StrikeModeRecord | EventRecord,
    Field(discriminator="kind"),
]


class OwnerRecord(BaseModel):
    """
    The owner (character) and the flat list of its child records.

    Attributes:
        id: Owner identifier (also used to look it up in combat state)
        name: Owner display name
        has_player_owner: True for player characters
        sunsigns: Sunsigns used by skill base formulas
        items: Every child record, nested ones included
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    has_player_owner: bool = False
    sunsigns: list[str] = Field(default_factory=list)
    items: list[EntityRecord] = Field(default_factory=list)
