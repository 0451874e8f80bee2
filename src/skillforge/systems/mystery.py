"""Mysteries: fate, fate bonuses, grace and piety.

Mysteries carry a ``level`` and a ``charges`` stack. Fate-bonus mysteries feed
the fate stack of the skills they apply to; fate mysteries decide whether fate
is available at all when the rules require it.
"""

from skillforge.entities.entity import Entity
from skillforge.entities.kinds import EntityKind, PhaseState
from skillforge.entities.records import MysteryRecord, MysterySubtype
from skillforge.modifiers import DisabledReason
from skillforge.pipeline.context import DerivationContext

LEVEL = "level"
CHARGES = "charges"
CHARGES_MAX = "charges_max"


def initialize_mystery(entity: Entity, context: DerivationContext) -> None:
    record: MysteryRecord = entity.record  # type: ignore[assignment]
    entity.new_stack(LEVEL, base=record.level_base)

    charges = entity.new_stack(CHARGES, base=max(record.charges_value, 0))
    if record.charges_value < 0:
        charges.disable(DisabledReason.UNLIMITED_CHARGES)

    charges_max = entity.new_stack(CHARGES_MAX, base=max(record.charges_max, 0))
    if record.charges_max < 0:
        charges_max.disable(DisabledReason.UNLIMITED_CHARGES)


def applies_to(mystery: Entity, skill_name: str) -> bool:
    """A mystery with no skill list applies to every skill."""
    skills = mystery.record.skills  # type: ignore[union-attr]
    return not skills or skill_name in skills


def has_charges(mystery: Entity) -> bool:
    """True if the mystery has unlimited or at least one remaining charge."""
    charges = mystery.settled(CHARGES, at_least=PhaseState.INITIALIZED)
    return charges.disabled or (charges.effective or 0) > 0


def _mysteries(skill: Entity, subtype: MysterySubtype) -> list[Entity]:
    found = [
        m
        for m in skill.owner.of_kind(EntityKind.MYSTERY)
        if m.record.subtype == subtype and applies_to(m, skill.name)  # type: ignore[union-attr]
    ]
    return sorted(found, key=lambda m: m.id)


def fate_bonuses_for(skill: Entity) -> list[Entity]:
    """Fate-bonus mysteries that apply to ``skill`` and still have charges."""
    return [m for m in _mysteries(skill, MysterySubtype.FATE_BONUS) if has_charges(m)]


def applicable_fate(skill: Entity) -> list[Entity]:
    """Fate mysteries with a positive level that apply to ``skill``."""
    return [
        m
        for m in _mysteries(skill, MysterySubtype.FATE)
        if (m.settled(LEVEL, at_least=PhaseState.INITIALIZED).effective or 0) > 0
    ]
