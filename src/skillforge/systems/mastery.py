"""
Mastery levels for skills and traits.

A mastery level is a modifier stack whose base is the persisted mastery,
grown by "boosts" and capped by a maximum target. Skills additionally carry a
``fate`` sub-stack: a luck value that can stand in for a failed test, and that
is switched off under a number of conditions.

Phase responsibilities:

- initialize: create stacks, parse the skill base formula, apply fate mode
- evaluate: resolve the skill base, apply boosts, clamp, Aura check
- finalize: fate from the Fate trait, magic modifier, fate bonuses
"""

import structlog

from skillforge.config import FateMode
from skillforge.entities.entity import Entity, OwnerView
from skillforge.entities.kinds import EntityKind
from skillforge.entities.records import MasteryRecordBase, TraitIntensity
from skillforge.modifiers import DeltaSource, DisabledReason
from skillforge.pipeline.context import DerivationContext
from skillforge.systems.mystery import applicable_fate, fate_bonuses_for
from skillforge.systems.skill_base import AttributeScore, SkillBase

logger = structlog.get_logger(__name__)

MASTERY = "mastery"
FATE = "fate"

FATE_TRAIT_ABBREV = "fate"
AURA_ATTRIBUTE = "Aura"

# (highest mastery level, boost) pairs, checked in order
MASTERY_BOOST_TABLE = (
    (39, 10),
    (44, 9),
    (49, 8),
    (59, 7),
    (69, 6),
    (79, 5),
    (99, 4),
)
MASTERY_BOOST_FLOOR = 3


def calc_mastery_boost(level: int) -> int:
    """
    Calculate how much one boost adds at a given mastery level.

    Args:
        level: The current mastery level

    Returns:
        10 up to 39, then 9, 8, 7, 6, 5, 4 at the 44/49/59/69/79/99
        breakpoints, and 3 above 99

    Examples:
        >>> calc_mastery_boost(45)
        8
        >>> calc_mastery_boost(100)
        3
    """
    for ceiling, boost in MASTERY_BOOST_TABLE:
        if level <= ceiling:
            return boost
    return MASTERY_BOOST_FLOOR


def apply_mastery_boosts(level: int, boosts: int) -> int:
    """
    Apply ``boosts`` boosts, each computed against the already boosted level.

    Examples:
        >>> apply_mastery_boosts(45, 2)
        60
    """
    for _ in range(boosts):
        level += calc_mastery_boost(level)
    return level


def attribute_scores(owner: OwnerView) -> dict[str, AttributeScore]:
    """Attribute traits of the owner keyed by lower-case shortcode."""
    scores: dict[str, AttributeScore] = {}
    for trait in sorted(owner.of_kind(EntityKind.TRAIT), key=lambda t: t.id):
        record = trait.record
        if record.intensity != TraitIntensity.ATTRIBUTE or not record.abbrev:  # type: ignore[union-attr]
            continue
        key = record.abbrev.lower()  # type: ignore[union-attr]
        scores.setdefault(key, AttributeScore(trait.name, record.mastery_base))  # type: ignore[union-attr]
    return scores


def find_fate_trait(owner: OwnerView) -> Entity | None:
    traits = [
        t
        for t in owner.of_kind(EntityKind.TRAIT)
        if t.record.abbrev.lower() == FATE_TRAIT_ABBREV  # type: ignore[union-attr]
    ]
    return min(traits, key=lambda t: t.id) if traits else None


# ---------------------------------------------------------------------------
# Mastery capability
# ---------------------------------------------------------------------------


def initialize_mastery(entity: Entity, context: DerivationContext) -> None:
    record: MasteryRecordBase = entity.record  # type: ignore[assignment]
    max_target = record.max_target
    if max_target is None:
        max_target = context.rules.mastery_max_target

    mastery = entity.new_stack(
        MASTERY,
        base=record.mastery_base,
        min_target=record.min_target,
        max_target=max_target,
    )

    skill_base = SkillBase(record.skill_base_formula)
    entity.values["skill_base"] = skill_base
    if skill_base.invalid:
        mastery.disable(DisabledReason.INVALID_SKILL_BASE)
        logger.warning(
            "skill_base_formula_invalid",
            owner_id=entity.owner.id,
            entity_id=entity.id,
            formula=record.skill_base_formula,
        )


def evaluate_mastery(entity: Entity, context: DerivationContext) -> None:
    record: MasteryRecordBase = entity.record  # type: ignore[assignment]
    mastery = entity.stack(MASTERY)

    skill_base: SkillBase = entity.values["skill_base"]
    skill_base.resolve(attribute_scores(entity.owner), entity.owner.record.sunsigns)

    if mastery.base > 0 and record.boosts:
        mastery.set_base(apply_mastery_boosts(mastery.base, record.boosts))

    if mastery.max_target is not None and mastery.base > mastery.max_target:
        mastery.set_base(mastery.max_target)


# ---------------------------------------------------------------------------
# Fate capability
# ---------------------------------------------------------------------------


def initialize_fate(entity: Entity, context: DerivationContext) -> None:
    rules = context.rules
    fate = entity.new_stack(FATE)

    match rules.fate_mode:
        case FateMode.EVERYONE:
            fate.set_base(rules.fate_default_base)
        case FateMode.PC_ONLY:
            if entity.owner.has_player_owner:
                fate.set_base(rules.fate_default_base)
            else:
                fate.disable(DisabledReason.NPC_FATE_DISABLED)
        case FateMode.TRAIT_ONLY:
            pass
        case FateMode.NONE:
            fate.disable(DisabledReason.FATE_NOT_SUPPORTED)


def evaluate_fate(entity: Entity, context: DerivationContext) -> None:
    skill_base: SkillBase = entity.values["skill_base"]
    if AURA_ATTRIBUTE in skill_base.attributes:
        entity.stack(FATE).disable(DisabledReason.AURA_BASED_NO_FATE)


def finalize_fate(entity: Entity, context: DerivationContext) -> None:
    record: MasteryRecordBase = entity.record  # type: ignore[assignment]
    rules = context.rules
    mastery = entity.stack(MASTERY)
    fate = entity.stack(FATE)

    if mastery.disabled:
        fate.disable(DisabledReason.MASTERY_DISABLED)
    if fate.disabled:
        return

    fate_trait = find_fate_trait(entity.owner)
    if fate_trait is not None:
        fate.set_base(0)
        fate.add_vm(fate_trait.settled(MASTERY), include_base=True)
    elif rules.fate_mode == FateMode.TRAIT_ONLY:
        fate.disable(DisabledReason.NO_FATE_TRAIT)
        return

    if record.magic_mod:
        fate.add(DeltaSource.MAGIC_MOD, record.magic_mod)

    for bonus in fate_bonuses_for(entity):
        level = bonus.settled("level").effective or 0
        fate.add(DeltaSource.FATE_BONUS, level, tags={bonus.name})

    if rules.fate_requires_mystery and not applicable_fate(entity):
        fate.disable(DisabledReason.NO_FATE_AVAILABLE)
