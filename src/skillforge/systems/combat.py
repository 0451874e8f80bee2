"""
Combat values for strike modes.

A strike mode (combat technique, melee or missile mode) owns attack, block,
counterstrike, impact and durability stacks. It draws on the mastery of its
associated skill, on the durability of the gear it is nested in, and, while
its owner is in an active fight, takes an outnumbered penalty on defence.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skillforge.entities.entity import Entity
from skillforge.entities.kinds import GEAR_KINDS, EntityKind, PhaseState
from skillforge.entities.loader import load_yaml_file
from skillforge.entities.records import StrikeModeRecord
from skillforge.errors import SnapshotValidationError, StructuralAssociationError
from skillforge.modifiers import DeltaSource, DisabledReason
from skillforge.pipeline.context import DerivationContext
from skillforge.systems.gear import DURABILITY
from skillforge.systems.mastery import MASTERY

logger = structlog.get_logger(__name__)

ATTACK = "attack"
BLOCK = "block"
COUNTERSTRIKE = "counterstrike"
IMPACT = "impact"

SKILL_DRIVEN_STACKS = (ATTACK, BLOCK, COUNTERSTRIKE)


@dataclass(frozen=True)
class CombatantState:
    """
    One participant of an active combat.

    Attributes:
        owner_id: ID of the owner taking part
        defeated: True once the participant is out of the fight
        threatening_count: Number of opponents currently threatening it
    """

    owner_id: str
    defeated: bool = False
    threatening_count: int = 0


@dataclass(frozen=True)
class CombatSnapshot:
    """Read-only view of the active combat, injected into a derivation pass."""

    combatants: tuple[CombatantState, ...] = ()

    def participant(self, owner_id: str) -> CombatantState | None:
        for combatant in self.combatants:
            if combatant.owner_id == owner_id:
                return combatant
        return None


class _CombatantSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    owner_id: str = Field(..., min_length=1)
    defeated: bool = False
    threatening_count: int = Field(default=0, ge=0)


class _CombatSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    combatants: list[_CombatantSchema] = Field(default_factory=list)


def load_combat(data: dict[str, Any]) -> CombatSnapshot:
    """
    Build a combat snapshot from plain data.

    Raises:
        SnapshotValidationError: If the data does not match the combat schema
    """
    if "combat" in data and isinstance(data["combat"], dict):
        data = data["combat"]
    try:
        schema = _CombatSchema.model_validate(data)
    except ValidationError as e:
        raise SnapshotValidationError(f"Invalid combat snapshot: {e}") from e

    return CombatSnapshot(
        combatants=tuple(CombatantState(**c.model_dump()) for c in schema.combatants)
    )


def load_combat_file(file_path: Path) -> CombatSnapshot:
    return load_combat(load_yaml_file(file_path))


def outnumbered_penalty(threatening_count: int, step: int = -10) -> int:
    """
    Penalty for being threatened by more than one opponent.

    Examples:
        >>> outnumbered_penalty(3)
        -20
        >>> outnumbered_penalty(1)
        0
    """
    return max(threatening_count - 1, 0) * step


def initialize_strike_mode(entity: Entity, context: DerivationContext) -> None:
    record: StrikeModeRecord = entity.record  # type: ignore[assignment]

    attack = entity.new_stack(ATTACK, base=record.attack_base)
    block = entity.new_stack(BLOCK, base=record.block_base)
    counterstrike = entity.new_stack(COUNTERSTRIKE, base=record.counterstrike_base)
    entity.new_stack(IMPACT, base=record.impact.modifier)
    entity.new_stack(DURABILITY)

    entity.values["impact_dice"] = record.impact.dice
    entity.values["impact_aspect"] = record.impact.aspect

    if record.no_attack:
        attack.disable(DisabledReason.NO_ATTACK)
        counterstrike.disable(DisabledReason.NO_COUNTERSTRIKE)
    if record.no_block:
        block.disable(DisabledReason.NO_BLOCK)

    skill = None
    if record.assoc_skill_name:
        skill = entity.owner.find(EntityKind.SKILL, record.assoc_skill_name)
    entity.values["assoc_skill_id"] = skill.id if skill is not None else None

    if skill is None:
        logger.warning(
            "strike_mode_assoc_skill_missing",
            owner_id=entity.owner.id,
            strike_mode_id=entity.id,
            skill_name=record.assoc_skill_name,
        )


def evaluate_strike_mode(entity: Entity, context: DerivationContext) -> None:
    record: StrikeModeRecord = entity.record  # type: ignore[assignment]
    if entity.kind == EntityKind.COMBAT_TECHNIQUE:
        entity.values["length"] = record.length_base

    container_id = entity.nested_in
    if container_id is None:
        return

    container = entity.owner.get(container_id)
    if container is None or container.kind not in GEAR_KINDS:
        container_kind = container.kind if container is not None else "missing"
        raise StructuralAssociationError(
            f"Strike mode {entity.id!r} is nested in {container_id!r} "
            f"({container_kind}), which is not gear"
        )

    entity.stack(DURABILITY).add_vm(
        container.settled(DURABILITY, at_least=PhaseState.INITIALIZED), include_base=True
    )
    if container.kind == EntityKind.WEAPON_GEAR and entity.kind != EntityKind.COMBAT_TECHNIQUE:
        entity.values["length"] = container.record.length_base  # type: ignore[union-attr]


def finalize_strike_mode(entity: Entity, context: DerivationContext) -> None:
    skill_id = entity.values.get("assoc_skill_id")
    skill = entity.owner.get(skill_id) if skill_id else None
    if skill is not None:
        mastery = skill.settled(MASTERY)
        for name in SKILL_DRIVEN_STACKS:
            entity.stack(name).add_vm(mastery, include_base=True)

    apply_outnumbered(entity, context)


def apply_outnumbered(entity: Entity, context: DerivationContext) -> None:
    """Add the outnumbered penalty to block and counterstrike, if any applies."""
    if context.combat is None:
        return

    participant = context.combat.participant(entity.owner.id)
    if participant is None or participant.defeated:
        return

    penalty = outnumbered_penalty(participant.threatening_count, context.rules.outnumbered_step)
    if not penalty:
        return

    entity.stack(BLOCK).add(DeltaSource.OUTNUMBERED, penalty)
    entity.stack(COUNTERSTRIKE).add(DeltaSource.OUTNUMBERED, penalty)
    logger.debug(
        "outnumbered_penalty_applied",
        owner_id=entity.owner.id,
        strike_mode_id=entity.id,
        threatening_count=participant.threatening_count,
        penalty=penalty,
    )
