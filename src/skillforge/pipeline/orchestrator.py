"""
Derivation pipeline for skillforge.

Every pass rebuilds the owner's entities from their records and drives them
through initialize, evaluate and finalize. Each phase runs over the whole
entity set before the next one starts, so any entity may read what its
siblings produced in an earlier phase without caring about iteration order.
"""

import structlog

from skillforge.entities.entity import Entity, OwnerView
from skillforge.entities.kinds import Capability
from skillforge.entities.records import OwnerRecord
from skillforge.errors import PhaseFailedError, PhaseOrderError, SkillforgeError
from skillforge.pipeline.capabilities import CAPABILITY_HOOKS
from skillforge.pipeline.context import DerivationContext
from skillforge.pipeline.phases import PHASE_ORDER, HookTable, Phase
from skillforge.pipeline.state import DerivedState

logger = structlog.get_logger(__name__)


class DerivationPipeline:
    """
    Runs derivation passes.

    Args:
        context: Rules and combat state handed to every phase function
        hooks: Capability to phase function table
    """

    def __init__(
        self, context: DerivationContext | None = None, hooks: HookTable | None = None
    ) -> None:
        self.context = context or DerivationContext()
        self.hooks = hooks if hooks is not None else CAPABILITY_HOOKS

    def build(self, owner: OwnerRecord) -> OwnerView:
        """Create fresh, uninitialized entities for every record of ``owner``."""
        view = OwnerView(owner)
        for record in owner.items:
            view.attach(Entity.from_record(record, view))
        return view

    def advance(self, entity: Entity, phase: Phase) -> None:
        """
        Run one phase on one entity.

        Raises:
            PhaseOrderError: If the entity is not in the state the phase requires
            PhaseFailedError: If a phase function raised an unexpected exception
        """
        if entity.phase_state != phase.requires:
            raise PhaseOrderError(
                f"Cannot {phase} entity {entity.id!r}: it is "
                f"{entity.phase_state.name.lower()}, needs {phase.requires.name.lower()}"
            )

        for capability in Capability:
            if capability not in entity.capabilities:
                continue
            hooks = self.hooks.get(capability)
            fn = hooks.for_phase(phase) if hooks is not None else None
            if fn is None:
                continue
            try:
                fn(entity, self.context)
            except SkillforgeError:
                raise
            except Exception as e:
                raise PhaseFailedError(str(phase), entity.id, f"{type(e).__name__}: {e}") from e

        entity.phase_state = phase.produces

    def run_phase(self, owner: OwnerView, phase: Phase) -> None:
        """
        Run ``phase`` over every entity of ``owner``.

        All entities are checked before any of them runs, and every stack is
        invalidated once the whole set has finished the phase.
        """
        entities = list(owner)
        for entity in entities:
            if entity.phase_state != phase.requires:
                raise PhaseOrderError(
                    f"Cannot {phase} owner {owner.id!r}: entity {entity.id!r} is "
                    f"{entity.phase_state.name.lower()}"
                )

        for entity in entities:
            self.advance(entity, phase)

        for entity in entities:
            for stack in entity.stacks.values():
                stack.invalidate()

        logger.debug("phase_completed", owner_id=owner.id, phase=str(phase), entities=len(entities))

    def run(self, owner: OwnerRecord) -> DerivedState:
        """
        Run a full derivation pass.

        Returns:
            The derived state of every entity

        Raises:
            SkillforgeError: If any phase fails; the pass is abandoned
        """
        view = self.build(owner)
        logger.debug("derivation_started", owner_id=owner.id, entities=len(view))

        for phase in PHASE_ORDER:
            self.run_phase(view, phase)

        logger.info("derivation_completed", owner_id=owner.id, entities=len(view))
        return DerivedState(view)
