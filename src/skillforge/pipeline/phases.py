"""Derivation phases and the capability hook table type."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from skillforge.entities.kinds import Capability, PhaseState

if TYPE_CHECKING:
    from skillforge.entities.entity import Entity
    from skillforge.pipeline.context import DerivationContext


class Phase(StrEnum):
    """The three barrier-separated stages of a derivation pass."""

    INITIALIZE = "initialize"
    EVALUATE = "evaluate"
    FINALIZE = "finalize"

    @property
    def requires(self) -> PhaseState:
        """State every entity must be in before this phase runs on it."""
        return _TRANSITIONS[self][0]

    @property
    def produces(self) -> PhaseState:
        """State an entity is in once this phase completed on it."""
        return _TRANSITIONS[self][1]


_TRANSITIONS: dict[Phase, tuple[PhaseState, PhaseState]] = {
    Phase.INITIALIZE: (PhaseState.UNINITIALIZED, PhaseState.INITIALIZED),
    Phase.EVALUATE: (PhaseState.INITIALIZED, PhaseState.EVALUATED),
    Phase.FINALIZE: (PhaseState.EVALUATED, PhaseState.FINALIZED),
}

PHASE_ORDER: tuple[Phase, ...] = (Phase.INITIALIZE, Phase.EVALUATE, Phase.FINALIZE)

PhaseFn = Callable[["Entity", "DerivationContext"], None]


@dataclass(frozen=True)
class CapabilityHooks:
    """Free functions implementing one capability, one per phase."""

    initialize: PhaseFn | None = None
    evaluate: PhaseFn | None = None
    finalize: PhaseFn | None = None

    def for_phase(self, phase: Phase) -> PhaseFn | None:
        match phase:
            case Phase.INITIALIZE:
                return self.initialize
            case Phase.EVALUATE:
                return self.evaluate
            case Phase.FINALIZE:
                return self.finalize
        raise ValueError(f"Unknown phase: {phase!r}")


HookTable = Mapping[Capability, CapabilityHooks]
