"""Derived state of an owner and the store that keeps the last good one."""

from collections.abc import Callable
from typing import Any

import structlog

from skillforge.entities.entity import Entity, OwnerView
from skillforge.entities.kinds import EntityKind
from skillforge.entities.records import OwnerRecord
from skillforge.errors import SkillforgeError
from skillforge.modifiers import ModifierStack

logger = structlog.get_logger(__name__)


class DerivedState:
    """The fully derived entities of one owner after a successful pass."""

    def __init__(self, owner: OwnerView) -> None:
        self.owner = owner

    @property
    def owner_id(self) -> str:
        return self.owner.id

    def entity(self, entity_id: str) -> Entity:
        entity = self.owner.get(entity_id)
        if entity is None:
            raise KeyError(entity_id)
        return entity

    def find(self, kind: EntityKind, name: str) -> Entity | None:
        return self.owner.find(kind, name)

    def stack(self, entity_id: str, name: str) -> ModifierStack:
        return self.entity(entity_id).stack(name)

    def snapshot(self) -> dict[str, dict[str, int | None]]:
        """Effective value of every stack, keyed by entity ID then stack name."""
        return {
            entity.id: {name: stack.effective for name, stack in sorted(entity.stacks.items())}
            for entity in sorted(self.owner, key=lambda e: e.id)
        }

    def to_dict(self) -> dict[str, Any]:
        """Full audit view: stacks with contributions and disabled reasons."""
        return {
            "owner": {"id": self.owner.id, "name": self.owner.name},
            "entities": [
                {
                    "id": entity.id,
                    "name": entity.name,
                    "kind": str(entity.kind),
                    "stacks": [stack.to_dict() for _, stack in sorted(entity.stacks.items())],
                }
                for entity in sorted(self.owner, key=lambda e: e.id)
            ],
        }


class DerivedStateStore:
    """
    Keeps the last successfully derived state per owner.

    A failed pass never replaces the stored state.

    Args:
        derive: Runs one full derivation pass for an owner record
    """

    def __init__(self, derive: Callable[[OwnerRecord], DerivedState]) -> None:
        self._derive = derive
        self._states: dict[str, DerivedState] = {}

    def get(self, owner_id: str) -> DerivedState | None:
        return self._states.get(owner_id)

    def refresh(self, owner: OwnerRecord) -> DerivedState:
        """
        Re-derive an owner and store the result.

        Raises:
            SkillforgeError: If the pass fails; the previous state is kept
        """
        try:
            state = self._derive(owner)
        except SkillforgeError as e:
            logger.error(
                "derivation_failed",
                owner_id=owner.id,
                error=str(e),
                kept_previous=owner.id in self._states,
            )
            raise

        self._states[owner.id] = state
        return state
