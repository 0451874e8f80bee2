"""Runtime entities and the per-pass owner view."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from skillforge.entities.kinds import Capability, EntityKind, PhaseState, capabilities_for
from skillforge.errors import BarrierViolationError
from skillforge.modifiers import ModifierStack

if TYPE_CHECKING:
    from skillforge.entities.records import EntityRecord, OwnerRecord


@dataclass(eq=False)
class Entity:
    """
    One child computation unit of an owner (a skill, a weapon, a strike mode...).

    Entities are rebuilt from their records on every derivation pass. An
    entity only ever writes to its own ``stacks`` and ``values``; it reads
    siblings through :meth:`settled`, which refuses reads that the phase
    barrier does not yet make safe.

    Attributes:
        id: Record ID
        name: Record name
        kind: Explicit entity kind
        record: The validated persisted record
        capabilities: Behaviour this entity takes part in
        owner: Read-only view of the owner and all sibling entities
        phase_state: Where this entity is in its lifecycle
        stacks: Modifier stacks owned by this entity
        values: Plain derived values (lengths, resolved associations, ...)
    """

    id: str
    name: str
    kind: EntityKind
    record: "EntityRecord"
    capabilities: frozenset[Capability]
    owner: "OwnerView" = field(repr=False)
    phase_state: PhaseState = PhaseState.UNINITIALIZED
    stacks: dict[str, ModifierStack] = field(default_factory=dict, repr=False)
    values: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_record(cls, record: "EntityRecord", owner: "OwnerView") -> "Entity":
        kind = record.entity_kind
        return cls(
            id=record.id,
            name=record.name,
            kind=kind,
            record=record,
            capabilities=capabilities_for(kind),
            owner=owner,
        )

    @property
    def nested_in(self) -> str | None:
        return self.record.nested_in

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def new_stack(self, name: str, base: int = 0, **bounds: int | None) -> ModifierStack:
        """Create and register a stack owned by this entity."""
        stack = ModifierStack(name, owner_id=self.id, base=base, **bounds)
        self.stacks[name] = stack
        return stack

    def stack(self, name: str) -> ModifierStack:
        """Return one of this entity's own stacks."""
        return self.stacks[name]

    def settled(
        self, name: str, at_least: PhaseState = PhaseState.EVALUATED
    ) -> ModifierStack:
        """
        Return a stack for reading by another entity.

        Args:
            name: Stack name
            at_least: Phase state this entity must have reached for the stack
                to be safe to read

        Returns:
            The stack

        Raises:
            BarrierViolationError: If this entity has not reached ``at_least``
        """
        if self.phase_state < at_least:
            raise BarrierViolationError(
                f"{self.id}.{name} read while {self.id} is {self.phase_state.name.lower()}"
                f" (needs {at_least.name.lower()})"
            )
        return self.stacks[name]

    def settled_value(self, key: str, at_least: PhaseState = PhaseState.EVALUATED) -> Any:
        """Like :meth:`settled` but for plain values."""
        if self.phase_state < at_least:
            raise BarrierViolationError(
                f"{self.id}.{key} read while {self.id} is {self.phase_state.name.lower()}"
                f" (needs {at_least.name.lower()})"
            )
        return self.values.get(key)


class OwnerView:
    """
    The owner record plus its entity collection for a single pass.

    The collection is fixed once built; phases may look things up but never
    add or remove entities.
    """

    def __init__(self, record: "OwnerRecord") -> None:
        self.record = record
        self._entities: dict[str, Entity] = {}

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def has_player_owner(self) -> bool:
        return self.record.has_player_owner

    def attach(self, entity: Entity) -> None:
        self._entities[entity.id] = entity

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def get(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def of_kind(self, *kinds: EntityKind) -> list[Entity]:
        return [e for e in self._entities.values() if e.kind in kinds]

    def with_capability(self, capability: Capability) -> list[Entity]:
        return [e for e in self._entities.values() if capability in e.capabilities]

    def find(self, kind: EntityKind, name: str) -> Entity | None:
        """Find the entity of ``kind`` with exactly this name.

        If several share the name, the lowest ID wins so lookups do not depend
        on collection order.
        """
        matches = [e for e in self._entities.values() if e.kind == kind and e.name == name]
        if not matches:
            return None
        return min(matches, key=lambda e: e.id)

    def nested_under(self, entity_id: str) -> list[Entity]:
        return [e for e in self._entities.values() if e.nested_in == entity_id]
