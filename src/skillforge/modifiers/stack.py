"""Modifier stacks: a base value plus named, auditable contributions.

A stack is the atomic value primitive of the rules engine. Every derived
number (mastery, fate, attack, block, durability, ...) is a stack owned by
exactly one entity. Other entities never hold a reference to it; they copy its
effective value in with :meth:`ModifierStack.add_vm`.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

VM_TAG = "vm"
DISABLED_SOURCE_TAG = "disabled"


@dataclass(frozen=True)
class Contribution:
    """A single named delta appended to a stack."""

    source_name: str
    delta: int
    tags: frozenset[str] = field(default_factory=frozenset)

    def describe(self) -> str:
        sign = "+" if self.delta > 0 else ""
        return f"{self.source_name} {sign}{self.delta}"


class ModifierStack:
    """
    A base value plus an ordered list of contributions.

    ``effective`` is ``base + sum(deltas)`` while enabled and ``None`` once the
    stack has been disabled. Contributions are kept in insertion order for
    display, but the sum never depends on that order.
    """

    def __init__(
        self,
        name: str,
        owner_id: str | None = None,
        base: int = 0,
        min_target: int | None = None,
        max_target: int | None = None,
    ) -> None:
        """
        Create a stack.

        Args:
            name: Stack name within its entity (e.g. "mastery", "block")
            owner_id: ID of the entity that owns this stack
            base: Initial base value
            min_target: Optional lower bound for ``constrained_effective``
            max_target: Optional upper bound for ``constrained_effective``
        """
        self.name = name
        self.owner_id = owner_id
        self.min_target = min_target
        self.max_target = max_target
        self._base = _as_number(base)
        self._contributions: list[Contribution] = []
        self._disabled_history: list[str] = []
        self._cached: int | None = None
        self._dirty = True

    def __repr__(self) -> str:
        return (
            f"ModifierStack({self.identity!r}, base={self._base}, "
            f"effective={self.effective}, disabled={self.disabled_reason!r})"
        )

    @property
    def identity(self) -> str:
        """Qualified name used when this stack is merged into another."""
        if self.owner_id:
            return f"{self.owner_id}.{self.name}"
        return self.name

    @property
    def base(self) -> int:
        return self._base

    def set_base(self, value: int) -> "ModifierStack":
        """Set the base value, silently replacing any earlier base."""
        self._base = _as_number(value)
        self.invalidate()
        return self

    @property
    def contributions(self) -> tuple[Contribution, ...]:
        return tuple(self._contributions)

    def add(
        self, source_name: str, delta: int, tags: Iterable[str] | None = None
    ) -> "ModifierStack":
        """
        Append a named contribution.

        Contributions are recorded even while the stack is disabled so the audit
        trail stays complete; they just do not count towards ``effective``.

        Args:
            source_name: Display/audit name of the contribution
            delta: Signed amount
            tags: Optional labels (e.g. the skill a bonus came from)

        Returns:
            This stack, for chaining
        """
        contribution = Contribution(
            source_name=str(source_name),
            delta=_as_number(delta),
            tags=frozenset(tags or ()),
        )
        self._contributions.append(contribution)
        self.invalidate()
        return self

    def add_vm(self, other: "ModifierStack", include_base: bool = False) -> "ModifierStack":
        """
        Merge another stack's value in as one contribution.

        Args:
            other: A stack owned by some other entity
            include_base: Copy the full effective value when True, otherwise only
                the other stack's modifier (effective minus base)

        Returns:
            This stack, for chaining
        """
        if other is self:
            raise ValueError("a stack cannot merge itself")

        tags = {VM_TAG, other.identity}
        if other.disabled:
            tags.add(DISABLED_SOURCE_TAG)
            delta = 0
        elif include_base:
            delta = other.effective or 0
        else:
            delta = other.modifier

        return self.add(other.identity, delta, tags)

    def disable(self, reason: str) -> "ModifierStack":
        """
        Switch the stack off.

        The first reason wins; later reasons are kept in ``disabled_history``.
        """
        self._disabled_history.append(str(reason))
        self.invalidate()
        return self

    @property
    def disabled_reason(self) -> str | None:
        return self._disabled_history[0] if self._disabled_history else None

    @property
    def disabled_history(self) -> tuple[str, ...]:
        return tuple(self._disabled_history)

    @property
    def disabled(self) -> bool:
        return bool(self._disabled_history)

    def invalidate(self) -> None:
        """Drop the cached effective value."""
        self._dirty = True
        self._cached = None

    @property
    def effective(self) -> int | None:
        if self._dirty:
            if self.disabled:
                self._cached = None
            else:
                self._cached = self._base + sum(c.delta for c in self._contributions)
            self._dirty = False
        return self._cached

    @property
    def modifier(self) -> int:
        """Effective value minus base (0 while disabled)."""
        effective = self.effective
        if effective is None:
            return 0
        return effective - self._base

    @property
    def constrained_effective(self) -> int | None:
        """Effective value clamped into ``[min_target, max_target]``."""
        effective = self.effective
        if effective is None:
            return None
        if self.max_target is not None:
            effective = min(self.max_target, effective)
        if self.min_target is not None:
            effective = max(self.min_target, effective)
        return effective

    @property
    def abbrev(self) -> str:
        """Short audit summary, e.g. ``"Outn -20, FateBns +5"``."""
        if self.disabled:
            return f"Disabled: {self.disabled_reason}"
        return ", ".join(c.describe() for c in self._contributions)

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for presenters and the CLI."""
        return {
            "name": self.name,
            "identity": self.identity,
            "base": self._base,
            "effective": self.effective,
            "disabled_reason": self.disabled_reason,
            "contributions": [
                {"source": c.source_name, "delta": c.delta, "tags": sorted(c.tags)}
                for c in self._contributions
            ],
        }


def _as_number(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"modifier values must be numeric, got {value!r}")
    return value
