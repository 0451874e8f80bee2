"""Context passed to every phase function."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from skillforge.config import RulesConfig, Settings

if TYPE_CHECKING:
    from skillforge.systems.combat import CombatSnapshot


@dataclass(frozen=True)
class DerivationContext:
    """
    Everything a phase function may consult besides the entities themselves.

    Attributes:
        rules: Immutable rules configuration
        combat: Active combat state, or None when the owner is not in combat
    """

    rules: RulesConfig = field(default_factory=RulesConfig)
    combat: "CombatSnapshot | None" = None

    @classmethod
    def from_settings(
        cls, settings: Settings, combat: "CombatSnapshot | None" = None
    ) -> "DerivationContext":
        return cls(rules=RulesConfig.from_settings(settings), combat=combat)
