"""Exception hierarchy for skillforge."""


class SkillforgeError(Exception):
    """Base class for all skillforge errors."""

    pass


class SnapshotLoadError(SkillforgeError):
    """Raised when an owner snapshot cannot be read or parsed."""

    pass


class SnapshotValidationError(SkillforgeError):
    """Raised when an owner snapshot fails schema validation."""

    pass


class DiceFormulaError(SkillforgeError):
    """Raised when a dice formula cannot be parsed."""

    pass


class DerivationError(SkillforgeError):
    """Base class for errors that abort a derivation pass."""

    pass


class PhaseOrderError(DerivationError):
    """Raised when an entity is driven through its phases out of order."""

    pass


class BarrierViolationError(DerivationError):
    """Raised when an entity reads a sibling that has not reached a phase yet."""

    pass


class StructuralAssociationError(DerivationError):
    """Raised when a nested association points at an unsupported container."""

    pass


class PhaseFailedError(DerivationError):
    """Wraps an unexpected exception raised inside a phase function."""

    def __init__(self, phase: str, entity_id: str, message: str) -> None:
        super().__init__(f"{phase} failed for entity {entity_id}: {message}")
        self.phase = phase
        self.entity_id = entity_id


class TestUnavailableError(SkillforgeError):
    """Raised when a success test is requested against a disabled stack."""

    __test__ = False

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
