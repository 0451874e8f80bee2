"""Well-known contribution sources and disablement reasons."""

from enum import StrEnum


class DeltaSource(StrEnum):
    """Short audit names for contributions added by the rules engine."""

    ATTACK = "Atk"
    BLOCK = "Blk"
    COUNTERSTRIKE = "CXMod"
    DURABILITY = "Dur"
    FATE_BONUS = "FateBns"
    MAGIC_MOD = "MagicMod"
    OUTNUMBERED = "Outn"
    PLAYER = "SitMod"
    SKILL_BASE = "SB"


class DisabledReason(StrEnum):
    """Displayable reasons a stack may be switched off."""

    AURA_BASED_NO_FATE = "Aura-based, no fate"
    FATE_NOT_SUPPORTED = "Fate not supported"
    INVALID_SKILL_BASE = "Invalid skill base formula"
    MASTERY_DISABLED = "Mastery level disabled"
    NO_ATTACK = "No attack"
    NO_BLOCK = "No block"
    NO_COUNTERSTRIKE = "No counterstrike"
    NO_FATE_AVAILABLE = "No fate available"
    NO_FATE_TRAIT = "No fate trait"
    NPC_FATE_DISABLED = "Non-player character fate disabled"
    UNLIMITED_CHARGES = "Unlimited charges"
