"""Modifier stacks and contribution sources."""

from .deltas import DeltaSource, DisabledReason
from .stack import Contribution, ModifierStack

__all__ = [
    "Contribution",
    "DeltaSource",
    "DisabledReason",
    "ModifierStack",
]
