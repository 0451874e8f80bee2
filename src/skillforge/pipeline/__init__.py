"""Derivation phases and context.

The pipeline itself lives in :mod:`skillforge.pipeline.orchestrator`; it is not
re-exported here because the capability modules import this package.
"""

from .context import DerivationContext
from .phases import PHASE_ORDER, CapabilityHooks, HookTable, Phase, PhaseFn

__all__ = [
    "PHASE_ORDER",
    "CapabilityHooks",
    "DerivationContext",
    "HookTable",
    "Phase",
    "PhaseFn",
]
