"""The default capability hook table."""

from types import MappingProxyType

from skillforge.entities.kinds import Capability
from skillforge.pipeline.phases import CapabilityHooks, HookTable
from skillforge.systems.combat import (
    evaluate_strike_mode,
    finalize_strike_mode,
    initialize_strike_mode,
)
from skillforge.systems.events import evaluate_event, finalize_event_host
from skillforge.systems.gear import initialize_gear
from skillforge.systems.mastery import (
    evaluate_fate,
    evaluate_mastery,
    finalize_fate,
    initialize_fate,
    initialize_mastery,
)
from skillforge.systems.mystery import initialize_mystery

CAPABILITY_HOOKS: HookTable = MappingProxyType(
    {
        Capability.MASTERY: CapabilityHooks(
            initialize=initialize_mastery,
            evaluate=evaluate_mastery,
        ),
        Capability.FATE: CapabilityHooks(
            initialize=initialize_fate,
            evaluate=evaluate_fate,
            finalize=finalize_fate,
        ),
        Capability.GEAR: CapabilityHooks(initialize=initialize_gear),
        Capability.MYSTERY: CapabilityHooks(initialize=initialize_mystery),
        Capability.STRIKE_MODE: CapabilityHooks(
            initialize=initialize_strike_mode,
            evaluate=evaluate_strike_mode,
            finalize=finalize_strike_mode,
        ),
        Capability.EVENT: CapabilityHooks(evaluate=evaluate_event),
        Capability.EVENT_HOST: CapabilityHooks(finalize=finalize_event_host),
    }
)
