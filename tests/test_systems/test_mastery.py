"""Tests for mastery levels and fate."""

import pytest
from structlog.testing import capture_logs

from skillforge.config import FateMode, RulesConfig
from skillforge.entities.kinds import EntityKind
from skillforge.pipeline.context import DerivationContext
from skillforge.pipeline.orchestrator import DerivationPipeline
from skillforge.systems.mastery import (
    FATE,
    MASTERY,
    apply_mastery_boosts,
    calc_mastery_boost,
)


def derive(owner, **rules):
    return DerivationPipeline(DerivationContext(rules=RulesConfig(**rules))).run(owner)


FATE_TRAIT = {
    "id": "t-fate",
    "kind": "trait",
    "name": "Fate",
    "abbrev": "fate",
    "mastery_base": 40,
}


class TestMasteryBoost:
    """Tests for the boost table."""

    @pytest.mark.parametrize(
        "level,boost",
        [
            (0, 10),
            (39, 10),
            (40, 9),
            (44, 9),
            (45, 8),
            (49, 8),
            (50, 7),
            (59, 7),
            (60, 6),
            (69, 6),
            (70, 5),
            (79, 5),
            (80, 4),
            (99, 4),
            (100, 3),
            (150, 3),
        ],
    )
    def test_breakpoints(self, level, boost):
        assert calc_mastery_boost(level) == boost

    def test_boost_never_increases_with_level(self):
        """Higher levels never get a bigger boost."""
        boosts = [calc_mastery_boost(level) for level in range(0, 200)]
        assert all(a >= b for a, b in zip(boosts, boosts[1:]))

    def test_boosts_compound(self):
        """Each boost is computed against the already boosted level."""
        assert apply_mastery_boosts(45, 2) == 60

    def test_zero_boosts(self):
        assert apply_mastery_boosts(45, 0) == 45


class TestMasteryDerivation:
    """Tests for the mastery stack over a full pass."""

    def test_boosted_mastery(self, warrior, pipeline):
        """Base 45 with two boosts becomes 60."""
        state = pipeline.run(warrior)
        assert state.stack("s-sword", MASTERY).effective == 60

    def test_skill_base_resolved(self, warrior, pipeline):
        """The skill base averages STR and DEX and adds the sunsign bonus."""
        state = pipeline.run(warrior)
        assert state.entity("s-sword").values["skill_base"].value == 15

    def test_zero_base_not_boosted(self, make_owner, pipeline):
        """Boosts only apply to a positive mastery base."""
        owner = make_owner(
            [{"id": "s-new", "kind": "skill", "name": "Dance", "mastery_base": 0, "boosts": 3}]
        )
        state = pipeline.run(owner)
        assert state.stack("s-new", MASTERY).effective == 0

    def test_clamped_to_max_target(self, make_owner, pipeline):
        """A boosted base is capped by the record's max target."""
        owner = make_owner(
            [
                {
                    "id": "s-cap",
                    "kind": "skill",
                    "name": "Capped",
                    "mastery_base": 90,
                    "boosts": 3,
                    "max_target": 95,
                }
            ]
        )
        state = pipeline.run(owner)
        assert state.stack("s-cap", MASTERY).effective == 95

    def test_rules_max_target_fallback(self, make_owner):
        """Without a record max target the rules default caps the base."""
        owner = make_owner(
            [{"id": "s-cap", "kind": "skill", "name": "Capped", "mastery_base": 90, "boosts": 3}]
        )
        state = derive(owner, mastery_max_target=92)
        assert state.stack("s-cap", MASTERY).effective == 92

    def test_invalid_formula_disables_mastery(self, make_owner, pipeline):
        """An unparsable skill base formula disables mastery, and with it fate."""
        owner = make_owner(
            [
                {
                    "id": "s-bad",
                    "kind": "skill",
                    "name": "Broken",
                    "skill_base_formula": "@str:x",
                    "mastery_base": 40,
                }
            ]
        )
        with capture_logs() as logs:
            state = pipeline.run(owner)

        assert state.stack("s-bad", MASTERY).disabled_reason == "Invalid skill base formula"
        assert state.stack("s-bad", FATE).disabled_reason == "Mastery level disabled"
        assert any(log["event"] == "skill_base_formula_invalid" for log in logs)


class TestFateModes:
    """Tests for the fate availability modes."""

    def test_everyone(self, warrior):
        state = derive(warrior, fate_mode=FateMode.EVERYONE)
        # 50 default plus the Lucky Blade fate bonus
        assert state.stack("s-sword", FATE).effective == 55

    def test_pc_only_for_player(self, warrior):
        state = derive(warrior, fate_mode=FateMode.PC_ONLY)
        assert state.stack("s-sword", FATE).effective == 55

    def test_pc_only_for_npc(self, make_owner):
        owner = make_owner(has_player_owner=False)
        state = derive(owner, fate_mode=FateMode.PC_ONLY)
        fate = state.stack("s-sword", FATE)
        assert fate.effective is None
        assert fate.disabled_reason == "Non-player character fate disabled"

    def test_trait_only_without_trait(self, warrior):
        state = derive(warrior, fate_mode=FateMode.TRAIT_ONLY)
        assert state.stack("s-sword", FATE).disabled_reason == "No fate trait"

    def test_trait_only_with_trait(self, make_owner):
        """The Fate trait's mastery becomes the fate value."""
        owner = make_owner([FATE_TRAIT])
        state = derive(owner, fate_mode=FateMode.TRAIT_ONLY)
        fate = state.stack("s-sword", FATE)
        assert fate.base == 0
        assert fate.effective == 45
        assert "t-fate.mastery" in [c.source_name for c in fate.contributions]

    def test_fate_trait_overrides_default(self, make_owner):
        owner = make_owner([FATE_TRAIT])
        state = derive(owner, fate_mode=FateMode.EVERYONE)
        assert state.stack("s-sword", FATE).effective == 45

    def test_none(self, warrior):
        state = derive(warrior, fate_mode=FateMode.NONE)
        assert state.stack("s-sword", FATE).disabled_reason == "Fate not supported"


class TestFateRules:
    """Tests for fate adjustments and disablement."""

    def test_aura_disables_fate(self, warrior, pipeline):
        """A skill based on Aura never has fate."""
        state = pipeline.run(warrior)
        fate = state.stack("s-ritual", FATE)
        assert fate.disabled_reason == "Aura-based, no fate"
        assert state.stack("s-ritual", MASTERY).effective == 30

    def test_first_disable_reason_wins(self, make_owner):
        """Fate not supported is reported even when mastery is also disabled."""
        owner = make_owner(
            [
                {
                    "id": "s-bad",
                    "kind": "skill",
                    "name": "Broken",
                    "skill_base_formula": "@str:x",
                }
            ]
        )
        state = derive(owner, fate_mode=FateMode.NONE)
        fate = state.stack("s-bad", FATE)
        assert fate.disabled_reason == "Fate not supported"
        assert "Mastery level disabled" in fate.disabled_history

    def test_magic_mod(self, make_owner):
        owner = make_owner(
            [{"id": "s-magic", "kind": "skill", "name": "Charm", "magic_mod": -5}]
        )
        state = derive(owner)
        fate = state.stack("s-magic", FATE)
        assert fate.effective == 45
        assert [c.source_name for c in fate.contributions] == ["MagicMod"]

    def test_fate_bonus_only_for_listed_skill(self, make_owner):
        """A fate bonus restricted to Sword does not touch other skills."""
        owner = make_owner([{"id": "s-bow", "kind": "skill", "name": "Bow"}])
        state = derive(owner)
        assert state.stack("s-bow", FATE).effective == 50
        assert state.stack("s-sword", FATE).effective == 55

    def test_fate_bonus_without_charges(self, make_owner):
        """A fate bonus with no charges left does not apply."""
        owner = make_owner(
            [
                {
                    "id": "m-spent",
                    "kind": "mystery",
                    "name": "Spent Luck",
                    "subtype": "fate_bonus",
                    "level_base": 10,
                    "charges_value": 0,
                }
            ]
        )
        state = derive(owner)
        assert state.stack("s-sword", FATE).effective == 55

    def test_unlimited_fate_bonus_applies_to_all(self, make_owner):
        owner = make_owner(
            [
                {
                    "id": "m-blessing",
                    "kind": "mystery",
                    "name": "Blessing",
                    "subtype": "fate_bonus",
                    "level_base": 3,
                }
            ]
        )
        state = derive(owner)
        assert state.stack("s-sword", FATE).effective == 58
        assert state.stack("m-blessing", "charges").disabled_reason == "Unlimited charges"

    def test_requires_fate_mystery(self, make_owner):
        """With fate_requires_mystery, only skills covered by a fate mystery keep fate."""
        owner = make_owner(
            [
                {
                    "id": "m-fate",
                    "kind": "mystery",
                    "name": "Fated Blade",
                    "subtype": "fate",
                    "level_base": 1,
                    "skills": ["Sword"],
                },
                {"id": "s-bow", "kind": "skill", "name": "Bow"},
            ]
        )
        state = derive(owner, fate_requires_mystery=True)
        assert state.stack("s-sword", FATE).effective == 55
        assert state.stack("s-bow", FATE).disabled_reason == "No fate available"

    def test_traits_have_no_fate(self, warrior, pipeline):
        state = pipeline.run(warrior)
        strength = state.find(EntityKind.TRAIT, "Strength")
        assert FATE not in strength.stacks
        assert strength.stack(MASTERY).effective == 12
