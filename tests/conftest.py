"""Shared fixtures for all tests."""

import copy
from pathlib import Path
from typing import Any

import pytest
import structlog

from skillforge.config import get_settings
from skillforge.dice import RollResult, parse_dice
from skillforge.entities.loader import load_owner
from skillforge.entities.records import OwnerRecord
from skillforge.pipeline.context import DerivationContext
from skillforge.pipeline.orchestrator import DerivationPipeline

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FixedRoller:
    """Roller that returns preset die faces in order, plus any flat modifiers."""

    def __init__(self, *faces: int) -> None:
        self.faces = list(faces)
        self.formulas: list[str] = []

    def roll(self, formula: str) -> RollResult:
        self.formulas.append(formula)
        face = self.faces.pop(0)
        flat = sum(sign * count for sign, count, sides in parse_dice(formula) if not sides)
        return RollResult(total=face + flat, breakdown=f"{formula} [{face}]", dice=(face,))


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; start every test from a clean slate."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration made by a test (e.g. through the CLI)."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def roller_factory():
    """Build a FixedRoller from die faces."""
    return FixedRoller


@pytest.fixture
def warrior_data() -> dict[str, Any]:
    """A player character with attributes, a boosted skill, a weapon and a fate bonus."""
    return {
        "id": "char-aldric",
        "name": "Aldric",
        "has_player_owner": True,
        "sunsigns": ["hirin"],
        "items": [
            {
                "id": "t-str",
                "kind": "trait",
                "name": "Strength",
                "abbrev": "str",
                "intensity": "attribute",
                "mastery_base": 12,
            },
            {
                "id": "t-dex",
                "kind": "trait",
                "name": "Dexterity",
                "abbrev": "dex",
                "intensity": "attribute",
                "mastery_base": 14,
            },
            {
                "id": "t-aur",
                "kind": "trait",
                "name": "Aura",
                "abbrev": "aur",
                "intensity": "attribute",
                "mastery_base": 9,
            },
            {
                "id": "s-sword",
                "kind": "skill",
                "name": "Sword",
                "abbrev": "swd",
                "skill_base_formula": "@str, @dex, hirin:2",
                "mastery_base": 45,
                "boosts": 2,
            },
            {
                "id": "s-ritual",
                "kind": "skill",
                "name": "Ritual",
                "abbrev": "rit",
                "skill_base_formula": "@aur, @int",
                "mastery_base": 30,
            },
            {
                "id": "m-luck",
                "kind": "mystery",
                "name": "Lucky Blade",
                "subtype": "fate_bonus",
                "level_base": 5,
                "charges_value": 2,
                "skills": ["Sword"],
            },
            {
                "id": "g-sword",
                "kind": "weapon_gear",
                "name": "Broadsword",
                "durability_base": 12,
                "length_base": 4,
                "strike_modes": [
                    {
                        "id": "sm-swing",
                        "kind": "melee_strike_mode",
                        "name": "Swing",
                        "assoc_skill_name": "Sword",
                        "attack_base": 5,
                        "counterstrike_base": 5,
                        "impact": {"num_dice": 2, "die": 6, "modifier": 1, "aspect": "edged"},
                    }
                ],
                "events": [
                    {"id": "ev-oil", "kind": "event", "name": "Oil the blade"},
                ],
            },
        ],
    }


@pytest.fixture
def make_owner(warrior_data):
    """Build an OwnerRecord from the warrior data, appending items and overriding owner fields."""

    def _make(extra_items: list[dict[str, Any]] | None = None, **overrides: Any) -> OwnerRecord:
        data = copy.deepcopy(warrior_data)
        data.update(overrides)
        data["items"] = data["items"] + list(extra_items or [])
        return load_owner(data)

    return _make


@pytest.fixture
def warrior(make_owner) -> OwnerRecord:
    return make_owner()


@pytest.fixture
def pipeline() -> DerivationPipeline:
    return DerivationPipeline(DerivationContext())
