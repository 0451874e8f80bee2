"""Skill base formulas.

A skill base formula averages a few attribute scores and adds optional
sunsign and flat modifiers, for example::

    "@str, @int, @sta, hirin:2, ahnu, 5"

averages STR, INT and STA, adds 2 if the owner's sunsign is hirin (1 for ahnu,
only the largest sunsign bonus counts) and adds 5.
"""

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

ATTRIBUTE_PREFIX = "@"
_NUMBER = re.compile(r"^[-+]?\d+$")
_WORD = re.compile(r"^[a-z][a-z0-9_'-]*$")


@dataclass(frozen=True)
class FormulaTerm:
    """One parsed part of a formula: an attribute, a sunsign or a flat modifier."""

    kind: str  # "attr", "sunsign" or "modifier"
    name: str = ""
    amount: int = 1


@dataclass(frozen=True)
class AttributeScore:
    name: str
    score: int


def parse_formula(formula: str) -> list[FormulaTerm] | None:
    """
    Parse a skill base formula.

    Args:
        formula: Comma separated terms (case-insensitive)

    Returns:
        The parsed terms, or None if the formula is empty or invalid
    """
    terms: list[FormulaTerm] = []
    for raw in formula.lower().split(","):
        param = raw.strip()
        if not param:
            continue

        if param.startswith(ATTRIBUTE_PREFIX):
            name, _, mult = param[1:].partition(":")
            name = name.strip()
            if not _WORD.match(name):
                return None
            multiplier = 1
            if mult:
                if not _NUMBER.match(mult.strip()):
                    return None
                multiplier = int(mult)
            terms.append(FormulaTerm("attr", name, multiplier))
            continue

        if _NUMBER.match(param):
            terms.append(FormulaTerm("modifier", amount=int(param)))
            continue

        parts = [p.strip() for p in param.split(":")]
        if len(parts) > 2 or not _WORD.match(parts[0]):
            return None
        amount = 1
        if len(parts) == 2:
            if not _NUMBER.match(parts[1]):
                return None
            amount = int(parts[1])
        terms.append(FormulaTerm("sunsign", parts[0], amount))

    return terms or None


class SkillBase:
    """
    A parsed skill base formula and, once resolved, its value.

    Args:
        formula: The raw formula text (may be empty)
    """

    def __init__(self, formula: str) -> None:
        self.formula = formula or ""
        self.terms = parse_formula(self.formula) if self.formula.strip() else None
        self.value = 0
        self._attributes: dict[str, AttributeScore] = {}

    @property
    def valid(self) -> bool:
        return bool(self.terms)

    @property
    def invalid(self) -> bool:
        """True for a non-empty formula that failed to parse."""
        return bool(self.formula.strip()) and not self.terms

    @property
    def attributes(self) -> list[str]:
        """Names of the attribute traits the formula matched."""
        return [a.name for a in self._attributes.values()]

    def resolve(
        self, attributes: Mapping[str, AttributeScore], sunsigns: Iterable[str] = ()
    ) -> int:
        """
        Compute the skill base value.

        Args:
            attributes: Attribute scores keyed by lower-case shortcode
            sunsigns: The owner's sunsigns

        Returns:
            The skill base (never negative); 0 for an empty or invalid formula
        """
        self._attributes = {}
        if not self.terms:
            self.value = 0
            return self.value

        owner_signs = {s.lower() for s in sunsigns}
        scores: list[int] = []
        sunsign_bonus: int | None = None
        modifier = 0

        for term in self.terms:
            if term.kind == "modifier":
                modifier += term.amount
            elif term.kind == "attr":
                attr = attributes.get(term.name)
                if attr is not None:
                    self._attributes[term.name] = attr
                    scores.append(attr.score * term.amount)
                else:
                    scores.append(0)
            elif term.kind == "sunsign" and term.name in owner_signs:
                sunsign_bonus = max(term.amount, sunsign_bonus or term.amount)

        result = _average(scores) + (sunsign_bonus or 0) + modifier
        self.value = max(0, result)
        return self.value


def _average(scores: list[int]) -> int:
    if not scores:
        return 0
    mean = sum(scores) / len(scores)
    if len(scores) == 2:
        # With two attributes, round toward the primary one
        return math.ceil(mean) if scores[0] > scores[1] else math.floor(mean)
    return math.floor(mean + 0.5)
