"""Dice formulas and rollers."""

import random
import re
from dataclasses import dataclass
from typing import Protocol

from skillforge.errors import DiceFormulaError

_TERM = re.compile(r"^(?:(?P<count>\d*)d(?P<sides>\d+)|(?P<flat>\d+))$")


@dataclass(frozen=True)
class RollResult:
    """
    Outcome of a dice roll.

    Attributes:
        total: Sum of all dice and flat modifiers
        breakdown: Human readable form, e.g. "1d100 (37) + 12"
        dice: Individual die faces, in roll order
    """

    total: int
    breakdown: str
    dice: tuple[int, ...] = ()


class Roller(Protocol):
    """Anything that can roll a dice formula."""

    def roll(self, formula: str) -> RollResult: ...


def parse_dice(formula: str) -> list[tuple[int, int, int]]:
    """
    Parse a dice formula into signed terms.

    Args:
        formula: Terms joined by + or -, e.g. "1d100 + 15" or "2d6 - 1"

    Returns:
        ``(sign, count, sides)`` tuples; flat modifiers have ``sides == 0``

    Raises:
        DiceFormulaError: If the formula is empty or malformed
    """
    text = formula.replace(" ", "").lower()
    if not text:
        raise DiceFormulaError("Empty dice formula")
    if text[0] not in "+-":
        text = "+" + text

    terms: list[tuple[int, int, int]] = []
    for sign, body in re.findall(r"([+-])([^+-]*)", text):
        match = _TERM.match(body)
        if match is None:
            raise DiceFormulaError(f"Invalid dice formula: {formula!r}")
        direction = -1 if sign == "-" else 1
        if match.group("flat") is not None:
            terms.append((direction, int(match.group("flat")), 0))
            continue
        count = int(match.group("count") or 1)
        sides = int(match.group("sides"))
        if sides < 1:
            raise DiceFormulaError(f"Dice need at least one side: {formula!r}")
        terms.append((direction, count, sides))

    return terms


class DiceRoller:
    """
    Roll dice formulas with an injectable random source.

    Args:
        rng: Random generator; pass a seeded ``random.Random`` for repeatable rolls
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def roll(self, formula: str) -> RollResult:
        total = 0
        faces: list[int] = []
        parts: list[str] = []

        for sign, count, sides in parse_dice(formula):
            if sides:
                rolled = [self.rng.randint(1, sides) for _ in range(count)]
                faces.extend(rolled)
                value = sum(rolled)
                text = f"{count}d{sides} ({', '.join(str(r) for r in rolled)})"
            else:
                value = count
                text = str(count)
            total += sign * value
            if parts:
                parts.append("-" if sign < 0 else "+")
            elif sign < 0:
                text = "-" + text
            parts.append(text)

        return RollResult(total=total, breakdown=" ".join(parts), dice=tuple(faces))
