"""
Dice notation and rolling.

All rolls draw from an explicit random.Random so an encounter can be replayed
from its seed.
"""

import random
import re
from dataclasses import dataclass

_NOTATION = re.compile(r"^\s*(\d*)\s*d\s*(\d+)\s*(?:([+-])\s*(\d+))?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class DiceRoll:
    """NdF+M dice expression."""
    count: int = 1
    faces: int = 6
    modifier: int = 0

    @classmethod
    def parse(cls, notation: str) -> "DiceRoll":
        """Parse "2d6+1", "d20", "1d4-1"."""
        match = _NOTATION.match(notation)
        if not match:
            raise ValueError(f"Invalid dice notation: {notation!r}")
        count_str, faces, sign, mod = match.groups()
        if int(faces) < 1:
            raise ValueError(f"Dice need at least one face: {notation!r}")
        modifier = int(mod) if mod else 0
        if sign == "-":
            modifier = -modifier
        return cls(count=int(count_str) if count_str else 1, faces=int(faces), modifier=modifier)

    @classmethod
    def none(cls) -> "DiceRoll":
        """No damage or healing."""
        return cls(count=0, faces=0, modifier=0)

    def roll(self, rng: random.Random) -> int:
        """Roll a fresh total."""
        total = self.modifier
        for _ in range(self.count):
            total += rng.randint(1, self.faces)
        return total

    @property
    def average(self) -> float:
        """Expected value as count * faces / 2 + modifier."""
        return self.count * (self.faces / 2) + self.modifier

    def __str__(self) -> str:
        result = f"{self.count}d{self.faces}"
        if self.modifier:
            result += f"{self.modifier:+d}"
        return result


def roll_d20(rng: random.Random) -> int:
    return rng.randint(1, 20)


def roll_d6(rng: random.Random) -> int:
    return rng.randint(1, 6)
