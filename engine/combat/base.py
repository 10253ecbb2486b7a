"""
Base combat resolution system with common mechanics.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..abilities import AttributeType
from ..dice import roll_d20


class ActionKind(Enum):
    BASIC_ATTACK = "basic_attack"
    ABILITY = "ability"
    MOVE = "move"
    STATUS_TICK = "status_tick"


@dataclass
class ActionReport:
    """Report of a single resolved action against one recipient."""
    round: int
    kind: ActionKind
    actor: str
    target: Optional[str] = None
    ability: Optional[str] = None
    hit: bool = True
    critical: bool = False
    saved: bool = False
    damage: int = 0
    healing: int = 0
    statuses: list[str] = field(default_factory=list)
    target_defeated: bool = False
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = dict(self.__dict__)
        data["kind"] = self.kind.value
        return data


class CombatResolver:
    """Base class for action resolution. Draws from the encounter's RNG."""

    def __init__(self, rng: random.Random):
        self.rng = rng

    def d20(self) -> int:
        return roll_d20(self.rng)

    def saving_throw(self, character, attribute: AttributeType, dc: int) -> tuple[int, bool]:
        """Roll d20 + attribute modifier against dc. Returns (total, saved)."""
        total = self.d20() + character.get_modifier(attribute)
        return total, total >= dc
