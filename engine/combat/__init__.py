"""
Action resolution for arena combat.

Basic attacks and abilities each have a resolver; the turn engine spends AP,
picks recipients and records statistics around them.
"""

from .base import ActionKind, ActionReport, CombatResolver
from .attacks import BasicAttackResolver
from .abilities import AbilityResolver

__all__ = [
    "ActionKind",
    "ActionReport",
    "CombatResolver",
    "BasicAttackResolver",
    "AbilityResolver",
]
