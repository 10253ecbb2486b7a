"""
Basic weapon attacks.

d20 + STR modifier against the target's defense, meet-or-exceed hits.
A natural 20 always hits and doubles the damage.
"""

import logging

from ..abilities import AttributeType
from ..dice import roll_d6
from .base import ActionKind, ActionReport, CombatResolver

logger = logging.getLogger(__name__)


class BasicAttackResolver(CombatResolver):
    """Resolves basic attacks. AP is spent by the caller."""

    CRITICAL_ROLL = 20

    def resolve(self, attacker, target, round_number: int = 0) -> ActionReport:
        attack_bonus = attacker.character.get_modifier(AttributeType.STRENGTH)
        natural = self.d20()
        total = natural + attack_bonus
        defense = target.character.defense
        critical = natural == self.CRITICAL_ROLL

        report = ActionReport(
            round=round_number,
            kind=ActionKind.BASIC_ATTACK,
            actor=attacker.name,
            target=target.name,
            critical=critical,
        )
        report.notes.append(f"attack {total} vs DEF {defense}")

        if not critical and total < defense:
            report.hit = False
            logger.debug(f"{attacker.name} misses {target.name} ({total} vs DEF {defense})")
            return report

        damage = max(0, roll_d6(self.rng) + attack_bonus)
        if critical:
            damage *= 2

        report.damage = target.character.take_damage(damage)
        report.target_defeated = not target.character.is_alive()
        logger.debug(
            f"{attacker.name} hits {target.name} for {report.damage}"
            f"{' (critical)' if critical else ''}"
        )
        return report
