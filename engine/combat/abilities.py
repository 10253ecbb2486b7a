"""
Ability resolution - damage, healing, saving throws and status effects.
"""

import logging

from ..abilities import Ability
from .base import ActionKind, ActionReport, CombatResolver

logger = logging.getLogger(__name__)


class AbilityResolver(CombatResolver):
    """Resolves an ability against one or more recipients. AP is spent by the caller."""

    BASE_SAVE_DC = 10

    def roll_amount(self, ability: Ability, user) -> int:
        """Dice total plus the optional attribute bonus, floored at zero."""
        if not ability.has_dice:
            return 0
        amount = ability.damage.roll(self.rng)
        if ability.add_attribute_modifier:
            amount += user.character.get_modifier(ability.attribute)
        return max(0, amount)

    def resolve(self, ability: Ability, user, recipients: list, round_number: int = 0) -> list[ActionReport]:
        """Apply the ability to each recipient. One roll is shared; saves are per recipient."""
        amount = self.roll_amount(ability, user)
        save_dc = self.BASE_SAVE_DC + user.character.get_modifier(ability.attribute)
        return [
            self._apply(ability, user, recipient, amount, save_dc, round_number)
            for recipient in recipients
        ]

    def _apply(self, ability: Ability, user, recipient, amount: int, save_dc: int, round_number: int) -> ActionReport:
        report = ActionReport(
            round=round_number,
            kind=ActionKind.ABILITY,
            actor=user.name,
            target=recipient.name,
            ability=ability.name,
        )

        if ability.requires_save:
            total, report.saved = self.saving_throw(recipient.character, ability.save_attribute, save_dc)
            report.notes.append(f"save {total} vs DC {save_dc}")
            if report.saved:
                amount //= 2

        if ability.has_dice:
            if ability.is_healing:
                report.healing = recipient.character.heal(amount)
            else:
                report.damage = recipient.character.take_damage(amount)
                report.target_defeated = not recipient.character.is_alive()

        # A successful save negates every inflicted status
        if not report.saved:
            for effect in ability.inflicts:
                if recipient.add_status(effect.condition, effect.duration):
                    report.statuses.append(effect.condition.value)

        logger.debug(
            f"{user.name} uses {ability.name} on {recipient.name}: "
            f"dmg={report.damage} heal={report.healing} saved={report.saved}"
        )
        return report
