"""
Heuristic tactical agent.

Per call the agent takes at most one action, in priority order:
  1. (optional) reposition on the battlefield
  2. defensive ability on self when hurt
  3. offensive ability, gated by ability_usage_rate
  4. basic attack
Target and ability choices are scored when a roll under `intelligence`
succeeds, otherwise chosen uniformly at random. All randomness comes from the
encounter's rng so battles replay from a seed.
"""

import logging
import math
from typing import Optional

from engine.abilities import Ability, ActionType, AttributeType, DISABLING_CONDITIONS
from engine.area import AreaShape
from engine.map import INVALID, HexCoordinate, find_path, get_reachable_cells, hex_distance, meters_to_hexes
from engine.turn import CombatManager, Combatant

from .base import AgentConfig, CombatAgent

logger = logging.getLogger(__name__)

LOW_HEALTH_FRACTION = 0.3
RANGED_THRESHOLD_M = 3.0
MELEE_RANGE_M = 1.5
THREAT_DISTANCE = 2


# Ability classification
def is_defensive(ability: Ability) -> bool:
    """Healing, a self-targeted enhancement, or explicitly tagged defensive."""
    if ability.is_healing or ability.defensive:
        return True
    return ability.action_type == ActionType.ENHANCEMENT and ability.area.shape == AreaShape.SELF


def is_offensive(ability: Ability) -> bool:
    """Deals non-healing damage, or inflicts a disabling condition, on someone other than the user."""
    if ability.area.shape == AreaShape.SELF:
        return False
    if ability.has_dice and not ability.is_healing:
        return True
    return any(e.condition in DISABLING_CONDITIONS for e in ability.inflicts)


# Scoring
def estimate_average_damage(combatant: Combatant) -> int:
    """Rough per-action damage: 1d6 + STR, a bit more for ability users."""
    character = combatant.character
    damage = character.get_modifier(AttributeType.STRENGTH) + 4
    if character.known_abilities:
        damage += 3
    return damage


def threat_score(target: Combatant) -> float:
    character = target.character
    score = (
        character.current_hp
        + character.get_score(AttributeType.STRENGTH) * 2
        + character.get_score(AttributeType.INTELLIGENCE) * 1.5
        + character.level * 10
    )
    if character.health_fraction < LOW_HEALTH_FRACTION:
        score += 50  # finish off the wounded
    score += estimate_average_damage(target) * 2
    if character.knows_healing():
        score += 40  # healers first
    return score


def ability_score(ability: Ability, user: Combatant, enemies: list[Combatant]) -> float:
    expected = ability.damage.average
    if ability.add_attribute_modifier:
        expected += user.character.get_modifier(ability.attribute)

    score = expected * 10
    score -= ability.ap_cost * 5
    score += len(ability.inflicts) * 15
    if ability.area.is_area:
        score += sum(1 for e in enemies if e.is_alive()) * 10
    if ability.cooldown_turns > 0:
        score -= 20
    return score


def pick_best(candidates: list, score) -> Optional[object]:
    """Highest score, first encountered on ties."""
    best, best_score = None, -math.inf
    for candidate in candidates:
        value = score(candidate)
        if value > best_score:
            best, best_score = candidate, value
    return best


class TacticalAgent(CombatAgent):
    """Weighted-heuristic agent driven by an AgentConfig."""

    def __init__(self, config: Optional[AgentConfig] = None):
        super().__init__(config or AgentConfig())

    def make_decision(
        self,
        actor: Combatant,
        allies: list[Combatant],
        enemies: list[Combatant],
        combat: CombatManager,
    ) -> bool:
        if actor.current_ap <= 0 or not actor.is_alive():
            return False

        rng = combat.rng
        living = [e for e in enemies if e.is_alive()]
        spatial = self._spatial(actor, combat)

        if spatial and self._reposition(actor, living, combat):
            return self._took_action()

        # 1. Defensive
        if actor.character.health_fraction < self.config.defensive_threshold:
            defensive = [a for a in actor.character.known_abilities if is_defensive(a) and actor.can_use(a)]
            if defensive:
                ability = max(defensive, key=lambda a: a.ap_cost)
                logger.debug(f"{actor.name} is hurt, using {ability.name} on self")
                if combat.use_ability(ability, actor, actor):
                    return self._took_action()

        # 2. Offensive ability
        if living and rng.random() < self.config.ability_usage_rate:
            options = {}
            for ability in actor.character.known_abilities:
                if not is_offensive(ability) or not actor.can_use(ability):
                    continue
                targets = self._in_range(actor, living, ability.range_m, combat) if spatial else living
                if targets:
                    options[ability] = targets
            if options:
                ability = self.select_ability(actor, list(options), living, rng)
                target = self.select_ability_target(ability, options[ability], rng)
                if combat.use_ability(ability, actor, target):
                    return self._took_action()

        # 3. Basic attack
        if actor.current_ap >= combat.settings.basic_attack_cost:
            targets = self._in_range(actor, living, MELEE_RANGE_M, combat) if spatial else living
            target = self.select_target(targets, rng)
            if target is not None and combat.perform_basic_attack(actor, target):
                return self._took_action()

        # 4. Nothing useful
        return False

    def _took_action(self) -> bool:
        self.decisions_made += 1
        return True

    # Selection
    def select_target(self, enemies: list[Combatant], rng) -> Optional[Combatant]:
        """Scored choice with probability `intelligence`, else uniform random."""
        living = [e for e in enemies if e.is_alive()]
        if not living:
            return None
        if rng.random() < self.config.intelligence:
            return pick_best(living, threat_score)
        return rng.choice(living)

    def select_ability(self, actor: Combatant, abilities: list[Ability], enemies: list[Combatant], rng) -> Ability:
        if rng.random() < self.config.intelligence:
            return pick_best(abilities, lambda a: ability_score(a, actor, enemies))
        return rng.choice(abilities)

    def select_ability_target(self, ability: Ability, enemies: list[Combatant], rng) -> Optional[Combatant]:
        # Area effects anchor on a random living enemy (no centroid search)
        if ability.area.is_area:
            living = [e for e in enemies if e.is_alive()]
            return rng.choice(living) if living else None
        return self.select_target(enemies, rng)

    # Spatial awareness
    def _spatial(self, actor: Combatant, combat: CombatManager) -> bool:
        return (
            self.config.tactical_movement
            and combat.battlefield is not None
            and actor.position != INVALID
        )

    def _in_range(self, actor: Combatant, enemies: list[Combatant], range_m: float, combat: CombatManager) -> list[Combatant]:
        reach = max(1, math.ceil(meters_to_hexes(range_m, combat.settings.meters_per_hex)))
        return [
            e for e in enemies
            if e.position != INVALID and hex_distance(actor.position, e.position) <= reach
        ]

    @staticmethod
    def is_ranged(actor: Combatant) -> bool:
        """Has a long-range ability and no melee one."""
        abilities = actor.character.known_abilities
        has_ranged = any(a.range_m > RANGED_THRESHOLD_M for a in abilities)
        has_melee = any(a.range_m <= MELEE_RANGE_M for a in abilities)
        return has_ranged and not has_melee

    def _reposition(self, actor: Combatant, enemies: list[Combatant], combat: CombatManager) -> bool:
        if actor.current_ap < combat.settings.move_cost:
            return False

        placed = [e for e in enemies if e.position != INVALID]
        if not placed:
            return False
        nearest = min(placed, key=lambda e: hex_distance(actor.position, e.position))
        distance = hex_distance(actor.position, nearest.position)

        if self.is_ranged(actor):
            reach = max(
                math.ceil(meters_to_hexes(a.range_m, combat.settings.meters_per_hex))
                for a in actor.character.known_abilities
            )
            if distance <= THREAT_DISTANCE:
                destination = self._move_away(actor, nearest.position, combat)
            elif distance > reach:
                destination = self._move_toward(actor, nearest.position, combat)
            else:
                return False
        else:
            if distance <= 1:
                return False
            destination = self._move_toward(actor, nearest.position, combat)

        if destination is None:
            return False
        logger.debug(f"{actor.name} repositions {actor.position} -> {destination} (nearest enemy {nearest.name})")
        return combat.move_combatant(actor, destination)

    def _move_toward(self, actor: Combatant, target: HexCoordinate, combat: CombatManager) -> Optional[HexCoordinate]:
        battlefield = combat.battlefield
        search = max(battlefield.width, battlefield.height)
        path = find_path(battlefield, actor.position, target, search)
        if path is None or len(path) < 3:
            return None
        # Never land on the target itself
        step = max(1, min(actor.character.speed, len(path) - 2))
        return path[step]

    def _move_away(self, actor: Combatant, threat: HexCoordinate, combat: CombatManager) -> Optional[HexCoordinate]:
        best, best_distance = None, hex_distance(actor.position, threat)
        for cell in get_reachable_cells(combat.battlefield, actor.position, actor.character.speed):
            distance = hex_distance(cell, threat)
            if distance > best_distance:
                best, best_distance = cell, distance
        return best

    # AP management
    def should_bank_action_points(self, actor: Combatant) -> bool:
        """Advisory: hold AP when hurt or saving for an expensive ability."""
        if actor.character.health_fraction < self.config.defensive_threshold and actor.current_ap <= 2:
            return True
        expensive = any(a.ap_cost > actor.current_ap for a in actor.character.known_abilities)
        return expensive and actor.current_ap <= 2
