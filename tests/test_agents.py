"""
Unit tests for the heuristic combat agent and personality presets.
"""

import random

import pytest

from agents import AIPersonality, AgentConfig, TacticalAgent, configure, create_agent, is_defensive, is_offensive
from agents.tactical import ability_score, pick_best, threat_score
from engine.abilities import Ability, ActionType, DamageType, StatusCondition, StatusEffectSpec
from engine.area import AreaOfEffect, AreaShape
from engine.dice import DiceRoll
from engine.map import HexBattlefield, HexCoordinate, hex_distance
from engine.turn import Combatant, CombatManager

from conftest import ScriptedRandom


def start(team_a, team_b, rng=None, battlefield=None) -> CombatManager:
    manager = CombatManager(rng=rng or ScriptedRandom([20] + [1] * 10), battlefield=battlefield)
    manager.start_combat(team_a, team_b)
    return manager


def sides(manager: CombatManager, actor: Combatant):
    return manager.get_team_members(actor.team_id), manager.get_team_members(1 - actor.team_id)


class TestClassification:
    """Tests for defensive/offensive ability detection."""

    def test_healing_is_defensive(self, heal):
        assert is_defensive(heal)
        assert not is_offensive(heal)

    def test_self_enhancement_is_defensive(self):
        buff = Ability(id="buff", name="Buff", ap_cost=1, action_type=ActionType.ENHANCEMENT,
                       area=AreaOfEffect.self_target())
        assert is_defensive(buff)

    def test_tagged_defensive(self):
        ward = Ability(id="ward", name="Ward", ap_cost=1, defensive=True)
        assert is_defensive(ward)

    def test_damage_is_offensive(self, firebolt):
        assert is_offensive(firebolt)
        assert not is_defensive(firebolt)

    def test_disabling_status_is_offensive(self):
        hold = Ability(id="hold", name="Hold", ap_cost=2,
                       inflicts=(StatusEffectSpec(StatusCondition.PARALYZED, 1),))
        assert is_offensive(hold)
        mark = Ability(id="mark", name="Mark", ap_cost=2,
                       inflicts=(StatusEffectSpec(StatusCondition.MARKED, 1),))
        assert not is_offensive(mark)

    def test_self_area_is_never_offensive(self):
        backlash = Ability(id="backlash", name="Backlash", ap_cost=2, damage=DiceRoll(2, 6),
                           area=AreaOfEffect.self_target(),
                           inflicts=(StatusEffectSpec(StatusCondition.STUNNED, 1),))
        assert not is_offensive(backlash)


class TestScoring:
    """Tests for target and ability scores."""

    def test_threat_score_formula(self, make_character):
        target = Combatant(make_character(max_hp=20, attributes={"strength": 14, "intelligence": 12}), team_id=1)
        # 20 + 28 + 18 + 10 + 2 * (2 + 4)
        assert threat_score(target) == pytest.approx(88.0)

    def test_wounded_healer_scores_higher(self, make_character, heal):
        healthy = Combatant(make_character("Healthy", max_hp=20), team_id=1)
        healer = Combatant(make_character("Healer", max_hp=20, current_hp=4, abilities=[heal]), team_id=1)
        assert threat_score(healer) > threat_score(healthy)
        assert pick_best([healthy, healer], threat_score) is healer

    def test_pick_best_first_on_tie(self):
        assert pick_best(["a", "b"], lambda x: 1) == "a"

    def test_ability_score(self, make_character):
        user = Combatant(make_character(), team_id=0)
        enemies = [Combatant(make_character(), team_id=1) for _ in range(2)]
        blast = Ability(id="blast", name="Blast", ap_cost=4, damage=DiceRoll(2, 6),
                        area=AreaOfEffect(AreaShape.RADIUS, 1), cooldown_turns=1,
                        inflicts=(StatusEffectSpec(StatusCondition.BURNING, 1),))
        # 10*6 - 5*4 + 15 + 10*2 - 20
        assert ability_score(blast, user, enemies) == pytest.approx(55.0)


class TestPresets:
    """Tests for personality presets."""

    @pytest.mark.parametrize("personality, expected", [
        (AIPersonality.AGGRESSIVE, (1.0, 0.8, 0.5, 0.1)),
        (AIPersonality.DEFENSIVE, (0.3, 0.4, 0.7, 0.5)),
        (AIPersonality.TACTICAL, (0.7, 0.7, 1.0, 0.3)),
        (AIPersonality.BALANCED, (0.6, 0.6, 0.7, 0.3)),
    ])
    def test_values(self, personality, expected):
        config = configure(personality)
        assert (config.aggression, config.ability_usage_rate,
                config.intelligence, config.defensive_threshold) == expected

    def test_random_is_seeded_and_bounded(self):
        a = configure("random", random.Random(5))
        b = configure("random", random.Random(5))
        assert a == b
        assert 0.0 <= a.defensive_threshold <= 0.5

    def test_create_agent_by_name(self):
        agent = create_agent("tactical", tactical_movement=True)
        assert isinstance(agent, TacticalAgent)
        assert agent.config.intelligence == 1.0
        assert agent.config.tactical_movement

    def test_unknown_personality(self):
        with pytest.raises(ValueError):
            configure("berserk")

    def test_config_bounds(self):
        with pytest.raises(ValueError):
            AgentConfig(intelligence=1.5)


class TestDecisions:
    """Tests for the decision procedure."""

    def test_no_ap_no_action(self, make_character):
        manager = start([make_character("A")], [make_character("B")])
        actor = manager.get_current_combatant()
        actor.current_ap = 0
        assert not TacticalAgent().make_decision(actor, *sides(manager, actor), manager)

    def test_basic_attack_fallback(self, make_character):
        foe = make_character("Foe", max_hp=50)
        manager = start([make_character("A")], [foe])
        actor = manager.get_current_combatant()
        agent = TacticalAgent(AgentConfig(ability_usage_rate=0.0))

        assert agent.make_decision(actor, *sides(manager, actor), manager)
        assert manager.combat_log[-1].actor == "A"
        assert actor.current_ap == 3
        assert agent.decisions_made == 1

    def test_stops_when_ap_runs_low(self, make_character):
        manager = start([make_character("A")], [make_character("Foe", max_hp=200)])
        actor = manager.get_current_combatant()
        agent = TacticalAgent(AgentConfig(ability_usage_rate=0.0))
        actions = 0
        while agent.make_decision(actor, *sides(manager, actor), manager):
            actions += 1
        assert actions == 2
        assert actor.current_ap == 1

    def test_hurt_actor_heals_self(self, make_character, heal):
        cleric = make_character("Cleric", max_hp=40, current_hp=5, abilities=[heal])
        manager = start([cleric], [make_character("Foe")])
        actor = manager.get_current_combatant()
        agent = TacticalAgent(AgentConfig(defensive_threshold=0.5))

        assert agent.make_decision(actor, *sides(manager, actor), manager)
        report = manager.combat_log[-1]
        assert report.target == "Cleric"
        assert report.healing > 0

    def test_costliest_defensive_ability_first(self, make_character, heal):
        ward = Ability(id="ward", name="Ward", ap_cost=1, defensive=True,
                       inflicts=(StatusEffectSpec(StatusCondition.SHIELDED, 2),))
        cleric = make_character("Cleric", max_hp=40, current_hp=5, abilities=[ward, heal])
        manager = start([cleric], [make_character("Foe")])
        actor = manager.get_current_combatant()

        TacticalAgent(AgentConfig(defensive_threshold=0.5)).make_decision(actor, *sides(manager, actor), manager)
        assert manager.combat_log[-1].ability == heal.name

    def test_offensive_ability_when_roll_succeeds(self, make_character, firebolt):
        mage = make_character("Mage", abilities=[firebolt])
        manager = start([mage], [make_character("Foe", max_hp=50)])
        actor = manager.get_current_combatant()
        agent = TacticalAgent(AgentConfig(ability_usage_rate=1.0, intelligence=1.0))

        assert agent.make_decision(actor, *sides(manager, actor), manager)
        assert manager.combat_log[-1].ability == firebolt.name

    def test_targets_the_wounded_enemy(self, make_character):
        strong = make_character("Strong", max_hp=30)
        weak = make_character("Weak", max_hp=30, current_hp=3)
        manager = start([make_character("A")], [strong, weak])
        actor = manager.get_current_combatant()
        agent = TacticalAgent(AgentConfig(ability_usage_rate=0.0, intelligence=1.0))

        agent.make_decision(actor, *sides(manager, actor), manager)
        assert manager.combat_log[-1].target == "Weak"

    def test_no_living_enemies(self, make_character):
        foe = make_character("Foe")
        manager = start([make_character("A")], [foe, make_character("Other")])
        actor = manager.get_current_combatant()
        foe.current_hp = 0
        allies, _ = sides(manager, actor)
        assert not TacticalAgent().make_decision(actor, allies, [manager.get_combatant(foe)], manager)

    def test_should_bank(self, make_character):
        agent = TacticalAgent(AgentConfig(defensive_threshold=0.5))
        hurt = Combatant(make_character(max_hp=10, current_hp=2), team_id=0, current_ap=2)
        healthy = Combatant(make_character(max_hp=10), team_id=0, current_ap=2)
        assert agent.should_bank_action_points(hurt)
        assert not agent.should_bank_action_points(healthy)

    def test_should_bank_for_expensive_ability(self, make_character):
        big = Ability(id="big", name="Big", ap_cost=4, damage=DiceRoll(4, 6))
        caster = Combatant(make_character(abilities=[big]), team_id=0, current_ap=2)
        assert TacticalAgent().should_bank_action_points(caster)


class TestTacticalMovement:
    """Tests for repositioning on a battlefield."""

    def test_melee_closes_distance(self, make_character):
        manager = start([make_character("Brute", speed=2)], [make_character("Foe")],
                        battlefield=HexBattlefield(8, 8))
        actor = manager.get_current_combatant()
        foe = manager.get_team_members(1)[0]
        before = hex_distance(actor.position, foe.position)

        agent = TacticalAgent(AgentConfig(tactical_movement=True))
        assert agent.make_decision(actor, *sides(manager, actor), manager)
        assert hex_distance(actor.position, foe.position) == before - 2

    def test_melee_attacks_when_adjacent(self, make_character):
        manager = start([make_character("Brute")], [make_character("Foe", max_hp=50)],
                        battlefield=HexBattlefield(8, 8))
        actor = manager.get_current_combatant()
        foe = manager.get_team_members(1)[0]
        bf = manager.battlefield
        bf.move_combatant(actor, actor.position, foe.position - HexCoordinate(1, 0))
        actor.position = foe.position - HexCoordinate(1, 0)

        agent = TacticalAgent(AgentConfig(tactical_movement=True, ability_usage_rate=0.0))
        assert agent.make_decision(actor, *sides(manager, actor), manager)
        assert manager.combat_log[-1].target == "Foe"

    def test_ranged_retreats_from_close_enemy(self, make_character):
        bow = Ability(id="bow", name="Bow", ap_cost=2, range_m=18, damage=DiceRoll(1, 8), damage_type=DamageType.PIERCING)
        archer = make_character("Archer", speed=2, abilities=[bow])
        manager = start([archer], [make_character("Foe")], battlefield=HexBattlefield(8, 8))
        actor = manager.get_combatant(archer)
        foe = manager.get_team_members(1)[0]
        bf = manager.battlefield
        near = foe.position - HexCoordinate(1, 0)
        bf.move_combatant(actor, actor.position, near)
        actor.position = near

        agent = TacticalAgent(AgentConfig(tactical_movement=True))
        assert agent.is_ranged(actor)
        assert agent.make_decision(actor, *sides(manager, actor), manager)
        assert hex_distance(actor.position, foe.position) > 1
