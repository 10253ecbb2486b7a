"""
Main battle runner for hex arena simulation.

Orchestrates a full battle between two AI-controlled rosters.
"""

import json
import logging
import random
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from engine import (
    AbilityCatalog, BattleStatistics, Character, CombatManager, HexBattlefield,
    SimulationConfig, load_config, load_roster,
)
from engine.turn import Combatant
from agents import CombatAgent, create_agent

logger = logging.getLogger(__name__)

# Stops an agent that keeps reporting success without spending AP
MAX_ACTIONS_PER_TURN = 20


class BattleOutcome(Enum):
    TEAM_A_VICTORY = "team_a_victory"
    TEAM_B_VICTORY = "team_b_victory"
    DRAW = "draw"


@dataclass
class CharacterSnapshot:
    """Final state of one character."""
    name: str
    team_id: int
    current_hp: int
    max_hp: int
    level: int
    experience: int
    alive: bool

    @classmethod
    def from_combatant(cls, combatant: Combatant) -> "CharacterSnapshot":
        character = combatant.character
        return cls(
            name=character.name,
            team_id=combatant.team_id,
            current_hp=character.current_hp,
            max_hp=character.max_hp,
            level=character.level,
            experience=character.experience,
            alive=character.is_alive(),
        )


@dataclass
class BattleResult:
    """Everything known about a finished battle."""
    outcome: BattleOutcome
    rounds: int
    turns: int
    seed: Optional[int]
    characters: list[CharacterSnapshot] = field(default_factory=list)
    statistics: BattleStatistics = field(default_factory=BattleStatistics)
    combat_log: list = field(default_factory=list)

    @property
    def winner(self) -> Optional[int]:
        return {BattleOutcome.TEAM_A_VICTORY: 0, BattleOutcome.TEAM_B_VICTORY: 1}.get(self.outcome)

    def survivors(self, team_id: int) -> list[CharacterSnapshot]:
        return [c for c in self.characters if c.team_id == team_id and c.alive]

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "rounds": self.rounds,
            "turns": self.turns,
            "seed": self.seed,
            "characters": [asdict(c) for c in self.characters],
            "statistics": self.statistics.to_dict(),
            "combat_log": [report.to_dict() for report in self.combat_log],
        }


class BattleSimulation:
    """Main simulation orchestrator."""

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        agent_a: Optional[CombatAgent] = None,
        agent_b: Optional[CombatAgent] = None,
        log_dir: Optional[Path | str] = None,
        on_battle_complete: Optional[Callable[[BattleResult], None]] = None,
    ):
        self.config = config or SimulationConfig()
        self.agent_a = agent_a
        self.agent_b = agent_b
        self.log_dir = Path(log_dir) if log_dir else None
        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        self.on_battle_complete = on_battle_complete

        # Last battle's engine, for observers
        self.combat: Optional[CombatManager] = None

    def _agents(self, rng: random.Random) -> dict[int, CombatAgent]:
        agents = {
            0: self.agent_a or create_agent(self.config.team_a_personality, rng, self.config.tactical_movement),
            1: self.agent_b or create_agent(self.config.team_b_personality, rng, self.config.tactical_movement),
        }
        for agent in agents.values():
            agent.reset()
        return agents

    def build_combat(self, rng: random.Random, statistics: BattleStatistics) -> CombatManager:
        battlefield = None
        if self.config.use_battlefield:
            battlefield = HexBattlefield(self.config.battlefield_width, self.config.battlefield_height)
        return CombatManager(self.config.combat, rng, battlefield, statistics, max_rounds=self.config.max_rounds)

    def simulate_battle(
        self,
        team_a: list[Character],
        team_b: list[Character],
        seed: Optional[int] = None,
    ) -> BattleResult:
        """Run one battle to victory, mutual defeat or the round cap."""
        seed = self.config.seed if seed is None else seed
        rng = random.Random(seed)

        statistics = BattleStatistics()
        statistics.start_battle(team_a, team_b)

        combat = self.build_combat(rng, statistics)
        self.combat = combat
        agents = self._agents(rng)

        logger.info(f"Battle: {len(team_a)} vs {len(team_b)} (seed={seed})")
        combat.start_combat(team_a, team_b)

        while combat.is_combat_active():
            actor = combat.get_current_combatant()
            agent = agents[actor.team_id]
            allies = combat.get_team_members(actor.team_id)
            enemies = combat.get_team_members(1 - actor.team_id)

            actions = 0
            while actor.current_ap > 0 and actions < MAX_ACTIONS_PER_TURN:
                if not agent.make_decision(actor, allies, enemies, combat):
                    break
                actions += 1
                statistics.record_action(actor.name)
                self._pause()

            combat.end_current_turn()
            self._pause()

        result = self._compile_result(combat, statistics, seed)
        logger.info(f"Battle over: {result.outcome.value} after {result.rounds} rounds")

        if self.log_dir:
            self._save_battle_log(result)
        if self.on_battle_complete:
            self.on_battle_complete(result)
        return result

    def _pause(self):
        if self.config.action_delay > 0:
            time.sleep(self.config.action_delay)

    def _compile_result(self, combat: CombatManager, statistics: BattleStatistics, seed: Optional[int]) -> BattleResult:
        """Compile final battle results."""
        if combat.is_combat_active() or combat.winning_team is None:
            outcome = BattleOutcome.DRAW
        elif combat.winning_team == 0:
            outcome = BattleOutcome.TEAM_A_VICTORY
        else:
            outcome = BattleOutcome.TEAM_B_VICTORY

        rounds = min(combat.round_number, self.config.max_rounds) if combat.turns_taken else 0
        statistics.total_rounds = rounds
        statistics.total_turns = combat.turns_taken
        statistics.end_battle()

        return BattleResult(
            outcome=outcome,
            rounds=rounds,
            turns=combat.turns_taken,
            seed=seed,
            characters=[CharacterSnapshot.from_combatant(c) for c in combat.combatants],
            statistics=statistics,
            combat_log=list(combat.combat_log),
        )

    def run_series(
        self,
        make_teams: Callable[[], tuple[list[Character], list[Character]]],
        battles: int,
    ) -> dict:
        """Run repeated battles on fresh rosters. Seeds advance per battle when a base seed is set."""
        tally = {outcome: 0 for outcome in BattleOutcome}
        results = []
        for i in range(battles):
            team_a, team_b = make_teams()
            seed = None if self.config.seed is None else self.config.seed + i
            result = self.simulate_battle(team_a, team_b, seed=seed)
            tally[result.outcome] += 1
            results.append(result)

        return {
            "battles": battles,
            "team_a_wins": tally[BattleOutcome.TEAM_A_VICTORY],
            "team_b_wins": tally[BattleOutcome.TEAM_B_VICTORY],
            "draws": tally[BattleOutcome.DRAW],
            "average_rounds": sum(r.rounds for r in results) / battles if battles else 0.0,
            "results": results,
        }

    def _save_battle_log(self, result: BattleResult):
        """Save battle log to file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        log_path = self.log_dir / f"battle_{timestamp}.json"

        with open(log_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2, default=str)

        logger.info(f"Battle log saved to: {log_path}")


def main():
    """Run an arena battle simulation."""
    import argparse

    parser = argparse.ArgumentParser(description="Hex Arena Battle Simulation")
    parser.add_argument("--team-a", default="data/rosters/vanguard.yaml", help="Team A roster")
    parser.add_argument("--team-b", default="data/rosters/marauders.yaml", help="Team B roster")
    parser.add_argument("--abilities", default="data/abilities.yaml", help="Ability catalog")
    parser.add_argument("--config", default="data/config.yaml", help="Simulation config")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--rounds", type=int, default=None, help="Max rounds")
    parser.add_argument("--personality-a", default=None, help="Team A AI personality")
    parser.add_argument("--personality-b", default=None, help="Team B AI personality")
    parser.add_argument("--battles", type=int, default=1, help="Number of battles to run")
    parser.add_argument("--logs", default=None, help="Directory for JSON battle logs")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    config = load_config(args.config if Path(args.config).exists() else None)
    if args.seed is not None:
        config.seed = args.seed
    if args.rounds is not None:
        config.max_rounds = args.rounds
    if args.personality_a:
        config.team_a_personality = args.personality_a
    if args.personality_b:
        config.team_b_personality = args.personality_b

    catalog = AbilityCatalog.from_yaml(args.abilities)

    name_a, team_a = load_roster(args.team_a, catalog)
    name_b, team_b = load_roster(args.team_b, catalog)

    # The first battle uses the rosters loaded above; later ones reload fresh copies
    loaded = iter([(team_a, team_b)])

    def make_teams():
        return next(loaded, None) or (load_roster(args.team_a, catalog)[1], load_roster(args.team_b, catalog)[1])

    sim = BattleSimulation(config, log_dir=args.logs)

    if args.battles > 1:
        summary = sim.run_series(make_teams, args.battles)
        print("\n" + "="*60)
        print(f"SERIES RESULTS ({summary['battles']} battles)")
        print("="*60)
        print(f"{name_a} wins: {summary['team_a_wins']}")
        print(f"{name_b} wins: {summary['team_b_wins']}")
        print(f"Draws: {summary['draws']}")
        print(f"Average rounds: {summary['average_rounds']:.1f}")
        return

    result = sim.simulate_battle(team_a, team_b)

    print("\n" + "="*60)
    print("FINAL RESULTS")
    print("="*60)
    winner = {0: name_a, 1: name_b}.get(result.winner, "Draw")
    print(f"Winner: {winner}")
    print(f"Rounds: {result.rounds} ({result.turns} turns)")
    for team_id, name in ((0, name_a), (1, name_b)):
        survivors = ", ".join(f"{c.name} ({c.current_hp}/{c.max_hp})" for c in result.survivors(team_id))
        print(f"Survivors - {name}: {survivors or 'none'}")
    print()
    print(result.statistics)


if __name__ == "__main__":
    main()
