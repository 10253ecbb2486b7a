#!/usr/bin/env python3
"""
Live battle log - streams events as they happen.
"""

import argparse
import sys
import time
from pathlib import Path

# Load .env from project root (same as game.py)
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from engine import AbilityCatalog, load_config, load_roster
from engine.combat import ActionKind, ActionReport
from engine.turn import Combatant
from game import BattleResult, BattleSimulation

# Seconds between printed lines
PACE = 0.05

TEAM_NAMES = {0: "TEAM A", 1: "TEAM B"}


def log(source, message, round_number=None):
    """Print a battle log entry."""
    prefixes = {
        "system": "⚡ SYSTEM",
        "combat": "💥 COMBAT",
        "status": "☠️  STATUS",
        "move": "👣 MOVE",
    }
    prefix = prefixes.get(source, source)
    round_prefix = f"[R{round_number}] " if round_number else ""
    print(f"{round_prefix}{prefix}: {message}")
    sys.stdout.flush()
    time.sleep(PACE)


def log_header(text):
    """Print a header."""
    print(f"\n{'='*70}")
    print(f"  {text}")
    print(f"{'='*70}\n")
    sys.stdout.flush()


def describe(report: ActionReport) -> str:
    """One-line description of an action report."""
    if report.kind == ActionKind.MOVE:
        return f"{report.actor} moves {', '.join(report.notes)}"
    if report.kind == ActionKind.STATUS_TICK:
        return f"{report.target} suffers {report.damage} from {report.actor}"

    verb = report.ability or "attacks"
    if report.kind == ActionKind.BASIC_ATTACK and not report.hit:
        return f"{report.actor} attacks {report.target} - MISS"

    parts = []
    if report.damage:
        parts.append(f"{report.damage} damage{' (CRITICAL)' if report.critical else ''}")
    if report.healing:
        parts.append(f"+{report.healing} HP")
    if report.saved:
        parts.append("saved")
    if report.statuses:
        parts.append(", ".join(s.upper() for s in report.statuses))
    detail = " | ".join(parts) or "no effect"
    return f"{report.actor} ➜ {report.target} [{verb}]: {detail}"


class LiveBattleLog:
    """Attaches to a CombatManager's callbacks and prints each event."""

    def __init__(self, sim: BattleSimulation):
        self.sim = sim
        self._round = 0

    def attach(self):
        combat = self.sim.combat
        combat.on_turn_start = self.on_turn_start
        combat.on_action = self.on_action
        combat.on_combat_end = self.on_combat_end

    def on_turn_start(self, combatant: Combatant):
        combat = self.sim.combat
        if combat.round_number != self._round:
            self._round = combat.round_number
            log_header(f"ROUND {self._round}")
        hp = f"{combatant.character.current_hp}/{combatant.character.max_hp}"
        log("system", f"{TEAM_NAMES[combatant.team_id]} {combatant.name} acts (HP {hp}, AP {combatant.current_ap})", self._round)

    def on_action(self, report: ActionReport):
        source = {ActionKind.MOVE: "move", ActionKind.STATUS_TICK: "status"}.get(report.kind, "combat")
        log(source, describe(report), report.round)
        if report.target_defeated:
            print(f"         └─ {report.target} is defeated!")

    def on_combat_end(self, winning_team):
        if winning_team is None:
            log("system", "The battle ends in a draw")
            return
        log("system", f"{TEAM_NAMES[winning_team]} wins the field")


class LoggedBattleSimulation(BattleSimulation):
    """BattleSimulation that hooks the live log onto each new combat."""

    def build_combat(self, rng, statistics):
        combat = super().build_combat(rng, statistics)
        self.combat = combat
        LiveBattleLog(self).attach()
        return combat


def print_summary(result: BattleResult):
    log_header(f"BATTLE OVER - {result.outcome.value.upper()}")
    print(f"Rounds: {result.rounds} | Turns: {result.turns}")
    for snapshot in result.characters:
        state = "standing" if snapshot.alive else "down"
        print(f"   {TEAM_NAMES[snapshot.team_id]} {snapshot.name}: {snapshot.current_hp}/{snapshot.max_hp} ({state})")
    print()
    print(result.statistics)


def main():
    parser = argparse.ArgumentParser(description="Live arena battle log")
    parser.add_argument("--team-a", default="data/rosters/vanguard.yaml")
    parser.add_argument("--team-b", default="data/rosters/marauders.yaml")
    parser.add_argument("--abilities", default="data/abilities.yaml")
    parser.add_argument("--config", default="data/config.yaml")
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    print("Initializing simulation...")
    config = load_config(args.config if Path(args.config).exists() else None)
    if args.seed is not None:
        config.seed = args.seed

    catalog = AbilityCatalog.from_yaml(args.abilities)
    name_a, team_a = load_roster(args.team_a, catalog)
    name_b, team_b = load_roster(args.team_b, catalog)
    TEAM_NAMES.update({0: name_a, 1: name_b})

    log_header(f"{name_a.upper()} vs {name_b.upper()}")
    sim = LoggedBattleSimulation(config)
    result = sim.simulate_battle(team_a, team_b)
    print_summary(result)


if __name__ == "__main__":
    main()
