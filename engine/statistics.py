"""
Battle statistics: per-character and per-team counters keyed by character name.
"""

import time
from dataclasses import asdict, dataclass, field
from typing import Optional


@dataclass
class CharacterStatistics:
    """Counters for one character."""
    name: str
    team_id: int
    starting_hp: int
    ending_hp: int = 0
    damage_dealt: int = 0
    damage_taken: int = 0
    healing_done: int = 0
    abilities_used: int = 0
    basic_attacks: int = 0
    actions_taken: int = 0
    survived: bool = True

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.damage_dealt} dmg, {self.damage_taken} taken, "
            f"{self.abilities_used} abilities, {'SURVIVED' if self.survived else 'DEFEATED'}"
        )


@dataclass
class TeamStatistics:
    """Team totals."""
    total_damage: int = 0
    total_healing: int = 0
    abilities_used: int = 0
    basic_attacks: int = 0
    actions_taken: int = 0


@dataclass
class BattleStatistics:
    """Statistics for one battle."""
    total_turns: int = 0
    total_rounds: int = 0
    duration_seconds: float = 0.0
    characters: dict[str, CharacterStatistics] = field(default_factory=dict)
    teams: dict[int, TeamStatistics] = field(default_factory=lambda: {0: TeamStatistics(), 1: TeamStatistics()})
    _rosters: dict[str, object] = field(default_factory=dict, repr=False)
    _started_at: Optional[float] = field(default=None, repr=False)

    def start_battle(self, team_a: list, team_b: list):
        self._started_at = time.perf_counter()
        self.total_turns = 0
        for team_id, team in ((0, team_a), (1, team_b)):
            for character in team:
                self._rosters[character.name] = character
                self.characters[character.name] = CharacterStatistics(
                    name=character.name,
                    team_id=team_id,
                    starting_hp=character.current_hp,
                )

    def end_battle(self):
        if self._started_at is not None:
            self.duration_seconds = time.perf_counter() - self._started_at
        for name, stats in self.characters.items():
            character = self._rosters.get(name)
            if character is None:
                continue
            stats.ending_hp = character.current_hp
            stats.survived = character.is_alive()

    def _team(self, name: str) -> Optional[TeamStatistics]:
        stats = self.characters.get(name)
        return self.teams[stats.team_id] if stats else None

    def record_action(self, name: str):
        if name not in self.characters:
            return
        self.characters[name].actions_taken += 1
        self._team(name).actions_taken += 1

    def record_damage(self, attacker: Optional[str], target: str, amount: int):
        if target in self.characters:
            self.characters[target].damage_taken += amount
        if attacker in self.characters:
            self.characters[attacker].damage_dealt += amount
            self._team(attacker).total_damage += amount

    def record_healing(self, healer: str, amount: int):
        if healer not in self.characters:
            return
        self.characters[healer].healing_done += amount
        self._team(healer).total_healing += amount

    def record_ability_used(self, name: str):
        if name not in self.characters:
            return
        self.characters[name].abilities_used += 1
        self._team(name).abilities_used += 1

    def record_basic_attack(self, name: str):
        if name not in self.characters:
            return
        self.characters[name].basic_attacks += 1
        self._team(name).basic_attacks += 1

    def top_damage_dealers(self, n: int = 3) -> list[CharacterStatistics]:
        return sorted(self.characters.values(), key=lambda s: s.damage_dealt, reverse=True)[:n]

    def to_dict(self) -> dict:
        return {
            "total_turns": self.total_turns,
            "total_rounds": self.total_rounds,
            "duration_seconds": round(self.duration_seconds, 4),
            "teams": {team_id: asdict(t) for team_id, t in self.teams.items()},
            "characters": {name: asdict(s) for name, s in self.characters.items()},
        }

    def __str__(self) -> str:
        lines = [
            "=== BATTLE STATISTICS ===",
            f"Duration: {self.duration_seconds:.2f} seconds",
            f"Total Turns: {self.total_turns} ({self.total_rounds} rounds)",
        ]
        for team_id, label in ((0, "TEAM A"), (1, "TEAM B")):
            team = self.teams[team_id]
            lines += [
                f"{label}:",
                f"  Total Damage: {team.total_damage}",
                f"  Total Healing: {team.total_healing}",
                f"  Abilities Used: {team.abilities_used}",
                f"  Basic Attacks: {team.basic_attacks}",
            ]
        lines.append("TOP PERFORMERS:")
        for stats in self.top_damage_dealers():
            lines.append(f"  {stats.name}: {stats.damage_dealt} damage")
        return "\n".join(lines)
