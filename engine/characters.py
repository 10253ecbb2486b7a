"""
Persistent character entities and roster loading.

Characters outlive encounters: HP and experience changes made during combat
stick. Everything encounter-scoped (AP, statuses, position) lives on the
Combatant wrapper in turn.py.
"""

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .abilities import Ability, AbilityCatalog, AbilityDataError, AttributeType

logger = logging.getLogger(__name__)


class RosterError(ValueError):
    """Malformed roster data."""


def attribute_modifier(score: int) -> int:
    """Modifier for an attribute score (10 -> 0, 16 -> +3, 8 -> -1)."""
    if score >= 19:
        return 5
    if score >= 17:
        return 4
    if score >= 15:
        return 3
    if score >= 13:
        return 2
    if score >= 11:
        return 1
    if score >= 9:
        return 0
    if score >= 7:
        return -1
    if score >= 5:
        return -2
    if score >= 3:
        return -3
    return -4


def _half_toward_zero(value: int) -> int:
    return int(value / 2)


@dataclass(eq=False)
class Character:
    """A playable character."""
    name: str
    max_hp: int
    level: int = 1
    current_hp: Optional[int] = None
    max_ap: int = 5
    speed: int = 2  # hexes per move action
    armor_bonus: int = 0
    attributes: dict[AttributeType, int] = field(default_factory=dict)
    known_abilities: list[Ability] = field(default_factory=list)
    tech_tree_levels: dict[str, int] = field(default_factory=dict)
    memory: Optional[int] = None  # ability slots
    experience: int = 0
    experience_to_next_level: int = 1000
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    def __post_init__(self):
        if self.current_hp is None:
            self.current_hp = self.max_hp
        self.current_hp = max(0, min(self.current_hp, self.max_hp))
        for attr in AttributeType:
            self.attributes.setdefault(attr, 10)
        if self.memory is None:
            self.memory = max(2, 4 + self.get_modifier(AttributeType.INTELLIGENCE))

    # Stats
    def get_score(self, attr: AttributeType) -> int:
        return self.attributes.get(attr, 10)

    def get_modifier(self, attr: AttributeType) -> int:
        return attribute_modifier(self.get_score(attr))

    @property
    def initiative_modifier(self) -> int:
        return _half_toward_zero(
            self.get_modifier(AttributeType.COORDINATION) + self.get_modifier(AttributeType.WITS)
        )

    @property
    def defense(self) -> int:
        """10 + (best of STR/COR + WIT) / 2 + armor."""
        physical = max(self.get_modifier(AttributeType.STRENGTH), self.get_modifier(AttributeType.COORDINATION))
        return 10 + _half_toward_zero(physical + self.get_modifier(AttributeType.WITS)) + self.armor_bonus

    @property
    def health_fraction(self) -> float:
        return self.current_hp / max(1, self.max_hp)

    @property
    def used_memory(self) -> int:
        return sum(a.memory_cost for a in self.known_abilities)

    # Abilities
    def has_ability(self, ability: Ability) -> bool:
        return any(a.id == ability.id for a in self.known_abilities)

    def can_learn_ability(self, ability: Ability) -> bool:
        return self.used_memory + ability.memory_cost <= self.memory

    def learn_ability(self, ability: Ability) -> bool:
        if self.has_ability(ability):
            return True
        if not self.can_learn_ability(ability):
            logger.warning(f"{self.name}: not enough memory slots to learn {ability.name}")
            return False
        self.known_abilities.append(ability)
        return True

    def meets_requirements(self, ability: Ability) -> bool:
        """Level, known-ability and tech-tree gate."""
        if self.level < ability.level:
            return False
        if not self.has_ability(ability):
            return False
        if ability.tech_tree and self.tech_tree_levels.get(ability.tech_tree, 0) < ability.tech_tree_level:
            return False
        return True

    def knows_healing(self) -> bool:
        return any(a.is_healing for a in self.known_abilities)

    # Health
    def is_alive(self) -> bool:
        return self.current_hp > 0

    def take_damage(self, amount: int) -> int:
        """Apply damage, returning the HP actually lost."""
        before = self.current_hp
        self.current_hp = max(0, self.current_hp - max(0, amount))
        return before - self.current_hp

    def heal(self, amount: int) -> int:
        """Restore HP up to max, returning the HP actually gained."""
        before = self.current_hp
        self.current_hp = min(self.max_hp, self.current_hp + max(0, amount))
        return self.current_hp - before

    # Progression hook
    def gain_experience(self, xp: int):
        self.experience += xp
        while self.experience >= self.experience_to_next_level:
            self.experience -= self.experience_to_next_level
            self.level += 1
            logger.info(f"{self.name} reached level {self.level}")

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Character({self.name!r}, HP {self.current_hp}/{self.max_hp}, L{self.level})"


def character_from_dict(info: dict, catalog: AbilityCatalog) -> Character:
    """Build a Character from a roster entry."""
    if "name" not in info or "max_hp" not in info:
        raise RosterError(f"Roster entry needs name and max_hp: {info}")

    attributes = {}
    for attr_name, score in (info.get("attributes") or {}).items():
        try:
            attributes[AttributeType(attr_name.lower())] = int(score)
        except ValueError:
            raise RosterError(f"{info['name']}: unknown attribute {attr_name!r}") from None

    character = Character(
        name=info["name"],
        max_hp=int(info["max_hp"]),
        level=int(info.get("level", 1)),
        current_hp=info.get("current_hp"),
        max_ap=int(info.get("max_ap", 5)),
        speed=int(info.get("speed", 2)),
        armor_bonus=int(info.get("armor_bonus", 0)),
        attributes=attributes,
        tech_tree_levels=dict(info.get("tech_trees") or {}),
        memory=info.get("memory"),
    )

    for ability_id in info.get("abilities", []) or []:
        try:
            character.learn_ability(catalog.get(ability_id))
        except AbilityDataError as e:
            raise RosterError(f"{character.name}: {e}") from None

    return character


def load_roster(path: Path | str, catalog: AbilityCatalog) -> tuple[str, list[Character]]:
    """Load a team roster from YAML. Returns (team name, members)."""
    path = Path(path)
    if not path.exists():
        raise RosterError(f"Roster file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    team = data.get("team", data)
    members = [character_from_dict(entry, catalog) for entry in team.get("members", [])]
    if not members:
        raise RosterError(f"Roster has no members: {path}")

    name = team.get("name", path.stem)
    logger.info(f"Loaded roster {name}: {', '.join(m.name for m in members)}")
    return name, members
