"""
Ability templates and the ability catalog.

Abilities are immutable templates loaded from YAML and referenced by id.
Encounter state (cooldowns, AP) never lives on a template.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml

from .area import AreaOfEffect, parse_area
from .dice import DiceRoll

logger = logging.getLogger(__name__)


class AbilityDataError(ValueError):
    """Malformed or unknown ability data."""


class AttributeType(Enum):
    COORDINATION = "coordination"
    FAITH = "faith"
    FORTITUDE = "fortitude"
    INTELLIGENCE = "intelligence"
    SOCIABILITY = "sociability"
    STRENGTH = "strength"
    WITS = "wits"


class ActionType(Enum):
    STANDARD = "standard"
    REACTION = "reaction"
    REGULAR = "regular"
    SUMMON = "summon"
    ENHANCEMENT = "enhancement"
    DEBUFF = "debuff"
    AURA = "aura"
    HIDE = "hide"
    USE_ITEM = "use_item"


class DamageType(Enum):
    PHYSICAL = "physical"
    SLASHING = "slashing"
    PIERCING = "piercing"
    BLUNT = "blunt"
    FIRE = "fire"
    WATER = "water"
    COLD = "cold"
    WIND = "wind"
    LIGHTNING = "lightning"
    THUNDER = "thunder"
    EARTH = "earth"
    LIGHT = "light"
    DARK = "dark"
    ARCANE = "arcane"
    POISON = "poison"
    ACID = "acid"
    HEALING = "healing"
    FORCE = "force"


class StatusCondition(Enum):
    POISONED = "poisoned"
    STUNNED = "stunned"
    PARALYZED = "paralyzed"
    BLINDED = "blinded"
    FRIGHTENED = "frightened"
    RESTRAINED = "restrained"
    SLOWED = "slowed"
    BURNING = "burning"
    FROZEN = "frozen"
    WEAKENED = "weakened"
    PRONE = "prone"
    BLEEDING = "bleeding"
    MARKED = "marked"
    SHIELDED = "shielded"
    ENCOURAGED = "encouraged"


# Per-turn damage dealt by a condition while it persists
PER_TURN_DAMAGE = {
    StatusCondition.POISONED: DiceRoll(1, 4),
    StatusCondition.BURNING: DiceRoll(1, 6),
}

# Conditions that make an ability count as offensive without damage dice
DISABLING_CONDITIONS = {
    StatusCondition.STUNNED,
    StatusCondition.PARALYZED,
    StatusCondition.POISONED,
}


@dataclass(frozen=True)
class StatusEffectSpec:
    """A status effect an ability inflicts."""
    condition: StatusCondition
    duration: int  # in turns


@dataclass(frozen=True)
class Ability:
    """Immutable ability template."""
    id: str
    name: str
    ap_cost: int
    level: int = 1  # minimum character level
    memory_cost: int = 1
    action_type: ActionType = ActionType.STANDARD
    range_m: float = 1.5
    area: AreaOfEffect = field(default_factory=AreaOfEffect.single)
    damage: DiceRoll = field(default_factory=DiceRoll.none)
    damage_type: DamageType = DamageType.PHYSICAL
    attribute: AttributeType = AttributeType.STRENGTH
    add_attribute_modifier: bool = False
    requires_save: bool = False
    save_attribute: AttributeType = AttributeType.FORTITUDE
    inflicts: tuple[StatusEffectSpec, ...] = ()
    tech_tree: Optional[str] = None
    tech_tree_level: int = 0
    cooldown_turns: int = 0
    defensive: bool = False
    description: str = ""

    @property
    def is_healing(self) -> bool:
        return self.damage_type == DamageType.HEALING

    @property
    def has_dice(self) -> bool:
        return self.damage.count > 0

    def __str__(self) -> str:
        return self.name


class AbilityCatalog:
    """Read-only arena of ability templates keyed by id."""

    def __init__(self, abilities: Optional[list[Ability]] = None):
        self.abilities: dict[str, Ability] = {}
        for ability in abilities or []:
            self.add(ability)

    def add(self, ability: Ability):
        if ability.id in self.abilities:
            raise AbilityDataError(f"Duplicate ability id: {ability.id}")
        self.abilities[ability.id] = ability

    def get(self, ability_id: str) -> Ability:
        try:
            return self.abilities[ability_id]
        except KeyError:
            raise AbilityDataError(f"Unknown ability id: {ability_id}") from None

    def __contains__(self, ability_id: str) -> bool:
        return ability_id in self.abilities

    def __len__(self) -> int:
        return len(self.abilities)

    def __iter__(self):
        return iter(self.abilities.values())

    @classmethod
    def from_yaml(cls, path: Path | str) -> "AbilityCatalog":
        """Load ability definitions from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise AbilityDataError(f"Ability file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        catalog = cls.from_dict(data.get("abilities", data))
        logger.info(f"Loaded {len(catalog)} abilities from {path}")
        return catalog

    @classmethod
    def from_dict(cls, definitions: dict) -> "AbilityCatalog":
        catalog = cls()
        for ability_id, info in definitions.items():
            catalog.add(ability_from_dict(ability_id, info or {}))
        return catalog


def _enum_value(enum_cls, value, ability_id: str, field_name: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        raise AbilityDataError(f"{ability_id}: invalid {field_name} {value!r}") from None


def ability_from_dict(ability_id: str, info: dict) -> Ability:
    """Build an Ability from a raw YAML mapping."""
    if "ap_cost" not in info:
        raise AbilityDataError(f"{ability_id}: missing ap_cost")

    damage_text = info.get("damage")
    try:
        damage = DiceRoll.parse(damage_text) if damage_text else DiceRoll.none()
    except ValueError as e:
        raise AbilityDataError(f"{ability_id}: {e}") from None

    inflicts = []
    for effect in info.get("inflicts", []) or []:
        duration = int(effect.get("duration", 1))
        if duration <= 0:
            raise AbilityDataError(f"{ability_id}: status duration must be positive")
        inflicts.append(StatusEffectSpec(
            condition=_enum_value(StatusCondition, effect.get("condition"), ability_id, "condition"),
            duration=duration,
        ))

    save = info.get("save")

    return Ability(
        id=ability_id,
        name=info.get("name", ability_id.replace("_", " ").title()),
        ap_cost=int(info["ap_cost"]),
        level=int(info.get("level", 1)),
        memory_cost=int(info.get("memory_cost", 1)),
        action_type=_enum_value(ActionType, info.get("action_type", "standard"), ability_id, "action_type"),
        range_m=float(info.get("range", 1.5)),
        area=parse_area(info.get("area")),
        damage=damage,
        damage_type=_enum_value(DamageType, info.get("damage_type", "physical"), ability_id, "damage_type"),
        attribute=_enum_value(AttributeType, info.get("attribute", "strength"), ability_id, "attribute"),
        add_attribute_modifier=bool(info.get("add_attribute_modifier", False)),
        requires_save=save is not None,
        save_attribute=_enum_value(AttributeType, save, ability_id, "save") if save else AttributeType.FORTITUDE,
        inflicts=tuple(inflicts),
        tech_tree=info.get("tech_tree"),
        tech_tree_level=int(info.get("tech_tree_level", 0)),
        cooldown_turns=int(info.get("cooldown", 0)),
        defensive=bool(info.get("defensive", False)),
        description=info.get("description", ""),
    )
