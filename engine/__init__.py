"""
Hex-grid arena combat engine.

Core modules:
- map: Hex coordinates, battlefield occupancy, pathfinding
- area: Area-of-effect shapes and cell patterns
- abilities: Ability definitions and YAML catalog
- characters: Attributes, modifiers, rosters
- combat/: Basic attack and ability resolution
- turn: Initiative, action points, turn sequencing
- statistics: Per-battle counters
- config: Simulation settings
"""

from .map import (
    HexCoordinate, CubeCoordinate, HexBattlefield, INVALID, DIRECTIONS,
    hex_distance, meters_to_hexes, find_path, get_reachable_cells,
)
from .area import AreaShape, AreaOfEffect, parse_area, get_area_pattern
from .dice import DiceRoll
from .abilities import (
    Ability, AbilityCatalog, AbilityDataError, ActionType, AttributeType,
    DamageType, StatusCondition, StatusEffectSpec,
)
from .characters import Character, RosterError, attribute_modifier, load_roster
from .config import CombatSettings, SimulationConfig, load_config
from .statistics import BattleStatistics, CharacterStatistics, TeamStatistics
from .turn import CombatManager, CombatState, Combatant, TurnPhase

__all__ = [
    # Map
    "HexCoordinate", "CubeCoordinate", "HexBattlefield", "INVALID", "DIRECTIONS",
    "hex_distance", "meters_to_hexes", "find_path", "get_reachable_cells",
    # Area
    "AreaShape", "AreaOfEffect", "parse_area", "get_area_pattern",
    # Abilities
    "DiceRoll", "Ability", "AbilityCatalog", "AbilityDataError", "ActionType",
    "AttributeType", "DamageType", "StatusCondition", "StatusEffectSpec",
    # Characters
    "Character", "RosterError", "attribute_modifier", "load_roster",
    # Config
    "CombatSettings", "SimulationConfig", "load_config",
    # Statistics
    "BattleStatistics", "CharacterStatistics", "TeamStatistics",
    # Turn Management
    "CombatManager", "CombatState", "Combatant", "TurnPhase",
]
