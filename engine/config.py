"""
Simulation configuration.

Defaults are overridden by a YAML file, then by ARENA_* environment
variables (a .env file in the working directory is honored).
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class CombatSettings:
    """Rules constants for the turn engine."""
    max_banked_ap: int = 2
    basic_attack_cost: int = 2
    move_cost: int = 1
    victory_experience: int = 100
    meters_per_hex: float = 1.5


@dataclass
class SimulationConfig:
    """Settings for a battle simulation."""
    max_rounds: int = 50
    action_delay: float = 0.0  # seconds between actions, pacing only
    battlefield_width: int = 10
    battlefield_height: int = 10
    use_battlefield: bool = True
    seed: Optional[int] = None
    team_a_personality: str = "balanced"
    team_b_personality: str = "balanced"
    tactical_movement: bool = False
    combat: CombatSettings = field(default_factory=CombatSettings)


ENV_OVERRIDES = {
    "ARENA_SEED": ("seed", int),
    "ARENA_MAX_ROUNDS": ("max_rounds", int),
    "ARENA_ACTION_DELAY": ("action_delay", float),
}


def _apply(target, values: dict):
    known = {f.name for f in fields(target)}
    for key, value in values.items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key: {key}")
            continue
        setattr(target, key, value)


def load_config(path: Path | str | None = None, use_env: bool = True) -> SimulationConfig:
    """Load simulation config from YAML (optional) and the environment."""
    config = SimulationConfig()

    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            simulation = dict(data.get("simulation", {}))
            combat = simulation.pop("combat", data.get("combat", {})) or {}
            _apply(config, simulation)
            _apply(config.combat, combat)
            logger.info(f"Loaded config from {path}")
        else:
            logger.warning(f"Config file not found: {path}, using defaults")

    if use_env:
        load_dotenv()
        for env_name, (attr, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw:
                setattr(config, attr, cast(raw))

    return config
