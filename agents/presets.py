"""
Personality presets for combat agents.
"""

import random
from enum import Enum
from typing import Optional

from .base import AgentConfig
from .tactical import TacticalAgent


class AIPersonality(Enum):
    AGGRESSIVE = "aggressive"  # attacks, uses abilities often, rarely retreats
    DEFENSIVE = "defensive"    # heals early, conservative ability use
    TACTICAL = "tactical"      # always scores targets and abilities
    RANDOM = "random"          # rolled per agent
    BALANCED = "balanced"


PRESETS = {
    AIPersonality.AGGRESSIVE: dict(aggression=1.0, ability_usage_rate=0.8, intelligence=0.5, defensive_threshold=0.1),
    AIPersonality.DEFENSIVE: dict(aggression=0.3, ability_usage_rate=0.4, intelligence=0.7, defensive_threshold=0.5),
    AIPersonality.TACTICAL: dict(aggression=0.7, ability_usage_rate=0.7, intelligence=1.0, defensive_threshold=0.3),
    AIPersonality.BALANCED: dict(aggression=0.6, ability_usage_rate=0.6, intelligence=0.7, defensive_threshold=0.3),
}


def configure(personality: AIPersonality | str, rng: Optional[random.Random] = None,
              tactical_movement: bool = False) -> AgentConfig:
    """Build an AgentConfig for a personality. RANDOM draws from rng."""
    personality = AIPersonality(personality)
    if personality == AIPersonality.RANDOM:
        rng = rng or random.Random()
        return AgentConfig(
            aggression=rng.random(),
            ability_usage_rate=rng.random(),
            intelligence=rng.random(),
            defensive_threshold=rng.random() * 0.5,
            tactical_movement=tactical_movement,
        )
    return AgentConfig(**PRESETS[personality], tactical_movement=tactical_movement)


def create_agent(personality: AIPersonality | str = AIPersonality.BALANCED,
                 rng: Optional[random.Random] = None,
                 tactical_movement: bool = False) -> TacticalAgent:
    return TacticalAgent(configure(personality, rng, tactical_movement))
