"""
Combat agents for arena simulation.

Heuristic decision making with personality presets.
"""

from .base import AgentConfig, CombatAgent
from .tactical import TacticalAgent, is_defensive, is_offensive
from .presets import AIPersonality, configure, create_agent

__all__ = [
    "AgentConfig", "CombatAgent", "TacticalAgent",
    "is_defensive", "is_offensive",
    "AIPersonality", "configure", "create_agent",
]
