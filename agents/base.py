"""
Base combat agent and its tuning knobs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from engine.turn import CombatManager, Combatant


@dataclass
class AgentConfig:
    """Configuration for a combat agent. All rates are in [0, 1]."""
    aggression: float = 0.6  # reserved; not consulted by the decision procedure
    ability_usage_rate: float = 0.6
    intelligence: float = 0.7
    defensive_threshold: float = 0.3
    tactical_movement: bool = False

    def __post_init__(self):
        for name in ("aggression", "ability_usage_rate", "intelligence", "defensive_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")


class CombatAgent(ABC):
    """Base class for agents that act on behalf of one team."""

    def __init__(self, config: AgentConfig):
        self.config = config
        self.decisions_made = 0

    @abstractmethod
    def make_decision(
        self,
        actor: Combatant,
        allies: list[Combatant],
        enemies: list[Combatant],
        combat: CombatManager,
    ) -> bool:
        """Choose and execute one action for the actor. Returns True if an action was taken."""
        pass

    def reset(self):
        """Reset agent state for a new battle."""
        self.decisions_made = 0
