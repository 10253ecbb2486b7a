"""
Pytest configuration and shared fixtures.
"""

import random
from pathlib import Path

import pytest

from engine.abilities import Ability, AbilityCatalog, AttributeType, DamageType
from engine.characters import Character
from engine.dice import DiceRoll

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ScriptedRandom(random.Random):
    """Random source that returns queued randint values, then falls back to a seeded stream."""

    def __init__(self, rolls=(), chance: float = 0.0, seed: int = 0):
        super().__init__(seed)
        self.rolls = list(rolls)
        self.chance = chance

    def randint(self, a, b):
        if self.rolls:
            return self.rolls.pop(0)
        return super().randint(a, b)

    def random(self):
        return self.chance


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def catalog() -> AbilityCatalog:
    """The shipped ability catalog."""
    return AbilityCatalog.from_yaml(DATA_DIR / "abilities.yaml")


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_character():
    """Factory for characters with sensible defaults."""
    def _make(name="Hero", max_hp=20, abilities=(), **kwargs):
        attributes = {AttributeType(k): v for k, v in kwargs.pop("attributes", {}).items()}
        character = Character(name=name, max_hp=max_hp, attributes=attributes, **kwargs)
        for ability in abilities:
            character.learn_ability(ability)
        return character
    return _make


@pytest.fixture
def firebolt() -> Ability:
    return Ability(
        id="test_bolt",
        name="Test Bolt",
        ap_cost=2,
        range_m=12,
        damage=DiceRoll(1, 6),
        damage_type=DamageType.FIRE,
        attribute=AttributeType.INTELLIGENCE,
        add_attribute_modifier=True,
    )


@pytest.fixture
def heal() -> Ability:
    return Ability(
        id="test_heal",
        name="Test Heal",
        ap_cost=3,
        damage=DiceRoll(2, 8),
        damage_type=DamageType.HEALING,
        attribute=AttributeType.FAITH,
    )
