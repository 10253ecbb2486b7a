"""
Unit tests for dice and the ability catalog.
"""

import random

import pytest

from engine.abilities import (
    AbilityCatalog, AbilityDataError, ActionType, AttributeType, DamageType,
    StatusCondition, ability_from_dict,
)
from engine.area import AreaShape
from engine.dice import DiceRoll


class TestDiceRoll:
    """Tests for dice notation and rolling."""

    @pytest.mark.parametrize("notation, expected", [
        ("2d6", DiceRoll(2, 6, 0)),
        ("1d4+1", DiceRoll(1, 4, 1)),
        ("d20", DiceRoll(1, 20, 0)),
        ("3d8-2", DiceRoll(3, 8, -2)),
    ])
    def test_parse(self, notation, expected):
        assert DiceRoll.parse(notation) == expected

    @pytest.mark.parametrize("bad", ["", "six", "2x6", "d", "1d0", "d0"])
    def test_parse_rejects_garbage(self, bad):
        with pytest.raises(ValueError):
            DiceRoll.parse(bad)

    def test_roll_bounds(self):
        rng = random.Random(7)
        dice = DiceRoll(2, 6, 1)
        for _ in range(200):
            assert 3 <= dice.roll(rng) <= 13

    def test_seeded_rolls_repeat(self):
        dice = DiceRoll(3, 6)
        first = [dice.roll(random.Random(99)) for _ in range(3)]
        assert len(set(first)) == 1

    def test_average(self):
        assert DiceRoll(2, 6, 1).average == 7.0
        assert DiceRoll.none().average == 0.0

    def test_str(self):
        assert str(DiceRoll(2, 6, -1)) == "2d6-1"


class TestAbilityFromDict:
    """Tests for building abilities from YAML mappings."""

    def test_full_definition(self):
        ability = ability_from_dict("fireball", {
            "name": "Fireball",
            "ap_cost": 4,
            "range": 15,
            "area": "radius 1",
            "damage": "3d6",
            "damage_type": "fire",
            "attribute": "intelligence",
            "save": "coordination",
            "inflicts": [{"condition": "burning", "duration": 2}],
            "cooldown": 2,
        })
        assert ability.ap_cost == 4
        assert ability.area.shape == AreaShape.RADIUS
        assert ability.damage == DiceRoll(3, 6)
        assert ability.damage_type == DamageType.FIRE
        assert ability.requires_save
        assert ability.save_attribute == AttributeType.COORDINATION
        assert ability.inflicts[0].condition == StatusCondition.BURNING
        assert ability.cooldown_turns == 2

    def test_defaults(self):
        ability = ability_from_dict("jab", {"ap_cost": 1})
        assert ability.name == "Jab"
        assert ability.action_type == ActionType.STANDARD
        assert ability.range_m == 1.5
        assert not ability.has_dice
        assert not ability.requires_save

    def test_missing_ap_cost(self):
        with pytest.raises(AbilityDataError):
            ability_from_dict("broken", {"damage": "1d6"})

    @pytest.mark.parametrize("damage", ["lots", "1d0"])
    def test_bad_dice(self, damage):
        with pytest.raises(AbilityDataError):
            ability_from_dict("broken", {"ap_cost": 1, "damage": damage})

    def test_non_positive_duration(self):
        with pytest.raises(AbilityDataError):
            ability_from_dict("broken", {"ap_cost": 1, "inflicts": [{"condition": "stunned", "duration": 0}]})

    def test_unknown_enum_value(self):
        with pytest.raises(AbilityDataError):
            ability_from_dict("broken", {"ap_cost": 1, "damage_type": "plasma"})


class TestAbilityCatalog:
    """Tests for the shipped catalog and lookups."""

    def test_loads_shipped_catalog(self, catalog):
        assert len(catalog) > 5
        assert "fireball" in catalog
        assert catalog.get("cure_wounds").is_healing

    def test_unknown_id(self, catalog):
        with pytest.raises(AbilityDataError):
            catalog.get("does_not_exist")

    def test_duplicate_id(self):
        catalog = AbilityCatalog.from_dict({"jab": {"ap_cost": 1}})
        with pytest.raises(AbilityDataError):
            catalog.add(ability_from_dict("jab", {"ap_cost": 2}))

    def test_missing_file(self, tmp_path):
        with pytest.raises(AbilityDataError):
            AbilityCatalog.from_yaml(tmp_path / "nope.yaml")

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "abilities.yaml"
        path.write_text("abilities:\n  jab:\n    ap_cost: 1\n    damage: 1d4\n")
        catalog = AbilityCatalog.from_yaml(path)
        assert catalog.get("jab").damage == DiceRoll(1, 4)
