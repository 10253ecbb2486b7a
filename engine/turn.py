"""
Turn sequencing for arena combat.

Combat moves NOT_STARTED -> IN_PROGRESS -> ENDED. While in progress the
initiative order is walked cyclically; each combatant's turn goes
TURN_START -> ACTIONS_PENDING -> TURN_END. Wrapping past the end of the
order completes a round; completing round max_rounds ends combat with no
winner.

Action points: current AP resets to max at turn start plus up to 2 banked
from the previous turn; at turn end up to 2 unspent AP are banked.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .abilities import Ability, PER_TURN_DAMAGE, StatusCondition
from .area import AreaShape, get_area_pattern
from .characters import Character
from .combat import AbilityResolver, ActionKind, ActionReport, BasicAttackResolver
from .config import CombatSettings
from .dice import roll_d20
from .map import INVALID, HexBattlefield, HexCoordinate, find_path
from .statistics import BattleStatistics

logger = logging.getLogger(__name__)


class CombatState(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


class TurnPhase(Enum):
    TURN_START = "turn_start"
    ACTIONS_PENDING = "actions_pending"
    TURN_END = "turn_end"


# Legal state changes
STATE_TRANSITIONS = {
    CombatState.NOT_STARTED: {CombatState.IN_PROGRESS},
    CombatState.IN_PROGRESS: {CombatState.ENDED},
    CombatState.ENDED: set(),
}

PHASE_TRANSITIONS = {
    None: {TurnPhase.TURN_START},
    TurnPhase.TURN_START: {TurnPhase.ACTIONS_PENDING, TurnPhase.TURN_END},
    TurnPhase.ACTIONS_PENDING: {TurnPhase.TURN_END},
    TurnPhase.TURN_END: {TurnPhase.TURN_START},
}


@dataclass
class ActiveStatusEffect:
    condition: StatusCondition
    remaining: int


@dataclass(eq=False)
class Combatant:
    """Encounter-scoped wrapper around a Character."""
    character: Character
    team_id: int
    initiative: int = 0
    current_ap: int = 0
    banked_ap: int = 0
    position: HexCoordinate = INVALID
    status_effects: list[ActiveStatusEffect] = field(default_factory=list)
    cooldowns: dict[str, int] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.character.name

    @property
    def max_ap(self) -> int:
        return self.character.max_ap

    def is_alive(self) -> bool:
        return self.character.is_alive()

    # Action points
    def start_turn(self, max_banked: int = 2):
        self.current_ap = self.max_ap + min(self.banked_ap, max_banked)
        self.banked_ap = 0

    def end_turn(self, max_banked: int = 2):
        self.banked_ap = min(max(self.current_ap, 0), max_banked)
        self.current_ap = 0

    def spend_ap(self, amount: int) -> bool:
        if self.current_ap < amount:
            return False
        self.current_ap -= amount
        return True

    # Status effects
    def add_status(self, condition: StatusCondition, duration: int) -> bool:
        if duration <= 0:
            return False
        self.status_effects.append(ActiveStatusEffect(condition, duration))
        return True

    def has_status(self, condition: StatusCondition) -> bool:
        return any(e.condition == condition for e in self.status_effects)

    def tick_status_effects(self, rng: random.Random) -> list[tuple[StatusCondition, int]]:
        """Advance each effect by one turn. Returns (condition, damage) for per-turn damage."""
        ticks = []
        for effect in self.status_effects:
            effect.remaining -= 1
            dice = PER_TURN_DAMAGE.get(effect.condition)
            if dice is not None:
                ticks.append((effect.condition, self.character.take_damage(dice.roll(rng))))
        self.status_effects = [e for e in self.status_effects if e.remaining > 0]
        return ticks

    # Cooldowns
    def is_on_cooldown(self, ability: Ability) -> bool:
        return self.cooldowns.get(ability.id, 0) > 0

    def start_cooldown(self, ability: Ability):
        if ability.cooldown_turns > 0:
            self.cooldowns[ability.id] = ability.cooldown_turns

    def tick_cooldowns(self):
        self.cooldowns = {k: v - 1 for k, v in self.cooldowns.items() if v > 1}

    def can_use(self, ability: Ability) -> bool:
        """AP, level/known-ability/tech-tree gate and cooldown."""
        if self.current_ap < ability.ap_cost:
            return False
        if not self.character.meets_requirements(ability):
            return False
        return not self.is_on_cooldown(ability)

    def __str__(self) -> str:
        return self.name


class CombatManager:
    """Manages turn-based combat encounters using action points."""

    def __init__(
        self,
        settings: Optional[CombatSettings] = None,
        rng: Optional[random.Random] = None,
        battlefield: Optional[HexBattlefield] = None,
        statistics: Optional[BattleStatistics] = None,
        max_rounds: Optional[int] = None,
    ):
        self.settings = settings or CombatSettings()
        self.max_rounds = max_rounds
        self.rng = rng or random.Random()
        self.battlefield = battlefield
        self.statistics = statistics

        self.attack_resolver = BasicAttackResolver(self.rng)
        self.ability_resolver = AbilityResolver(self.rng)

        self.combatants: list[Combatant] = []
        self.state = CombatState.NOT_STARTED
        self.phase: Optional[TurnPhase] = None
        self.current_index = 0
        self.completed_rounds = 0
        self.turns_taken = 0
        self.winning_team: Optional[int] = None
        self.combat_log: list[ActionReport] = []

        # Callbacks for observers (loggers, pacing)
        self.on_turn_start: Optional[Callable] = None
        self.on_turn_end: Optional[Callable] = None
        self.on_action: Optional[Callable] = None
        self.on_combat_end: Optional[Callable] = None

    def set_battle_statistics(self, statistics: BattleStatistics):
        self.statistics = statistics

    @property
    def round_number(self) -> int:
        return self.completed_rounds + 1

    # State machine
    def _transition(self, new_state: CombatState):
        if new_state not in STATE_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal combat transition {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _set_phase(self, new_phase: TurnPhase):
        if new_phase not in PHASE_TRANSITIONS[self.phase]:
            raise RuntimeError(f"Illegal turn transition {self.phase} -> {new_phase.value}")
        self.phase = new_phase

    def is_combat_active(self) -> bool:
        return self.state == CombatState.IN_PROGRESS

    # Setup
    def start_combat(self, team_a: list[Character], team_b: list[Character]):
        """Wrap both teams, roll initiative and begin the first turn."""
        if self.state == CombatState.IN_PROGRESS:
            raise RuntimeError("Combat already in progress")

        self.state = CombatState.NOT_STARTED
        self.phase = None
        self.current_index = 0
        self.completed_rounds = 0
        self.turns_taken = 0
        self.winning_team = None
        self.combat_log = []

        self.combatants = [Combatant(c, 0) for c in team_a] + [Combatant(c, 1) for c in team_b]
        self._roll_initiative()
        # Stable sort: ties keep roster order
        self.combatants.sort(key=lambda c: c.initiative, reverse=True)

        if self.battlefield is not None:
            self._deploy()

        self._transition(CombatState.IN_PROGRESS)

        logger.info(f"Combat started! {len(self.combatants)} combatants")
        for i, c in enumerate(self.combatants, 1):
            logger.info(f"  {i}. {c.name} (team {c.team_id}) - Initiative: {c.initiative}")

        self.start_next_turn()

    def _roll_initiative(self):
        for combatant in self.combatants:
            combatant.initiative = roll_d20(self.rng) + combatant.character.initiative_modifier

    def _deployment_cells(self, team_id: int) -> list[HexCoordinate]:
        """Team 0 fills columns from the west edge, team 1 from the east edge."""
        width, height = self.battlefield.width, self.battlefield.height
        columns = range(width) if team_id == 0 else range(width - 1, -1, -1)
        mid = height // 2
        rows = sorted(range(height), key=lambda r: (abs(r - mid), r))
        return [HexCoordinate(q, r) for q in columns for r in rows]

    def _deploy(self):
        self.battlefield.clear()
        for team_id in (0, 1):
            cells = iter(self._deployment_cells(team_id))
            for combatant in self.combatants:
                if combatant.team_id != team_id or not combatant.is_alive():
                    continue
                for cell in cells:
                    if self.battlefield.place_combatant(combatant, cell):
                        combatant.position = cell
                        break
                else:
                    logger.warning(f"No room to deploy {combatant.name}")

    # Turn flow
    def start_next_turn(self):
        """Grant the next living combatant a turn, or end combat."""
        if not self.is_combat_active():
            return

        while True:
            if self._check_combat_end():
                self._end_combat()
                return

            while (self.current_index < len(self.combatants)
                   and not self.combatants[self.current_index].is_alive()):
                self.current_index += 1

            if self.current_index >= len(self.combatants):
                self.current_index = 0
                self.completed_rounds += 1
                if self.max_rounds is not None and self.completed_rounds >= self.max_rounds:
                    logger.info(f"Round cap of {self.max_rounds} reached")
                    self._end_combat()
                    return
                logger.info(f"=== Round {self.round_number} ===")
                continue

            if self._begin_turn(self.combatants[self.current_index]):
                return

            # Defeated by per-turn effects; the turn is forfeited
            self._set_phase(TurnPhase.TURN_END)
            self.current_index += 1

    def _begin_turn(self, combatant: Combatant) -> bool:
        """Run turn-start bookkeeping. Returns False if the combatant fell."""
        self._set_phase(TurnPhase.TURN_START)

        combatant.start_turn(self.settings.max_banked_ap)
        for condition, damage in combatant.tick_status_effects(self.rng):
            report = ActionReport(
                round=self.round_number,
                kind=ActionKind.STATUS_TICK,
                actor=condition.value,
                target=combatant.name,
                damage=damage,
                target_defeated=not combatant.is_alive(),
            )
            if self.statistics:
                self.statistics.record_damage(None, combatant.name, damage)
            self._log_report(report, combatant)
        combatant.tick_cooldowns()

        if not combatant.is_alive():
            logger.info(f"{combatant.name} succumbs before acting")
            self._vacate(combatant)
            return False

        self.turns_taken += 1
        logger.info(f"{combatant.name}'s turn (AP: {combatant.current_ap})")
        if self.on_turn_start:
            self.on_turn_start(combatant)
        self._set_phase(TurnPhase.ACTIONS_PENDING)
        return True

    def end_current_turn(self):
        """Bank unspent AP and advance to the next combatant."""
        if not self.is_combat_active():
            return

        combatant = self.combatants[self.current_index]
        combatant.end_turn(self.settings.max_banked_ap)
        self._set_phase(TurnPhase.TURN_END)

        if self.on_turn_end:
            self.on_turn_end(combatant)

        self.current_index += 1
        self.start_next_turn()

    def get_current_combatant(self) -> Optional[Combatant]:
        if not self.is_combat_active() or self.current_index >= len(self.combatants):
            return None
        return self.combatants[self.current_index]

    # Queries
    def get_team_members(self, team_id: int, alive_only: bool = True) -> list[Combatant]:
        return [
            c for c in self.combatants
            if c.team_id == team_id and (c.is_alive() or not alive_only)
        ]

    def get_combatant(self, character: Character) -> Optional[Combatant]:
        for combatant in self.combatants:
            if combatant.character is character:
                return combatant
        return None

    def _team_alive(self, team_id: int) -> bool:
        return any(c.team_id == team_id and c.is_alive() for c in self.combatants)

    # Actions
    def use_ability(self, ability: Ability, user: Combatant, target: Combatant) -> bool:
        """Use an ability on a target. Returns False (no state change) when refused."""
        if not self.is_combat_active():
            logger.warning(f"{user.name} cannot use {ability.name}: combat is not active")
            return False
        if not user.can_use(ability):
            logger.warning(f"{user.name} cannot use {ability.name} (AP {user.current_ap}/{ability.ap_cost})")
            return False

        user.spend_ap(ability.ap_cost)
        user.start_cooldown(ability)
        if self.statistics:
            self.statistics.record_ability_used(user.name)

        logger.info(f"{user.name} uses {ability.name} on {target.name}")
        recipients = self._ability_recipients(ability, user, target)
        reports = self.ability_resolver.resolve(ability, user, recipients, self.round_number)
        for recipient, report in zip(recipients, reports):
            if self.statistics:
                if report.damage:
                    self.statistics.record_damage(user.name, report.target, report.damage)
                if report.healing:
                    self.statistics.record_healing(user.name, report.healing)
            self._log_report(report, recipient)
        return True

    def _ability_recipients(self, ability: Ability, user: Combatant, target: Combatant) -> list[Combatant]:
        """The target, plus its living teammates inside the area on a battlefield."""
        if ability.area.shape == AreaShape.SELF:
            return [user]
        recipients = [target]
        if not ability.area.is_area or self.battlefield is None or target.position == INVALID:
            return recipients

        facing = None
        if user.position != INVALID and user.position != target.position:
            facing = target.position - user.position
        for cell in get_area_pattern(ability.area, target.position, facing):
            occupant = self.battlefield.get_occupant(cell)
            if (occupant is not None and occupant is not target
                    and occupant.team_id == target.team_id and occupant.is_alive()):
                recipients.append(occupant)
        return recipients

    def perform_basic_attack(self, attacker: Combatant, target: Combatant) -> bool:
        """Attack for a fixed AP cost. Returns True if the attack was made, hit or miss."""
        if not self.is_combat_active():
            return False
        if not attacker.spend_ap(self.settings.basic_attack_cost):
            logger.warning(f"{attacker.name}: not enough AP for basic attack")
            return False

        if self.statistics:
            self.statistics.record_basic_attack(attacker.name)

        report = self.attack_resolver.resolve(attacker, target, self.round_number)
        if report.hit and self.statistics:
            self.statistics.record_damage(attacker.name, target.name, report.damage)
        logger.info(
            f"{attacker.name} attacks {target.name}: "
            + (f"hit for {report.damage}{' (CRITICAL)' if report.critical else ''}" if report.hit else "miss")
        )
        self._log_report(report, target)
        return True

    def move_combatant(self, combatant: Combatant, destination: HexCoordinate) -> bool:
        """Move up to the character's speed in hexes for the move cost."""
        if not self.is_combat_active() or self.battlefield is None or combatant.position == INVALID:
            return False
        if combatant.current_ap < self.settings.move_cost:
            return False
        if self.battlefield.is_occupied(destination):
            logger.warning(f"{combatant.name} cannot move to occupied {destination}")
            return False

        path = find_path(self.battlefield, combatant.position, destination, combatant.character.speed)
        if path is None or len(path) < 2:
            return False
        if not self.battlefield.move_combatant(combatant, combatant.position, destination):
            return False

        combatant.spend_ap(self.settings.move_cost)
        origin, combatant.position = combatant.position, destination
        self._log_report(ActionReport(
            round=self.round_number,
            kind=ActionKind.MOVE,
            actor=combatant.name,
            notes=[f"{origin} -> {destination}"],
        ))
        return True

    def _log_report(self, report: ActionReport, target: Optional[Combatant] = None):
        self.combat_log.append(report)
        if report.target_defeated and target is not None:
            logger.info(f"{target.name} has been defeated!")
            self._vacate(target)
        if self.on_action:
            self.on_action(report)

    def _vacate(self, combatant: Combatant):
        if self.battlefield is not None and combatant.position != INVALID:
            if self.battlefield.get_occupant(combatant.position) is combatant:
                self.battlefield.remove_combatant(combatant.position)
            combatant.position = INVALID

    # Termination
    def _check_combat_end(self) -> bool:
        return not self._team_alive(0) or not self._team_alive(1)

    def _end_combat(self):
        self._transition(CombatState.ENDED)
        self.phase = None

        team0_alive = self._team_alive(0)
        team1_alive = self._team_alive(1)
        if team0_alive and not team1_alive:
            self.winning_team = 0
        elif team1_alive and not team0_alive:
            self.winning_team = 1
        else:
            self.winning_team = None

        if self.winning_team is None:
            logger.info("Combat ended in a draw!")
        else:
            logger.info(f"Team {self.winning_team} wins!")

        self._award_rewards()

        if self.on_combat_end:
            self.on_combat_end(self.winning_team)

    def _award_rewards(self):
        """Fixed experience to every surviving member of the winning side."""
        if self.winning_team is None:
            return
        for combatant in self.get_team_members(self.winning_team):
            combatant.character.gain_experience(self.settings.victory_experience)
