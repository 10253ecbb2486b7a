"""
Hex grid battlefield for arena combat.

Uses axial coordinates (q, r) for hex grid with flat-top orientation.
Cube coordinates are derived only for distance math.
"""

import heapq
import logging
from collections import deque
from dataclasses import dataclass
from itertools import count
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HexCoordinate:
    """Axial hex coordinate."""
    q: int  # column
    r: int  # row

    def to_cube(self) -> "CubeCoordinate":
        """Convert to cube coordinates (x = q, z = r, y = -x - z)."""
        return CubeCoordinate(self.q, -self.q - self.r, self.r)

    def __add__(self, other: "HexCoordinate") -> "HexCoordinate":
        return HexCoordinate(self.q + other.q, self.r + other.r)

    def __sub__(self, other: "HexCoordinate") -> "HexCoordinate":
        return HexCoordinate(self.q - other.q, self.r - other.r)

    def __str__(self) -> str:
        return f"({self.q}, {self.r})"


@dataclass(frozen=True)
class CubeCoordinate:
    """Cube coordinate, x + y + z = 0."""
    x: int
    y: int
    z: int

    def to_axial(self) -> HexCoordinate:
        return HexCoordinate(self.x, self.z)

    @staticmethod
    def distance(a: "CubeCoordinate", b: "CubeCoordinate") -> int:
        return (abs(a.x - b.x) + abs(a.y - b.y) + abs(a.z - b.z)) // 2


# Sentinel for "no position"
INVALID = HexCoordinate(-2**31, -2**31)

# Axial direction vectors for flat-top hexes
DIRECTIONS = (
    HexCoordinate(1, 0),    # east
    HexCoordinate(1, -1),   # northeast
    HexCoordinate(0, -1),   # northwest
    HexCoordinate(-1, 0),   # west
    HexCoordinate(-1, 1),   # southwest
    HexCoordinate(0, 1),    # southeast
)


def hex_distance(a: HexCoordinate, b: HexCoordinate) -> int:
    """Calculate distance in hexes between two cells."""
    return CubeCoordinate.distance(a.to_cube(), b.to_cube())


def meters_to_hexes(meters: float, meters_per_hex: float = 1.5) -> float:
    """Convert a distance in meters to hex tiles."""
    return meters / meters_per_hex


class HexBattlefield:
    """
    Bounded hex battlefield with occupancy tracking.

    Valid cells satisfy 0 <= q < width and 0 <= r < height.
    At most one occupant per cell.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.occupied: dict[HexCoordinate, Any] = {}

    def is_valid_position(self, coord: HexCoordinate) -> bool:
        return 0 <= coord.q < self.width and 0 <= coord.r < self.height

    def is_occupied(self, coord: HexCoordinate) -> bool:
        return coord in self.occupied

    def get_occupant(self, coord: HexCoordinate) -> Optional[Any]:
        """Get the occupant at a position, or None if empty."""
        return self.occupied.get(coord)

    def place_combatant(self, combatant: Any, position: HexCoordinate) -> bool:
        """Place an occupant. Refuses out-of-bounds or occupied cells."""
        if not self.is_valid_position(position):
            logger.warning(f"Cannot place {combatant} at invalid position {position}")
            return False
        if self.is_occupied(position):
            logger.warning(f"Position {position} is already occupied")
            return False

        self.occupied[position] = combatant
        return True

    def move_combatant(self, combatant: Any, source: HexCoordinate, destination: HexCoordinate) -> bool:
        """Move an occupant. The destination is validated before the source is vacated."""
        if not self.is_valid_position(destination):
            logger.warning(f"Cannot move {combatant} to invalid position {destination}")
            return False
        if self.is_occupied(destination) and destination != source:
            logger.warning(f"Cannot move {combatant}: {destination} is occupied")
            return False

        if self.occupied.get(source) is combatant:
            del self.occupied[source]
        self.occupied[destination] = combatant
        return True

    def remove_combatant(self, position: HexCoordinate) -> Optional[Any]:
        """Vacate a cell, returning its former occupant."""
        return self.occupied.pop(position, None)

    def get_distance(self, a: HexCoordinate, b: HexCoordinate) -> int:
        return hex_distance(a, b)

    def get_neighbors(self, coord: HexCoordinate) -> list[HexCoordinate]:
        """Get all in-bounds adjacent cells."""
        neighbors = []
        for direction in DIRECTIONS:
            neighbor = coord + direction
            if self.is_valid_position(neighbor):
                neighbors.append(neighbor)
        return neighbors

    def get_combatants_in_range(self, center: HexCoordinate, radius: int, team_id: Optional[int] = None) -> list[Any]:
        """Get occupants within radius hexes, optionally filtered by team."""
        found = []
        for position, occupant in self.occupied.items():
            if hex_distance(center, position) > radius:
                continue
            if team_id is not None and getattr(occupant, "team_id", None) != team_id:
                continue
            found.append(occupant)
        return found

    def cells(self) -> Iterable[HexCoordinate]:
        for q in range(self.width):
            for r in range(self.height):
                yield HexCoordinate(q, r)

    def clear(self):
        """Remove all occupants (between encounters)."""
        self.occupied.clear()


# Pathfinding
def find_path(
    grid: HexBattlefield,
    start: HexCoordinate,
    end: HexCoordinate,
    max_steps: int,
    ignore_occupied: bool = False,
) -> Optional[list[HexCoordinate]]:
    """
    Find a shortest path using A*.

    Unit edge cost, hex distance heuristic. Equal f-scores are popped in
    insertion order. Occupied cells block movement unless ignore_occupied is
    set or the cell is the destination. Returns None when no path exists
    within max_steps.
    """
    if not grid.is_valid_position(start) or not grid.is_valid_position(end):
        return None

    if start == end:
        return [start]

    tie_breaker = count()
    open_set = [(hex_distance(start, end), next(tie_breaker), start)]
    came_from: dict[HexCoordinate, HexCoordinate] = {}
    g_score = {start: 0}
    closed: set[HexCoordinate] = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)

        if current == end:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            return list(reversed(path))

        if current in closed:
            continue
        closed.add(current)

        for neighbor in grid.get_neighbors(current):
            if neighbor in closed:
                continue
            if not ignore_occupied and grid.is_occupied(neighbor) and neighbor != end:
                continue

            tentative_g = g_score[current] + 1
            if tentative_g > max_steps:
                continue

            if neighbor not in g_score or tentative_g < g_score[neighbor]:
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                f_score = tentative_g + hex_distance(neighbor, end)
                heapq.heappush(open_set, (f_score, next(tie_breaker), neighbor))

    return None  # No path found


def get_reachable_cells(grid: HexBattlefield, start: HexCoordinate, movement_range: int) -> list[HexCoordinate]:
    """Get all free cells reachable within movement_range steps (start excluded)."""
    reachable = []
    distances = {start: 0}
    frontier = deque([start])

    while frontier:
        current = frontier.popleft()
        current_dist = distances[current]
        if current_dist >= movement_range:
            continue

        for neighbor in grid.get_neighbors(current):
            if grid.is_occupied(neighbor) or neighbor in distances:
                continue
            distances[neighbor] = current_dist + 1
            frontier.append(neighbor)
            reachable.append(neighbor)

    return reachable
