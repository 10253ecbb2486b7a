"""
Area-of-effect patterns on the hex grid.

Area descriptors from ability data ("Radius 2", "3x3 square", "Line 4", ...)
are parsed once at load time into an AreaOfEffect; patterns are then resolved
against an anchor cell and an optional facing.

Square and cone are approximations: a square N is a hex radius N // 2, and a
cone is a triangular spread along the nearest hex direction.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .map import DIRECTIONS, HexCoordinate


class AreaShape(Enum):
    SELF = "self"
    SINGLE = "single"
    RADIUS = "radius"
    SQUARE = "square"
    LINE = "line"
    CONE = "cone"


# Size used when the descriptor carries no number
DEFAULT_SIZES = {
    AreaShape.SELF: 0,
    AreaShape.SINGLE: 0,
    AreaShape.RADIUS: 1,
    AreaShape.SQUARE: 3,
    AreaShape.LINE: 3,
    AreaShape.CONE: 1,
}

# Descriptor keywords, checked in order
KEYWORDS = [
    ("self", AreaShape.SELF),
    ("single", AreaShape.SINGLE),
    ("radius", AreaShape.RADIUS),
    ("surrounding", AreaShape.RADIUS),
    ("square", AreaShape.SQUARE),
    ("line", AreaShape.LINE),
    ("cone", AreaShape.CONE),
]

_NUMBER = re.compile(r"\d+")


@dataclass(frozen=True)
class AreaOfEffect:
    """Closed area-of-effect variant."""
    shape: AreaShape = AreaShape.SINGLE
    size: int = 0

    @property
    def is_area(self) -> bool:
        """True for patterns that can cover more than the anchor."""
        return self.shape in (AreaShape.RADIUS, AreaShape.SQUARE, AreaShape.LINE, AreaShape.CONE)

    @classmethod
    def self_target(cls) -> "AreaOfEffect":
        return cls(AreaShape.SELF, 0)

    @classmethod
    def single(cls) -> "AreaOfEffect":
        return cls(AreaShape.SINGLE, 0)

    def __str__(self) -> str:
        if self.is_area:
            return f"{self.shape.value} {self.size}"
        return self.shape.value


def parse_area(descriptor: Optional[str]) -> AreaOfEffect:
    """Classify a free-text area descriptor. Unrecognized text is single target."""
    if not descriptor:
        return AreaOfEffect.single()

    text = descriptor.lower()
    for keyword, shape in KEYWORDS:
        if keyword in text:
            match = _NUMBER.search(text)
            size = int(match.group()) if match else DEFAULT_SIZES[shape]
            return AreaOfEffect(shape, size)

    return AreaOfEffect.single()


def nearest_direction(facing: HexCoordinate) -> HexCoordinate:
    """Snap a facing vector to the closest of the six hex directions."""
    best = DIRECTIONS[0]
    best_dist = None
    for direction in DIRECTIONS:
        dist = abs(facing.q - direction.q) + abs(facing.r - direction.r)
        if best_dist is None or dist < best_dist:
            best_dist = dist
            best = direction
    return best


def radius_pattern(center: HexCoordinate, radius: int) -> list[HexCoordinate]:
    """All hexes within cube distance radius of center."""
    hexes = []
    for dq in range(-radius, radius + 1):
        for dr in range(max(-radius, -dq - radius), min(radius, -dq + radius) + 1):
            hexes.append(HexCoordinate(center.q + dq, center.r + dr))
    return hexes


def line_pattern(center: HexCoordinate, direction: HexCoordinate, length: int) -> list[HexCoordinate]:
    hexes = [center]
    for i in range(1, length):
        hexes.append(HexCoordinate(center.q + direction.q * i, center.r + direction.r * i))
    return hexes


def cone_pattern(center: HexCoordinate, direction: HexCoordinate, reach: int) -> list[HexCoordinate]:
    hexes = [center]
    for dist in range(1, reach + 1):
        half = dist // 2
        for spread in range(-half, half + 1):
            hexes.append(HexCoordinate(
                center.q + direction.q * dist + spread,
                center.r + direction.r * dist,
            ))
    return hexes


def get_area_pattern(
    area: AreaOfEffect,
    anchor: HexCoordinate,
    facing: Optional[HexCoordinate] = None,
) -> list[HexCoordinate]:
    """Resolve an area of effect into the affected cells (unbounded by any grid)."""
    if area.shape == AreaShape.RADIUS:
        return radius_pattern(anchor, area.size)
    if area.shape == AreaShape.SQUARE:
        return radius_pattern(anchor, area.size // 2)

    direction = nearest_direction(facing) if facing is not None else DIRECTIONS[0]
    if area.shape == AreaShape.LINE:
        return line_pattern(anchor, direction, area.size)
    if area.shape == AreaShape.CONE:
        return cone_pattern(anchor, direction, area.size)

    return [anchor]
