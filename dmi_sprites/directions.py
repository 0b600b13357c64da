from enum import IntFlag
from typing import List


class Dirs(IntFlag):
    NORTH = 1
    SOUTH = 2
    EAST = 4
    WEST = 8
    SOUTHEAST = SOUTH | EAST
    SOUTHWEST = SOUTH | WEST
    NORTHEAST = NORTH | EAST
    NORTHWEST = NORTH | WEST


# Order in which a state's frames store their directions.
DIR_ORDER: List[Dirs] = [
    Dirs.SOUTH,
    Dirs.NORTH,
    Dirs.EAST,
    Dirs.WEST,
    Dirs.SOUTHEAST,
    Dirs.SOUTHWEST,
    Dirs.NORTHEAST,
    Dirs.NORTHWEST,
]

DIR_NAMES: List[str] = [
    "South",
    "North",
    "East",
    "West",
    "Southeast",
    "Southwest",
    "Northeast",
    "Northwest",
]

VALID_DIR_COUNTS = (1, 4, 8)


def dir_ordinal(direction: int) -> int:
    """Position of a direction flag in DIR_ORDER, or -1 for unknown values."""
    try:
        return DIR_ORDER.index(direction)
    except ValueError:
        return -1


def dir_name(direction: int) -> str:
    ordinal = dir_ordinal(direction)
    if ordinal < 0:
        raise ValueError(f"Unknown direction value: {direction!r}")
    return DIR_NAMES[ordinal]
