"""
Level and accuracy formulas.

Every code path that needs a level or an accuracy percentage goes through
these functions; nothing stores a level independently of its XP.
"""

from typing import TypedDict

# One level per thousand XP; level 1 starts at 0 XP.
LEVEL_XP_UNIT = 1000


class LevelProgress(TypedDict):
    current: int
    required: int
    percentage: float


def level_for_xp(xp: int) -> int:
    """Level reached with ``xp`` total experience."""
    return max(xp, 0) // LEVEL_XP_UNIT + 1


def xp_to_next_level(xp: int) -> LevelProgress:
    """XP gathered inside the current level and how much the level needs."""
    current = max(xp, 0) % LEVEL_XP_UNIT
    return {
        "current": current,
        "required": LEVEL_XP_UNIT,
        "percentage": current / LEVEL_XP_UNIT * 100,
    }


def accuracy_percent(correct: int, total: int) -> int:
    """Whole-number accuracy, rounding halves up; 0 when nothing was attempted."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)
