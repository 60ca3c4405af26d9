"""
Difficulty Scaling Policy.
"""

from mathwiz.engines.difficulty.policy import (
    DIFFICULTY_CAP,
    DIFFICULTY_STEP,
    PROBLEMS_PER_SET,
    difficulty_multiplier,
    sets_completed_for,
)

__all__ = [
    "DIFFICULTY_CAP",
    "DIFFICULTY_STEP",
    "PROBLEMS_PER_SET",
    "difficulty_multiplier",
    "sets_completed_for",
]
