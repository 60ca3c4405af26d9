"""
Difficulty scaling policy.

Problem generators scale their numeric ranges by a multiplier that grows with
the number of practice sets a learner has finished. The multiplier depends on
nothing but that count, so progressive difficulty is reproducible.
"""

from mathwiz.engines.errors import InvalidArgument

DIFFICULTY_STEP = 0.15
DIFFICULTY_CAP = 2.5
PROBLEMS_PER_SET = 10


def difficulty_multiplier(sets_completed: int) -> float:
    """
    1.0 for a new learner, +0.15 per finished set, capped at 2.5.

    Raises:
        InvalidArgument: sets_completed is not a whole number or is negative.
    """
    # bool is an int subclass but never a set count
    if isinstance(sets_completed, bool) or not isinstance(sets_completed, int):
        raise InvalidArgument("setsCompleted must be an integer")
    if sets_completed < 0:
        raise InvalidArgument("setsCompleted must not be negative")
    # rounded so 1.0 + n * 0.15 lands exactly on the cap instead of just below it
    return min(round(1.0 + sets_completed * DIFFICULTY_STEP, 4), DIFFICULTY_CAP)


def sets_completed_for(total_problems: int, set_size: int = PROBLEMS_PER_SET) -> int:
    """Whole practice sets contained in a problem count."""
    if total_problems < 0:
        raise InvalidArgument("totalProblems must not be negative")
    if set_size <= 0:
        raise InvalidArgument("setSize must be positive")
    return total_problems // set_size
