"""
Mastery Engine - attempts, skill tracing, lessons and onboarding.

Rules:
- Every graded attempt counts once toward totals; correct ones also toward
  correctAnswers and earn XP minus 5 per hint used
- Level = xp // 1000 + 1, accuracy = round(correct / total * 100)
- Skill mastery follows a Bayesian Knowledge Tracing posterior
- Lessons are worth 100 XP once; onboarding grants a 100 XP welcome bonus
"""

from mathwiz.engines.mastery.grader import Grader, answers_match
from mathwiz.engines.mastery.progress_tracker import (
    HINT_PENALTY,
    LESSON_XP_REWARD,
    ONBOARDING_XP_BONUS,
    Attempt,
    AttemptOutcome,
    complete_lesson,
    complete_onboarding,
    is_lesson_unlocked,
    record_attempt,
    xp_for_attempt,
)
from mathwiz.engines.mastery.skill_tracer import posterior, seed_skill, update_skill_mastery

__all__ = [
    "Grader",
    "answers_match",
    "HINT_PENALTY",
    "LESSON_XP_REWARD",
    "ONBOARDING_XP_BONUS",
    "Attempt",
    "AttemptOutcome",
    "complete_lesson",
    "complete_onboarding",
    "is_lesson_unlocked",
    "record_attempt",
    "xp_for_attempt",
    "posterior",
    "seed_skill",
    "update_skill_mastery",
]
