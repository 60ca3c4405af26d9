"""
Progress Tracker - pure state transitions for a learner profile.

Each function takes a profile snapshot and returns a new one; persistence is
the caller's job. Achievement XP is never credited here (see
engines.achievements.evaluator.apply_achievements).
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from mathwiz.engines.errors import InvalidArgument, InvalidAttempt, OnboardingAlreadyCompleted
from mathwiz.engines.mastery.skill_tracer import seed_skill, update_skill_mastery
from mathwiz.logging_config import get_logger
from mathwiz.schemas.profile import CompletedLesson, LearnerProfile, SkillMastery, utcnow

logger = get_logger(__name__)

HINT_PENALTY = 5
LESSON_XP_REWARD = 100
ONBOARDING_XP_BONUS = 100
MAX_GRADE_LEVEL = 12


class Attempt(BaseModel):
    """Outcome of one graded practice problem."""

    skill_ids: List[str]
    correct: bool
    hints_used: int = 0
    base_xp_reward: int = 0
    problem_id: Optional[str] = None


class AttemptOutcome(BaseModel):
    profile: LearnerProfile
    xp_earned: int


def xp_for_attempt(attempt: Attempt) -> int:
    """XP a correct answer is worth after hint penalties; 0 for a miss."""
    if not attempt.correct:
        return 0
    return max(0, attempt.base_xp_reward - attempt.hints_used * HINT_PENALTY)


def _validate_attempt(attempt: Attempt) -> None:
    if attempt.base_xp_reward < 0:
        raise InvalidAttempt("baseXpReward must not be negative")
    if attempt.hints_used < 0:
        raise InvalidAttempt("hintsUsed must not be negative")
    if not attempt.skill_ids or any(not s for s in attempt.skill_ids):
        raise InvalidAttempt("an attempt must name at least one skill")


def record_attempt(profile: LearnerProfile, attempt: Attempt, now: Optional[datetime] = None) -> AttemptOutcome:
    """
    Apply one graded attempt to the profile.

    Raises:
        InvalidAttempt: negative reward or hints, or no skills named.
    """
    _validate_attempt(attempt)
    now = now or utcnow()
    xp_earned = xp_for_attempt(attempt)

    skills: Dict[str, SkillMastery] = dict(profile.skills)
    # dict.fromkeys: a skill listed twice in one attempt is practised once
    for skill_id in dict.fromkeys(attempt.skill_ids):
        current = skills.get(skill_id) or seed_skill(skill_id, now=now)
        skills[skill_id] = update_skill_mastery(current, attempt.correct, now=now)

    completed_problems = list(profile.completed_problems)
    if attempt.correct and attempt.problem_id and attempt.problem_id not in completed_problems:
        completed_problems.append(attempt.problem_id)

    updated = profile.model_copy(
        update={
            "total_problems_completed": profile.total_problems_completed + 1,
            "correct_answers": profile.correct_answers + (1 if attempt.correct else 0),
            "xp": profile.xp + xp_earned,
            "skills": skills,
            "completed_problems": completed_problems,
        }
    )
    logger.debug(
        "Attempt recorded",
        extra={
            "correct": attempt.correct,
            "xp_earned": xp_earned,
            "total_problems": updated.total_problems_completed,
        },
    )
    return AttemptOutcome(profile=updated, xp_earned=xp_earned)


def is_lesson_unlocked(profile: LearnerProfile, prerequisite: Optional[str]) -> bool:
    """A lesson is open when it has no prerequisite or the prerequisite is done."""
    return not prerequisite or prerequisite in profile.completed_lesson_ids


def complete_lesson(
    profile: LearnerProfile,
    lesson_id: str,
    score: Optional[float] = None,
    time_spent: Optional[int] = None,
    now: Optional[datetime] = None,
) -> AttemptOutcome:
    """
    Mark a lesson complete and credit its XP.

    Completing a lesson a second time changes nothing and earns nothing.
    """
    if not lesson_id:
        raise InvalidArgument("lesson id is required")
    if lesson_id in profile.completed_lesson_ids:
        return AttemptOutcome(profile=profile, xp_earned=0)

    completion = CompletedLesson(
        lesson_id=lesson_id,
        completed_at=now or utcnow(),
        score=score,
        time_spent=time_spent,
    )
    updated = profile.model_copy(
        update={
            "completed_lessons": [*profile.completed_lessons, completion],
            "xp": profile.xp + LESSON_XP_REWARD,
        }
    )
    return AttemptOutcome(profile=updated, xp_earned=LESSON_XP_REWARD)


def complete_onboarding(
    profile: LearnerProfile,
    grade_level: int,
    placement_correct: int,
    placement_total: int,
    now: Optional[datetime] = None,
) -> LearnerProfile:
    """
    Finish onboarding: set the grade, seed skills from the placement quiz and
    grant the welcome bonus.

    Only addition is estimated from placement; the other starting skills
    begin unpractised. Skills the profile already has are left alone.

    Raises:
        OnboardingAlreadyCompleted: the profile already finished onboarding.
        InvalidArgument: grade outside 0-12 or impossible placement counts.
    """
    if profile.onboarding_completed:
        raise OnboardingAlreadyCompleted(f"profile {profile.id} already completed onboarding")
    if not 0 <= grade_level <= MAX_GRADE_LEVEL:
        raise InvalidArgument(f"grade level must be between 0 and {MAX_GRADE_LEVEL}")
    if placement_total < 0 or not 0 <= placement_correct <= placement_total:
        raise InvalidArgument("placement counts must satisfy 0 <= correct <= total")

    now = now or utcnow()
    placement_mastery = placement_correct / placement_total if placement_total else 0.0

    seeded = [seed_skill("addition", placement_mastery, placement_total, now=now), seed_skill("subtraction", now=now)]
    if grade_level >= 2:
        seeded += [seed_skill("multiplication", now=now), seed_skill("division", now=now)]

    skills = dict(profile.skills)
    for skill in seeded:
        skills.setdefault(skill.skill_id, skill)

    logger.info(
        "Onboarding completed",
        extra={"grade_level": grade_level, "placement_mastery": round(placement_mastery, 2)},
    )
    return profile.model_copy(
        update={
            "grade_level": grade_level,
            "skills": skills,
            "xp": profile.xp + ONBOARDING_XP_BONUS,
            "onboarding_completed": True,
        }
    )
