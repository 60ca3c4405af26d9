"""
Skill tracer - Bayesian Knowledge Tracing update for one skill.

Correct answer: posterior given a correct response, then the learning
transition. Incorrect answer: posterior given an incorrect response only, so
a miss never raises the estimate (as long as p_slip <= 1 - p_guess).
"""

from datetime import datetime
from typing import Optional

from mathwiz.schemas.profile import (
    DEFAULT_P_GUESS,
    DEFAULT_P_LEARN,
    DEFAULT_P_SLIP,
    SkillMastery,
    utcnow,
)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def posterior(p_known: float, correct: bool, p_guess: float, p_slip: float) -> float:
    """P(known | observed response)."""
    if correct:
        known = p_known * (1.0 - p_slip)
        unknown = (1.0 - p_known) * p_guess
    else:
        known = p_known * p_slip
        unknown = (1.0 - p_known) * (1.0 - p_guess)
    total = known + unknown
    if total <= 0.0:
        return p_known
    return known / total


def update_skill_mastery(skill: SkillMastery, correct: bool, now: Optional[datetime] = None) -> SkillMastery:
    """Return a copy of ``skill`` updated for one more attempt."""
    estimate = posterior(skill.mastery_level, correct, skill.p_guess, skill.p_slip)
    if correct:
        estimate = estimate + (1.0 - estimate) * skill.p_learn
    return skill.model_copy(
        update={
            "mastery_level": _clamp(estimate),
            "practice_count": skill.practice_count + 1,
            "last_practiced": now or utcnow(),
        }
    )


def seed_skill(
    skill_id: str,
    mastery_level: float = 0.0,
    practice_count: int = 0,
    now: Optional[datetime] = None,
    category: Optional[str] = None,
) -> SkillMastery:
    """A fresh record with the default BKT parameters."""
    return SkillMastery(
        skill_id=skill_id,
        category=category or skill_id,
        mastery_level=_clamp(mastery_level),
        p_learn=DEFAULT_P_LEARN,
        p_guess=DEFAULT_P_GUESS,
        p_slip=DEFAULT_P_SLIP,
        practice_count=practice_count,
        last_practiced=now or utcnow(),
    )
