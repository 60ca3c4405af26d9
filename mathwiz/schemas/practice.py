"""
Profile, practice, lesson and onboarding schemas.
"""

from typing import List, Optional

from pydantic import Field

from mathwiz.engines.achievements.evaluator import AchievementProgress
from mathwiz.schemas.common import CamelModel
from mathwiz.schemas.profile import Achievement, LearnerProfile


class LevelProgressResponse(CamelModel):
    current: int
    required: int
    percentage: float


class ProfileDetailResponse(CamelModel):
    profile: LearnerProfile
    state: str
    level_progress: LevelProgressResponse
    next_achievement: Optional[AchievementProgress] = None


class RosterItemResponse(CamelModel):
    id: str
    name: str
    avatar: str
    color: str
    profile: Optional[LearnerProfile] = None


class OnboardingRequest(CamelModel):
    grade_level: int
    placement_correct: int = 0
    placement_total: int = 0


class AttemptRequest(CamelModel):
    """
    One graded practice attempt.

    Either ``correct`` is given, or ``userAnswer`` and ``expectedAnswer`` are
    and the server grades them.
    """

    skill_ids: List[str] = []
    correct: Optional[bool] = None
    user_answer: Optional[str] = None
    expected_answer: Optional[str] = None
    hints_used: int = 0
    base_xp_reward: int = 0
    problem_id: Optional[str] = None


class ProgressUpdateResponse(CamelModel):
    """Result of a server-side profile update followed by an achievement check."""

    xp_earned: int
    correct: Optional[bool] = None
    new_achievements: List[Achievement] = []
    total_xp: int = Field(0, alias="totalXP")
    profile: LearnerProfile
    persisted: bool


class LessonCompleteRequest(CamelModel):
    score: Optional[float] = None
    time_spent: Optional[int] = None
    prerequisite: Optional[str] = None


class DifficultyResponse(CamelModel):
    sets_completed: int
    multiplier: float
