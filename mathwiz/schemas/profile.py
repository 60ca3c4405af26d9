"""
Learner profile data model.

The profile is the single mutable aggregate; skills, achievements and lesson
completions only exist inside it. Missing fields default to their zero value
so engine code never has to guess at absent data.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, computed_field, field_validator, model_validator

from mathwiz.engines.leveling import accuracy_percent, level_for_xp
from mathwiz.schemas.common import CamelModel

# Bayesian Knowledge Tracing defaults seeded for every new skill
DEFAULT_P_LEARN = 0.3
DEFAULT_P_GUESS = 0.25
DEFAULT_P_SLIP = 0.1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AchievementCategory(str, Enum):
    PRACTICE = "practice"
    MASTERY = "mastery"
    SOCIAL = "social"
    SPECIAL = "special"


class SkillMastery(CamelModel):
    """Estimated mastery of one skill, tracked with BKT parameters."""

    skill_id: str
    skill_name: str = ""
    category: Optional[str] = None
    mastery_level: float = Field(0.0, ge=0.0, le=1.0)
    p_learn: float = Field(DEFAULT_P_LEARN, ge=0.0, le=1.0, alias="p_learn")
    p_guess: float = Field(DEFAULT_P_GUESS, ge=0.0, le=1.0, alias="p_guess")
    p_slip: float = Field(DEFAULT_P_SLIP, ge=0.0, le=1.0, alias="p_slip")
    practice_count: int = Field(0, ge=0)
    last_practiced: Optional[datetime] = None

    @model_validator(mode="after")
    def _default_name(self) -> "SkillMastery":
        if not self.skill_name:
            self.skill_name = self.skill_id.replace("_", " ").title()
        return self


class Achievement(CamelModel):
    """An unlocked achievement. Never removed or recomputed once granted."""

    id: str
    name: str
    description: str = ""
    icon: str = ""
    category: AchievementCategory = AchievementCategory.SPECIAL
    xp_reward: int = Field(0, ge=0)
    unlocked_at: datetime = Field(default_factory=utcnow)
    progress: int = 100
    max_progress: int = 100


class CompletedLesson(CamelModel):
    lesson_id: str
    completed_at: datetime = Field(default_factory=utcnow)
    score: Optional[float] = None
    time_spent: Optional[int] = None


class Preferences(CamelModel):
    theme: str = "auto"
    sound_enabled: bool = True
    animations_enabled: bool = True
    character_avatar: str = ""
    wand_style: str = "default"


class LearnerProfile(CamelModel):
    """
    Aggregate learner state.

    ``level`` and ``accuracy_rate`` are derived from the counters on every
    read, so they can never drift from ``xp`` and the attempt totals.
    """

    id: str = Field(validation_alias=AliasChoices("id", "uid"))
    display_name: str = ""
    grade_level: int = Field(0, ge=0, le=12)
    xp: int = Field(0, ge=0)
    streak: int = Field(0, ge=0)
    total_problems_completed: int = Field(0, ge=0)
    correct_answers: int = Field(0, ge=0)
    achievements: List[Achievement] = []
    skills: Dict[str, SkillMastery] = {}
    completed_lessons: List[CompletedLesson] = []
    completed_problems: List[str] = []
    onboarding_completed: bool = False
    preferences: Preferences = Field(default_factory=Preferences)
    created_at: datetime = Field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def level(self) -> int:
        return level_for_xp(self.xp)

    @computed_field(alias="accuracyRate")  # type: ignore[prop-decorator]
    @property
    def accuracy_rate(self) -> int:
        return accuracy_percent(self.correct_answers, self.total_problems_completed)

    @field_validator("skills", mode="before")
    @classmethod
    def _skills_from_list(cls, value: Any) -> Any:
        """Accept the list form ``[{skillId: ...}, ...]`` as well as a mapping."""
        if isinstance(value, list):
            mapping: Dict[str, Any] = {}
            for item in value:
                if isinstance(item, dict):
                    key = item.get("skillId") or item.get("skill_id")
                else:
                    key = item.skill_id
                mapping.setdefault(key, item)
            return mapping
        return value

    @field_validator("created_at", "last_login_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("achievements")
    @classmethod
    def _unique_achievements(cls, value: List[Achievement]) -> List[Achievement]:
        return dedupe_achievements(value)

    @model_validator(mode="after")
    def _counters_consistent(self) -> "LearnerProfile":
        if self.correct_answers > self.total_problems_completed:
            raise ValueError("correctAnswers cannot exceed totalProblemsCompleted")
        for key, skill in self.skills.items():
            if skill.skill_id != key:
                raise ValueError(f"skill key {key!r} does not match skillId {skill.skill_id!r}")
        return self

    @property
    def achievement_ids(self) -> List[str]:
        return [a.id for a in self.achievements]

    @property
    def completed_lesson_ids(self) -> List[str]:
        return [cl.lesson_id for cl in self.completed_lessons]


def dedupe_achievements(achievements: List[Achievement]) -> List[Achievement]:
    """Keep the first occurrence of every achievement id, preserving order."""
    seen = set()
    unique = []
    for achievement in achievements:
        if achievement.id in seen:
            continue
        seen.add(achievement.id)
        unique.append(achievement)
    return unique


def new_profile(profile_id: str, display_name: str = "", now: Optional[datetime] = None) -> LearnerProfile:
    """Default profile for a learner seen for the first time."""
    now = now or utcnow()
    return LearnerProfile(
        id=profile_id,
        display_name=display_name or profile_id.title(),
        created_at=now,
        last_login_at=now,
    )
