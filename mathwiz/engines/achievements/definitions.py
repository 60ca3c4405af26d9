"""
Achievement catalogue.

Definitions are immutable configuration. Conditions receive the profile
snapshot and the evaluation time; every profile field already defaults to its
zero value, so no condition can fail on a fresh profile.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from mathwiz.schemas.profile import AchievementCategory, LearnerProfile

Condition = Callable[[LearnerProfile, datetime], bool]
ProgressFn = Callable[[LearnerProfile], Tuple[int, int]]

SKILL_MASTERED = 0.9
SKILL_PROFICIENT = 0.85

# Lessons per grade for grade_complete
REQUIRED_LESSONS: Dict[int, int] = {
    0: 4, 1: 5, 2: 5, 3: 5, 4: 5, 5: 5,
    6: 6, 7: 6, 8: 6, 9: 6, 10: 6,
    11: 7, 12: 7,
}
DEFAULT_REQUIRED_LESSONS = 5


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory
    xp_reward: int
    condition: Condition
    progress: Optional[ProgressFn] = None


def _problems(count: int) -> Tuple[Condition, ProgressFn]:
    return (
        lambda p, _now: p.total_problems_completed >= count,
        lambda p: (p.total_problems_completed, count),
    )


def _streak(days: int) -> Tuple[Condition, ProgressFn]:
    return (
        lambda p, _now: p.streak >= days,
        lambda p: (p.streak, days),
    )


def _accuracy(rate: int, min_problems: int) -> Condition:
    return lambda p, _now: p.accuracy_rate >= rate and p.total_problems_completed >= min_problems


def _level(level: int) -> Condition:
    return lambda p, _now: p.level >= level


def _mastered_skills(p: LearnerProfile, threshold: float = SKILL_MASTERED) -> int:
    return sum(1 for s in p.skills.values() if s.mastery_level >= threshold)


def _all_skills_proficient(p: LearnerProfile, _now: datetime) -> bool:
    return len(p.skills) >= 5 and _mastered_skills(p, SKILL_PROFICIENT) == len(p.skills)


def _first_week(p: LearnerProfile, now: datetime) -> bool:
    return now - p.created_at >= timedelta(days=7) and p.total_problems_completed >= 10


def required_lessons(grade_level: int) -> int:
    return REQUIRED_LESSONS.get(grade_level, DEFAULT_REQUIRED_LESSONS)


def _grade_complete(p: LearnerProfile, _now: datetime) -> bool:
    return len(p.completed_lessons) >= required_lessons(p.grade_level)


def _define(id, name, description, icon, category, xp_reward, condition, progress=None):
    return AchievementDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        category=category,
        xp_reward=xp_reward,
        condition=condition,
        progress=progress,
    )


PRACTICE = AchievementCategory.PRACTICE
MASTERY = AchievementCategory.MASTERY
SPECIAL = AchievementCategory.SPECIAL

ACHIEVEMENTS: List[AchievementDefinition] = [
    # Practice volume
    _define("first_problem", "First Spell Cast", "Complete your very first problem!", "✨", PRACTICE, 50,
            lambda p, _now: p.total_problems_completed >= 1),
    _define("problem_10", "Apprentice Wizard", "Solve 10 problems", "🧙", PRACTICE, 100, *_problems(10)),
    _define("problem_50", "Skilled Sorcerer", "Solve 50 problems", "🔮", PRACTICE, 250, *_problems(50)),
    _define("problem_100", "Master Mathematician", "Solve 100 problems", "🌟", PRACTICE, 500, *_problems(100)),
    _define("problem_500", "Grand Wizard", "Solve 500 problems - legendary!", "👑", PRACTICE, 1000, *_problems(500)),
    # Streaks
    _define("streak_3", "On Fire!", "Practice 3 days in a row", "🔥", PRACTICE, 100, *_streak(3)),
    _define("streak_7", "Weekly Warrior", "Practice 7 days in a row", "⚡", PRACTICE, 200, *_streak(7)),
    _define("streak_30", "Unstoppable Force", "Practice 30 days in a row", "💪", PRACTICE, 500, *_streak(30)),
    # Accuracy
    _define("accuracy_80", "Sharp Mind", "Maintain 80% accuracy", "🎯", MASTERY, 150, _accuracy(80, 10)),
    _define("accuracy_90", "Precision Master", "Maintain 90% accuracy", "🏆", MASTERY, 300, _accuracy(90, 20)),
    _define("accuracy_95", "Perfectionist", "Maintain 95% accuracy", "💎", MASTERY, 500, _accuracy(95, 50)),
    # Levels
    _define("level_5", "Rising Star", "Reach Level 5", "⭐", MASTERY, 100, _level(5)),
    _define("level_10", "Magic Prodigy", "Reach Level 10", "🌠", MASTERY, 250, _level(10)),
    _define("level_20", "Legendary Wizard", "Reach Level 20", "🔱", MASTERY, 500, _level(20)),
    # Skills
    _define("skill_master_1", "Skill Specialist", "Master your first skill (90%+)", "📖", MASTERY, 200,
            lambda p, _now: _mastered_skills(p) >= 1),
    _define("skill_master_3", "Triple Threat", "Master 3 different skills", "🎓", MASTERY, 400,
            lambda p, _now: _mastered_skills(p) >= 3),
    _define("skill_master_all", "Omniscient", "Master all skills in your grade", "🧠", MASTERY, 1000,
            _all_skills_proficient),
    # Milestones
    _define("first_week", "Welcome Wizard", "Complete your first week!", "🎉", SPECIAL, 200, _first_week),
    _define("grade_complete", "Grade Champion", "Complete all lessons for your grade", "🏅", MASTERY, 750,
            _grade_complete),
]

ACHIEVEMENTS_BY_ID: Dict[str, AchievementDefinition] = {d.id: d for d in ACHIEVEMENTS}
