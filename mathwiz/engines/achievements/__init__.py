"""
Achievement Engine - catalogue, unlock detection and reconciliation.

- check_achievements: pure, never re-produces an id the profile already has
- apply_achievements: the only place achievement XP is credited
- AchievementReconciler: stored profile wins over client-reported achievements
"""

from mathwiz.engines.achievements.definitions import (
    ACHIEVEMENTS,
    ACHIEVEMENTS_BY_ID,
    AchievementDefinition,
    required_lessons,
)
from mathwiz.engines.achievements.evaluator import (
    AchievementProgress,
    achievement_progress,
    apply_achievements,
    check_achievements,
    next_achievement,
)
from mathwiz.engines.achievements.reconciler import (
    AchievementReconciler,
    ProfileLocks,
    ReconcileResult,
    merge_profiles,
)

__all__ = [
    "ACHIEVEMENTS",
    "ACHIEVEMENTS_BY_ID",
    "AchievementDefinition",
    "required_lessons",
    "AchievementProgress",
    "achievement_progress",
    "apply_achievements",
    "check_achievements",
    "next_achievement",
    "AchievementReconciler",
    "ProfileLocks",
    "ReconcileResult",
    "merge_profiles",
]
