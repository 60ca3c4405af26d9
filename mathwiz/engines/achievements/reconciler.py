"""
Achievement reconciler - merges a client-reported profile with the stored one
before unlocking achievements.

The stored profile is authoritative for which achievements are already
granted. All read-check-write sequences for one learner run under that
learner's lock, so two overlapping requests cannot both grant the same id.
Storage failures are logged and degrade to a local, unsaved result.
"""

import asyncio
import weakref
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from mathwiz.engines.achievements.evaluator import apply_achievements, check_achievements
from mathwiz.kernel.profiles.profile_store import ProfileStore, ProfileStoreError
from mathwiz.logging_config import get_logger
from mathwiz.schemas.profile import (
    Achievement,
    CompletedLesson,
    LearnerProfile,
    SkillMastery,
    dedupe_achievements,
)

logger = get_logger(__name__)


class ReconcileResult(BaseModel):
    new_achievements: List[Achievement]
    total_xp: int
    final_profile: LearnerProfile
    persisted: bool


class ProfileLocks:
    """One asyncio.Lock per profile id, dropped once nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def for_profile(self, profile_id: str) -> asyncio.Lock:
        lock = self._locks.get(profile_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[profile_id] = lock
        return lock


def _merge_skills(submitted: Dict[str, SkillMastery], stored: Dict[str, SkillMastery]) -> Dict[str, SkillMastery]:
    merged = dict(stored)
    for skill_id, skill in submitted.items():
        current = merged.get(skill_id)
        if current is None or skill.practice_count > current.practice_count:
            merged[skill_id] = skill
    return merged


def _merge_lessons(submitted: List[CompletedLesson], stored: List[CompletedLesson]) -> List[CompletedLesson]:
    seen = {lesson.lesson_id for lesson in stored}
    merged = list(stored)
    for lesson in submitted:
        if lesson.lesson_id not in seen:
            seen.add(lesson.lesson_id)
            merged.append(lesson)
    return merged


def merge_profiles(submitted: LearnerProfile, stored: Optional[LearnerProfile]) -> LearnerProfile:
    """
    The view achievements are checked against.

    Achievements come from the stored profile whenever it has any, otherwise
    from the submitted one. Counters and XP never go backwards: each takes the
    larger of the two reports. Completion lists are unioned. Display name and
    preferences are taken from the client only when it sent them.
    """
    if stored is None:
        return submitted.model_copy(update={"achievements": dedupe_achievements(submitted.achievements)})

    baseline = stored.achievements if stored.achievements else dedupe_achievements(submitted.achievements)
    # Client-owned fields only replace the stored ones when the client actually sent them.
    sent = submitted.model_fields_set
    return stored.model_copy(
        update={
            "display_name": (submitted.display_name if "display_name" in sent else "") or stored.display_name,
            "preferences": submitted.preferences if "preferences" in sent else stored.preferences,
            "last_login_at": max(
                (t for t in (stored.last_login_at, submitted.last_login_at) if t is not None),
                default=None,
            ),
            "xp": max(submitted.xp, stored.xp),
            "streak": max(submitted.streak, stored.streak),
            "total_problems_completed": max(submitted.total_problems_completed, stored.total_problems_completed),
            "correct_answers": max(submitted.correct_answers, stored.correct_answers),
            "achievements": list(baseline),
            "skills": _merge_skills(submitted.skills, stored.skills),
            "completed_lessons": _merge_lessons(submitted.completed_lessons, stored.completed_lessons),
            "completed_problems": list(dict.fromkeys([*stored.completed_problems, *submitted.completed_problems])),
        }
    )


class AchievementReconciler:
    """
    Unlocks achievements against the authoritative stored profile.

    Usage:
        reconciler = AchievementReconciler(SqlProfileStore(session), locks)
        result = await reconciler.reconcile_and_check(submitted_profile)
    """

    def __init__(self, store: ProfileStore, locks: ProfileLocks):
        self.store = store
        self.locks = locks

    def locked(self, profile_id: str) -> asyncio.Lock:
        """The lock a caller holds around its own read-modify-write of a profile."""
        return self.locks.for_profile(profile_id)

    async def reconcile_and_check(
        self,
        submitted: LearnerProfile,
        now: Optional[datetime] = None,
    ) -> ReconcileResult:
        """
        Check a client-reported profile for new achievements.

        Writes only when something unlocked; with nothing new the stored
        profile is left as it is.
        """
        async with self.locked(submitted.id):
            return await self._reconcile(submitted, now)

    async def check_and_persist(
        self,
        profile: LearnerProfile,
        now: Optional[datetime] = None,
    ) -> ReconcileResult:
        """
        Save a profile the server itself updated, unlocking achievements on the way.

        ``profile`` must already be derived from the stored copy, so no merge
        happens here. The caller must hold ``locked(profile.id)``.
        """
        unlocked = check_achievements(profile, now=now)
        final = apply_achievements(profile, unlocked)
        return await self._persist(profile.id, unlocked, final)

    async def _reconcile(self, submitted: LearnerProfile, now: Optional[datetime]) -> ReconcileResult:
        profile_id = submitted.id
        try:
            stored = await self.store.get(profile_id)
        except ProfileStoreError:
            logger.warning("Stored profile unavailable; checking submitted profile only", extra={"profile_id": profile_id})
            view = merge_profiles(submitted, None)
            unlocked = check_achievements(view, now=now)
            # Without the stored baseline a write could clobber grants made elsewhere.
            if unlocked:
                logger.warning("Skipping profile write after failed read", extra={"profile_id": profile_id})
            return ReconcileResult(
                new_achievements=unlocked,
                total_xp=sum(a.xp_reward for a in unlocked),
                final_profile=apply_achievements(view, unlocked),
                persisted=False,
            )

        view = merge_profiles(submitted, stored)
        unlocked = check_achievements(view, now=now)
        if not unlocked:
            return ReconcileResult(new_achievements=[], total_xp=0, final_profile=view, persisted=False)
        return await self._persist(profile_id, unlocked, apply_achievements(view, unlocked))

    async def _persist(
        self,
        profile_id: str,
        unlocked: List[Achievement],
        final: LearnerProfile,
    ) -> ReconcileResult:
        try:
            saved = await self.store.upsert(profile_id, final)
        except ProfileStoreError:
            logger.exception("Profile write raised", extra={"profile_id": profile_id})
            saved = None

        if saved is None:
            logger.error(
                "Failed to save reconciled profile; returning local copy",
                extra={"profile_id": profile_id, "new_achievements": [a.id for a in unlocked]},
            )
        return ReconcileResult(
            new_achievements=unlocked,
            total_xp=sum(a.xp_reward for a in unlocked),
            final_profile=saved or final,
            persisted=saved is not None,
        )
