"""Unit tests for achievement reconciliation against the stored profile."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from mathwiz.engines.achievements import (
    ACHIEVEMENTS_BY_ID,
    AchievementReconciler,
    ProfileLocks,
    apply_achievements,
    check_achievements,
    merge_profiles,
)
from mathwiz.engines.achievements.evaluator import unlock
from mathwiz.engines.mastery import seed_skill
from mathwiz.kernel.profiles.profile_store import ProfileStoreError
from mathwiz.schemas.profile import CompletedLesson, LearnerProfile, Preferences


def _profile(now, **fields) -> LearnerProfile:
    return LearnerProfile(id="miles", created_at=now, **fields)


def _mock_store(stored=None, upsert_result="echo") -> AsyncMock:
    store = AsyncMock()
    store.get.return_value = stored
    if upsert_result == "echo":
        store.upsert.side_effect = lambda profile_id, profile: profile
    else:
        store.upsert.return_value = upsert_result
    return store


class TestMergeProfiles:
    def test_no_stored_profile(self, now):
        first = unlock(ACHIEVEMENTS_BY_ID["first_problem"], now)
        submitted = _profile(now, achievements=[first])
        assert merge_profiles(submitted, None).achievement_ids == ["first_problem"]

    def test_counters_take_the_larger_value(self, now):
        stored = _profile(now, xp=500, total_problems_completed=20, correct_answers=15, streak=4)
        submitted = _profile(now, xp=450, total_problems_completed=22, correct_answers=14, streak=2)
        merged = merge_profiles(submitted, stored)
        assert (merged.xp, merged.total_problems_completed, merged.correct_answers, merged.streak) == (500, 22, 15, 4)

    def test_skills_keep_most_practised_record(self, now):
        stored = _profile(now, skills={
            "addition": seed_skill("addition", 0.4, practice_count=10, now=now),
            "subtraction": seed_skill("subtraction", 0.2, practice_count=3, now=now),
        })
        submitted = _profile(now, skills={
            "addition": seed_skill("addition", 0.9, practice_count=4, now=now),
            "subtraction": seed_skill("subtraction", 0.6, practice_count=5, now=now),
            "division": seed_skill("division", 0.1, practice_count=1, now=now),
        })
        merged = merge_profiles(submitted, stored)
        assert merged.skills["addition"].mastery_level == 0.4
        assert merged.skills["subtraction"].mastery_level == 0.6
        assert "division" in merged.skills

    def test_lessons_and_problems_unioned(self, now):
        stored = _profile(now, completed_lessons=[CompletedLesson(lesson_id="a", completed_at=now)],
                          completed_problems=["p1", "p2"])
        submitted = _profile(now, completed_lessons=[CompletedLesson(lesson_id="b", completed_at=now)],
                             completed_problems=["p2", "p3"])
        merged = merge_profiles(submitted, stored)
        assert merged.completed_lesson_ids == ["a", "b"]
        assert merged.completed_problems == ["p1", "p2", "p3"]

    def test_stored_grade_and_onboarding_kept(self, now):
        stored = _profile(now, grade_level=3, onboarding_completed=True)
        submitted = _profile(now, grade_level=0, onboarding_completed=False, display_name="Miles R.")
        merged = merge_profiles(submitted, stored)
        assert merged.grade_level == 3
        assert merged.onboarding_completed is True
        assert merged.display_name == "Miles R."

    def test_omitted_preferences_keep_stored(self, now):
        stored = _profile(now, display_name="Miles", preferences=Preferences(theme="dark", sound_enabled=False))
        submitted = _profile(now, xp=10)
        merged = merge_profiles(submitted, stored)
        assert merged.preferences.theme == "dark"
        assert merged.preferences.sound_enabled is False
        assert merged.display_name == "Miles"

    def test_sent_preferences_replace_stored(self, now):
        stored = _profile(now, preferences=Preferences(theme="dark"))
        submitted = _profile(now, preferences=Preferences(theme="light"))
        assert merge_profiles(submitted, stored).preferences.theme == "light"

    def test_later_login_wins(self, now):
        stored = _profile(now, last_login_at=now)
        submitted = _profile(now, last_login_at=now - timedelta(days=1))
        assert merge_profiles(submitted, stored).last_login_at == now


class TestAchievementReconciler:
    @pytest.mark.asyncio
    async def test_stored_achievements_are_the_baseline(self, now):
        """A client-reported id the learner never earned does not survive."""
        earned = unlock(ACHIEVEMENTS_BY_ID["first_problem"], now)
        bogus = unlock(ACHIEVEMENTS_BY_ID["problem_500"], now)
        stored = _profile(now, achievements=[earned], xp=50, total_problems_completed=1, correct_answers=1)
        submitted = _profile(now, achievements=[earned, bogus], xp=50, total_problems_completed=10, correct_answers=10)
        store = _mock_store(stored)

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        assert [a.id for a in result.new_achievements] == ["problem_10", "accuracy_80"]
        assert result.final_profile.achievement_ids == ["first_problem", "problem_10", "accuracy_80"]
        assert result.total_xp == 250
        assert result.final_profile.xp == 50 + 250
        assert result.persisted is True
        store.upsert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unlock_write_keeps_stored_preferences(self, now):
        """A client snapshot without preferences must not reset them when an unlock is saved."""
        stored = _profile(now, preferences=Preferences(theme="dark", sound_enabled=False))
        submitted = LearnerProfile.model_validate(
            {"id": "miles", "createdAt": now.isoformat(), "totalProblemsCompleted": 1, "correctAnswers": 1}
        )
        store = _mock_store(stored)

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        assert result.persisted is True
        saved = store.upsert.await_args.args[1]
        assert saved.preferences.theme == "dark"
        assert saved.preferences.sound_enabled is False

    @pytest.mark.asyncio
    async def test_nothing_new_skips_write(self, now):
        earned = unlock(ACHIEVEMENTS_BY_ID["first_problem"], now)
        bogus = unlock(ACHIEVEMENTS_BY_ID["problem_500"], now)
        stored = _profile(now, achievements=[earned], xp=50, total_problems_completed=1, correct_answers=1)
        submitted = _profile(now, achievements=[earned, bogus], xp=50, total_problems_completed=1, correct_answers=1)
        store = _mock_store(stored)

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        assert result.new_achievements == []
        assert result.total_xp == 0
        assert result.final_profile.achievement_ids == ["first_problem"]
        assert result.persisted is False
        store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_stored_list_falls_back_to_submitted(self, now):
        earned = unlock(ACHIEVEMENTS_BY_ID["first_problem"], now)
        stored = _profile(now, total_problems_completed=1, correct_answers=1)
        submitted = _profile(now, achievements=[earned, earned], xp=50, total_problems_completed=1, correct_answers=1)
        store = _mock_store(stored)

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        assert result.new_achievements == []
        assert result.final_profile.achievement_ids == ["first_problem"]

    @pytest.mark.asyncio
    async def test_failed_write_returns_local_result(self, now):
        stored = _profile(now, xp=20, total_problems_completed=1, correct_answers=1)
        submitted = _profile(now, xp=70, total_problems_completed=1, correct_answers=1)
        store = _mock_store(stored, upsert_result=None)

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        view = merge_profiles(submitted, stored)
        expected = apply_achievements(view, check_achievements(view, now=now))
        assert result.persisted is False
        assert result.final_profile == expected
        assert result.final_profile.xp == 70 + 50
        assert [a.id for a in result.new_achievements] == ["first_problem"]

    @pytest.mark.asyncio
    async def test_write_raising_is_not_fatal(self, now):
        submitted = _profile(now, total_problems_completed=1, correct_answers=1)
        store = _mock_store(None)
        store.upsert.side_effect = ProfileStoreError("disk full")

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        assert result.persisted is False
        assert result.final_profile.achievement_ids == ["first_problem"]

    @pytest.mark.asyncio
    async def test_failed_read_checks_submitted_without_writing(self, now):
        submitted = _profile(now, total_problems_completed=1, correct_answers=1)
        store = _mock_store()
        store.get.side_effect = ProfileStoreError("connection refused")

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        assert [a.id for a in result.new_achievements] == ["first_problem"]
        assert result.persisted is False
        store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_new_learner_is_created(self, now):
        submitted = _profile(now, total_problems_completed=1, correct_answers=1, xp=30)
        store = _mock_store(None)

        result = await AchievementReconciler(store, ProfileLocks()).reconcile_and_check(submitted, now=now)

        assert result.persisted is True
        saved_id, saved_profile = store.upsert.await_args.args
        assert saved_id == "miles"
        assert saved_profile.xp == 80

    @pytest.mark.asyncio
    async def test_concurrent_checks_grant_once(self, now, memory_store):
        """Two overlapping checks for one learner: only the first grants."""
        memory_store.profiles["miles"] = _profile(now)
        submitted = _profile(now, total_problems_completed=1, correct_answers=1)
        reconciler = AchievementReconciler(memory_store, ProfileLocks())

        first, second = await asyncio.gather(
            reconciler.reconcile_and_check(submitted, now=now),
            reconciler.reconcile_and_check(submitted, now=now),
        )

        granted = [a.id for a in first.new_achievements + second.new_achievements]
        assert granted == ["first_problem"]
        assert memory_store.writes == 1
        assert memory_store.profiles["miles"].xp == 50

    @pytest.mark.asyncio
    async def test_check_and_persist_always_writes(self, now):
        profile = _profile(now, grade_level=2, onboarding_completed=True, xp=100)
        store = _mock_store(_profile(now))

        result = await AchievementReconciler(store, ProfileLocks()).check_and_persist(profile, now=now)

        assert result.new_achievements == []
        assert result.persisted is True
        saved = store.upsert.await_args.args[1]
        assert saved.grade_level == 2
        assert saved.onboarding_completed is True
        store.get.assert_not_awaited()


class TestProfileLocks:
    def test_same_id_same_lock(self):
        locks = ProfileLocks()
        lock = locks.for_profile("miles")
        assert locks.for_profile("miles") is lock
        assert locks.for_profile("robert") is not lock
