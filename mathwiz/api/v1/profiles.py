"""
Profile endpoints - roster, login, onboarding, practice attempts and lessons.

Every endpoint that changes a profile holds the learner's lock from the read
until the write, so it cannot interleave with an achievement check.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from mathwiz.api.deps import ProfileId, Reconciler, Store
from mathwiz.engines.achievements import ReconcileResult, achievement_progress, next_achievement
from mathwiz.engines.achievements.evaluator import AchievementProgress
from mathwiz.engines.errors import InvalidArgument, InvalidAttempt, OnboardingAlreadyCompleted
from mathwiz.engines.leveling import xp_to_next_level
from mathwiz.engines.mastery import (
    ONBOARDING_XP_BONUS,
    Attempt,
    answers_match,
    complete_lesson,
    complete_onboarding,
    is_lesson_unlocked,
    record_attempt,
)
from mathwiz.kernel.profiles import get_roster, roster_entry
from mathwiz.kernel.profiles.profile_store import ProfileStoreError, SqlProfileStore
from mathwiz.logging_config import get_logger
from mathwiz.schemas.practice import (
    AttemptRequest,
    LessonCompleteRequest,
    OnboardingRequest,
    ProfileDetailResponse,
    ProgressUpdateResponse,
    RosterItemResponse,
)
from mathwiz.schemas.profile import LearnerProfile, new_profile, utcnow

router = APIRouter()
logger = get_logger(__name__)


async def _get_stored(store: SqlProfileStore, profile_id: str):
    try:
        return await store.get(profile_id)
    except ProfileStoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Profile store unavailable",
        )


async def _load(store: SqlProfileStore, profile_id: str) -> LearnerProfile:
    profile = await _get_stored(store, profile_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile {profile_id} not found",
        )
    return profile


def _progress_response(xp_earned: int, result: ReconcileResult, correct=None) -> ProgressUpdateResponse:
    return ProgressUpdateResponse(
        xp_earned=xp_earned,
        correct=correct,
        new_achievements=result.new_achievements,
        total_xp=result.total_xp,
        profile=result.final_profile,
        persisted=result.persisted,
    )


@router.get("", response_model=List[RosterItemResponse])
async def list_profiles(store: Store):
    """Roster of named learners, each with their stored profile if they have one."""
    roster = get_roster()
    try:
        stored = {p.id: p for p in await store.get_many(entry.id for entry in roster)}
    except ProfileStoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Profile store unavailable",
        )
    return [
        RosterItemResponse(**entry.model_dump(), profile=stored.get(entry.id))
        for entry in roster
    ]


@router.post("/{profile_id}/login", response_model=LearnerProfile)
async def login(profile_id: ProfileId, store: Store, reconciler: Reconciler):
    """Select a learner: create their profile on first use, otherwise stamp the login time."""
    entry = roster_entry(profile_id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown learner {profile_id}",
        )

    now = utcnow()
    async with reconciler.locked(profile_id):
        profile = await _get_stored(store, profile_id)
        if profile is None:
            logger.info("Creating profile on first login")
            profile = new_profile(profile_id, entry.name, now=now)
        else:
            profile = profile.model_copy(update={"last_login_at": now})
        saved = await store.upsert(profile_id, profile)

    if saved is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Profile could not be saved",
        )
    return saved


@router.get("/{profile_id}", response_model=ProfileDetailResponse)
async def get_profile(profile_id: ProfileId, store: Store):
    profile = await _load(store, profile_id)
    return ProfileDetailResponse(
        profile=profile,
        state="active" if profile.onboarding_completed else "onboarding",
        level_progress=xp_to_next_level(profile.xp),
        next_achievement=next_achievement(profile),
    )


@router.get("/{profile_id}/achievements/progress", response_model=List[AchievementProgress])
async def get_achievement_progress(profile_id: ProfileId, store: Store):
    """Progress toward every locked achievement, closest first."""
    profile = await _load(store, profile_id)
    return achievement_progress(profile)


@router.post("/{profile_id}/onboarding", response_model=ProgressUpdateResponse)
async def finish_onboarding(
    profile_id: ProfileId,
    body: OnboardingRequest,
    store: Store,
    reconciler: Reconciler,
):
    """Record grade and placement results; allowed once per learner."""
    async with reconciler.locked(profile_id):
        profile = await _load(store, profile_id)
        try:
            updated = complete_onboarding(
                profile,
                grade_level=body.grade_level,
                placement_correct=body.placement_correct,
                placement_total=body.placement_total,
            )
        except OnboardingAlreadyCompleted as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        except InvalidArgument as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        result = await reconciler.check_and_persist(updated)

    return _progress_response(ONBOARDING_XP_BONUS, result)


@router.post("/{profile_id}/attempts", response_model=ProgressUpdateResponse)
async def submit_attempt(
    profile_id: ProfileId,
    body: AttemptRequest,
    store: Store,
    reconciler: Reconciler,
):
    """
    Record one practice attempt, then unlock any achievements it earned.

    The verdict is ``correct`` when given; otherwise the server grades
    ``userAnswer`` against ``expectedAnswer``.
    """
    if body.correct is not None:
        correct = body.correct
    elif body.user_answer is not None and body.expected_answer is not None:
        correct = answers_match(body.user_answer, body.expected_answer)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either correct or userAnswer and expectedAnswer are required",
        )

    attempt = Attempt(
        skill_ids=body.skill_ids,
        correct=correct,
        hints_used=body.hints_used,
        base_xp_reward=body.base_xp_reward,
        problem_id=body.problem_id,
    )

    async with reconciler.locked(profile_id):
        profile = await _load(store, profile_id)
        try:
            outcome = record_attempt(profile, attempt)
        except InvalidAttempt as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        result = await reconciler.check_and_persist(outcome.profile)

    return _progress_response(outcome.xp_earned, result, correct=correct)


@router.post("/{profile_id}/lessons/{lesson_id}/complete", response_model=ProgressUpdateResponse)
async def finish_lesson(
    profile_id: ProfileId,
    lesson_id: str,
    store: Store,
    reconciler: Reconciler,
    body: Optional[LessonCompleteRequest] = None,
):
    """Mark a lesson done; repeating a finished lesson earns nothing."""
    body = body or LessonCompleteRequest()
    async with reconciler.locked(profile_id):
        profile = await _load(store, profile_id)
        if not is_lesson_unlocked(profile, body.prerequisite):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Lesson {lesson_id} is locked until {body.prerequisite} is completed",
            )
        try:
            outcome = complete_lesson(profile, lesson_id, score=body.score, time_spent=body.time_spent)
        except InvalidArgument as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        result = await reconciler.check_and_persist(outcome.profile)

    return _progress_response(outcome.xp_earned, result)
