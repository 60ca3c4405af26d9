"""
Profile store - get/upsert access to persisted learner profiles.

The engines and the reconciler only depend on the ProfileStore protocol;
SqlProfileStore is the SQLAlchemy-backed implementation used by the API.
"""

from typing import Iterable, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mathwiz.kernel.models.profile import LearnerProfileRow
from mathwiz.logging_config import get_logger
from mathwiz.schemas.profile import LearnerProfile

logger = get_logger(__name__)


class ProfileStoreError(Exception):
    """The store could not be read."""


class ProfileStore(Protocol):
    async def get(self, profile_id: str) -> Optional[LearnerProfile]:
        """The stored profile, or None when the learner has none yet."""
        ...

    async def upsert(self, profile_id: str, profile: LearnerProfile) -> Optional[LearnerProfile]:
        """Create or replace the stored profile; None when the write failed."""
        ...


def row_to_profile(row: LearnerProfileRow) -> LearnerProfile:
    return LearnerProfile.model_validate(
        {
            "id": row.id,
            "display_name": row.display_name,
            "grade_level": row.grade_level,
            "xp": row.xp,
            "streak": row.streak,
            "total_problems_completed": row.total_problems_completed,
            "correct_answers": row.correct_answers,
            "achievements": row.achievements or [],
            "skills": row.skills or {},
            "completed_lessons": row.completed_lessons or [],
            "completed_problems": row.completed_problems or [],
            "onboarding_completed": row.onboarding_completed,
            "preferences": row.preferences or {},
            "created_at": row.created_at,
            "last_login_at": row.last_login_at,
        }
    )


def apply_profile(row: LearnerProfileRow, profile: LearnerProfile) -> None:
    """Copy every profile field onto the row."""
    document = profile.model_dump(mode="json", by_alias=True)
    row.display_name = profile.display_name
    row.grade_level = profile.grade_level
    row.xp = profile.xp
    row.level = profile.level
    row.streak = profile.streak
    row.total_problems_completed = profile.total_problems_completed
    row.correct_answers = profile.correct_answers
    row.accuracy_rate = profile.accuracy_rate
    row.achievements = document["achievements"]
    row.skills = document["skills"]
    row.completed_lessons = document["completedLessons"]
    row.completed_problems = document["completedProblems"]
    row.preferences = document["preferences"]
    row.onboarding_completed = profile.onboarding_completed
    row.last_login_at = profile.last_login_at


class SqlProfileStore:
    """
    Profile store over an AsyncSession.

    Each upsert commits on its own so a failed write never leaves the
    session half-flushed for the next one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, profile_id: str) -> Optional[LearnerProfile]:
        try:
            row = await self.session.get(LearnerProfileRow, profile_id)
        except SQLAlchemyError as e:
            logger.exception("Profile read failed", extra={"profile_id": profile_id})
            raise ProfileStoreError(str(e)) from e
        return row_to_profile(row) if row else None

    async def get_many(self, profile_ids: Iterable[str]) -> List[LearnerProfile]:
        ids = list(profile_ids)
        try:
            result = await self.session.execute(
                select(LearnerProfileRow).where(LearnerProfileRow.id.in_(ids)).order_by(LearnerProfileRow.id)
            )
        except SQLAlchemyError as e:
            logger.exception("Profile listing failed")
            raise ProfileStoreError(str(e)) from e
        return [row_to_profile(row) for row in result.scalars().all()]

    async def upsert(self, profile_id: str, profile: LearnerProfile) -> Optional[LearnerProfile]:
        try:
            row = await self.session.get(LearnerProfileRow, profile_id)
            if row is None:
                row = LearnerProfileRow(id=profile_id, created_at=profile.created_at)
                self.session.add(row)
            apply_profile(row, profile)
            await self.session.commit()
            await self.session.refresh(row)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception("Profile upsert failed", extra={"profile_id": profile_id})
            return None
        return row_to_profile(row)
