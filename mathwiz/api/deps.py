"""
FastAPI dependencies for database sessions, the profile store and the
achievement reconciler.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mathwiz.database import get_db
from mathwiz.engines.achievements import AchievementReconciler, ProfileLocks
from mathwiz.kernel.profiles import SqlProfileStore
from mathwiz.logging_config import profile_id_var

# Shared by every request in the process so per-learner locks actually serialize.
profile_locks = ProfileLocks()

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_profile_store(db: DbSession) -> SqlProfileStore:
    return SqlProfileStore(db)


Store = Annotated[SqlProfileStore, Depends(get_profile_store)]


def get_reconciler(store: Store) -> AchievementReconciler:
    return AchievementReconciler(store, profile_locks)


Reconciler = Annotated[AchievementReconciler, Depends(get_reconciler)]


async def bind_profile_id(profile_id: str) -> str:
    """Path dependency: tag every log line of this request with the learner id."""
    profile_id_var.set(profile_id)
    return profile_id


ProfileId = Annotated[str, Depends(bind_profile_id)]
