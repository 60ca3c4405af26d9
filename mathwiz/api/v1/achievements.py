"""
Achievement check endpoint.

The client reports its copy of the learner profile; the server merges it with
the stored profile, unlocks anything newly earned and saves the result.
"""

from fastapi import APIRouter, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mathwiz.api.deps import Reconciler
from mathwiz.logging_config import profile_id_var
from mathwiz.schemas.achievement import AchievementCheckRequest, AchievementCheckResponse
from mathwiz.schemas.profile import LearnerProfile

router = APIRouter()


@router.post("/check", response_model=AchievementCheckResponse)
async def check_achievements(body: AchievementCheckRequest, reconciler: Reconciler):
    """
    Unlock achievements for a submitted profile.

    ``updatedProfile`` is only present when something was unlocked.
    """
    if not body.user_id or body.user_profile is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User ID and profile are required",
        )
    profile_id_var.set(body.user_id)

    try:
        # userId is authoritative for which learner this is
        submitted = LearnerProfile.model_validate({**body.user_profile, "id": body.user_id})
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_context=False)) from e

    result = await reconciler.reconcile_and_check(submitted)

    response = AchievementCheckResponse(
        new_achievements=result.new_achievements,
        total_xp=result.total_xp,
        updated_profile=result.final_profile if result.new_achievements else None,
    )
    exclude = None if result.new_achievements else {"updated_profile"}
    return JSONResponse(content=response.model_dump(mode="json", by_alias=True, exclude=exclude))
