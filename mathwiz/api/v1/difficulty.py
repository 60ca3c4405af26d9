"""
Difficulty endpoint - the multiplier problem generators scale by.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from mathwiz.engines.difficulty import difficulty_multiplier, sets_completed_for
from mathwiz.engines.errors import InvalidArgument
from mathwiz.schemas.practice import DifficultyResponse

router = APIRouter()


@router.get("", response_model=DifficultyResponse)
async def get_difficulty(
    sets_completed: int = Query(0, alias="setsCompleted"),
    total_problems: Optional[int] = Query(None, alias="totalProblems"),
):
    """Multiplier for ``setsCompleted``, or for the sets contained in ``totalProblems`` when given."""
    try:
        if total_problems is not None:
            sets_completed = sets_completed_for(total_problems)
        multiplier = difficulty_multiplier(sets_completed)
    except InvalidArgument as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return DifficultyResponse(sets_completed=sets_completed, multiplier=multiplier)
