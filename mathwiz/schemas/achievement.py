"""
Achievement check schemas.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from mathwiz.schemas.common import CamelModel
from mathwiz.schemas.profile import Achievement, LearnerProfile


class AchievementCheckRequest(CamelModel):
    """Both fields are checked by the handler so a missing one is a 400, not a 422."""

    user_id: Optional[str] = None
    user_profile: Optional[Dict[str, Any]] = None


class AchievementCheckResponse(CamelModel):
    success: bool = True
    new_achievements: List[Achievement] = []
    total_xp: int = Field(0, alias="totalXP")
    updated_profile: Optional[LearnerProfile] = None
