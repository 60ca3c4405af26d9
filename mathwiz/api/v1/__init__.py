"""
API v1 routes.
"""

from fastapi import APIRouter

from mathwiz.api.v1 import achievements, difficulty, profiles

router = APIRouter()

router.include_router(achievements.router, prefix="/achievements", tags=["Achievements"])
router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
router.include_router(difficulty.router, prefix="/difficulty", tags=["Difficulty"])
