"""
Pytest fixtures for MathWiz tests.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional

import pytest

from mathwiz.schemas.profile import LearnerProfile, new_profile

NOW = datetime(2026, 3, 2, 16, 30, tzinfo=timezone.utc)


class InMemoryProfileStore:
    """
    Profile store backed by a dict.

    Every call yields to the event loop first, so interleavings between
    concurrent callers actually happen.
    """

    def __init__(self, profiles: Optional[Dict[str, LearnerProfile]] = None):
        self.profiles: Dict[str, LearnerProfile] = dict(profiles or {})
        self.writes = 0

    async def get(self, profile_id: str) -> Optional[LearnerProfile]:
        await asyncio.sleep(0)
        return self.profiles.get(profile_id)

    async def upsert(self, profile_id: str, profile: LearnerProfile) -> Optional[LearnerProfile]:
        await asyncio.sleep(0)
        self.writes += 1
        self.profiles[profile_id] = profile
        return profile


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fresh_profile() -> LearnerProfile:
    """A learner seen for the first time."""
    return new_profile("miles", "Miles", now=NOW)


@pytest.fixture
def memory_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()
