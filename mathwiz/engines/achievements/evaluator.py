"""
Achievement evaluator - unlock detection and crediting.

check_achievements is pure: the same snapshot always yields the same ids,
and an id already on the profile is never produced again.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from mathwiz.engines.achievements.definitions import ACHIEVEMENTS, AchievementDefinition
from mathwiz.logging_config import get_logger
from mathwiz.schemas.common import CamelModel
from mathwiz.schemas.profile import Achievement, LearnerProfile, utcnow

logger = get_logger(__name__)


class AchievementProgress(CamelModel):
    """Partial progress toward a locked achievement."""

    achievement_id: str
    name: str
    description: str
    icon: str
    xp_reward: int
    current: int
    max: int
    percentage: int


def unlock(definition: AchievementDefinition, now: datetime) -> Achievement:
    return Achievement(
        id=definition.id,
        name=definition.name,
        description=definition.description,
        icon=definition.icon,
        category=definition.category,
        xp_reward=definition.xp_reward,
        unlocked_at=now,
    )


def _credit(profile: LearnerProfile, added: Sequence[Achievement]) -> LearnerProfile:
    return profile.model_copy(
        update={
            "achievements": [*profile.achievements, *added],
            "xp": profile.xp + sum(a.xp_reward for a in added),
        }
    )


def check_achievements(
    profile: LearnerProfile,
    definitions: Sequence[AchievementDefinition] = ACHIEVEMENTS,
    now: Optional[datetime] = None,
) -> List[Achievement]:
    """
    Achievements whose condition holds and that the profile does not have yet.

    Unlocks that only become reachable through the XP of other unlocks (a
    level achievement, say) are included, so checking the applied result
    again finds nothing new. Results are in catalogue order.
    """
    now = now or utcnow()
    order = {definition.id: index for index, definition in enumerate(definitions)}
    unlocked: List[Achievement] = []
    view = profile
    while True:
        owned = set(view.achievement_ids)
        batch = [
            unlock(definition, now)
            for definition in definitions
            if definition.id not in owned and definition.condition(view, now)
        ]
        if not batch:
            return sorted(unlocked, key=lambda a: order[a.id])
        unlocked.extend(batch)
        view = _credit(view, batch)


def apply_achievements(profile: LearnerProfile, achievements: Sequence[Achievement]) -> LearnerProfile:
    """
    Add achievements to the profile and credit their XP.

    Ids already on the profile (or repeated in ``achievements``) are dropped
    silently and earn nothing.
    """
    seen = set(profile.achievement_ids)
    added: List[Achievement] = []
    for achievement in achievements:
        if achievement.id in seen:
            continue
        seen.add(achievement.id)
        added.append(achievement)

    if not added:
        return profile

    logger.info(
        "Achievements unlocked",
        extra={"achievement_ids": [a.id for a in added], "xp_awarded": sum(a.xp_reward for a in added)},
    )
    return _credit(profile, added)


def achievement_progress(
    profile: LearnerProfile,
    definitions: Sequence[AchievementDefinition] = ACHIEVEMENTS,
) -> List[AchievementProgress]:
    """Progress toward every locked achievement that tracks it, closest first."""
    unlocked = set(profile.achievement_ids)
    entries: List[AchievementProgress] = []
    for definition in definitions:
        if definition.id in unlocked or definition.progress is None:
            continue
        current, maximum = definition.progress(profile)
        percentage = min(100, round(current / maximum * 100)) if maximum > 0 else 100
        entries.append(
            AchievementProgress(
                achievement_id=definition.id,
                name=definition.name,
                description=definition.description,
                icon=definition.icon,
                xp_reward=definition.xp_reward,
                current=current,
                max=maximum,
                percentage=percentage,
            )
        )
    entries.sort(key=lambda e: e.percentage, reverse=True)
    return entries


def next_achievement(profile: LearnerProfile) -> Optional[AchievementProgress]:
    progress = achievement_progress(profile)
    return progress[0] if progress else None
