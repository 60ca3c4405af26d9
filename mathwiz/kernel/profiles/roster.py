"""
Named learner roster for the profile selector.

There is no authentication: a learner picks their name from the roster and
the matching profile is loaded (and created on first use).
"""

from typing import List, Optional

from pydantic import BaseModel

from mathwiz.config import get_settings

_AVATAR_COLORS = ["green", "blue", "purple", "gold", "red", "teal"]


class RosterEntry(BaseModel):
    id: str
    name: str
    avatar: str
    color: str


def get_roster() -> List[RosterEntry]:
    return [
        RosterEntry(
            id=learner_id,
            name=learner_id.replace("_", " ").title(),
            avatar=f"/avatars/wizard{index + 1}.svg",
            color=_AVATAR_COLORS[index % len(_AVATAR_COLORS)],
        )
        for index, learner_id in enumerate(get_settings().roster)
    ]


def roster_entry(learner_id: str) -> Optional[RosterEntry]:
    return next((entry for entry in get_roster() if entry.id == learner_id), None)
