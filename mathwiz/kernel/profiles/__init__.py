"""
Profile store and learner roster.
"""

from mathwiz.kernel.profiles.profile_store import ProfileStore, SqlProfileStore
from mathwiz.kernel.profiles.roster import RosterEntry, get_roster, roster_entry

__all__ = [
    "ProfileStore",
    "SqlProfileStore",
    "RosterEntry",
    "get_roster",
    "roster_entry",
]
