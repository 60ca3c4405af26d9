"""
Kernel Data Models

SQLAlchemy models backing the profile store.
"""

from mathwiz.kernel.models.base import Base, TimestampMixin
from mathwiz.kernel.models.profile import LearnerProfileRow

__all__ = [
    "Base",
    "TimestampMixin",
    "LearnerProfileRow",
]
