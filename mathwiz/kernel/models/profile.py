"""
Learner profile row - one per named learner.

Nested records (skills, achievements, lesson completions, preferences) are
owned by the profile and stored as JSON documents on the same row.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mathwiz.kernel.models.base import Base, TimestampMixin


class LearnerProfileRow(Base, TimestampMixin):
    __tablename__ = "learner_profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    grade_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Denormalized for reporting; always rewritten from xp
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_problems_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accuracy_rate: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    achievements: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    skills: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    completed_lessons: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    completed_problems: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    onboarding_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
