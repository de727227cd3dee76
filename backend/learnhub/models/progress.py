"""Progress model — one row per (user, lesson), written by upsert."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from learnhub.database import Base


class Progress(Base):
    __tablename__ = "progress"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    lesson_id = Column(String(36), ForeignKey("lessons.id", ondelete="CASCADE"), primary_key=True)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="progress")
    lesson = relationship("Lesson", back_populates="progress")
