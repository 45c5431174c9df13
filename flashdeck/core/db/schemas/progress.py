from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    Enum,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from flashdeck.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .library import Flashcard


class DifficultyLevel(enum.Enum):
    EASY = "easy"
    HARD = "hard"


class StudyProgress(Base):
    __tablename__ = "study_progress"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "flashcard_id",
            name="uq_study_progress_user_flashcard",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    flashcard_id: Mapped[int] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    difficulty: Mapped[DifficultyLevel] = mapped_column(
        Enum(DifficultyLevel), nullable=False
    )
    # Total answers recorded for this card, easy and hard alike
    repetitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_studied: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="study_progress")
    flashcard: Mapped["Flashcard"] = relationship("Flashcard", back_populates="progress")


__all__ = [
    "DifficultyLevel",
    "StudyProgress",
]
