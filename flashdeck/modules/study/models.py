"""Pydantic models for study sessions.

These are the values the session engine consumes and produces. Card records
arrive from a card source already flattened; presentation metadata on each
face is carried along untouched so clients can render the card as authored.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    EASY = "easy"
    HARD = "hard"


class ScopeKind(str, Enum):
    SECTION = "section"
    BOOK = "book"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETE = "complete"
    EXITED = "exited"


class CardFace(BaseModel):
    """Presentation metadata for one side of a card."""

    model_config = ConfigDict(frozen=True)

    gradient: Optional[str] = None
    custom_gradient: Optional[str] = None
    font: Optional[str] = "Inter"
    image: Optional[str] = None
    audio: Optional[str] = None


class FlashcardRecord(BaseModel):
    """Read-only flashcard as seen by a study session."""

    model_config = ConfigDict(frozen=True)

    id: int
    section_id: int
    front_text: str
    back_text: str
    front: CardFace = Field(default_factory=lambda: CardFace(gradient="gradient-1"))
    back: CardFace = Field(default_factory=lambda: CardFace(gradient="gradient-2"))


class StudyScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ScopeKind
    id: int

    @classmethod
    def section(cls, section_id: int) -> "StudyScope":
        return cls(kind=ScopeKind.SECTION, id=section_id)

    @classmethod
    def book(cls, book_id: int) -> "StudyScope":
        return cls(kind=ScopeKind.BOOK, id=book_id)


class ProgressUpdate(BaseModel):
    """Event emitted once per Answer transition."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    flashcard_id: int
    difficulty: Difficulty


class ProgressRecord(BaseModel):
    user_id: int
    flashcard_id: int
    difficulty: Difficulty
    repetitions: int = Field(default=0, ge=0)
    last_studied: datetime


class SessionSummary(BaseModel):
    answered_count: int
    total_count: int
    status: SessionStatus
    message: str


class EmptyDeck(BaseModel):
    """Outcome of starting a session on a scope with nothing to study."""

    scope: StudyScope
    message: str = "No flashcards found"


class ExitResult(BaseModel):
    confirmation_required: bool
    # the question to put to the user when confirmation is required
    message: Optional[str] = None
    summary: Optional[SessionSummary] = None


__all__ = [
    "Difficulty",
    "ScopeKind",
    "SessionStatus",
    "CardFace",
    "FlashcardRecord",
    "StudyScope",
    "ProgressUpdate",
    "ProgressRecord",
    "SessionSummary",
    "EmptyDeck",
    "ExitResult",
]
