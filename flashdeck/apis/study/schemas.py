from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from flashdeck.modules.study.models import (
    Difficulty,
    FlashcardRecord,
    ProgressRecord,
    ScopeKind,
    SessionStatus,
    SessionSummary,
    StudyScope,
)
from flashdeck.modules.study.state import StudySession


class StartSessionRequest(BaseModel):
    scope: ScopeKind = Field(..., description="Study a single section or a whole book")
    id: int = Field(..., description="Section or book id")

    def to_scope(self) -> StudyScope:
        return StudyScope(kind=self.scope, id=self.id)


class SessionView(BaseModel):
    id: str
    status: SessionStatus
    scope: StudyScope
    position: int
    total: int
    progress_percent: float
    is_flipped: bool
    answered_count: int
    current_card: Optional[FlashcardRecord] = None
    # Card ids whose progress could not be saved
    progress_warnings: list[int] = Field(default_factory=list)
    pending_writes: int = 0
    summary: Optional[SessionSummary] = None

    @classmethod
    def from_session(cls, session: StudySession) -> "SessionView":
        return cls(
            id=session.id,
            status=session.status,
            scope=session.scope,
            position=session.position,
            total=session.total,
            progress_percent=session.progress_percent,
            is_flipped=session.is_flipped,
            answered_count=len(session.answered_ids),
            current_card=session.current_card,
            progress_warnings=list(session.progress_failures),
            pending_writes=session.pending_writes,
            summary=None if session.is_active else session.summary(),
        )


class StartSessionResponse(BaseModel):
    status: Literal["active", "empty"]
    session: Optional[SessionView] = None
    message: Optional[str] = None


class AnswerRequest(BaseModel):
    difficulty: Difficulty


class ExitRequest(BaseModel):
    confirmed: bool = False


class ExitResponse(BaseModel):
    confirmation_required: bool
    message: Optional[str] = None
    summary: Optional[SessionSummary] = None


class ProgressUpsertRequest(BaseModel):
    flashcard_id: int
    difficulty: Difficulty


class ProgressRead(ProgressRecord):
    pass


class SummaryView(SessionSummary):
    """Summary plus the outcome of the session's background progress writes."""

    progress_warnings: list[int] = Field(default_factory=list)
    pending_writes: int = 0

    @classmethod
    def from_session(cls, session: StudySession) -> "SummaryView":
        return cls(
            **session.summary().model_dump(),
            progress_warnings=list(session.progress_failures),
            pending_writes=session.pending_writes,
        )
