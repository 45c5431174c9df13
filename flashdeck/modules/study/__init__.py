"""Study module exports."""

from .models import (
    Difficulty,
    EmptyDeck,
    ExitResult,
    FlashcardRecord,
    ProgressRecord,
    ProgressUpdate,
    SessionStatus,
    SessionSummary,
    StudyScope,
)
from .errors import ScopeNotFoundError, SessionNotFoundError, StudyError
from .shuffle import shuffle
from .state import StudySession
from .controller import StudySessionController
from .manager import StudySessionManager

__all__ = [
    "Difficulty",
    "EmptyDeck",
    "ExitResult",
    "FlashcardRecord",
    "ProgressRecord",
    "ProgressUpdate",
    "SessionStatus",
    "SessionSummary",
    "StudyScope",
    "ScopeNotFoundError",
    "SessionNotFoundError",
    "StudyError",
    "shuffle",
    "StudySession",
    "StudySessionController",
    "StudySessionManager",
]
