"""Study session state machine.

A session walks once through a fixed, already shuffled deck. It is either
active (positioned on a card, possibly flipped) or finished (complete after
the last card is answered, or exited early). Finished sessions ignore further
transitions. Sessions are never persisted; progress leaves the session only
through the events emitted by ``answer``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from flashdeck.modules.study.models import (
    Difficulty,
    FlashcardRecord,
    ProgressUpdate,
    SessionStatus,
    SessionSummary,
    StudyScope,
)


ProgressEmitter = Callable[[ProgressUpdate], None]


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _short_id() -> str:
    # 12-char slice from uuid4
    return uuid4().hex[:12]


def _cards(count: int) -> str:
    return f"{count} flashcard{'s' if count != 1 else ''}"


def _studied_message(count: int) -> str:
    return f"You've studied {_cards(count)}!"


def exit_confirmation_message(count: int) -> str:
    return f"You've studied {_cards(count)}. Are you sure you want to exit?"


@dataclass
class StudySession:
    user_id: int
    scope: StudyScope
    deck: tuple[FlashcardRecord, ...]
    id: str = field(default_factory=_short_id)
    current_index: int = 0
    is_flipped: bool = False
    answered_ids: set[int] = field(default_factory=set)
    status: SessionStatus = SessionStatus.ACTIVE
    started_at: datetime = field(default_factory=_now_utc)
    ended_at: Optional[datetime] = None
    last_activity: datetime = field(default_factory=_now_utc)
    # card ids whose background progress write failed
    progress_failures: list[int] = field(default_factory=list)
    # progress writes scheduled but not finished yet
    pending_writes: int = 0

    def __post_init__(self) -> None:
        self.deck = tuple(self.deck)
        if not self.deck:
            raise ValueError("a study session needs at least one card")

    # Views ---------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def total(self) -> int:
        return len(self.deck)

    @property
    def position(self) -> int:
        return self.current_index + 1

    @property
    def progress_percent(self) -> float:
        return round(self.position / self.total * 100.0, 2)

    @property
    def is_last_card(self) -> bool:
        return self.current_index == self.total - 1

    @property
    def current_card(self) -> Optional[FlashcardRecord]:
        if not self.is_active:
            return None
        return self.deck[self.current_index]

    # Transitions ---------------------------------------------------------
    def flip(self) -> "StudySession":
        if self.is_active:
            self.is_flipped = not self.is_flipped
            self.last_activity = _now_utc()
        return self

    def answer(
        self, difficulty: Difficulty, emit: Optional[ProgressEmitter] = None
    ) -> Optional[ProgressUpdate]:
        """Rate the current card and move on.

        Emits the progress event first, then marks the card answered, then
        either completes the session (last card) or advances face-down.
        """
        if not self.is_active:
            return None
        assert 0 <= self.current_index < self.total
        card = self.deck[self.current_index]
        event = ProgressUpdate(
            user_id=self.user_id,
            flashcard_id=card.id,
            difficulty=Difficulty(difficulty),
        )
        if emit is not None:
            emit(event)
        self.answered_ids.add(card.id)
        if self.is_last_card:
            self._finish(SessionStatus.COMPLETE)
        else:
            self.current_index += 1
            self.is_flipped = False
        self.last_activity = _now_utc()
        return event

    def requires_exit_confirmation(self) -> bool:
        return self.is_active and bool(self.answered_ids)

    def exit(self) -> "StudySession":
        if self.is_active:
            self._finish(SessionStatus.EXITED)
        return self

    def _finish(self, status: SessionStatus) -> None:
        self.status = status
        self.ended_at = _now_utc()
        self.last_activity = self.ended_at

    def summary(self) -> SessionSummary:
        answered = len(self.answered_ids)
        return SessionSummary(
            answered_count=answered,
            total_count=self.total,
            status=self.status,
            message=_studied_message(answered),
        )
