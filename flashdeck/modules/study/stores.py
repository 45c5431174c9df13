"""SQL-backed card source and progress store.

Each call opens its own short-lived session, so the stores are safe to use
from background jobs that outlive the request that scheduled them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flashdeck.core.db.base import async_session_maker
from flashdeck.core.db.schemas.library import Flashcard as DBFlashcard
from flashdeck.core.db.schemas.progress import (
    DifficultyLevel,
    StudyProgress as DBProgress,
)
from flashdeck.core.db_services import FlashcardLibraryService, StudyProgressService
from flashdeck.modules.study.errors import ScopeNotFoundError
from flashdeck.modules.study.models import (
    CardFace,
    Difficulty,
    FlashcardRecord,
    ProgressRecord,
    ScopeKind,
)


def to_record(card: DBFlashcard) -> FlashcardRecord:
    return FlashcardRecord(
        id=card.id,
        section_id=card.section_id,
        front_text=card.front_text,
        back_text=card.back_text,
        front=CardFace(
            gradient=card.front_gradient,
            custom_gradient=card.front_custom_gradient,
            font=card.front_font,
            image=card.front_image,
            audio=card.front_audio,
        ),
        back=CardFace(
            gradient=card.back_gradient,
            custom_gradient=card.back_custom_gradient,
            font=card.back_font,
            image=card.back_image,
            audio=card.back_audio,
        ),
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without a zone; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_progress(row: DBProgress) -> ProgressRecord:
    return ProgressRecord(
        user_id=row.user_id,
        flashcard_id=row.flashcard_id,
        difficulty=Difficulty(row.difficulty.value),
        repetitions=row.repetitions or 0,
        last_studied=_as_utc(row.last_studied),
    )


class SQLCardSource:
    """Card source reading from the flashcard library tables.

    With ``owner_id`` set, books and sections belonging to other users are
    reported as not found.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] = async_session_maker,
        *,
        owner_id: Optional[int] = None,
    ) -> None:
        self.session_maker = session_maker
        self.owner_id = owner_id

    async def list_cards_for_section(self, section_id: int) -> list[FlashcardRecord]:
        async with self.session_maker() as session:
            db = FlashcardLibraryService(session)
            if not await db.get_section(section_id, owner_id=self.owner_id):
                raise ScopeNotFoundError(ScopeKind.SECTION.value, section_id)
            cards = await db.list_section_flashcards(section_id)
            return [to_record(c) for c in cards]

    async def list_cards_for_book(self, book_id: int) -> list[FlashcardRecord]:
        async with self.session_maker() as session:
            db = FlashcardLibraryService(session)
            if not await db.get_book(book_id, owner_id=self.owner_id):
                raise ScopeNotFoundError(ScopeKind.BOOK.value, book_id)
            cards = await db.list_book_flashcards(book_id)
            return [to_record(c) for c in cards]


class SQLProgressStore:
    def __init__(
        self, session_maker: async_sessionmaker[AsyncSession] = async_session_maker
    ) -> None:
        self.session_maker = session_maker

    async def upsert_progress(
        self, user_id: int, flashcard_id: int, difficulty: Difficulty
    ) -> ProgressRecord:
        async with self.session_maker() as session:
            db = StudyProgressService(session)
            row = await db.upsert_progress(
                user_id, flashcard_id, DifficultyLevel(Difficulty(difficulty).value)
            )
            return to_progress(row)

    async def get_progress(
        self, user_id: int, flashcard_id: int
    ) -> Optional[ProgressRecord]:
        async with self.session_maker() as session:
            row = await StudyProgressService(session).get_progress(user_id, flashcard_id)
            return to_progress(row) if row else None
