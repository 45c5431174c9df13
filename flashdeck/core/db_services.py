"""Database service classes for the flashcard library and study progress."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from flashdeck.core.db.schemas.library import Book, Section, Flashcard
from flashdeck.core.db.schemas.progress import DifficultyLevel, StudyProgress


class FlashcardLibraryService:
    """Read access to books, sections and their flashcards."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_book(
        self, book_id: int, owner_id: Optional[int] = None
    ) -> Optional[Book]:
        """Get a book by id, optionally restricted to its owner."""
        query = select(Book).where(Book.id == book_id)
        if owner_id is not None:
            query = query.where(Book.user_id == owner_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_section(
        self, section_id: int, owner_id: Optional[int] = None
    ) -> Optional[Section]:
        """Get a section by id; owner is checked through its book."""
        query = select(Section).where(Section.id == section_id)
        if owner_id is not None:
            query = query.join(Book, Section.book_id == Book.id).where(
                Book.user_id == owner_id
            )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_book_sections(self, book_id: int) -> list[Section]:
        result = await self.session.execute(
            select(Section)
            .where(Section.book_id == book_id)
            .order_by(Section.created_at.asc(), Section.id.asc())
        )
        return list(result.scalars().all())

    async def list_section_flashcards(self, section_id: int) -> list[Flashcard]:
        result = await self.session.execute(
            select(Flashcard)
            .where(Flashcard.section_id == section_id)
            .order_by(Flashcard.created_at.asc(), Flashcard.id.asc())
        )
        return list(result.scalars().all())

    async def list_book_flashcards(self, book_id: int) -> list[Flashcard]:
        """All flashcards of a book, section by section in section order."""
        cards: list[Flashcard] = []
        for section in await self.list_book_sections(book_id):
            cards.extend(await self.list_section_flashcards(section.id))
        return cards


class StudyProgressService:
    """Service for per-user, per-flashcard study progress records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_progress(
        self, user_id: int, flashcard_id: int
    ) -> Optional[StudyProgress]:
        result = await self.session.execute(
            select(StudyProgress).where(
                StudyProgress.user_id == user_id,
                StudyProgress.flashcard_id == flashcard_id,
            )
        )
        return result.scalar_one_or_none()

    async def upsert_progress(
        self,
        user_id: int,
        flashcard_id: int,
        difficulty: DifficultyLevel,
        studied_at: Optional[datetime] = None,
    ) -> StudyProgress:
        """Record one answer: update the existing record or create it.

        Every answer counts as one repetition. A concurrent insert for the
        same key is resolved by retrying once as an update.
        """
        studied_at = studied_at or datetime.now(timezone.utc)
        existing = await self.get_progress(user_id, flashcard_id)
        if existing:
            return await self._apply_answer(existing, difficulty, studied_at)

        progress = StudyProgress(
            user_id=user_id,
            flashcard_id=flashcard_id,
            difficulty=difficulty,
            repetitions=1,
            last_studied=studied_at,
        )
        self.session.add(progress)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            existing = await self.get_progress(user_id, flashcard_id)
            if not existing:
                raise
            return await self._apply_answer(existing, difficulty, studied_at)
        await self.session.refresh(progress)
        return progress

    async def _apply_answer(
        self,
        progress: StudyProgress,
        difficulty: DifficultyLevel,
        studied_at: datetime,
    ) -> StudyProgress:
        progress.difficulty = difficulty
        progress.repetitions = (progress.repetitions or 0) + 1
        progress.last_studied = studied_at
        await self.session.commit()
        await self.session.refresh(progress)
        return progress
