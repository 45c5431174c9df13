"""Collaborators consumed by the study controller.

``CardSource`` hands out flat card lists for a section or a whole book;
``ProgressStore`` keeps one progress record per (user, flashcard) and is
written through upserts only. In-memory versions back the tests and the CLI
demo deck; the SQL versions live in ``flashdeck.modules.study.stores``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol, Sequence

from flashdeck.modules.study.errors import ScopeNotFoundError
from flashdeck.modules.study.models import (
    Difficulty,
    FlashcardRecord,
    ProgressRecord,
    ScopeKind,
)


class CardSource(Protocol):
    async def list_cards_for_section(self, section_id: int) -> Sequence[FlashcardRecord]:
        ...

    async def list_cards_for_book(self, book_id: int) -> Sequence[FlashcardRecord]:
        ...


class ProgressStore(Protocol):
    async def upsert_progress(
        self, user_id: int, flashcard_id: int, difficulty: Difficulty
    ) -> ProgressRecord:
        ...

    async def get_progress(
        self, user_id: int, flashcard_id: int
    ) -> Optional[ProgressRecord]:
        ...


class InMemoryCardSource:
    """Card source over a dict of book id -> ordered sections of cards."""

    def __init__(
        self, books: Optional[dict[int, dict[int, Iterable[FlashcardRecord]]]] = None
    ) -> None:
        self._books: dict[int, dict[int, list[FlashcardRecord]]] = {}
        for book_id, sections in (books or {}).items():
            for section_id, cards in sections.items():
                self.add_section(book_id, section_id, cards)

    def add_section(
        self, book_id: int, section_id: int, cards: Iterable[FlashcardRecord] = ()
    ) -> None:
        self._books.setdefault(book_id, {})[section_id] = list(cards)

    async def list_cards_for_section(self, section_id: int) -> list[FlashcardRecord]:
        for sections in self._books.values():
            if section_id in sections:
                return list(sections[section_id])
        raise ScopeNotFoundError(ScopeKind.SECTION.value, section_id)

    async def list_cards_for_book(self, book_id: int) -> list[FlashcardRecord]:
        sections = self._books.get(book_id)
        if sections is None:
            raise ScopeNotFoundError(ScopeKind.BOOK.value, book_id)
        cards: list[FlashcardRecord] = []
        for section_cards in sections.values():
            cards.extend(section_cards)
        return cards


class InMemoryProgressStore:
    def __init__(self) -> None:
        self.records: dict[tuple[int, int], ProgressRecord] = {}
        self.writes = 0

    async def upsert_progress(
        self, user_id: int, flashcard_id: int, difficulty: Difficulty
    ) -> ProgressRecord:
        self.writes += 1
        now = datetime.now(timezone.utc)
        key = (user_id, flashcard_id)
        existing = self.records.get(key)
        if existing:
            record = existing.model_copy(
                update={
                    "difficulty": Difficulty(difficulty),
                    "repetitions": existing.repetitions + 1,
                    "last_studied": now,
                }
            )
        else:
            record = ProgressRecord(
                user_id=user_id,
                flashcard_id=flashcard_id,
                difficulty=Difficulty(difficulty),
                repetitions=1,
                last_studied=now,
            )
        self.records[key] = record
        return record

    async def get_progress(
        self, user_id: int, flashcard_id: int
    ) -> Optional[ProgressRecord]:
        return self.records.get((user_id, flashcard_id))
