from __future__ import annotations

import asyncio
import random
from typing import Optional, Union

from flashdeck.core.logging import get_logger
from flashdeck.core.task_queue import BackgroundQueue
from flashdeck.modules.study.models import (
    Difficulty,
    EmptyDeck,
    ExitResult,
    ProgressRecord,
    ProgressUpdate,
    ScopeKind,
    SessionSummary,
    StudyScope,
)
from flashdeck.modules.study.shuffle import shuffle
from flashdeck.modules.study.sources import CardSource, ProgressStore
from flashdeck.modules.study.state import StudySession, exit_confirmation_message


logger = get_logger(__name__)


def _ctx(session: StudySession) -> dict:
    return {"session_id": session.id, "user_id": session.user_id}


class StudySessionController:
    """Drives study sessions: card source -> shuffle -> session -> progress store.

    Progress writes are detached from the session transitions. An answer
    schedules the write on the background queue (or a spawned task when no
    started queue is available) and returns immediately; a failed write is
    logged and noted on the session, never raised.
    """

    def __init__(
        self,
        card_source: CardSource,
        progress_store: ProgressStore,
        *,
        queue: Optional[BackgroundQueue] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.card_source = card_source
        self.progress_store = progress_store
        self.queue = queue
        self.rng = rng
        self._tasks: set[asyncio.Task] = set()

    # Session lifecycle --------------------------------------------------
    async def start_session(
        self, scope: StudyScope, user_id: int
    ) -> Union[StudySession, EmptyDeck]:
        if scope.kind == ScopeKind.SECTION:
            cards = await self.card_source.list_cards_for_section(scope.id)
        else:
            cards = await self.card_source.list_cards_for_book(scope.id)

        deck = shuffle(cards, self.rng)
        if not deck:
            logger.info(
                "Nothing to study for %s %s", scope.kind.value, scope.id,
                extra={"user_id": user_id},
            )
            return EmptyDeck(scope=scope)

        session = StudySession(user_id=user_id, scope=scope, deck=tuple(deck))
        logger.info(
            "Started study session %s on %s %s with %d card(s)",
            session.id, scope.kind.value, scope.id, session.total,
            extra=_ctx(session),
        )
        return session

    def flip(self, session: StudySession) -> StudySession:
        return session.flip()

    def answer(self, session: StudySession, difficulty: Difficulty) -> StudySession:
        was_active = session.is_active
        session.answer(
            Difficulty(difficulty),
            emit=lambda event: self._dispatch_progress(session, event),
        )
        if was_active and not session.is_active:
            self.end_session(session)
        return session

    def exit(self, session: StudySession, *, confirmed: bool = False) -> ExitResult:
        if session.requires_exit_confirmation() and not confirmed:
            return ExitResult(
                confirmation_required=True,
                message=exit_confirmation_message(len(session.answered_ids)),
            )
        was_active = session.is_active
        session.exit()
        summary = session.summary()
        if was_active:
            self.end_session(session)
        return ExitResult(confirmation_required=False, summary=summary)

    def summary(self, session: StudySession) -> SessionSummary:
        return session.summary()

    def end_session(self, session: StudySession) -> SessionSummary:
        summary = session.summary()
        logger.info(
            "Study session %s %s: %d/%d card(s) answered",
            session.id, summary.status.value,
            summary.answered_count, summary.total_count,
            extra=_ctx(session),
        )
        return summary

    # Progress -----------------------------------------------------------
    async def record_answer(
        self, user_id: int, flashcard_id: int, difficulty: Difficulty
    ) -> Optional[ProgressRecord]:
        """Upsert progress for one answer; failures are logged, not raised."""
        try:
            return await self.progress_store.upsert_progress(
                user_id, flashcard_id, Difficulty(difficulty)
            )
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Progress write failed for flashcard %s: %s", flashcard_id, e,
                extra={"user_id": user_id},
            )
            return None

    def _dispatch_progress(self, session: StudySession, event: ProgressUpdate) -> None:
        async def _job() -> None:
            try:
                record = await self.record_answer(
                    event.user_id, event.flashcard_id, event.difficulty
                )
                if record is None:
                    session.progress_failures.append(event.flashcard_id)
            finally:
                session.pending_writes -= 1

        session.pending_writes += 1
        try:
            if self.queue is not None and self.queue.started:
                self.queue.enqueue(_job)
                return
            task = asyncio.get_running_loop().create_task(_job())
        except RuntimeError as e:
            session.pending_writes -= 1
            logger.warning(
                "Could not schedule progress write for flashcard %s: %s",
                event.flashcard_id, e, extra=_ctx(session),
            )
            session.progress_failures.append(event.flashcard_id)
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for progress writes spawned outside the background queue."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
