"""In-memory registry of live study sessions.

Sessions are kept in-process only and are owned by the user who started
them. Finished sessions stay readable until their summary is collected with
no progress writes pending; sessions left idle are swept by a background
loop.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from flashdeck.core.logging import get_logger
from flashdeck.modules.study.errors import SessionNotFoundError
from flashdeck.modules.study.state import StudySession


logger = get_logger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class StudySessionManager:
    def __init__(self) -> None:
        self.sessions: dict[str, StudySession] = {}
        self._cleanup_task: Optional[asyncio.Task] = None
        self._idle_seconds: int = 1800
        self._sweep_interval: int = 60

    def add(self, session: StudySession) -> StudySession:
        self.sessions[session.id] = session
        return session

    def get(self, session_id: str, *, user_id: int) -> StudySession:
        session = self.sessions.get(session_id)
        # Another user's session is indistinguishable from a missing one
        if not session or session.user_id != user_id:
            raise SessionNotFoundError(session_id)
        return session

    def discard(self, session_id: str) -> Optional[StudySession]:
        return self.sessions.pop(session_id, None)

    def discard_if_settled(self, session: StudySession) -> bool:
        """Drop a finished session once none of its progress writes are pending."""
        if session.is_active or session.pending_writes:
            return False
        self.discard(session.id)
        return True

    def __len__(self) -> int:
        return len(self.sessions)

    # Cleanup loop -------------------------------------------------------
    def start(self, *, idle_seconds: int = 1800, sweep_interval: int = 60) -> None:
        self._idle_seconds = max(60, int(idle_seconds))
        self._sweep_interval = max(5, int(sweep_interval))
        if self._cleanup_task and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            await asyncio.gather(self._cleanup_task, return_exceptions=True)
        self._cleanup_task = None

    def sweep(
        self, now: Optional[datetime] = None, *, idle_seconds: Optional[int] = None
    ) -> list[str]:
        """Discard sessions idle longer than the timeout; return their ids."""
        now = now or _now_utc()
        limit = self._idle_seconds if idle_seconds is None else idle_seconds
        expired = [
            sid
            for sid, session in self.sessions.items()
            if (now - session.last_activity).total_seconds() > limit
        ]
        for sid in expired:
            session = self.sessions.pop(sid)
            logger.info(
                "Discarded idle study session %s (%d/%d answered)",
                sid, len(session.answered_ids), session.total,
                extra={"session_id": sid, "user_id": session.user_id},
            )
        return expired

    async def _cleanup_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._sweep_interval)
                self.sweep()
        except asyncio.CancelledError:
            return
