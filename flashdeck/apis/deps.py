from __future__ import annotations

from fastapi import Depends, Request

from flashdeck.core.db.schemas.auth import User
from flashdeck.core.task_queue import queue
from flashdeck.modules.auth import current_active_user
from flashdeck.modules.study.controller import StudySessionController
from flashdeck.modules.study.manager import StudySessionManager
from flashdeck.modules.study.stores import SQLCardSource, SQLProgressStore


def get_session_manager(request: Request) -> StudySessionManager:
    """The app-wide registry created in the lifespan of ``create_app``."""
    return request.app.state.study_sessions


def get_study_controller(
    user: User = Depends(current_active_user),
) -> StudySessionController:
    """Controller wired to the SQL library (scoped to the caller's books)."""
    return StudySessionController(
        SQLCardSource(owner_id=user.id),
        SQLProgressStore(),
        queue=queue,
    )
