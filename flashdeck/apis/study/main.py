from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError

from flashdeck.core.config import settings
from flashdeck.core.db.schemas.auth import User
from flashdeck.apis.deps import get_session_manager, get_study_controller
from flashdeck.modules.auth import current_active_user
from flashdeck.modules.study.controller import StudySessionController
from flashdeck.modules.study.errors import ScopeNotFoundError, SessionNotFoundError
from flashdeck.modules.study.manager import StudySessionManager
from flashdeck.modules.study.models import EmptyDeck
from flashdeck.modules.study.state import StudySession
from .schemas import (
    AnswerRequest,
    ExitRequest,
    ExitResponse,
    ProgressRead,
    ProgressUpsertRequest,
    SessionView,
    StartSessionRequest,
    StartSessionResponse,
    SummaryView,
)


router = APIRouter()

CurrentUser = Annotated[User, Depends(current_active_user)]
Controller = Annotated[StudySessionController, Depends(get_study_controller)]
Sessions = Annotated[StudySessionManager, Depends(get_session_manager)]

_base = f"/{settings.app.version}/study"


def _load(sessions: StudySessionManager, session_id: str, user: User) -> StudySession:
    try:
        return sessions.get(session_id, user_id=user.id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Study session not found")


@router.post(
    f"{_base}/sessions",
    response_model=StartSessionResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["study"],
)
async def start_session(
    req: StartSessionRequest,
    response: Response,
    user: CurrentUser,
    controller: Controller,
    sessions: Sessions,
) -> StartSessionResponse:
    try:
        result = await controller.start_session(req.to_scope(), user.id)
    except ScopeNotFoundError:
        raise HTTPException(status_code=404, detail="Study scope not found")

    if isinstance(result, EmptyDeck):
        response.status_code = status.HTTP_200_OK
        return StartSessionResponse(status="empty", message=result.message)

    sessions.add(result)
    return StartSessionResponse(status="active", session=SessionView.from_session(result))


@router.get(
    f"{_base}/sessions/{{session_id}}",
    response_model=SessionView,
    tags=["study"],
)
async def get_session_state(
    session_id: str, user: CurrentUser, sessions: Sessions
) -> SessionView:
    return SessionView.from_session(_load(sessions, session_id, user))


@router.post(
    f"{_base}/sessions/{{session_id}}/flip",
    response_model=SessionView,
    tags=["study"],
)
async def flip_card(
    session_id: str, user: CurrentUser, controller: Controller, sessions: Sessions
) -> SessionView:
    session = controller.flip(_load(sessions, session_id, user))
    return SessionView.from_session(session)


@router.post(
    f"{_base}/sessions/{{session_id}}/answer",
    response_model=SessionView,
    tags=["study"],
)
async def answer_card(
    session_id: str,
    req: AnswerRequest,
    user: CurrentUser,
    controller: Controller,
    sessions: Sessions,
) -> SessionView:
    session = controller.answer(_load(sessions, session_id, user), req.difficulty)
    return SessionView.from_session(session)


@router.post(
    f"{_base}/sessions/{{session_id}}/exit",
    response_model=ExitResponse,
    tags=["study"],
)
async def exit_session(
    session_id: str,
    req: ExitRequest,
    user: CurrentUser,
    controller: Controller,
    sessions: Sessions,
) -> ExitResponse:
    session = _load(sessions, session_id, user)
    result = controller.exit(session, confirmed=req.confirmed)
    return ExitResponse(**result.model_dump())


@router.get(
    f"{_base}/sessions/{{session_id}}/summary",
    response_model=SummaryView,
    tags=["study"],
)
async def session_summary(
    session_id: str, user: CurrentUser, sessions: Sessions
) -> SummaryView:
    session = _load(sessions, session_id, user)
    view = SummaryView.from_session(session)
    # Finished sessions are kept until every progress write has reported back
    sessions.discard_if_settled(session)
    return view


@router.post(
    f"{_base}/progress",
    response_model=ProgressRead,
    tags=["study"],
)
async def upsert_progress(
    req: ProgressUpsertRequest, user: CurrentUser, controller: Controller
) -> ProgressRead:
    try:
        record = await controller.progress_store.upsert_progress(
            user.id, req.flashcard_id, req.difficulty
        )
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Invalid input")
    return ProgressRead(**record.model_dump())


@router.get(
    f"{_base}/progress/{{flashcard_id:int}}",
    response_model=ProgressRead,
    tags=["study"],
)
async def get_progress(
    flashcard_id: int, user: CurrentUser, controller: Controller
) -> ProgressRead:
    record = await controller.progress_store.get_progress(user.id, flashcard_id)
    if not record:
        raise HTTPException(status_code=404, detail="No progress recorded")
    return ProgressRead(**record.model_dump())
