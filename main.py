from fastapi import FastAPI
from contextlib import asynccontextmanager
from flashdeck.core.config import settings
from flashdeck.core.db.base import init_models
from flashdeck.core.logging import get_logger, setup_logging
from flashdeck.apis.auth.main import router as auth_router
from flashdeck.apis.study.main import router as study_router
from flashdeck.modules.study.manager import StudySessionManager

import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from flashdeck.core.task_queue import queue as _bg_queue


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.database.auto_create:
        await init_models()
    _bg_queue.start()
    sessions: StudySessionManager = app.state.study_sessions
    sessions.start(
        idle_seconds=settings.study.session_idle_seconds,
        sweep_interval=settings.study.sweep_interval_seconds,
    )
    try:
        yield
    finally:
        await sessions.stop()
        # Let in-flight progress writes finish before shutting down
        await _bg_queue.stop()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )
    app.state.study_sessions = StudySessionManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(study_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        logger.error(f"An error occurred when starting the server: {e}.")
