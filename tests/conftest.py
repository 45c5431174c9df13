"""Shared fixtures for flashdeck tests."""

import os

# Settings are read at import time; point everything at throwaway backends
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_AUTO_CREATE", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MODE", "dev")

import random
from types import SimpleNamespace

import pytest

from main import app as fastapi_app
from flashdeck.apis.deps import get_study_controller
from flashdeck.core.task_queue import queue
from flashdeck.modules.auth import current_active_user
from flashdeck.modules.study.controller import StudySessionController
from flashdeck.modules.study.models import FlashcardRecord
from flashdeck.modules.study.sources import InMemoryCardSource, InMemoryProgressStore


class FailingProgressStore(InMemoryProgressStore):
    """Progress store whose writes always fail."""

    async def upsert_progress(self, user_id, flashcard_id, difficulty):
        raise RuntimeError("database unavailable")


def make_card(card_id: int, section_id: int = 1) -> FlashcardRecord:
    return FlashcardRecord(
        id=card_id,
        section_id=section_id,
        front_text=f"Q{card_id}",
        back_text=f"A{card_id}",
    )


def make_cards(ids, section_id: int = 1) -> list[FlashcardRecord]:
    return [make_card(i, section_id) for i in ids]


@pytest.fixture
def card_source():
    """Book 1: section 10 (cards 1-2) and section 11 (cards 3-5).
    Book 2: section 20 with no cards."""
    return InMemoryCardSource({
        1: {10: make_cards([1, 2], 10), 11: make_cards([3, 4, 5], 11)},
        2: {20: []},
    })


@pytest.fixture
def progress_store():
    return InMemoryProgressStore()


@pytest.fixture
def api_user():
    return SimpleNamespace(id=7, email="student@example.com", is_active=True)


@pytest.fixture
def app(card_source, progress_store, api_user):
    """The FastAPI app with auth and storage swapped for in-memory fakes.

    Use ``with TestClient(app) as client`` so the lifespan starts (and on
    exit drains) the background progress queue.
    """
    fastapi_app.dependency_overrides[current_active_user] = lambda: api_user
    fastapi_app.dependency_overrides[get_study_controller] = lambda: StudySessionController(
        card_source, progress_store, queue=queue, rng=random.Random(0)
    )
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.study_sessions.sessions.clear()
