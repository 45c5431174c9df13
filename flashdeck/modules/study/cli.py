from __future__ import annotations

import argparse
import asyncio
import random
from typing import Callable, Optional

from flashdeck.modules.study.controller import StudySessionController
from flashdeck.modules.study.errors import ScopeNotFoundError
from flashdeck.modules.study.models import (
    Difficulty,
    EmptyDeck,
    FlashcardRecord,
    SessionSummary,
    StudyScope,
)
from flashdeck.modules.study.sources import InMemoryCardSource, InMemoryProgressStore


DEMO_BOOK_ID = 1

DEMO_CARDS = {
    1: [
        ("Capital of France?", "Paris"),
        ("Capital of Japan?", "Tokyo"),
        ("Capital of Canada?", "Ottawa"),
    ],
    2: [
        ("H2O is commonly called?", "Water"),
        ("Symbol for sodium?", "Na"),
    ],
}

HELP = "[f]lip  [e]asy  [h]ard  [q]uit"


def demo_source() -> InMemoryCardSource:
    source = InMemoryCardSource()
    next_id = 1
    for section_id, pairs in DEMO_CARDS.items():
        cards = []
        for front, back in pairs:
            cards.append(
                FlashcardRecord(
                    id=next_id, section_id=section_id, front_text=front, back_text=back
                )
            )
            next_id += 1
        source.add_section(DEMO_BOOK_ID, section_id, cards)
    return source


async def run_session(
    controller: StudySessionController,
    scope: StudyScope,
    user_id: int,
    *,
    read: Optional[Callable[[str], str]] = None,
    write: Callable[[str], None] = print,
) -> Optional[SessionSummary]:
    """Interactive study loop on stdin/stdout. Returns the final summary."""

    async def ask(prompt: str) -> str:
        # Read off the loop thread so pending progress writes keep running
        answer = await asyncio.to_thread(read or input, prompt)
        return answer.strip().lower()

    result = await controller.start_session(scope, user_id)
    if isinstance(result, EmptyDeck):
        write(result.message)
        return None

    session = result
    summary: Optional[SessionSummary] = None
    while session.is_active:
        card = session.current_card
        assert card is not None
        side = card.back_text if session.is_flipped else card.front_text
        write(f"[{session.position}/{session.total}] {side}")
        cmd = await ask(f"{HELP} > ")
        if cmd == "f":
            controller.flip(session)
        elif cmd in ("e", "h"):
            difficulty = Difficulty.EASY if cmd == "e" else Difficulty.HARD
            controller.answer(session, difficulty)
        elif cmd == "q":
            exit_result = controller.exit(session)
            if exit_result.confirmation_required:
                confirm = await ask(f"{exit_result.message} [y/N] ")
                if confirm != "y":
                    continue
                exit_result = controller.exit(session, confirmed=True)
            summary = exit_result.summary
        else:
            write(HELP)

    await controller.drain()
    summary = summary or session.summary()
    if session.progress_failures:
        write(f"Warning: progress for {len(session.progress_failures)} card(s) was not saved")
    write(summary.message)
    return summary


def _scope(args: argparse.Namespace) -> StudyScope:
    if args.section is not None:
        return StudyScope.section(args.section)
    return StudyScope.book(args.book)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flashdeck-study", description="Study flashcards in the terminal"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("study", help="Study a section or a book from the database")
    target = s.add_mutually_exclusive_group(required=True)
    target.add_argument("--section", type=int, help="Section id")
    target.add_argument("--book", type=int, help="Book id")
    s.add_argument("--user", type=int, required=True, help="Studying user's id")

    d = sub.add_parser("demo", help="Study a small built-in deck (nothing is saved)")
    d.add_argument("--seed", type=int, help="Shuffle seed")

    args = parser.parse_args(argv)
    if args.cmd == "demo":
        controller = StudySessionController(
            demo_source(),
            InMemoryProgressStore(),
            rng=random.Random(args.seed) if args.seed is not None else None,
        )
        asyncio.run(run_session(controller, StudyScope.book(DEMO_BOOK_ID), user_id=0))
        return 0
    if args.cmd == "study":
        from flashdeck.modules.study.stores import SQLCardSource, SQLProgressStore

        controller = StudySessionController(
            SQLCardSource(owner_id=args.user), SQLProgressStore()
        )
        try:
            asyncio.run(run_session(controller, _scope(args), user_id=args.user))
        except ScopeNotFoundError as e:
            print(f"Cannot start study session: {e}")
            return 1
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
