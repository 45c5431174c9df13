import pytest

from flashdeck.modules.study.models import Difficulty, SessionStatus, StudyScope
from flashdeck.modules.study.state import StudySession, exit_confirmation_message
from conftest import make_card, make_cards


def _session(ids, user_id=1):
    return StudySession(user_id=user_id, scope=StudyScope.section(1), deck=make_cards(ids))


def test_new_session_starts_active_face_down():
    s = _session([1, 2, 3])
    assert s.status == SessionStatus.ACTIVE
    assert (s.current_index, s.is_flipped) == (0, False)
    assert s.answered_ids == set()
    assert s.current_card.id == 1
    assert isinstance(s.deck, tuple)


def test_empty_deck_is_rejected():
    with pytest.raises(ValueError):
        StudySession(user_id=1, scope=StudyScope.section(1), deck=())


def test_walkthrough_three_cards():
    s = _session([101, 102, 103])
    a, b, c = (card.id for card in s.deck)

    s.flip()
    assert (s.current_index, s.is_flipped) == (0, True)

    s.answer(Difficulty.EASY)
    assert (s.current_index, s.is_flipped) == (1, False)
    assert s.answered_ids == {a}

    s.flip()
    s.answer(Difficulty.HARD)
    assert (s.current_index, s.is_flipped) == (2, False)
    assert s.answered_ids == {a, b}

    s.flip()
    s.answer(Difficulty.EASY)
    assert s.status == SessionStatus.COMPLETE
    assert s.answered_ids == {a, b, c}
    assert s.ended_at is not None
    assert s.current_card is None


@pytest.mark.parametrize("n", [1, 2, 5, 17])
def test_n_answers_complete_a_deck_of_n(n):
    s = _session(range(n))
    for i in range(n):
        assert s.is_active
        assert 0 <= s.current_index < s.total
        assert s.current_index == i
        s.answer(Difficulty.HARD)
    assert s.status == SessionStatus.COMPLETE
    assert len(s.answered_ids) == n
    assert s.current_index == n - 1


def test_flip_toggles_only_the_flip_state():
    s = _session([1, 2])
    s.answer(Difficulty.EASY)
    before = (s.current_index, set(s.answered_ids))
    s.flip()
    assert s.is_flipped is True
    s.flip()
    assert s.is_flipped is False
    assert (s.current_index, s.answered_ids) == before


def test_answer_resets_flip_when_advancing():
    s = _session([1, 2, 3])
    s.flip()
    s.answer(Difficulty.HARD)
    assert s.is_flipped is False
    # answering face-down is allowed and also lands face-down
    s.answer(Difficulty.EASY)
    assert s.is_flipped is False


def test_answer_emits_event_before_marking_card_answered():
    s = _session([1, 2], user_id=42)
    seen = []

    def emit(event):
        seen.append((event, event.flashcard_id in s.answered_ids, s.current_index))

    returned = s.answer(Difficulty.HARD, emit=emit)
    assert len(seen) == 1
    event, already_answered, index_at_emit = seen[0]
    assert event == returned
    assert (event.user_id, event.flashcard_id, event.difficulty) == (42, 1, Difficulty.HARD)
    assert already_answered is False
    assert index_at_emit == 0


def test_answer_accepts_plain_string_difficulty():
    s = _session([1])
    event = s.answer("easy")
    assert event.difficulty is Difficulty.EASY


def test_transitions_after_completion_are_noops():
    s = _session([1])
    s.answer(Difficulty.EASY)
    emitted = []
    assert s.answer(Difficulty.HARD, emit=emitted.append) is None
    s.flip()
    assert emitted == []
    assert s.is_flipped is False
    assert s.status == SessionStatus.COMPLETE
    assert s.answered_ids == {1}


def test_repeated_card_id_is_tolerated():
    card = make_card(9)
    s = StudySession(user_id=1, scope=StudyScope.section(1), deck=(card, card))
    events = [s.answer(Difficulty.EASY), s.answer(Difficulty.HARD)]
    assert all(e is not None for e in events)
    assert s.status == SessionStatus.COMPLETE
    assert s.answered_ids == {9}


def test_exit_confirmation_needed_only_after_an_answer():
    s = _session([1, 2, 3])
    assert s.requires_exit_confirmation() is False
    s.answer(Difficulty.EASY)
    assert s.requires_exit_confirmation() is True


def test_exit_freezes_the_session():
    s = _session([1, 2, 3])
    s.answer(Difficulty.EASY)
    s.exit()
    assert s.status == SessionStatus.EXITED
    assert s.summary().answered_count == 1

    assert s.answer(Difficulty.HARD) is None
    s.flip()
    assert (s.current_index, s.is_flipped, s.answered_ids) == (1, False, {1})
    assert s.requires_exit_confirmation() is False


def test_exit_after_completion_keeps_complete_status():
    s = _session([1])
    s.answer(Difficulty.EASY)
    s.exit()
    assert s.status == SessionStatus.COMPLETE


def test_progress_views():
    s = _session([1, 2, 3, 4])
    assert (s.position, s.total, s.progress_percent) == (1, 4, 25.0)
    s.answer(Difficulty.EASY)
    assert (s.position, s.progress_percent) == (2, 50.0)
    assert s.is_last_card is False


def test_summary_messages():
    s = _session([1, 2])
    assert s.summary().message == "You've studied 0 flashcards!"
    s.answer(Difficulty.EASY)
    summary = s.summary()
    assert (summary.answered_count, summary.total_count) == (1, 2)
    assert summary.message == "You've studied 1 flashcard!"


@pytest.mark.parametrize("count, text", [
    (1, "You've studied 1 flashcard. Are you sure you want to exit?"),
    (3, "You've studied 3 flashcards. Are you sure you want to exit?"),
])
def test_exit_confirmation_message_pluralizes(count, text):
    assert exit_confirmation_message(count) == text


def test_finishing_counts_as_activity():
    s = _session([1, 2])
    started = s.last_activity
    s.exit()
    assert s.last_activity == s.ended_at
    assert s.last_activity >= started
