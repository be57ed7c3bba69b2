from __future__ import annotations

import asyncio

import pytest

from exam_practice.quiz.controller import EMPTY_BANK_NOTICE, QuizController
from exam_practice.quiz.loader import AnswerKeySource
from exam_practice.quiz.models import AnswerKey, QuestionBank
from exam_practice.quiz.scoring import Summary, WrongEntry


def test_start_renders_first_question(bank, presenter) -> None:
    controller = QuizController(bank, presenter)

    phase = controller.start()

    assert phase == "in_progress"
    assert presenter.calls == [("question", ("q1", 0, 3, None))]


def test_start_with_empty_bank_stays_not_started(presenter) -> None:
    controller = QuizController(QuestionBank(), presenter)

    assert controller.dispatch("start") == "not_started"
    assert presenter.calls == [("notice", EMPTY_BANK_NOTICE)]
    assert controller.dispatch("next") == "not_started"
    assert len(presenter.calls) == 1


def test_full_walkthrough_scores_summary(bank, answer_key, presenter) -> None:
    controller = QuizController(bank, presenter, answer_key=answer_key)
    controller.start()

    presenter.selection = "a"
    controller.dispatch("next")
    presenter.selection = "A"
    controller.dispatch("next")
    assert presenter.last == ("question", ("q3", 2, 3, None))
    phase = controller.dispatch("next")

    assert phase == "finished"
    kind, summary = presenter.last
    assert kind == "summary"
    assert isinstance(summary, Summary)
    assert summary.answered_count == 2
    assert summary.correct_count == 1
    assert summary.score_percent == 33.3
    assert summary.wrong_entries == (WrongEntry("q2", "A", "B"),)


def test_selection_queried_before_every_move(bank, presenter) -> None:
    controller = QuizController(bank, presenter)
    controller.start()

    controller.next()
    controller.previous()

    assert presenter.selection_queries == 2


def test_previous_restores_saved_selection(bank, presenter) -> None:
    controller = QuizController(bank, presenter)
    controller.start()
    presenter.selection = "B"
    controller.next()
    presenter.selection = None

    controller.previous()

    assert presenter.last == ("question", ("q1", 0, 3, "B"))


def test_previous_at_first_question_renders_nothing(bank, presenter) -> None:
    controller = QuizController(bank, presenter)
    controller.start()
    presenter.selection = "C"

    result = controller.previous()

    assert result is not None and result.outcome == "at_start"
    assert len(presenter.calls) == 1
    assert controller.state.user_answers == ["C"]


def test_navigation_ignored_after_finish(bank, presenter) -> None:
    controller = QuizController(bank, presenter)
    controller.start()
    for _ in range(3):
        controller.next()
    calls = len(presenter.calls)

    assert controller.next() is None
    assert controller.previous() is None
    assert len(presenter.calls) == calls
    assert controller.phase == "finished"


def test_restart_clears_answers(bank, presenter) -> None:
    controller = QuizController(bank, presenter)
    controller.start()
    presenter.selection = "A"
    for _ in range(3):
        controller.next()

    assert controller.dispatch("restart") == "in_progress"
    assert controller.state.current_index == 0
    assert controller.state.user_answers == []
    assert presenter.last == ("question", ("q1", 0, 3, None))


def test_pending_key_scores_as_unavailable(bank, presenter) -> None:
    source = AnswerKeySource()
    controller = QuizController(bank, presenter, answer_key=source)
    controller.start()
    presenter.selection = "A"
    controller.next()

    assert not controller.summary().scoring_available


def test_key_loaded_mid_session_is_used_for_scoring(
    bank, presenter, sources
) -> None:
    source = AnswerKeySource()
    controller = QuizController(bank, presenter, answer_key=source)
    controller.start()
    presenter.selection = "A"
    controller.next()

    asyncio.run(source.load(sources.answers()))

    assert source.status == "loaded"
    assert controller.summary().correct_count == 1


def test_answer_key_accepts_plain_key(bank, presenter) -> None:
    controller = QuizController(
        bank, presenter, answer_key=AnswerKey({"q1": "A"})
    )

    assert controller.answer_key.correct_for("q1") == "A"


def test_dispatch_rejects_unknown_action(bank, presenter) -> None:
    controller = QuizController(bank, presenter)

    with pytest.raises(ValueError, match="Unknown action"):
        controller.dispatch("jump")
