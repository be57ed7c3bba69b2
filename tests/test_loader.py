from __future__ import annotations

import asyncio
import logging
import threading

import pytest

from exam_practice.quiz import loader
from exam_practice.quiz.loader import (
    AnswerKeyError,
    AnswerKeySource,
    QuestionBankError,
    load_answer_key,
    load_question_bank,
    load_resources,
    parse_questions,
)
from exam_practice.quiz.models import AnswerKey, Choice


def test_load_question_bank_reads_json_array(sources) -> None:
    bank = load_question_bank(sources.questions())

    assert len(bank) == 3
    assert bank[0].id == "q1"
    assert bank[0].answers[0] == Choice("A", "Life estate")
    assert bank[2].answers == ()
    assert bank.last_index == 2


def test_load_question_bank_reads_jsonl(sources) -> None:
    bank = load_question_bank(sources.questions(name="questions.jsonl"))

    assert [question.id for question in bank] == ["q1", "q2", "q3"]


def test_parse_questions_fills_missing_ids_and_labels() -> None:
    bank = parse_questions(
        [
            {"question": "No id", "answers": ["first", {"text": "second"}]},
            {"id": 7, "question": "Numeric id"},
        ]
    )

    assert bank[0].id == "0"
    assert [c.label for c in bank[0].answers] == ["A", "B"]
    assert bank[1].id == "7"
    assert bank[1].answers == ()


@pytest.mark.parametrize(
    "payload",
    [{"q1": "A"}, ["not an object"], [{"id": "q1", "answers": "A"}]],
)
def test_parse_questions_rejects_bad_shapes(payload) -> None:
    with pytest.raises(QuestionBankError):
        parse_questions(payload)


def test_load_question_bank_missing_file(tmp_path) -> None:
    with pytest.raises(QuestionBankError, match="Cannot read"):
        load_question_bank(tmp_path / "missing.json")


def test_load_question_bank_invalid_json(sources) -> None:
    path = sources.raw("questions.json", "[{")
    with pytest.raises(QuestionBankError, match="Invalid JSON"):
        load_question_bank(path)


def test_load_answer_key_drops_blank_labels(sources) -> None:
    key = load_answer_key(sources.answers({"q1": "A", "q2": "", "q3": None}))

    assert key.correct_for("q1") == "A"
    assert key.correct_for("q2") is None
    assert "q3" not in key
    assert len(key) == 1


def test_load_answer_key_requires_object(sources) -> None:
    with pytest.raises(AnswerKeyError):
        load_answer_key(sources.answers(["A", "B"]))


def test_answer_key_source_is_empty_until_loaded(sources) -> None:
    source = AnswerKeySource()
    assert source.status == "pending"
    assert source.current().is_empty

    key = asyncio.run(source.load(sources.answers()))

    assert source.status == "loaded"
    assert source.current() is key
    assert key.correct_for("q2") == "B"


def test_answer_key_source_failure_is_logged_and_empty(
    tmp_path, caplog
) -> None:
    source = AnswerKeySource()

    with caplog.at_level(logging.WARNING, logger="exam_practice"):
        key = asyncio.run(source.load(tmp_path / "absent.json"))

    assert key.is_empty
    assert source.status == "failed"
    assert "Could not load answer key" in caplog.text


def test_answer_key_source_without_path() -> None:
    source = AnswerKeySource()

    asyncio.run(source.load(None))

    assert source.status == "absent"
    assert source.current() == AnswerKey.empty()


def test_load_resources_recovers_from_key_failure(sources) -> None:
    questions = sources.questions()
    broken = sources.raw("answers.json", "{not json")

    async def scenario():
        resources = await load_resources(questions, broken)
        assert len(resources.bank) == 3
        await resources.wait_for_key()
        return resources

    resources = asyncio.run(scenario())

    assert resources.answer_key.status == "failed"
    assert resources.answer_key.current().is_empty


def test_load_resources_bank_failure_is_fatal(
    tmp_path, sources, caplog
) -> None:
    with caplog.at_level(logging.ERROR, logger="exam_practice"):
        with pytest.raises(QuestionBankError):
            asyncio.run(
                load_resources(tmp_path / "nope.json", sources.answers())
            )

    assert "Failed to load questions" in caplog.text


def test_fetch_runs_loads_off_the_event_loop(monkeypatch, sources) -> None:
    calls = []

    async def fake_to_thread(func, *args):
        calls.append(func)
        return func(*args)

    monkeypatch.setattr(loader.asyncio, "to_thread", fake_to_thread)

    async def scenario() -> None:
        resources = await load_resources(
            sources.questions(), sources.answers()
        )
        await resources.wait_for_key()

    asyncio.run(scenario())

    assert load_question_bank in calls
    assert load_answer_key in calls


def test_fallback_labels_skip_labels_already_used() -> None:
    bank = parse_questions(
        [
            {
                "id": "q1",
                "question": "Mixed labels",
                "answers": [
                    {"label": "B", "text": "x"},
                    {"text": "y"},
                    "z",
                    {"label": "a", "text": "w"},
                ],
            }
        ]
    )

    assert [c.label for c in bank[0].answers] == ["B", "C", "D", "a"]


def test_load_resources_returns_before_the_key(monkeypatch, sources) -> None:
    async def scenario() -> None:
        release = asyncio.Event()

        async def slow_key(path):
            await release.wait()
            return AnswerKey({"q1": "A"})

        monkeypatch.setattr(loader, "fetch_answer_key", slow_key)

        resources = await load_resources(
            sources.questions(), sources.answers()
        )
        assert len(resources.bank) == 3
        assert resources.answer_key.status == "pending"
        assert resources.answer_key.current().is_empty

        release.set()
        key = await resources.wait_for_key()
        assert key.correct_for("q1") == "A"
        assert resources.answer_key.status == "loaded"

    asyncio.run(scenario())


def test_load_in_background_fills_the_source_later(
    monkeypatch, sources
) -> None:
    release = threading.Event()
    real_load = loader.load_answer_key

    def blocked_load(path):
        release.wait(timeout=5)
        return real_load(path)

    monkeypatch.setattr(loader, "load_answer_key", blocked_load)
    source = AnswerKeySource()

    thread = source.load_in_background(sources.answers())

    assert source.status == "pending"
    assert source.current().is_empty
    release.set()
    thread.join(timeout=5)
    assert source.status == "loaded"
    assert source.current().correct_for("q1") == "A"
