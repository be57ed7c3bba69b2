"""Read-only providers for the question bank and the answer key.

The question bank is required: failing to read it means there is nothing to
practise, so :class:`QuestionBankError` propagates. The answer key is
optional: failures are logged and the session continues unscored.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
import string
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from .models import AnswerKey, Choice, Question, QuestionBank

logger = logging.getLogger(__name__)

KeyStatus = Literal["pending", "loaded", "absent", "failed"]


class LoaderError(RuntimeError):
    """Base class for source loading failures."""


class QuestionBankError(LoaderError):
    """Raised when the question bank cannot be read or parsed."""


class AnswerKeyError(LoaderError):
    """Raised when the answer key cannot be read or parsed."""


def _read_json(path: Path, error: type[LoaderError]) -> Any:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise error(f"Cannot read {path}: {exc}") from exc
    try:
        if Path(path).suffix.lower() == ".jsonl":
            return [
                json.loads(line) for line in text.splitlines() if line.strip()
            ]
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise error(f"Invalid JSON in {path}: {exc}") from exc


def _iter_choices(raw: object, position: int) -> Iterable[Choice]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise QuestionBankError(
            f"Question #{position + 1}: 'answers' must be a list."
        )
    pairs: list[tuple[str, str]] = []
    for item in raw:
        if isinstance(item, dict):
            label = str(item.get("label") or "").strip()
            text = str(item.get("text") or "").strip()
        else:
            label, text = "", str(item).strip()
        pairs.append((label, text))

    taken = {label.upper() for label, _ in pairs if label}
    fallback = _unused_labels(taken)
    return [Choice(label or next(fallback), text) for label, text in pairs]


def _unused_labels(taken: set[str]) -> Iterator[str]:
    """Yield A, B, ... then A1, B1, ... skipping labels in ``taken``."""

    for round_ in itertools.count():
        suffix = str(round_) if round_ else ""
        for letter in string.ascii_uppercase:
            label = letter + suffix
            if label not in taken:
                yield label


def parse_questions(data: object) -> QuestionBank:
    """Build a :class:`QuestionBank` from decoded JSON records."""

    if not isinstance(data, list):
        raise QuestionBankError("Question source must be a list of records.")
    questions: list[Question] = []
    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise QuestionBankError(
                f"Question #{position + 1} must be an object, "
                f"found {type(record).__name__}."
            )
        identifier = record.get("id")
        questions.append(
            Question(
                id=str(identifier if identifier is not None else position),
                question=str(record.get("question") or "").strip(),
                answers=tuple(_iter_choices(record.get("answers"), position)),
            )
        )
    return QuestionBank.from_questions(questions)


def parse_answer_key(data: object) -> AnswerKey:
    """Build an :class:`AnswerKey` from a decoded ``{id: label}`` object."""

    if not isinstance(data, dict):
        raise AnswerKeyError("Answer key must be an object of id -> label.")
    labels = {
        str(qid): str(label).strip()
        for qid, label in data.items()
        if label is not None and str(label).strip()
    }
    return AnswerKey(labels)


def load_question_bank(path: Path) -> QuestionBank:
    return parse_questions(_read_json(path, QuestionBankError))


def load_answer_key(path: Path) -> AnswerKey:
    return parse_answer_key(_read_json(path, AnswerKeyError))


async def fetch_question_bank(path: Path) -> QuestionBank:
    try:
        bank = await asyncio.to_thread(load_question_bank, path)
    except QuestionBankError:
        logger.error(
            "Failed to load questions",
            extra={"path": str(path)},
            exc_info=True,
        )
        raise
    logger.info(
        "Loaded question bank",
        extra={"path": str(path), "question_count": len(bank)},
    )
    return bank


async def fetch_answer_key(path: Path) -> AnswerKey:
    return await asyncio.to_thread(load_answer_key, path)


class AnswerKeySource:
    """Answer key holder that reads as empty until its fetch succeeds."""

    def __init__(self, key: AnswerKey | None = None) -> None:
        self._key = key if key is not None else AnswerKey.empty()
        self.status: KeyStatus = "loaded" if key is not None else "pending"

    def current(self) -> AnswerKey:
        return self._key

    async def load(self, path: Path | None) -> AnswerKey:
        if path is None:
            logger.info("No answer key configured; scoring unavailable")
            self.status = "absent"
            return self._key
        try:
            key = await fetch_answer_key(path)
        except AnswerKeyError as exc:
            logger.warning(
                "Could not load answer key: %s", exc, extra={"path": str(path)}
            )
            self.status = "failed"
            return self._key
        self._key = key
        self.status = "loaded"
        logger.info(
            "Loaded answer key",
            extra={"path": str(path), "entry_count": len(key)},
        )
        return key

    def load_in_background(self, path: Path | None) -> threading.Thread:
        """Run :meth:`load` on its own daemon thread and event loop.

        For callers that block on input and have no event loop of their own.
        """

        thread = threading.Thread(
            target=asyncio.run,
            args=(self.load(path),),
            name="answer-key-loader",
            daemon=True,
        )
        thread.start()
        return thread


@dataclass(frozen=True)
class QuizResources:
    bank: QuestionBank
    answer_key: AnswerKeySource
    key_task: asyncio.Task[AnswerKey] | None = None

    async def wait_for_key(self) -> AnswerKey:
        if self.key_task is not None:
            await self.key_task
        return self.answer_key.current()


async def load_resources(
    questions: Path,
    answers: Path | None = None,
) -> QuizResources:
    """Load the bank, leaving the answer key to finish in the background.

    Returns as soon as the bank resolves. The key fills in its
    :class:`AnswerKeySource` whenever its task completes; await
    :meth:`QuizResources.wait_for_key` to block on it. Raises
    :class:`QuestionBankError` when the bank is unusable.
    """

    source = AnswerKeySource()
    key_task = asyncio.create_task(source.load(answers))
    try:
        bank = await fetch_question_bank(questions)
    except QuestionBankError:
        key_task.cancel()
        raise
    return QuizResources(bank=bank, answer_key=source, key_task=key_task)
