"""Summary computation for a practice session."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .models import AnswerKey, QuestionBank

SCORING_UNAVAILABLE = "No answer key loaded; scoring unavailable."


@dataclass(frozen=True)
class WrongEntry:
    """A question answered differently from the answer key."""

    id: str
    user_answer: str
    correct_answer: str


@dataclass(frozen=True)
class Summary:
    """End-of-session report.

    ``correct_count`` and ``score_percent`` are ``None`` when no answer key is
    available; ``score_percent`` is also ``None`` when nothing was answered.
    """

    total_questions: int
    answered_count: int
    correct_count: int | None = None
    score_percent: float | None = None
    wrong_entries: tuple[WrongEntry, ...] = ()

    @property
    def scoring_available(self) -> bool:
        return self.correct_count is not None


def labels_match(user_answer: str, correct_answer: str) -> bool:
    return user_answer.lower() == correct_answer.lower()


def round_percent(value: float) -> float:
    """Round half-up to one decimal place."""

    quantized = Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(quantized)


def score_session(
    bank: QuestionBank,
    key: AnswerKey | None,
    user_answers: Sequence[str | None],
) -> Summary:
    """Build a :class:`Summary` for ``user_answers`` against ``bank``.

    The percentage divides by the total number of questions, so unanswered
    questions count against the score.
    """

    total = len(bank)
    answers = [
        user_answers[idx] if idx < len(user_answers) else None
        for idx in range(total)
    ]
    answered = sum(1 for answer in answers if answer)

    if key is None or key.is_empty:
        return Summary(total_questions=total, answered_count=answered)

    correct = 0
    wrong: list[WrongEntry] = []
    for question, answer in zip(bank, answers):
        expected = key.correct_for(question.id)
        if not answer or not expected:
            continue
        if labels_match(answer, expected):
            correct += 1
        else:
            wrong.append(WrongEntry(question.id, answer, expected))

    percent = None
    if answered > 0:
        percent = round_percent(correct / total * 100)
    return Summary(
        total_questions=total,
        answered_count=answered,
        correct_count=correct,
        score_percent=percent,
        wrong_entries=tuple(wrong),
    )


def summary_message(summary: Summary) -> str:
    lines = [
        f"You reviewed {summary.total_questions} questions and answered "
        f"{summary.answered_count} of them."
    ]
    if not summary.scoring_available:
        lines.append(SCORING_UNAVAILABLE)
        return "\n".join(lines)
    scored = f"You answered {summary.correct_count} correctly."
    if summary.score_percent is not None:
        scored += f" Your score: {summary.score_percent:.1f}%"
    lines.append(scored)
    return "\n".join(lines)
