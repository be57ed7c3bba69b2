"""Immutable question bank and answer key records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class Choice:
    """A single multiple-choice option."""

    label: str
    text: str


@dataclass(frozen=True)
class Question:
    """One exam item. ``answers`` is empty for display-only questions."""

    id: str
    question: str
    answers: tuple[Choice, ...] = ()

    def choice_for(self, label: str | None) -> Choice | None:
        if not label:
            return None
        for choice in self.answers:
            if choice.label == label:
                return choice
        return None


@dataclass(frozen=True)
class QuestionBank:
    """Ordered, read-only collection of questions."""

    questions: tuple[Question, ...] = ()

    @classmethod
    def from_questions(cls, questions: Iterable[Question]) -> "QuestionBank":
        return cls(tuple(questions))

    def __len__(self) -> int:
        return len(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]

    def __iter__(self) -> Iterator[Question]:
        return iter(self.questions)

    @property
    def is_empty(self) -> bool:
        return not self.questions

    @property
    def last_index(self) -> int:
        """Position of the final question, ``-1`` for an empty bank."""

        return len(self.questions) - 1


@dataclass(frozen=True)
class AnswerKey:
    """Read-only mapping from question id to the correct option label."""

    labels: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "labels", MappingProxyType(dict(self.labels))
        )

    @classmethod
    def empty(cls) -> "AnswerKey":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.labels

    def correct_for(self, question_id: str) -> str | None:
        label = self.labels.get(question_id)
        return label or None

    def __len__(self) -> int:
        return len(self.labels)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self.labels
