"""Session state and the navigation rules that move it.

`SessionState` owns the current position and the recorded selections.
`NavigationEngine` applies one user step at a time: it always stores the
in-progress selection first, then moves within the bank boundaries. Leaving
either end of the bank is a defined outcome, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .models import QuestionBank

NavigationOutcome = Literal["continue", "finished", "at_start"]


def normalize_selection(selection: object) -> str | None:
    """Return the stored form of a selection; blanks mean "no answer"."""

    if selection is None:
        return None
    text = str(selection).strip()
    return text or None


@dataclass
class SessionState:
    """Mutable state of one practice run."""

    current_index: int = 0
    user_answers: list[str | None] = field(default_factory=list)

    def answer_at(self, index: int) -> str | None:
        if 0 <= index < len(self.user_answers):
            return self.user_answers[index]
        return None

    def record(self, index: int, selection: str | None) -> None:
        if index < 0:
            return
        missing = index + 1 - len(self.user_answers)
        if missing > 0:
            self.user_answers.extend([None] * missing)
        self.user_answers[index] = selection

    def clear(self) -> None:
        self.current_index = 0
        self.user_answers.clear()


@dataclass(frozen=True)
class NavigationResult:
    """Outcome of a single ``advance``/``retreat`` step."""

    outcome: NavigationOutcome
    index: int

    @property
    def moved(self) -> bool:
        return self.outcome == "continue"


class NavigationEngine:
    """Move a :class:`SessionState` through a :class:`QuestionBank`."""

    def __init__(
        self,
        bank: QuestionBank,
        state: SessionState | None = None,
    ) -> None:
        self.bank = bank
        self.state = state if state is not None else SessionState()

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def is_first(self) -> bool:
        return self.state.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.state.current_index >= self.bank.last_index

    def selection_at(self, index: int | None = None) -> str | None:
        target = self.state.current_index if index is None else index
        return self.state.answer_at(target)

    def save_current_answer(self, selection: object) -> None:
        index = self.state.current_index
        if not 0 <= index < len(self.bank):
            return
        self.state.record(index, normalize_selection(selection))

    def advance(self, selection: object = None) -> NavigationResult:
        if self.bank.is_empty:
            return NavigationResult("finished", 0)
        self.save_current_answer(selection)
        if self.state.current_index < self.bank.last_index:
            self.state.current_index += 1
            return NavigationResult("continue", self.state.current_index)
        return NavigationResult("finished", self.state.current_index)

    def retreat(self, selection: object = None) -> NavigationResult:
        self.save_current_answer(selection)
        if self.state.current_index > 0:
            self.state.current_index -= 1
            return NavigationResult("continue", self.state.current_index)
        return NavigationResult("at_start", 0)

    def reset(self) -> None:
        self.state.clear()
