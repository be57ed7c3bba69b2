"""Action dispatcher tying navigation, scoring and a presenter together."""

from __future__ import annotations

import logging
from typing import Callable, Literal, Protocol

from .loader import AnswerKeySource
from .models import AnswerKey, Question, QuestionBank
from .scoring import Summary, score_session
from .session import NavigationEngine, NavigationResult, SessionState

logger = logging.getLogger(__name__)

Phase = Literal["not_started", "in_progress", "finished"]

EMPTY_BANK_NOTICE = "No questions are available; the session cannot start."


class Presenter(Protocol):
    """Rendering surface driven by :class:`QuizController`."""

    def render_question(
        self,
        question: Question,
        position: int,
        total: int,
        selected: str | None,
    ) -> None: ...

    def render_summary(self, summary: Summary) -> None: ...

    def render_notice(self, message: str) -> None: ...

    def get_current_selection(self) -> str | None: ...


class QuizController:
    """Process the four user actions one at a time."""

    def __init__(
        self,
        bank: QuestionBank,
        presenter: Presenter,
        *,
        answer_key: AnswerKeySource | AnswerKey | None = None,
    ) -> None:
        self.bank = bank
        self.presenter = presenter
        self.engine = NavigationEngine(bank)
        self.phase: Phase = "not_started"
        if isinstance(answer_key, AnswerKey):
            answer_key = AnswerKeySource(answer_key)
        self._key_source = answer_key or AnswerKeySource()
        self._actions: dict[str, Callable[[], object]] = {
            "start": self.start,
            "next": self.next,
            "previous": self.previous,
            "restart": self.restart,
        }

    @property
    def state(self) -> SessionState:
        return self.engine.state

    @property
    def answer_key(self) -> AnswerKey:
        return self._key_source.current()

    def dispatch(self, action: str) -> Phase:
        try:
            handler = self._actions[action]
        except KeyError as exc:
            raise ValueError(f"Unknown action '{action}'.") from exc
        handler()
        return self.phase

    def start(self) -> Phase:
        self.engine.reset()
        if self.bank.is_empty:
            logger.warning("Start requested with an empty question bank")
            self.phase = "not_started"
            self.presenter.render_notice(EMPTY_BANK_NOTICE)
            return self.phase
        self.phase = "in_progress"
        logger.debug("Session started", extra={"total": len(self.bank)})
        self._render_current()
        return self.phase

    def restart(self) -> Phase:
        return self.start()

    def next(self) -> NavigationResult | None:
        if self.phase != "in_progress":
            logger.debug(
                "Ignoring next outside a session", extra={"phase": self.phase}
            )
            return None
        result = self.engine.advance(self.presenter.get_current_selection())
        if result.moved:
            self._render_current()
        else:
            self.phase = "finished"
            summary = self.summary()
            logger.info(
                "Session finished",
                extra={
                    "answered": summary.answered_count,
                    "correct": summary.correct_count,
                },
            )
            self.presenter.render_summary(summary)
        return result

    def previous(self) -> NavigationResult | None:
        if self.phase != "in_progress":
            logger.debug(
                "Ignoring previous outside a session",
                extra={"phase": self.phase},
            )
            return None
        result = self.engine.retreat(self.presenter.get_current_selection())
        if result.moved:
            self._render_current()
        return result

    def summary(self) -> Summary:
        return score_session(
            self.bank, self.answer_key, self.engine.state.user_answers
        )

    def _render_current(self) -> None:
        index = self.engine.current_index
        self.presenter.render_question(
            self.bank[index],
            index,
            len(self.bank),
            self.engine.selection_at(index),
        )
