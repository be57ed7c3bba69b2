"""Textual front end for a practice session.

The app acts as its own presenter: the controller calls back into it to show
a question or the summary, and asks it for the currently pressed choice
before every move.
"""

from __future__ import annotations

import logging
from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Button, Static

from ..controller import QuizController
from ..loader import AnswerKeySource, QuestionBankError, fetch_question_bank
from ..models import AnswerKey, Question, QuestionBank
from ..scoring import Summary, summary_message
from .console import NO_OPTIONS_PLACEHOLDER

logger = logging.getLogger(__name__)


class PracticeApp(App):
    """Textual practice session with one button per choice.

    Pass ``bank`` (and optionally ``answer_key``) to skip loading; otherwise
    the sources at ``questions_path`` and ``answers_path`` load in workers
    after mount and Start stays disabled until the bank is ready.
    """

    CSS = """
#choices Button.selected { background: $accent; color: black; }
#nav Button { margin: 0 1; }
#notice { color: $warning; }
"""
    BINDINGS = [
        ("n", "next", "Next"),
        ("p", "previous", "Prev"),
        ("r", "restart", "Restart"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        questions_path: Path | None = None,
        answers_path: Path | None = None,
        *,
        bank: QuestionBank | None = None,
        answer_key: AnswerKey | None = None,
    ) -> None:
        super().__init__()
        self._questions_path = questions_path
        self._answers_path = answers_path
        self.key_source = AnswerKeySource(answer_key)
        self.controller: QuizController | None = None
        self.question: Question | None = None
        self.position = 0
        self.total = 0
        self.selection: str | None = None
        self.summary: Summary | None = None
        self.notice = "Loading questions..."
        if bank is not None:
            self._attach_bank(bank)

    def compose(self) -> ComposeResult:
        yield Static(self.notice, id="notice")
        yield Container(id="stage")
        with Horizontal(id="nav"):
            yield Button("Start", id="start", disabled=self.controller is None)
            yield Button("Prev", id="previous", disabled=True)
            yield Button("Next", id="next", disabled=True)
            yield Button("Restart", id="restart", disabled=True)

    async def on_mount(self) -> None:
        if self.controller is None and self._questions_path is not None:
            self.run_worker(self._load_bank(self._questions_path))
        if self.key_source.status == "pending":
            self.run_worker(self.key_source.load(self._answers_path))

    async def _load_bank(self, path: Path) -> None:
        try:
            bank = await fetch_question_bank(path)
        except QuestionBankError as exc:
            self.render_notice(f"Failed to load questions: {exc}")
            return
        self._attach_bank(bank)
        self.render_notice(f"{len(bank)} questions loaded. Press Start.")
        self._refresh_nav()

    def _attach_bank(self, bank: QuestionBank) -> None:
        self.controller = QuizController(
            bank, self, answer_key=self.key_source
        )
        self.total = len(bank)
        self.notice = f"{len(bank)} questions loaded. Press Start."

    # Presenter protocol

    def get_current_selection(self) -> str | None:
        return self.selection

    def render_question(
        self,
        question: Question,
        position: int,
        total: int,
        selected: str | None,
    ) -> None:
        self.question = question
        self.position = position
        self.total = total
        self.selection = selected
        self.summary = None
        self._mount_stage(self._question_widgets())
        self._refresh_nav()

    def render_summary(self, summary: Summary) -> None:
        self.question = None
        self.selection = None
        self.summary = summary
        self._mount_stage(self._summary_widgets())
        self._refresh_nav()

    def render_notice(self, message: str) -> None:
        self.notice = message
        if not self.is_running:
            return
        try:
            self.query_one("#notice", Static).update(message)
        except NoMatches:
            pass

    # Actions

    def select_choice(self, index: int) -> str | None:
        if self.question is None:
            return None
        if not 0 <= index < len(self.question.answers):
            return None
        self.selection = self.question.answers[index].label
        self._mount_stage(self._question_widgets())
        return self.selection

    def action_start(self) -> None:
        self._run_controller_action("start")

    def action_next(self) -> None:
        self._run_controller_action("next")

    def action_previous(self) -> None:
        self._run_controller_action("previous")

    def action_restart(self) -> None:
        self._run_controller_action("restart")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id.startswith("choice-"):
            self.select_choice(int(button_id.split("-", 1)[1]))
        elif button_id in {"start", "next", "previous", "restart"}:
            self._run_controller_action(button_id)

    def _run_controller_action(self, action: str) -> None:
        if self.controller is None:
            logger.debug(
                "Action before questions loaded", extra={"action": action}
            )
            return
        self.controller.dispatch(action)

    # Helpers

    def progress_text(self) -> str:
        return f"Question {self.position + 1} of {self.total}"

    def next_label(self) -> str:
        return "Finish" if self.position >= self.total - 1 else "Next"

    def _question_widgets(self) -> list:
        question = self.question
        widgets: list = [
            Static(self.progress_text(), id="progress"),
            Static(question.question, id="question-text"),
        ]
        if not question.answers:
            widgets.append(Static(NO_OPTIONS_PLACEHOLDER, id="no-options"))
            return widgets
        buttons = []
        for idx, choice in enumerate(question.answers):
            button = Button(
                f"{choice.label}) {choice.text}", id=f"choice-{idx}"
            )
            if choice.label == self.selection:
                button.add_class("selected")
            buttons.append(button)
        widgets.append(Vertical(*buttons, id="choices"))
        return widgets

    def _summary_widgets(self) -> list:
        summary = self.summary
        widgets: list = [Static(summary_message(summary), id="summary-text")]
        if summary.wrong_entries:
            lines = [
                f"{entry.id}: Your answer {entry.user_answer}, "
                f"correct answer {entry.correct_answer}"
                for entry in summary.wrong_entries
            ]
            widgets.append(Static("\n".join(lines), id="incorrect-list"))
        return widgets

    def _mount_stage(self, widgets: list) -> None:
        if not self.is_running:
            return
        try:
            stage = self.query_one("#stage", Container)
        except NoMatches:
            return
        stage.remove_children()
        stage.mount(Vertical(*widgets))

    def _refresh_nav(self) -> None:
        if not self.is_running:
            return
        phase = self.controller.phase if self.controller else "not_started"
        try:
            self.query_one("#start", Button).disabled = (
                self.controller is None or phase != "not_started"
            )
            previous = self.query_one("#previous", Button)
            previous.disabled = phase != "in_progress" or self.position == 0
            next_button = self.query_one("#next", Button)
            next_button.disabled = phase != "in_progress"
            next_button.label = self.next_label()
            restart = self.query_one("#restart", Button)
            restart.disabled = phase == "not_started"
        except NoMatches:
            pass
