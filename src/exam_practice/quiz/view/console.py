"""Rich-powered console presenter and command loop.

The loop reads one command per prompt, turns it into a controller action and
lets :class:`ConsolePresenter` render the result. Choosing an option only
updates the presenter's pending selection; it is recorded when the user
moves to another question.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..controller import QuizController
from ..loader import AnswerKeySource
from ..models import Question, QuestionBank
from ..scoring import Summary, summary_message

InputProvider = Callable[[], str]
ExitAction = Literal["finished", "quit", "empty"]

NO_OPTIONS_PLACEHOLDER = "(No multiple-choice options available)"


@dataclass(frozen=True)
class ConsoleCommand:
    """Normalized user command parsed from console input."""

    type: Literal["next", "previous", "restart", "quit", "select"]
    label: str | None = None


@dataclass(frozen=True)
class ConsoleSessionResult:
    """Return value from ``run_console_session``."""

    summary: Summary
    exit_action: ExitAction


def parse_console_command(raw: str | None) -> ConsoleCommand | None:
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next"}:
        return ConsoleCommand("next")
    if lowered in {"p", "prev", "previous"}:
        return ConsoleCommand("previous")
    if lowered in {"r", "restart"}:
        return ConsoleCommand("restart")
    if lowered in {"q", "quit", "exit"}:
        return ConsoleCommand("quit")
    return ConsoleCommand("select", text)


class ConsolePresenter:
    """Render questions and summaries to a Rich console."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self.question: Question | None = None
        self.selection: str | None = None

    def get_current_selection(self) -> str | None:
        return self.selection

    def label_for(self, raw_label: str) -> str | None:
        """Return the option label matching ``raw_label``, ignoring case."""

        if self.question is None:
            return None
        wanted = raw_label.strip().lower()
        for choice in self.question.answers:
            if choice.label.lower() == wanted:
                return choice.label
        return None

    def select(self, raw_label: str) -> str | None:
        label = self.label_for(raw_label)
        if label is not None:
            self.selection = label
        return label

    def render_question(
        self,
        question: Question,
        position: int,
        total: int,
        selected: str | None,
    ) -> None:
        self.question = question
        self.selection = selected
        header = Text.assemble(
            (f"Question {position + 1}", "bold cyan"),
            (f" / {total}", "dim"),
        )
        self.console.print()
        self.console.rule(header)
        self.console.print(Text(question.question, style="bold"))

        if not question.answers:
            self.console.print(Text(NO_OPTIONS_PLACEHOLDER, style="dim"))
        else:
            table = Table(show_header=False, box=box.SIMPLE, expand=True)
            table.add_column("Label", justify="center", style="cyan")
            table.add_column("Choice")
            for choice in question.answers:
                chosen = choice.label == selected
                row = Text("• " if chosen else "  ")
                row += Text(
                    choice.text, style="bold green" if chosen else ""
                )
                table.add_row(choice.label, row)
            self.console.print(table)

        next_hint = "n (finish)" if position == total - 1 else "n (next)"
        hints = [next_hint, "r (restart)", "q (quit)"]
        if position > 0:
            hints.insert(1, "p (prev)")
        if question.answers:
            labels = ", ".join(choice.label for choice in question.answers)
            hints.insert(0, f"choices [{labels}]")
        self.console.print(Text("Commands: " + ", ".join(hints), style="dim"))

    def render_summary(self, summary: Summary) -> None:
        self.question = None
        self.selection = None
        self.console.print()
        self.console.rule(Text("Practice Summary", style="bold magenta"))
        self.console.print(summary_message(summary))

        overview = Table(
            show_header=False, box=box.MINIMAL_DOUBLE_HEAD, expand=False
        )
        overview.add_column("Metric", style="bold")
        overview.add_column("Value", justify="right")
        overview.add_row("Total questions", str(summary.total_questions))
        overview.add_row("Answered", str(summary.answered_count))
        if summary.scoring_available:
            overview.add_row("Correct", str(summary.correct_count))
        if summary.score_percent is not None:
            overview.add_row("Score", f"{summary.score_percent:.1f}%")
        self.console.print(overview)

        if summary.wrong_entries:
            wrong = Table(title="Incorrect answers", box=box.SIMPLE)
            wrong.add_column("Question")
            wrong.add_column("Your answer")
            wrong.add_column("Correct answer")
            for entry in summary.wrong_entries:
                wrong.add_row(
                    entry.id, entry.user_answer, entry.correct_answer
                )
            self.console.print(wrong)
        self.console.print(
            Text("Commands: r (restart), q (quit)", style="dim")
        )

    def render_notice(self, message: str) -> None:
        self.console.print(
            Panel(message, title="Exam Practice", border_style="yellow")
        )


def run_console_session(
    bank: QuestionBank,
    answer_key: AnswerKeySource,
    console: Console,
    input_provider: InputProvider,
) -> ConsoleSessionResult:
    """Drive a practice session from console input until quit or EOF."""

    presenter = ConsolePresenter(console)
    controller = QuizController(bank, presenter, answer_key=answer_key)
    if controller.start() != "in_progress":
        return ConsoleSessionResult(controller.summary(), "empty")

    while True:
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            break
        command = parse_console_command(raw)
        # An option label shadows the command word it spells.
        if command is not None and presenter.label_for(raw) is not None:
            command = ConsoleCommand("select", raw.strip())
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            break
        if command.type == "select":
            _select(presenter, controller, command.label or "", console)
            continue
        controller.dispatch(command.type)

    exit_action: ExitAction = (
        "finished" if controller.phase == "finished" else "quit"
    )
    if exit_action == "quit":
        console.print("\n[bold yellow]Ending session without finishing.[/]")
    return ConsoleSessionResult(controller.summary(), exit_action)


def _select(
    presenter: ConsolePresenter,
    controller: QuizController,
    label: str,
    console: Console,
) -> None:
    if controller.phase != "in_progress":
        console.print("[red]Restart the session to answer again.[/]")
        return
    chosen = presenter.select(label)
    if chosen is None:
        console.print(
            f"[red]'{label}' is not a valid choice for this question.[/red]"
        )
        return
    console.print(f"Selected [bold]{chosen}[/].")
