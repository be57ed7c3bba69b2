from __future__ import annotations

from dataclasses import dataclass, field

from exam_practice.quiz.models import Question
from exam_practice.quiz.scoring import Summary


@dataclass
class RecordingPresenter:
    """Presenter double that records render calls.

    ``selection`` plays the part of whatever option the user has highlighted.
    """

    selection: str | None = None
    calls: list[tuple[str, object]] = field(default_factory=list)
    selection_queries: int = 0

    def render_question(
        self,
        question: Question,
        position: int,
        total: int,
        selected: str | None,
    ) -> None:
        self.calls.append(
            ("question", (question.id, position, total, selected))
        )
        self.selection = selected

    def render_summary(self, summary: Summary) -> None:
        self.calls.append(("summary", summary))

    def render_notice(self, message: str) -> None:
        self.calls.append(("notice", message))

    def get_current_selection(self) -> str | None:
        self.selection_queries += 1
        return self.selection

    @property
    def last(self) -> tuple[str, object]:
        return self.calls[-1]
