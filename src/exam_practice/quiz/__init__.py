from ._main import build_arg_parser, main
from .controller import Presenter, QuizController
from .loader import (
    AnswerKeyError,
    AnswerKeySource,
    QuestionBankError,
    load_answer_key,
    load_question_bank,
    load_resources,
)
from .models import AnswerKey, Choice, Question, QuestionBank
from .scoring import Summary, WrongEntry, score_session, summary_message
from .session import NavigationEngine, NavigationResult, SessionState

__all__ = [
    "build_arg_parser",
    "main",
    "Presenter",
    "QuizController",
    "AnswerKeyError",
    "AnswerKeySource",
    "QuestionBankError",
    "load_answer_key",
    "load_question_bank",
    "load_resources",
    "AnswerKey",
    "Choice",
    "Question",
    "QuestionBank",
    "Summary",
    "WrongEntry",
    "score_session",
    "summary_message",
    "NavigationEngine",
    "NavigationResult",
    "SessionState",
]
