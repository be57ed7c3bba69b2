from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

ROOT = TESTS_DIR.parent
SRC = str(ROOT / "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from fixtures import RecordingPresenter, SourceWriter  # noqa: E402
from fixtures.sources import SAMPLE_KEY, SAMPLE_QUESTIONS  # noqa: E402

from exam_practice.quiz.loader import (  # noqa: E402
    parse_answer_key,
    parse_questions,
)
from exam_practice.quiz.models import AnswerKey, QuestionBank  # noqa: E402


@pytest.fixture
def bank() -> QuestionBank:
    return parse_questions(SAMPLE_QUESTIONS)


@pytest.fixture
def answer_key() -> AnswerKey:
    return parse_answer_key(SAMPLE_KEY)


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def sources(tmp_path: Path) -> SourceWriter:
    return SourceWriter(tmp_path)


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("exam_practice")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
