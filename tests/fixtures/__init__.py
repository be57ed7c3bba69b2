"""Reusable test doubles for the exam_practice suite."""

from .presenter import RecordingPresenter
from .sources import SourceWriter

__all__ = ["RecordingPresenter", "SourceWriter"]
