"""Core shared helpers for exam_practice."""

from __future__ import annotations

from .logging import JsonLogFormatter, configure_logger

__all__ = [
    "configure_logger",
    "JsonLogFormatter",
]
