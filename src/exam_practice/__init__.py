"""Multiple-choice exam practice runner."""

__version__ = "0.1.0"
