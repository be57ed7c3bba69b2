from .console import (
    ConsolePresenter,
    ConsoleSessionResult,
    parse_console_command,
    run_console_session,
)

__all__ = [
    "ConsolePresenter",
    "ConsoleSessionResult",
    "parse_console_command",
    "run_console_session",
]
