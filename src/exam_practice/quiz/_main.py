import argparse
import asyncio
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..core import configure_logger
from .config import (
    CONFIG_FILENAME,
    ConfigError,
    ConfigOverrides,
    PracticeConfig,
    load_config,
    write_template,
)
from .loader import (
    AnswerKeySource,
    QuestionBankError,
    QuizResources,
    fetch_question_bank,
    load_resources,
)
from .view.console import run_console_session

LOGGER_NAME = "exam_practice"


def _overrides_from_args(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        questions_path=getattr(args, "questions", None),
        answers_path=getattr(args, "answers", None),
        interface=getattr(args, "ui", None),
        log_level=getattr(args, "log_level", None),
        verbose=True if getattr(args, "verbose", False) else None,
    )


def _load(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> PracticeConfig:
    try:
        result = load_config(
            config_path=args.config,
            overrides=_overrides_from_args(args),
        )
    except ConfigError as exc:
        parser.error(str(exc))
    config = result.config
    logger, _ = configure_logger(
        LOGGER_NAME,
        log_dir=config.log_dir,
        level=config.log_level,
        verbose=config.verbose,
    )
    logger.debug(
        "exam-practice CLI invoked",
        extra={"command": args.command, "config_path": result.config_path},
    )
    return config


async def _load_resources(
    config: PracticeConfig, console: Console
) -> Optional[QuizResources]:
    try:
        return await load_resources(config.questions_path, config.answers_path)
    except QuestionBankError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return None


def _cmd_init(args: argparse.Namespace) -> int:
    path = Path(args.path).expanduser()
    try:
        written = write_template(path, overwrite=bool(args.force))
    except ConfigError as exc:
        print(f"{exc}. Use --force to replace it.")
        return 1
    print(f"Created template {written.resolve()}")
    return 0


def _cmd_start(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> int:
    config = _load(parser, args)
    console = Console()

    if config.interface == "tui":
        from .view.tui import PracticeApp

        PracticeApp(config.questions_path, config.answers_path).run()
        return 0

    try:
        bank = asyncio.run(fetch_question_bank(config.questions_path))
    except QuestionBankError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 1
    if bank.is_empty:
        console.print("Question bank is empty.")
        return 1

    key_source = AnswerKeySource()
    key_thread = key_source.load_in_background(config.answers_path)
    run_console_session(
        bank,
        key_source,
        console,
        lambda: console.input("[bold]> [/]"),
    )
    key_thread.join()
    return 0


def _cmd_check(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> int:
    config = _load(parser, args)
    return asyncio.run(_check(config, Console()))


async def _check(config: PracticeConfig, console: Console) -> int:
    resources = await _load_resources(config, console)
    if resources is None:
        return 1
    bank = resources.bank
    key = await resources.wait_for_key()
    no_options = sum(1 for question in bank if not question.answers)
    console.print(f"Questions: {len(bank)} ({no_options} without options)")
    if key.is_empty:
        console.print(
            f"Answer key: unavailable ({resources.answer_key.status})"
        )
        return 0
    ids = {question.id for question in bank}
    unkeyed = [question.id for question in bank if question.id not in key]
    orphaned = sorted(qid for qid in key.labels if qid not in ids)
    console.print(f"Answer key: {len(key)} entries")
    if unkeyed:
        console.print(f"Questions without an answer: {', '.join(unkeyed)}")
    if orphaned:
        console.print(f"Answers for unknown questions: {', '.join(orphaned)}")
    return 0


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="Path to config TOML")
    parser.add_argument("--questions", type=Path, help="Question bank file")
    parser.add_argument("--answers", type=Path, help="Answer key file")
    parser.add_argument("--log-level", dest="log_level")
    parser.add_argument("--verbose", action="store_true")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="exam-practice",
        description="Multiple-choice exam practice sessions",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser("init", help="Create a config template")
    sp_init.add_argument("--path", default=CONFIG_FILENAME)
    sp_init.add_argument("--force", action="store_true")

    sp_start = sub.add_parser("start", help="Start a practice session")
    _add_source_options(sp_start)
    sp_start.add_argument("--ui", choices=["console", "tui"])

    sp_check = sub.add_parser(
        "check", help="Load the sources and report what was found"
    )
    _add_source_options(sp_check)
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "init":
        code = _cmd_init(args)
    elif args.command == "start":
        code = _cmd_start(parser, args)
    elif args.command == "check":
        code = _cmd_check(parser, args)
    else:  # pragma: no cover - fallback guard
        parser.print_help()
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":  # pragma: no cover
    main()
