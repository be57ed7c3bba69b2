"""Configuration loader for practice sessions.

Precedence is CLI overrides, then environment, then the TOML file, then the
built-in defaults. Relative source paths in the file resolve against the
file's own directory.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Mapping, MutableMapping, Optional

CONFIG_FILENAME = "exam-practice.toml"
CONFIG_ENV = "EXAM_PRACTICE_CONFIG"
LOG_DIR_ENV = "EXAM_PRACTICE_LOG_DIR"

Interface = Literal["console", "tui"]
_INTERFACES = ("console", "tui")

CONFIG_TEMPLATE = """\
# Exam practice configuration

[sources]
# JSON array (or .jsonl) of {id, question, answers: [{label, text}]}
questions = "questions.json"
# JSON object of {question_id: label}; leave empty to practise unscored
answers = "answers.json"

[session]
# "console" (Rich prompts) or "tui" (Textual app)
interface = "console"

[logging]
level = "INFO"
dir = ".exam-practice/logs"
verbose = false
"""


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class PracticeConfig:
    """Fully resolved settings for one run."""

    questions_path: Path
    answers_path: Optional[Path]
    interface: Interface
    log_level: str
    log_dir: Path
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    questions_path: Optional[Path] = None
    answers_path: Optional[Path] = None
    interface: Optional[str] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: PracticeConfig
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> LoadResult:
    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env
    base_dir = (cwd or Path.cwd()).resolve()

    explicit = config_path is not None or bool(env_map.get(CONFIG_ENV))
    requested = _resolve_config_path(config_path, env_map, base_dir)

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        _apply_file(table, _read_toml(requested))
        loaded_path = requested
        file_dir = requested.resolve().parent
    elif explicit:
        raise ConfigError(f"Config file not found: {requested}")
    else:
        file_dir = base_dir

    sources = table["sources"]
    questions = overrides.questions_path or _file_path(
        sources["questions"], file_dir
    )
    if questions is None:
        raise ConfigError("[sources].questions must name a file.")

    answers = overrides.answers_path or _file_path(
        sources["answers"], file_dir
    )

    interface = _resolve_interface(
        overrides.interface or table["session"]["interface"]
    )

    logging_table = table["logging"]
    log_dir_value = env_map.get(LOG_DIR_ENV) or logging_table["dir"]
    log_dir = _file_path(log_dir_value, file_dir)
    if log_dir is None:
        raise ConfigError("[logging].dir must name a directory.")

    verbose = (
        overrides.verbose
        if overrides.verbose is not None
        else bool(logging_table["verbose"])
    )

    config = PracticeConfig(
        questions_path=_resolve(questions, base_dir),
        answers_path=_resolve(answers, base_dir) if answers else None,
        interface=interface,
        log_level=str(overrides.log_level or logging_table["level"]).upper(),
        log_dir=log_dir,
        verbose=verbose,
    )
    return LoadResult(config=config, config_path=loaded_path)


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write :data:`CONFIG_TEMPLATE` to ``path``, creating parent dirs."""

    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    return path


# Section -> key -> accepted value type.
_SCHEMA: Mapping[str, Mapping[str, type]] = {
    "sources": {"questions": str, "answers": str},
    "session": {"interface": str},
    "logging": {"level": str, "dir": str, "verbose": bool},
}


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    return {
        "sources": {"questions": "questions.json", "answers": "answers.json"},
        "session": {"interface": "console"},
        "logging": {
            "level": "INFO",
            "dir": ".exam-practice/logs",
            "verbose": False,
        },
    }


def _read_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def _apply_file(
    table: MutableMapping[str, MutableMapping[str, object]],
    document: Mapping[str, Any],
) -> None:
    """Copy ``document`` values into ``table`` after checking the schema."""

    for section, values in document.items():
        keys = _SCHEMA.get(section)
        if keys is None:
            raise ConfigError(f"Unknown configuration key '{section}'.")
        if not isinstance(values, Mapping):
            raise ConfigError(
                f"Expected table for '{section}', "
                f"found {type(values).__name__}."
            )
        for key, value in values.items():
            dotted = f"{section}.{key}"
            expected = keys.get(key)
            if expected is None:
                raise ConfigError(f"Unknown configuration key '{dotted}'.")
            if not isinstance(value, expected):
                raise ConfigError(
                    f"Expected {expected.__name__} for '{dotted}', "
                    f"found {type(value).__name__}."
                )
            table[section][key] = value


def _resolve_config_path(
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    base_dir: Path,
) -> Path:
    if config_path is not None:
        return Path(config_path).expanduser()
    env_candidate = env_map.get(CONFIG_ENV)
    if env_candidate:
        return Path(env_candidate).expanduser()
    return base_dir / CONFIG_FILENAME


def _file_path(value: object, base: Path) -> Optional[Path]:
    if value is None or not str(value).strip():
        return None
    path = Path(str(value).strip()).expanduser()
    return path if path.is_absolute() else base / path


def _resolve(path: Path, base: Path) -> Path:
    path = Path(path).expanduser()
    return path if path.is_absolute() else base / path


def _resolve_interface(value: object) -> Interface:
    normalized = str(value).strip().lower()
    if normalized not in _INTERFACES:
        expected = ", ".join(_INTERFACES)
        raise ConfigError(
            f"Unknown interface '{value}'. Expected one of: {expected}."
        )
    return normalized  # type: ignore[return-value]
