"""
SceneVault logging.

Handlers live on the root logger only; modules use get_logger(__name__)
and propagate. One file per run under logs/<command>/, plus a rich
console handler unless quiet.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from scenevault.env import get_logging_env, module_logs_dir
from . import state as _state
from .console import build_console_handler
from .file import RedactSecretsFilter, build_file_handler, repoint_file_handler
from .retention import enforce_retention

_NOISY_LOGGERS = {
    "googleapiclient.discovery_cache": logging.ERROR,
    "googleapiclient": logging.WARNING,
    "google": logging.WARNING,
    "urllib3": logging.WARNING,
}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def register_secret(secret: str | None) -> None:
    """Mask this value in every log record emitted from now on."""
    if secret and len(secret) >= 8:
        _state.SECRETS.add(secret)


def redact(secret: str | None) -> str:
    """Short, log-safe preview of a credential."""
    if not secret:
        return "(unset)"
    if len(secret) <= 8:
        return "***"
    return f"{secret[:4]}...{secret[-4:]}"


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def _run_id() -> str:
    run_id = os.environ.get("SCENEVAULT_RUN_ID")
    if not run_id:
        run_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        os.environ["SCENEVAULT_RUN_ID"] = run_id
    return run_id


def run_logfile(command: str | None = None) -> Path:
    command = command or os.environ.get("SCENEVAULT_COMMAND") or "bootstrap"
    return module_logs_dir(command) / f"{command}-{_run_id()}.log"


def init_logging() -> None:
    """
    Initialize logging for the entire process.

    Safe to call more than once: a second call for the same run only
    adjusts the level, a call for a new command repoints the file handler.
    """
    env = get_logging_env()
    for name, level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    root = logging.getLogger()
    logfile = run_logfile()
    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)

    if _state.INITIALIZED and _state.LOG_FILE_PATH == logfile:
        root.setLevel(root_level)
        return

    removed = enforce_retention(logfile.parent, int(env.log_retention), protect=logfile)

    file_handler = next(
        (h for h in root.handlers if isinstance(h, logging.FileHandler)), None
    )
    root.handlers.clear()
    root.setLevel(root_level)

    if file_handler is not None:
        repoint_file_handler(file_handler, logfile)
    else:
        file_handler = build_file_handler(logfile)
    root.addHandler(file_handler)

    if not env.quiet:
        console = build_console_handler(root_level)
        console.addFilter(RedactSecretsFilter())
        root.addHandler(console)

    _state.INITIALIZED = True
    _state.RUN_ID = _run_id()
    _state.LOG_DIR = logfile.parent
    _state.LOG_FILE_PATH = logfile

    if removed:
        get_logger(__name__).debug(f"Pruned {removed} old log file(s) in {logfile.parent}")


__all__ = [
    "get_logger",
    "init_logging",
    "register_secret",
    "redact",
    "run_logfile",
]
