from __future__ import annotations

import argparse
from typing import Iterable, Optional

from rich.table import Table
from rich.text import Text

from scenevault.app import AppContext, build_context
from scenevault.env import ConfigError
from scenevault.errors import (
    CredentialError,
    ParseError,
    QuotaError,
    SceneVaultError,
    ValidationError,
)
from scenevault.logger import get_logger
from scenevault.logger.console import UI_CONSOLE
from scenevault.models import Scene

logger = get_logger(__name__)

# ----------------------------
# Exit codes
# ----------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_QUOTA = 10
EXIT_CREDENTIAL = 12
EXIT_FAILED = 20


def exit_code_for(error: BaseException) -> int:
    if isinstance(error, QuotaError):
        return EXIT_QUOTA
    if isinstance(error, CredentialError):
        return EXIT_CREDENTIAL
    if isinstance(error, (ValidationError, ParseError, ConfigError)):
        return EXIT_USAGE
    return EXIT_FAILED


def report_error(error: BaseException) -> int:
    """Print a short user-facing message and return the exit code."""
    if isinstance(error, SceneVaultError):
        logger.debug(f"{type(error).__name__} code={error.code} detail={error.detail}")
        UI_CONSOLE.print(Text(error.user_message, style="red"))
        if error.settings_hint:
            UI_CONSOLE.print(
                "[dim]Set your key with:[/dim] scenevault settings set-key <API_KEY>"
            )
    else:
        UI_CONSOLE.print(Text(str(error), style="red"))
    return exit_code_for(error)


# ----------------------------
# Help dispatch (subparser-local)
# ----------------------------


def dispatch_subparser_help(
    parser: argparse.ArgumentParser, path: list[str] | None
) -> int:
    """
    Implements consistent `X help [subcmd ...]` behavior for a subtree parser.
    """
    if not path:
        parser.print_help()
        return 0

    try:
        parser.parse_args(path + ["--help"])
    except SystemExit:
        pass
    return 0


def add_help_command(
    sub: argparse._SubParsersAction, parent: argparse.ArgumentParser, name: str
) -> None:
    help_p = sub.add_parser("help", help=f"Show help for {name}")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=parent)


# ----------------------------
# Context
# ----------------------------


def get_context() -> AppContext:
    return build_context()


# ----------------------------
# Output helpers
# ----------------------------


def print_table(
    headers: list[str], rows: Iterable[list[str]], title: Optional[str] = None
) -> None:
    rows = list(rows)
    if not rows:
        UI_CONSOLE.print("(no results)")
        return

    table = Table(title=title, show_lines=False)
    for h in headers:
        table.add_column(h, overflow="fold")
    for row in rows:
        table.add_row(*(str(c) for c in row))
    UI_CONSOLE.print(table)


def print_scenes(scenes: list[Scene], title: Optional[str] = None) -> None:
    print_table(
        ["ID", "Title", "Platform", "Category", "Status", "Channel", "Created"],
        (
            [
                s.id,
                s.title,
                s.platform.value,
                s.category.value,
                s.status.value,
                s.channel_name or "",
                s.created_at[:10],
            ]
            for s in scenes
        ),
        title=title,
    )
