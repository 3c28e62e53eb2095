from __future__ import annotations

import argparse
from datetime import datetime

from rich.text import Text

from scenevault.cli.common import (
    add_help_command,
    dispatch_subparser_help,
    get_context,
    print_table,
)
from scenevault.logger import get_logger, redact
from scenevault.logger.console import UI_CONSOLE
from scenevault.providers.youtube import validate_api_key
from scenevault.settings import VanishedVideoPolicy

logger = get_logger(__name__)


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_settings_parser(subparsers: argparse._SubParsersAction) -> None:
    settings = subparsers.add_parser("settings", help="API key and local preferences")
    sub = settings.add_subparsers(dest="settings_cmd", required=True)
    add_help_command(sub, settings, "settings")

    show = sub.add_parser("show", help="Show stored settings")
    show.set_defaults(action="show")

    key = sub.add_parser("set-key", help="Store a YouTube Data API key")
    key.add_argument("api_key")
    key.add_argument(
        "--no-validate",
        action="store_true",
        help="Store without a test call to the YouTube API",
    )
    key.set_defaults(action="set-key")

    clear = sub.add_parser("clear-key", help="Remove the stored API key")
    clear.set_defaults(action="clear-key")

    pref = sub.add_parser(
        "pref", help="What a refresh does with videos removed from a playlist"
    )
    pref.add_argument("policy", choices=[p.value for p in VanishedVideoPolicy])
    pref.set_defaults(action="pref")


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def _format_backup(ms: int | None) -> str:
    if ms is None:
        return "never"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def handle_settings(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    ctx = get_context()
    settings = ctx.settings

    if args.action == "show":
        state = settings.load_filter_state()
        print_table(
            ["Setting", "Value"],
            [
                ["API key", redact(settings.api_key)],
                ["Removed playlist videos", settings.vanished_policy.value],
                ["Last backup", _format_backup(settings.last_backup_ms)],
                ["Search", state.search_query or "-"],
                ["Platform filter", state.selected_platform],
                ["Category filter", state.selected_category],
                ["Status filter", state.selected_status],
                ["Sort", state.sort_by.value],
            ],
        )
        return 0

    if args.action == "set-key":
        if not args.no_validate:
            validate_api_key(args.api_key)
        settings.set_api_key(args.api_key)
        logger.info(f"API key stored ({redact(settings.api_key)})")
        UI_CONSOLE.print(Text("API key saved.", style="green"))
        return 0

    if args.action == "clear-key":
        settings.clear_api_key()
        UI_CONSOLE.print(Text("API key removed.", style="green"))
        return 0

    if args.action == "pref":
        settings.set_vanished_policy(args.policy)
        UI_CONSOLE.print(
            Text(f"Removed playlist videos will be: {args.policy}", style="green")
        )
        return 0

    raise RuntimeError(f"Unknown settings action: {args.action}")
