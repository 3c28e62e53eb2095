from __future__ import annotations

import argparse

from scenevault.cli.common import add_help_command, dispatch_subparser_help
from scenevault.env import get_env
from scenevault.logger import redact
from scenevault.logger.console import UI_CONSOLE
from scenevault.settings import LocalSettingsStore, Settings


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    env = subparsers.add_parser("env", help="Environment utilities")
    sub = env.add_subparsers(dest="env_cmd", required=True)
    add_help_command(sub, env, "env")

    dump_p = sub.add_parser("dump", help="Show resolved runtime environment")
    dump_p.set_defaults(action="dump")


def handle_env(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    if args.action == "dump":
        return handle_env_dump()

    raise RuntimeError(f"Unknown env action: {args.action}")


def handle_env_dump() -> int:
    env = get_env()
    data = env.as_dict()
    data["Storage"]["youtube_api_key"] = redact(
        Settings(LocalSettingsStore(env.settings_path)).api_key
    )

    UI_CONSOLE.print("\n[bold]Runtime Environment[/bold]")
    UI_CONSOLE.print("─" * 50)

    for section, values in data.items():
        UI_CONSOLE.print(f"\n[bold cyan]{section}[/bold cyan]")
        for key, value in values.items():
            UI_CONSOLE.print(f"  {key:<20} = {value}", markup=False, highlight=False)

    UI_CONSOLE.print()
    return 0
