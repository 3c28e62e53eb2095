from __future__ import annotations

import argparse
import sys
from typing import Optional

from scenevault.bootstrap import bootstrap_base_env, bootstrap_run_context
from scenevault.env import STORE_KINDS, ConfigError


def _dispatch_help(argv: list[str]) -> int:
    # Support:
    #   scenevault help
    #   scenevault help playlists import
    #   scenevault playlists help import
    if argv and argv[0] == "help":
        argv = argv[1:]

    if not argv:
        build_parser().print_help()
        return 0

    try:
        build_parser().parse_args(argv + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="scenevault",
        description="Track video scenes and sync YouTube playlists.",
    )
    p.add_argument("--verbose", action="store_true", help="Verbose console output")
    p.add_argument("--quiet", action="store_true", help="Suppress console logging")
    p.add_argument("--store", choices=STORE_KINDS, help="Row store backend")
    p.add_argument("--user", dest="user_id", help="Owner id for all records")

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from scenevault.cli.cli_check import build_check_parser
    from scenevault.cli.cli_env import build_env_parser
    from scenevault.cli.cli_playlists import build_playlists_parser
    from scenevault.cli.cli_scenes import build_scenes_parser
    from scenevault.cli.cli_settings import build_settings_parser
    from scenevault.cli.cli_transfer import build_export_parser, build_import_parser

    build_playlists_parser(sub)
    build_check_parser(sub)
    build_scenes_parser(sub)
    build_export_parser(sub)
    build_import_parser(sub)
    build_settings_parser(sub)
    build_env_parser(sub)

    return p


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "playlists":
        from scenevault.cli.cli_playlists import handle_playlists

        return handle_playlists(args)

    if args.command == "check":
        from scenevault.cli.cli_check import handle_check

        return handle_check(args)

    if args.command == "scenes":
        from scenevault.cli.cli_scenes import handle_scenes

        return handle_scenes(args)

    if args.command == "export":
        from scenevault.cli.cli_transfer import handle_export

        return handle_export(args)

    if args.command == "import":
        from scenevault.cli.cli_transfer import handle_import

        return handle_import(args)

    if args.command == "settings":
        from scenevault.cli.cli_settings import handle_settings

        return handle_settings(args)

    if args.command == "env":
        from scenevault.cli.cli_env import handle_env

        return handle_env(args)

    raise RuntimeError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # Load .env and base environment early
    bootstrap_base_env()

    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "_help", False):
        return _dispatch_help(list(args.path))

    # Stamp run context before logging so the log file lands in logs/<command>/
    bootstrap_run_context(
        command=args.command,
        verbose=True if args.verbose else None,
        quiet=True if args.quiet else None,
        store=args.store,
        user_id=args.user_id,
    )

    from scenevault.cli.common import report_error
    from scenevault.errors import SceneVaultError
    from scenevault.logger import get_logger, init_logging

    init_logging()
    log = get_logger(__name__)
    log.debug(f"Command: {args.command}")

    try:
        return _dispatch(args)
    except (SceneVaultError, ConfigError) as e:
        # The user sees report_error output; the run log gets the record.
        log.error(
            f"{args.command} failed: {type(e).__name__}: {e}",
            extra={"file_only": True},
        )
        return report_error(e)


if __name__ == "__main__":
    raise SystemExit(main())
