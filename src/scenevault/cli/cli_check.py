from __future__ import annotations

import argparse
import signal
from contextlib import contextmanager
from typing import Iterator

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.text import Text

from scenevault.cli.common import (
    EXIT_CREDENTIAL,
    add_help_command,
    dispatch_subparser_help,
    get_context,
)
from scenevault.logger import get_logger
from scenevault.logger.console import UI_CONSOLE
from scenevault.pipeline import CancelToken
from scenevault.stages.reconcile import ReconcileOutcome, ReconcileStatus

logger = get_logger(__name__)


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_check_parser(subparsers: argparse._SubParsersAction) -> None:
    check = subparsers.add_parser("check", help="Re-check YouTube video availability")
    sub = check.add_subparsers(dest="check_cmd", required=True)
    add_help_command(sub, check, "check")

    all_p = sub.add_parser("all", help="Check every YouTube scene")
    all_p.add_argument(
        "--no-progress", action="store_true", help="Do not draw a progress bar"
    )
    all_p.set_defaults(action="all")

    one = sub.add_parser("scene", help="Check a single scene by id")
    one.add_argument("scene_id")
    one.set_defaults(action="scene")


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


@contextmanager
def cancel_on_interrupt(token: CancelToken) -> Iterator[None]:
    """First Ctrl-C sets the cancel token instead of killing the run."""

    def _handler(signum, frame) -> None:
        logger.warning("Interrupted; finishing the current write and stopping")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _print_outcome(outcome: ReconcileOutcome) -> int:
    if outcome.status is ReconcileStatus.NO_VIDEOS_FOUND:
        UI_CONSOLE.print("No YouTube videos found.")
        return 0

    if outcome.status is ReconcileStatus.MISSING_API_KEY:
        UI_CONSOLE.print(
            Text("Please add your YouTube API key in Settings first.", style="red")
        )
        UI_CONSOLE.print(
            "[dim]Set your key with:[/dim] scenevault settings set-key <API_KEY>"
        )
        return EXIT_CREDENTIAL

    msg = Text()
    if outcome.cancelled:
        msg.append(f"Cancelled after {outcome.checked} of {outcome.total}. ", style="yellow")
    else:
        msg.append(f"Checked {outcome.checked} video(s). ", style="bold")
    msg.append(f"{outcome.available} available", style="green")
    msg.append(", ")
    msg.append(f"{outcome.unavailable} unavailable", style="red")
    UI_CONSOLE.print(msg)
    return 0


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_check(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    ctx = get_context()

    if args.action == "scene":
        return _print_outcome(ctx.reconciler.check_scene(args.scene_id))

    if args.action == "all":
        token = CancelToken()
        show_bar = not args.no_progress and ctx.env.interactive

        with cancel_on_interrupt(token):
            if not show_bar:
                outcome = ctx.reconciler.check_all(cancel=token)
                return _print_outcome(outcome)

            with Progress(
                TextColumn("Checking videos"),
                BarColumn(),
                MofNCompleteColumn(),
                console=UI_CONSOLE,
                transient=True,
            ) as progress:
                task = progress.add_task("check", total=None)

                def _on_progress(current: int, total: int) -> None:
                    progress.update(task, completed=current, total=total)

                outcome = ctx.reconciler.check_all(progress=_on_progress, cancel=token)

        return _print_outcome(outcome)

    raise RuntimeError(f"Unknown check action: {args.action}")
