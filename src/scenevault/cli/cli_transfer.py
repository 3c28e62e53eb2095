from __future__ import annotations

import argparse
from pathlib import Path

from rich.text import Text

from scenevault.cli.common import get_context
from scenevault.errors import ValidationError
from scenevault.logger.console import UI_CONSOLE
from scenevault.stages.transfer import (
    EXPORT_FORMATS,
    ExportScope,
    ImportMode,
    export_scenes,
    import_file,
)


# ------------------------------------------------------------
# Parsers
# ------------------------------------------------------------


def build_export_parser(subparsers: argparse._SubParsersAction) -> None:
    exp = subparsers.add_parser("export", help="Export scenes to json, csv or html")
    exp.add_argument("--format", dest="fmt", default="json", choices=EXPORT_FORMATS)
    exp.add_argument(
        "--scope",
        default=ExportScope.ALL.value,
        choices=[s.value for s in ExportScope],
        help="all scenes, the saved filter view, or --ids (default: all)",
    )
    exp.add_argument("--ids", nargs="+", default=[], help="Scene ids (scope=selected)")
    exp.add_argument("--out-dir", help="Output directory (default: <data>/exports)")


def build_import_parser(subparsers: argparse._SubParsersAction) -> None:
    imp = subparsers.add_parser("import", help="Import scenes from a JSON export")
    imp.add_argument("path", help="JSON export file")
    imp.add_argument(
        "--mode",
        default=ImportMode.MERGE.value,
        choices=[m.value for m in ImportMode],
        help="merge adds to the library; replace deletes every scene first",
    )


# ------------------------------------------------------------
# Handlers
# ------------------------------------------------------------


def handle_export(args: argparse.Namespace) -> int:
    ctx = get_context()
    scope = ExportScope(args.scope)

    if scope is ExportScope.FILTERED:
        scenes = ctx.library.filtered(ctx.settings.load_filter_state())
    elif scope is ExportScope.SELECTED:
        if not args.ids:
            raise ValidationError("No scenes selected (use --ids).")
        wanted = set(args.ids)
        scenes = [s for s in ctx.library.list_scenes() if s.id in wanted]
    else:
        scenes = ctx.library.list_scenes()

    out_dir = Path(args.out_dir) if args.out_dir else None
    path = export_scenes(scenes, args.fmt, out_dir, scope=scope, settings=ctx.settings)
    UI_CONSOLE.print(Text(f"Exported {len(scenes)} scene(s) to {path}", style="green"))
    return 0


def handle_import(args: argparse.Namespace) -> int:
    ctx = get_context()
    count = import_file(ctx.store, ctx.user_id, Path(args.path), args.mode)
    UI_CONSOLE.print(
        Text(f"Successfully imported {count} scene{'s' if count != 1 else ''}", style="green")
    )
    return 0
