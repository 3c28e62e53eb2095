from __future__ import annotations

import argparse
from dataclasses import replace

from rich.text import Text

from scenevault.cli.common import (
    add_help_command,
    dispatch_subparser_help,
    get_context,
    print_scenes,
    print_table,
)
from scenevault.logger.console import UI_CONSOLE
from scenevault.models import Category, Platform, SortOption, Status
from scenevault.providers.web import fetch_url_metadata
from scenevault.settings import ALL

PLATFORM_CHOICES = [p.value for p in Platform]
CATEGORY_CHOICES = [c.value for c in Category]
STATUS_CHOICES = [s.value for s in Status]
SORT_CHOICES = [s.value for s in SortOption]


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def _add_scene_fields(p: argparse.ArgumentParser) -> None:
    p.add_argument("--url")
    p.add_argument("--thumbnail")
    p.add_argument("--timestamp", help="Free-text timestamp (e.g. 12:34)")
    p.add_argument("--notes")
    p.add_argument("--channel", dest="channel_name")


def build_scenes_parser(subparsers: argparse._SubParsersAction) -> None:
    scenes = subparsers.add_parser("scenes", help="Manage scenes")
    sub = scenes.add_subparsers(dest="scenes_cmd", required=True)
    add_help_command(sub, scenes, "scenes")

    lst = sub.add_parser("list", help="List all scenes (newest first)")
    lst.set_defaults(action="list")

    add = sub.add_parser("add", help="Add a scene manually")
    add.add_argument("title", nargs="?", help="Title (optional with --fetch-metadata)")
    add.add_argument("--platform", default=Platform.YOUTUBE.value, choices=PLATFORM_CHOICES)
    add.add_argument("--category", default=Category.FM.value, choices=CATEGORY_CHOICES)
    add.add_argument(
        "--fetch-metadata",
        action="store_true",
        help="Fill title/thumbnail from the page at --url",
    )
    _add_scene_fields(add)
    add.set_defaults(action="add")

    upd = sub.add_parser("update", help="Update fields of a scene")
    upd.add_argument("scene_id")
    upd.add_argument("--title")
    upd.add_argument("--platform", choices=PLATFORM_CHOICES)
    upd.add_argument("--category", choices=CATEGORY_CHOICES)
    upd.add_argument("--status", choices=STATUS_CHOICES)
    _add_scene_fields(upd)
    upd.set_defaults(action="update")

    dele = sub.add_parser("delete", help="Delete a scene")
    dele.add_argument("scene_id")
    dele.set_defaults(action="delete")

    bdel = sub.add_parser("bulk-delete", help="Delete several scenes")
    bdel.add_argument("ids", nargs="+")
    bdel.set_defaults(action="bulk-delete")

    bcat = sub.add_parser("bulk-category", help="Set the category of several scenes")
    bcat.add_argument("category", choices=CATEGORY_CHOICES)
    bcat.add_argument("ids", nargs="+")
    bcat.set_defaults(action="bulk-category")

    bun = sub.add_parser("bulk-unavailable", help="Mark several scenes unavailable")
    bun.add_argument("ids", nargs="+")
    bun.set_defaults(action="bulk-unavailable")

    stats = sub.add_parser("stats", help="Library statistics")
    stats.set_defaults(action="stats")

    flt = sub.add_parser("filter", help="Filter and sort using the saved filter state")
    flt.add_argument("--search", dest="search_query")
    flt.add_argument("--platform", choices=[ALL] + PLATFORM_CHOICES)
    flt.add_argument("--category", choices=[ALL] + CATEGORY_CHOICES)
    flt.add_argument("--status", choices=[ALL] + STATUS_CHOICES)
    flt.add_argument("--sort", choices=SORT_CHOICES)
    flt.add_argument("--save", action="store_true", help="Persist the resulting filter state")
    flt.add_argument("--reset", action="store_true", help="Start from the default state")
    flt.set_defaults(action="filter")


# ------------------------------------------------------------
# Handlers
# ------------------------------------------------------------


def _fields(args: argparse.Namespace, names: tuple[str, ...]) -> dict:
    return {n: getattr(args, n) for n in names if getattr(args, n, None) is not None}


def _handle_add(args: argparse.Namespace) -> int:
    ctx = get_context()
    title = args.title
    thumbnail = args.thumbnail

    if args.fetch_metadata and args.url:
        meta = fetch_url_metadata(args.url, timeout=ctx.env.request_timeout)
        title = title or meta.title
        thumbnail = thumbnail or meta.image or None

    scene = ctx.library.add_scene(
        title or "",
        args.platform,
        args.category,
        url=args.url,
        thumbnail=thumbnail,
        timestamp=args.timestamp,
        notes=args.notes,
        channel_name=args.channel_name,
    )
    UI_CONSOLE.print(Text(f"Added '{scene.title}' ({scene.id})", style="green"))
    return 0


def _handle_filter(args: argparse.Namespace) -> int:
    ctx = get_context()
    state = ctx.settings.load_filter_state()
    if args.reset:
        state = type(state)()

    changes = _fields(args, ("search_query",))
    if args.platform:
        changes["selected_platform"] = args.platform
    if args.category:
        changes["selected_category"] = args.category
    if args.status:
        changes["selected_status"] = args.status
    if args.sort:
        changes["sort_by"] = SortOption(args.sort)
    state = replace(state, **changes)

    if args.save:
        ctx.settings.save_filter_state(state)

    print_scenes(ctx.library.filtered(state))
    return 0


def handle_scenes(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    if args.action == "add":
        return _handle_add(args)

    if args.action == "filter":
        return _handle_filter(args)

    ctx = get_context()
    library = ctx.library

    if args.action == "list":
        print_scenes(library.list_scenes())
        return 0

    if args.action == "update":
        changes = _fields(
            args,
            (
                "title",
                "platform",
                "category",
                "status",
                "url",
                "thumbnail",
                "timestamp",
                "notes",
                "channel_name",
            ),
        )
        if not changes:
            UI_CONSOLE.print("Nothing to update.")
            return 0
        library.update_scene(args.scene_id, **changes)
        UI_CONSOLE.print(Text("Updated.", style="green"))
        return 0

    if args.action == "delete":
        library.delete_scene(args.scene_id)
        UI_CONSOLE.print(Text("Deleted.", style="green"))
        return 0

    if args.action == "bulk-delete":
        n = library.bulk_delete(args.ids)
        UI_CONSOLE.print(Text(f"Deleted {n} scene(s).", style="green"))
        return 0

    if args.action == "bulk-category":
        n = library.bulk_set_category(args.ids, args.category)
        UI_CONSOLE.print(Text(f"Updated {n} scene(s) to {args.category}.", style="green"))
        return 0

    if args.action == "bulk-unavailable":
        n = library.bulk_mark_unavailable(args.ids)
        UI_CONSOLE.print(Text(f"Marked {n} scene(s) unavailable.", style="green"))
        return 0

    if args.action == "stats":
        stats = library.stats()
        print_table(
            ["Metric", "Count"],
            [
                ["Total", str(stats.total)],
                ["Available", str(stats.available)],
                ["Unavailable", str(stats.unavailable)],
            ]
            + [[f"Platform: {k}", str(v)] for k, v in stats.by_platform.items()]
            + [[f"Category: {k}", str(v)] for k, v in stats.by_category.items()],
            title="Library",
        )
        return 0

    raise RuntimeError(f"Unknown scenes action: {args.action}")
