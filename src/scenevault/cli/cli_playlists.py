from __future__ import annotations

import argparse

from rich.text import Text

from scenevault.cli.common import (
    add_help_command,
    dispatch_subparser_help,
    get_context,
    print_table,
)
from scenevault.logger.console import UI_CONSOLE
from scenevault.models import Category
from scenevault.stages.sync import SyncResult

CATEGORY_CHOICES = [c.value for c in Category]


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_playlists_parser(subparsers: argparse._SubParsersAction) -> None:
    playlists = subparsers.add_parser(
        "playlists", help="Import and manage YouTube playlists"
    )
    sub = playlists.add_subparsers(dest="playlists_cmd", required=True)
    add_help_command(sub, playlists, "playlists")

    imp = sub.add_parser("import", help="Import a playlist by URL")
    imp.add_argument("url", help="Playlist URL (must contain list=...)")
    imp.add_argument(
        "--category",
        default=Category.FM.value,
        choices=CATEGORY_CHOICES,
        help="Category for newly added videos (default: F/M)",
    )
    imp.set_defaults(action="import")

    ref = sub.add_parser("refresh", help="Re-sync an imported playlist")
    ref.add_argument("playlist_id")
    ref.add_argument(
        "--category",
        choices=CATEGORY_CHOICES,
        help="Category for new videos (default: category of the playlist's first scene)",
    )
    ref.set_defaults(action="refresh")

    lst = sub.add_parser("list", help="List imported playlists")
    lst.set_defaults(action="list")

    ren = sub.add_parser("rename", help="Rename a playlist record")
    ren.add_argument("playlist_id")
    ren.add_argument("title")
    ren.set_defaults(action="rename")

    dele = sub.add_parser("delete", help="Delete a playlist and all of its scenes")
    dele.add_argument("playlist_id")
    dele.set_defaults(action="delete")

    url = sub.add_parser("url", help="Print the YouTube URL of a playlist")
    url.add_argument("playlist_id")
    url.set_defaults(action="url")


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def _print_result(result: SyncResult) -> None:
    if result.basic:
        UI_CONSOLE.print(
            Text(f"Imported '{result.playlist_title}' without videos.", style="yellow")
        )
        UI_CONSOLE.print(
            "[dim]Add an API key to import videos:[/dim] "
            "scenevault settings set-key <API_KEY>"
        )
        return

    msg = Text(f"'{result.playlist_title}': ", style="bold")
    msg.append(f"{result.added_count} new", style="green")
    msg.append(f" of {result.total_videos} video(s)")
    if result.vanished_count:
        msg.append(f", {result.vanished_count} vanished", style="yellow")
    UI_CONSOLE.print(msg)


def handle_playlists(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    if args.action == "url":
        from scenevault.providers.youtube import playlist_url

        UI_CONSOLE.print(playlist_url(args.playlist_id), highlight=False)
        return 0

    ctx = get_context()
    syncer = ctx.syncer

    if args.action == "import":
        _print_result(syncer.sync_playlist(args.url, args.category))
        return 0

    if args.action == "refresh":
        _print_result(syncer.refresh_playlist(args.playlist_id, args.category))
        return 0

    if args.action == "list":
        scenes = ctx.store.list_scenes(ctx.user_id)
        per_playlist: dict[str, int] = {}
        for s in scenes:
            if s.playlist_id:
                per_playlist[s.playlist_id] = per_playlist.get(s.playlist_id, 0) + 1

        print_table(
            ["Playlist ID", "Title", "Scenes", "Videos", "Imported"],
            (
                [
                    p.playlist_id,
                    p.title,
                    str(per_playlist.get(p.playlist_id, 0)),
                    str(p.video_count),
                    p.imported_at[:10],
                ]
                for p in syncer.list_playlists()
            ),
        )
        return 0

    if args.action == "rename":
        syncer.rename_playlist(args.playlist_id, args.title)
        UI_CONSOLE.print(Text("Renamed.", style="green"))
        return 0

    if args.action == "delete":
        removed = syncer.delete_playlist(args.playlist_id)
        UI_CONSOLE.print(
            Text(
                f"Deleted playlist {args.playlist_id} and {removed} scene(s).",
                style="green",
            )
        )
        return 0

    raise RuntimeError(f"Unknown playlists action: {args.action}")
