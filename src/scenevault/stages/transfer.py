"""
transfer.py

Export a set of scenes to json / csv / html, and import a JSON export
back with merge or replace semantics.

Imports write one row at a time; a failure part-way raises without
reporting a success count (rows already written stay written).
"""

from __future__ import annotations

import csv
import html
import io
import json
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from scenevault.env import out_file
from scenevault.errors import ParseError, ValidationError
from scenevault.logger import get_logger
from scenevault.models import Category, Platform, Scene
from scenevault.settings import Settings
from scenevault.store import Store

logger = get_logger(__name__)

EXPORT_FORMATS = ("json", "csv", "html")

CSV_COLUMNS = (
    "title",
    "platform",
    "category",
    "status",
    "url",
    "timestamp",
    "notes",
    "channel_name",
    "upload_date",
    "video_id",
    "playlist_id",
    "source_type",
    "thumbnail",
    "created_at",
)

# Assigned fresh on import.
_IDENTITY_FIELDS = ("id", "user_id", "created_at", "updated_at")


class ImportMode(str, Enum):
    MERGE = "merge"
    REPLACE = "replace"


class ExportScope(str, Enum):
    ALL = "all"
    FILTERED = "filtered"
    SELECTED = "selected"


# ----------------------------
# Filenames
# ----------------------------


def generate_filename(
    fmt: str, scope: ExportScope | str = ExportScope.ALL, today: Optional[date] = None
) -> str:
    day = (today or date.today()).isoformat()
    if ExportScope(scope) is ExportScope.SELECTED:
        return f"scenevault-export-selected-{day}.json"
    return f"scenevault-export-{day}.{fmt}"


# ----------------------------
# Renderers
# ----------------------------


def to_json(scenes: Sequence[Scene]) -> str:
    return json.dumps([s.to_row() for s in scenes], indent=2, ensure_ascii=False)


def to_csv(scenes: Sequence[Scene]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_COLUMNS)
    for scene in scenes:
        row = scene.to_row()
        writer.writerow(["" if row.get(c) is None else row.get(c) for c in CSV_COLUMNS])
    return buf.getvalue()


def _html_row(scene: Scene) -> str:
    e = html.escape
    thumb = (
        f'<img src="{e(scene.thumbnail)}" alt="" loading="lazy" width="160">'
        if scene.thumbnail
        else ""
    )
    title = e(scene.title)
    if scene.url:
        title = f'<a href="{e(scene.url)}">{title}</a>'
    cells = (
        thumb,
        title,
        e(scene.platform.value),
        e(scene.category.value),
        e(scene.status.value),
        e(scene.channel_name or ""),
        e(scene.timestamp or ""),
        e(scene.notes or ""),
    )
    return "<tr>" + "".join(f"<td>{c}</td>" for c in cells) + "</tr>"


def to_html(scenes: Sequence[Scene], title: str = "SceneVault Export") -> str:
    headers = ("", "Title", "Platform", "Category", "Status", "Channel", "Timestamp", "Notes")
    head = "".join(f"<th>{h}</th>" for h in headers)
    body = "\n".join(_html_row(s) for s in scenes)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>{html.escape(title)}</title>\n"
        "<style>body{font-family:sans-serif;background:#111;color:#eee}"
        "table{border-collapse:collapse;width:100%}"
        "td,th{border-bottom:1px solid #333;padding:6px;text-align:left;vertical-align:top}"
        "a{color:#6cf}</style>\n"
        "</head>\n<body>\n"
        f"<h1>{html.escape(title)}</h1>\n"
        f"<p>{len(scenes)} scene(s)</p>\n"
        f"<table>\n<thead><tr>{head}</tr></thead>\n<tbody>\n{body}\n</tbody>\n</table>\n"
        "</body>\n</html>\n"
    )


_RENDERERS = {"json": to_json, "csv": to_csv, "html": to_html}


def render(scenes: Sequence[Scene], fmt: str) -> str:
    if fmt not in _RENDERERS:
        raise ValidationError(
            f"Unknown export format: {fmt} (expected one of: {', '.join(EXPORT_FORMATS)})"
        )
    return _RENDERERS[fmt](scenes)


def export_scenes(
    scenes: Sequence[Scene],
    fmt: str,
    out_dir: Optional[Path] = None,
    *,
    scope: ExportScope | str = ExportScope.ALL,
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
) -> Path:
    """Write the export file and stamp the last-backup time."""
    if ExportScope(scope) is ExportScope.SELECTED and fmt != "json":
        raise ValidationError("Selected scenes can only be exported as JSON.")

    content = render(scenes, fmt)
    path = out_file(generate_filename(fmt, scope, today), out_dir)
    path.write_text(content, encoding="utf-8")

    if settings is not None:
        settings.mark_backup()

    logger.info(f"Exported {len(scenes)} scene(s) to {path}")
    return path


# ----------------------------
# Import
# ----------------------------


def _parse_entry(n: int, entry: Any) -> Scene:
    if not isinstance(entry, dict):
        raise ParseError(f"Invalid import file: entry {n} is not an object.")

    title = entry.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ParseError(f"Invalid import file: entry {n} is missing a title.")

    try:
        platform = Platform.parse(entry.get("platform"))
    except ValueError:
        raise ParseError(
            f"Invalid import file: entry {n} has invalid platform "
            f"{entry.get('platform')!r}."
        )

    try:
        category = Category.parse(entry.get("category"))
    except ValueError:
        raise ParseError(
            f"Invalid import file: entry {n} has invalid category "
            f"{entry.get('category')!r}."
        )

    row: Dict[str, Any] = {k: v for k, v in entry.items() if k not in _IDENTITY_FIELDS}
    row["platform"] = platform.value
    row["category"] = category.value
    if platform is not Platform.YOUTUBE:
        row.pop("video_id", None)
    scene = Scene.from_row(row)
    scene.title = title.strip()

    try:
        scene.check_invariants()
    except ValueError as e:
        raise ParseError(f"Invalid import file: entry {n}: {e}")
    return scene


def parse_json_export(text: str) -> List[Scene]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError("Invalid import file: not valid JSON.", detail=str(e)) from e

    if not isinstance(data, list):
        raise ParseError("Invalid import file: expected a list of scenes.")

    scenes = [_parse_entry(n, entry) for n, entry in enumerate(data, start=1)]
    if not scenes:
        raise ParseError("No valid scenes found in the file")
    return scenes


def import_scenes(
    store: Store,
    user_id: str,
    scenes: Sequence[Scene],
    mode: ImportMode | str = ImportMode.MERGE,
) -> int:
    """
    merge:   insert every scene as new, one at a time
    replace: delete every current scene of the owner one at a time, then merge
    """
    chosen = ImportMode(mode)

    if chosen is ImportMode.REPLACE:
        current = store.list_scenes(user_id)
        for scene in current:
            store.delete_scene(user_id, scene.id)
        logger.info(f"Replace import: removed {len(current)} existing scene(s)")

    for scene in scenes:
        fresh = Scene.from_row(
            {k: v for k, v in scene.to_row().items() if k not in _IDENTITY_FIELDS}
        )
        store.insert_scene(user_id, fresh)

    logger.info(f"Imported {len(scenes)} scene(s) ({chosen.value})")
    return len(scenes)


def import_file(
    store: Store, user_id: str, path: Path, mode: ImportMode | str = ImportMode.MERGE
) -> int:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ParseError("Failed to read file", detail=f"{path}: {e}") from e
    return import_scenes(store, user_id, parse_json_export(text), mode)


__all__ = [
    "EXPORT_FORMATS",
    "CSV_COLUMNS",
    "ImportMode",
    "ExportScope",
    "generate_filename",
    "render",
    "to_json",
    "to_csv",
    "to_html",
    "export_scenes",
    "parse_json_export",
    "import_scenes",
    "import_file",
]
