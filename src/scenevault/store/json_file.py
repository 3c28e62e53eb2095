from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from scenevault.errors import PersistenceError
from scenevault.logger import get_logger
from scenevault.store.memory import MemoryStore

logger = get_logger(__name__)

STORE_VERSION = 1


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False, sort_keys=True)
    tmp.replace(path)


class JsonFileStore(MemoryStore):
    """
    MemoryStore persisted to one JSON document.

    Every mutation rewrites the document atomically (tmp file + rename),
    so a crash leaves either the old or the new state on disk.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug(f"No store file at {self.path}; starting empty")
            return

        try:
            doc = _read_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(
                "Local data file is unreadable.", detail=f"{self.path}: {e}"
            ) from e

        version = doc.get("version") if isinstance(doc, dict) else None
        if version != STORE_VERSION:
            raise PersistenceError(
                "Local data file has an unsupported format.",
                detail=f"{self.path}: version={version!r}",
            )

        for row in doc.get("scenes") or []:
            if isinstance(row, dict) and row.get("id"):
                self._scenes[row["id"]] = row
                self._order[row["id"]] = next(self._seq)

        for row in doc.get("playlists") or []:
            if isinstance(row, dict) and row.get("playlist_id"):
                self._playlists[(row.get("user_id", ""), row["playlist_id"])] = row

        logger.debug(
            f"Loaded {len(self._scenes)} scene(s), "
            f"{len(self._playlists)} playlist(s) from {self.path}"
        )

    def _commit(self) -> None:
        ordered = sorted(self._scenes.values(), key=lambda r: self._order[r["id"]])
        doc = {
            "version": STORE_VERSION,
            "scenes": ordered,
            "playlists": list(self._playlists.values()),
        }
        try:
            _write_json(self.path, doc)
        except OSError as e:
            raise PersistenceError(detail=f"{self.path}: {e}") from e
