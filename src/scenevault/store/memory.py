from __future__ import annotations

import itertools
import uuid
from typing import Any, Dict, List

from scenevault.errors import PersistenceError
from scenevault.logger import get_logger
from scenevault.models import (
    SCENE_MUTABLE_FIELDS,
    PlaylistRecord,
    Scene,
    now_iso,
)
from scenevault.store.base import Store

logger = get_logger(__name__)

_PLAYLIST_MUTABLE_FIELDS = frozenset(
    {"title", "description", "thumbnail", "video_count", "imported_at", "updated_at"}
)


class MemoryStore(Store):
    """
    In-process row store.

    Rows are kept in their serialized (dict) shape so that every read
    goes through Scene.from_row(), exactly like a remote store.
    """

    def __init__(self) -> None:
        self._scenes: Dict[str, Dict[str, Any]] = {}
        self._playlists: Dict[tuple[str, str], Dict[str, Any]] = {}
        self._seq = itertools.count()
        self._order: Dict[str, int] = {}

    # ----------------------------
    # Hooks
    # ----------------------------

    def _commit(self) -> None:
        """Called after every successful mutation."""

    # ----------------------------
    # Scenes
    # ----------------------------

    def list_scenes(self, user_id: str) -> List[Scene]:
        rows = [r for r in self._scenes.values() if r.get("user_id") == user_id]
        rows.sort(
            key=lambda r: (r.get("created_at") or "", self._order.get(r["id"], 0)),
            reverse=True,
        )
        return [Scene.from_row(r) for r in rows]

    def insert_scenes(self, user_id: str, scenes: List[Scene]) -> List[Scene]:
        ts = now_iso()
        rows: List[Dict[str, Any]] = []
        for scene in scenes:
            row = scene.to_row()
            row["id"] = row.get("id") or str(uuid.uuid4())
            if row["id"] in self._scenes:
                raise PersistenceError(detail=f"Duplicate scene id: {row['id']}")
            row["user_id"] = user_id
            row["created_at"] = row.get("created_at") or ts
            row["updated_at"] = row.get("updated_at") or ts
            rows.append(row)

        # All rows validated first: a multi-row insert is all-or-nothing.
        stored: List[Scene] = []
        for row in rows:
            self._scenes[row["id"]] = row
            self._order[row["id"]] = next(self._seq)
            stored.append(Scene.from_row(row))

        self._commit()
        logger.debug(f"Inserted {len(stored)} scene(s) for {user_id}")
        return stored

    def _owned_scene(self, user_id: str, scene_id: str) -> Dict[str, Any]:
        row = self._scenes.get(scene_id)
        if row is None or row.get("user_id") != user_id:
            raise PersistenceError(
                "Scene not found.", code="NOT_FOUND", detail=f"scene {scene_id}"
            )
        return row

    def update_scene(self, user_id: str, scene_id: str, changes: Dict[str, Any]) -> None:
        row = self._owned_scene(user_id, scene_id)
        unknown = set(changes) - SCENE_MUTABLE_FIELDS - {"updated_at"}
        if unknown:
            raise PersistenceError(detail=f"Unknown scene fields: {sorted(unknown)}")

        for k, v in changes.items():
            row[k] = getattr(v, "value", v)
        row["updated_at"] = now_iso()
        self._commit()

    def delete_scene(self, user_id: str, scene_id: str) -> None:
        self._owned_scene(user_id, scene_id)
        del self._scenes[scene_id]
        self._order.pop(scene_id, None)
        self._commit()

    def delete_scenes_by_playlist(self, user_id: str, playlist_id: str) -> int:
        doomed = [
            sid
            for sid, r in self._scenes.items()
            if r.get("user_id") == user_id and r.get("playlist_id") == playlist_id
        ]
        for sid in doomed:
            del self._scenes[sid]
            self._order.pop(sid, None)
        self._commit()
        return len(doomed)

    # ----------------------------
    # Playlists
    # ----------------------------

    def list_playlists(self, user_id: str) -> List[PlaylistRecord]:
        rows = [r for (uid, _), r in self._playlists.items() if uid == user_id]
        rows.sort(key=lambda r: r.get("imported_at") or "", reverse=True)
        return [PlaylistRecord.from_row(r) for r in rows]

    def upsert_playlist(self, user_id: str, payload: Dict[str, Any]) -> PlaylistRecord:
        playlist_id = payload.get("playlist_id")
        if not playlist_id:
            raise PersistenceError(detail="upsert_playlist requires playlist_id")

        key = (user_id, playlist_id)
        ts = now_iso()
        row = self._playlists.get(key)

        if row is None:
            row = {
                "id": str(uuid.uuid4()),
                "user_id": user_id,
                "playlist_id": playlist_id,
                "title": "",
                "description": "",
                "thumbnail": "",
                "video_count": 0,
                "imported_at": ts,
                "updated_at": ts,
            }
            self._playlists[key] = row

        for k, v in payload.items():
            if k in _PLAYLIST_MUTABLE_FIELDS:
                row[k] = v

        self._commit()
        return PlaylistRecord.from_row(row)

    def update_playlist(
        self, user_id: str, playlist_id: str, changes: Dict[str, Any]
    ) -> None:
        row = self._playlists.get((user_id, playlist_id))
        if row is None:
            raise PersistenceError(
                "Playlist not found.", code="NOT_FOUND", detail=playlist_id
            )
        for k, v in changes.items():
            if k in _PLAYLIST_MUTABLE_FIELDS:
                row[k] = v
        row["updated_at"] = now_iso()
        self._commit()

    def delete_playlist(self, user_id: str, playlist_id: str) -> None:
        self._playlists.pop((user_id, playlist_id), None)
        self._commit()
