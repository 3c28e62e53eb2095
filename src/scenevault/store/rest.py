"""
rest.py

PostgREST (Supabase) client for the `scenes` and `youtube_playlists`
tables.

Owner scoping is enforced twice: row-level security on the server and a
`user_id=eq.<owner>` filter on every request.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from scenevault.errors import PersistenceError
from scenevault.logger import get_logger
from scenevault.models import PlaylistRecord, Scene, now_iso
from scenevault.store.base import Store

logger = get_logger(__name__)

SCENES_TABLE = "scenes"
PLAYLISTS_TABLE = "youtube_playlists"

# Server-side defaults fill these when left empty.
_SERVER_DEFAULTED = ("id", "created_at", "updated_at")


class RestStore(Store):
    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
                "Content-Type": "application/json",
            }
        )

    # ----------------------------
    # HTTP
    # ----------------------------

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        url = f"{self.base_url}/{table}"

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {table} failed: {e}")
            raise PersistenceError(detail=str(e)) from e

        if not response.ok:
            body = (response.text or "")[:300]
            logger.error(f"{method} {table} -> HTTP {response.status_code}: {body}")
            raise PersistenceError(
                code=f"HTTP_{response.status_code}",
                detail=body,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # ----------------------------
    # Scenes
    # ----------------------------

    def list_scenes(self, user_id: str) -> List[Scene]:
        rows = self._request(
            "GET",
            SCENES_TABLE,
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
            },
        )
        return [Scene.from_row(r) for r in rows or []]

    def insert_scenes(self, user_id: str, scenes: List[Scene]) -> List[Scene]:
        if not scenes:
            return []

        payload = []
        for scene in scenes:
            row = scene.to_row()
            row["user_id"] = user_id
            for k in _SERVER_DEFAULTED:
                if not row.get(k):
                    row.pop(k, None)
            payload.append(row)

        rows = self._request(
            "POST",
            SCENES_TABLE,
            json_body=payload,
            prefer="return=representation",
        )
        return [Scene.from_row(r) for r in rows or []]

    def update_scene(self, user_id: str, scene_id: str, changes: Dict[str, Any]) -> None:
        body = {k: getattr(v, "value", v) for k, v in changes.items()}
        body["updated_at"] = now_iso()
        self._request(
            "PATCH",
            SCENES_TABLE,
            params={"id": f"eq.{scene_id}", "user_id": f"eq.{user_id}"},
            json_body=body,
        )

    def delete_scene(self, user_id: str, scene_id: str) -> None:
        self._request(
            "DELETE",
            SCENES_TABLE,
            params={"id": f"eq.{scene_id}", "user_id": f"eq.{user_id}"},
        )

    def delete_scenes_by_playlist(self, user_id: str, playlist_id: str) -> int:
        rows = self._request(
            "DELETE",
            SCENES_TABLE,
            params={"user_id": f"eq.{user_id}", "playlist_id": f"eq.{playlist_id}"},
            prefer="return=representation",
        )
        return len(rows or [])

    # ----------------------------
    # Playlists
    # ----------------------------

    def list_playlists(self, user_id: str) -> List[PlaylistRecord]:
        rows = self._request(
            "GET",
            PLAYLISTS_TABLE,
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "imported_at.desc",
            },
        )
        return [PlaylistRecord.from_row(r) for r in rows or []]

    def upsert_playlist(self, user_id: str, payload: Dict[str, Any]) -> PlaylistRecord:
        body = dict(payload)
        body["user_id"] = user_id
        rows = self._request(
            "POST",
            PLAYLISTS_TABLE,
            params={"on_conflict": "user_id,playlist_id"},
            json_body=body,
            prefer="resolution=merge-duplicates,return=representation",
        )
        if not rows:
            raise PersistenceError(detail="upsert returned no representation")
        return PlaylistRecord.from_row(rows[0])

    def update_playlist(
        self, user_id: str, playlist_id: str, changes: Dict[str, Any]
    ) -> None:
        body = dict(changes)
        body["updated_at"] = now_iso()
        self._request(
            "PATCH",
            PLAYLISTS_TABLE,
            params={"user_id": f"eq.{user_id}", "playlist_id": f"eq.{playlist_id}"},
            json_body=body,
        )

    def delete_playlist(self, user_id: str, playlist_id: str) -> None:
        self._request(
            "DELETE",
            PLAYLISTS_TABLE,
            params={"user_id": f"eq.{user_id}", "playlist_id": f"eq.{playlist_id}"},
        )
