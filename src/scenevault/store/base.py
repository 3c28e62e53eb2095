from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from scenevault.models import PlaylistRecord, Scene


class SceneStore(ABC):
    """
    Owner-scoped persistence for scenes (the `scenes` table).

    Every call is scoped to one owner; rows of other owners are never
    visible or touched.
    """

    @abstractmethod
    def list_scenes(self, user_id: str) -> List[Scene]:
        """All scenes of the owner, newest first (created_at desc)."""
        raise NotImplementedError

    @abstractmethod
    def insert_scenes(self, user_id: str, scenes: List[Scene]) -> List[Scene]:
        """
        Insert new rows in one call. Empty ids and timestamps are
        assigned by the store. Returns the stored rows.
        """
        raise NotImplementedError

    def insert_scene(self, user_id: str, scene: Scene) -> Scene:
        return self.insert_scenes(user_id, [scene])[0]

    @abstractmethod
    def update_scene(self, user_id: str, scene_id: str, changes: Dict[str, Any]) -> None:
        """Partial update by id; refreshes updated_at."""
        raise NotImplementedError

    @abstractmethod
    def delete_scene(self, user_id: str, scene_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_scenes_by_playlist(self, user_id: str, playlist_id: str) -> int:
        """Delete the owner's scenes of one playlist. Returns rows removed."""
        raise NotImplementedError


class PlaylistStore(ABC):
    """Owner-scoped persistence for playlist records (`youtube_playlists`)."""

    @abstractmethod
    def list_playlists(self, user_id: str) -> List[PlaylistRecord]:
        """All playlist records of the owner, newest import first."""
        raise NotImplementedError

    @abstractmethod
    def upsert_playlist(self, user_id: str, payload: Dict[str, Any]) -> PlaylistRecord:
        """
        Insert or update keyed by (user_id, playlist_id).

        On conflict only the keys present in payload are written.
        """
        raise NotImplementedError

    @abstractmethod
    def update_playlist(
        self, user_id: str, playlist_id: str, changes: Dict[str, Any]
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_playlist(self, user_id: str, playlist_id: str) -> None:
        raise NotImplementedError


class Store(SceneStore, PlaylistStore, ABC):
    """Both collaborators behind one object."""

    def get_playlist(self, user_id: str, playlist_id: str) -> PlaylistRecord | None:
        for p in self.list_playlists(user_id):
            if p.playlist_id == playlist_id:
                return p
        return None
