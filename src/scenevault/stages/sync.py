"""
sync.py

Playlist import / refresh into the owner's scene library.

Flow (per playlist):
- validate URL -> playlist id
- no API key: basic import (record only, no items)
- fetch metadata, then the full page sequence
- dedup against the owner's existing (playlist_id, video_id) keys
- one bulk insert of the new items
- upsert the playlist record (imported_at only when new)
- on refresh: apply the vanished-video preference

Nothing is written before the whole page sequence has been fetched, so a
mid-fetch failure leaves both the items and the playlist record as they
were.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from scenevault.errors import SceneVaultError, ValidationError
from scenevault.logger import get_logger
from scenevault.models import (
    Category,
    Platform,
    PlaylistItem,
    PlaylistMetadata,
    PlaylistRecord,
    Scene,
    SourceType,
    Status,
    now_iso,
)
from scenevault.pipeline import SyncStage, SyncState
from scenevault.providers.youtube import (
    PlaylistItemFetcher,
    YouTubeDataClient,
    extract_playlist_id,
    playlist_url,
)
from scenevault.settings import Settings, VanishedVideoPolicy
from scenevault.store import Store

logger = get_logger(__name__)

BASIC_IMPORT_DESCRIPTION = (
    "Imported without API key. Add your API key in Settings to import "
    "full playlist metadata and videos."
)

ClientFactory = Callable[[str], YouTubeDataClient]
DedupKey = Tuple[str, str]


# ----------------------------
# Result
# ----------------------------


@dataclass(frozen=True)
class SyncResult:
    playlist_id: str
    playlist_title: str
    added_count: int
    total_videos: int = 0
    vanished_count: int = 0
    basic: bool = False


# ----------------------------
# Pure helpers
# ----------------------------


def default_title(playlist_id: str) -> str:
    return f"Playlist: {playlist_id}"


def parse_category(value: Category | str) -> Category:
    try:
        return Category.parse(value)
    except ValueError:
        raise ValidationError(
            f"Invalid category: {value!r} (expected one of: "
            f"{', '.join(c.value for c in Category)})"
        )


def existing_keys(scenes: Iterable[Scene]) -> Set[DedupKey]:
    return {s.dedup_key for s in scenes if s.dedup_key is not None}


def dedup(
    existing: Set[DedupKey], candidates: Iterable[PlaylistItem], playlist_id: str
) -> List[PlaylistItem]:
    """
    Candidates not yet present under `playlist_id`.

    Items without a video id are dropped. Repeats within `candidates`
    collapse to the first occurrence, so a playlist listing the same video
    twice yields one scene and counts once in `added_count`.
    """
    seen = set(existing)
    out: List[PlaylistItem] = []
    for item in candidates:
        if not item.video_id:
            continue
        key = (playlist_id, item.video_id)
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out


def item_to_scene(item: PlaylistItem, playlist_id: str, category: Category) -> Scene:
    return Scene(
        title=item.title,
        platform=Platform.YOUTUBE,
        category=category,
        status=Status.AVAILABLE,
        source_type=SourceType.YOUTUBE_PLAYLIST,
        url=item.url,
        thumbnail=item.thumbnail or None,
        playlist_id=playlist_id,
        video_id=item.video_id,
        channel_name=item.channel_name,
        upload_date=item.upload_date,
    )


def build_upsert_payload(
    playlist_id: str,
    meta: Optional[PlaylistMetadata],
    inserted: List[Scene],
    existing: Optional[PlaylistRecord],
) -> Dict[str, Any]:
    thumbnail = (
        (meta.thumbnail if meta else "")
        or (inserted[0].thumbnail if inserted and inserted[0].thumbnail else "")
        or (existing.thumbnail if existing else "")
        or ""
    )
    payload: Dict[str, Any] = {
        "playlist_id": playlist_id,
        "title": (meta.title if meta else "")
        or (existing.title if existing else "")
        or default_title(playlist_id),
        "description": (meta.description if meta else "")
        or (existing.description if existing else "")
        or "",
        "thumbnail": thumbnail,
        "video_count": meta.video_count if meta else 0,
        "updated_at": now_iso(),
    }
    if existing is None:
        payload["imported_at"] = payload["updated_at"]
    return payload


# ----------------------------
# Orchestrator
# ----------------------------


class PlaylistSyncer:
    def __init__(
        self,
        store: Store,
        settings: Settings,
        user_id: str,
        *,
        client_factory: Optional[ClientFactory] = None,
        page_size: int = 50,
        max_items: int = 500,
    ) -> None:
        self.store = store
        self.settings = settings
        self.user_id = user_id
        self.client_factory: ClientFactory = client_factory or YouTubeDataClient
        self.page_size = page_size
        self.max_items = max_items
        self.state = SyncState()

    # ---- entry points ----

    def sync_playlist(self, url: str, category: Category | str) -> SyncResult:
        self.state = SyncState()
        self.state.set_stage(SyncStage.VALIDATE_URL)
        try:
            playlist_id = extract_playlist_id(url)
            chosen = parse_category(category)
        except SceneVaultError as e:
            self.state.finish_failed(e.code)
            raise
        return self._run(playlist_id, chosen, refresh=False)

    def refresh_playlist(
        self, playlist_id: str, category: Category | str | None = None
    ) -> SyncResult:
        """Re-sync an imported playlist and apply the vanished-video preference."""
        self.state = SyncState()
        if category is None:
            chosen = self._default_category(playlist_id)
        else:
            chosen = parse_category(category)
        return self._run(playlist_id, chosen, refresh=True)

    # ---- pipeline ----

    def _run(self, playlist_id: str, category: Category, *, refresh: bool) -> SyncResult:
        self.state.playlist_id = playlist_id
        api_key = self.settings.api_key

        try:
            if not api_key:
                return self.import_basic(playlist_id)

            client = self.client_factory(api_key)

            self.state.set_stage(SyncStage.FETCH_METADATA)
            meta = client.fetch_playlist_metadata(playlist_id)

            self.state.set_stage(SyncStage.FETCH_PAGES)
            fetcher = PlaylistItemFetcher(
                client,
                playlist_id,
                page_size=self.page_size,
                max_items=self.max_items,
                on_page=self.state.record_page,
            )
            items = fetcher.fetch_all()

            self.state.set_stage(SyncStage.DEDUP)
            current = self.store.list_scenes(self.user_id)
            fresh = dedup(existing_keys(current), items, playlist_id)
            logger.info(
                f"{playlist_id}: {len(items)} fetched, "
                f"{len(items) - len(fresh)} already present, {len(fresh)} new"
            )

            self.state.set_stage(SyncStage.PERSIST_ITEMS)
            inserted: List[Scene] = []
            if fresh:
                inserted = self.store.insert_scenes(
                    self.user_id,
                    [item_to_scene(it, playlist_id, category) for it in fresh],
                )

            self.state.set_stage(SyncStage.UPSERT_PLAYLIST_RECORD)
            existing = self.store.get_playlist(self.user_id, playlist_id)
            payload = build_upsert_payload(playlist_id, meta, inserted, existing)
            record = self.store.upsert_playlist(self.user_id, payload)

            vanished = 0
            if refresh:
                self.state.set_stage(SyncStage.HANDLE_VANISHED)
                vanished = self._handle_vanished(
                    playlist_id, {it.video_id for it in items}, current
                )

        except SceneVaultError as e:
            self.state.finish_failed(e.code)
            logger.error(f"Sync of {playlist_id} failed at {self.state.stage.value}: {e.code}")
            raise

        self.state.finish_ok()
        logger.info(
            f"Synced '{record.title}' ({playlist_id}): +{len(inserted)} "
            f"in {self.state.runtime_seconds}s"
        )
        return SyncResult(
            playlist_id=playlist_id,
            playlist_title=record.title,
            added_count=len(inserted),
            total_videos=len(items),
            vanished_count=vanished,
        )

    def import_basic(self, playlist_id: str) -> SyncResult:
        """Record-only import used when no API key is stored."""
        self.state.set_stage(SyncStage.BASIC_IMPORT)
        ts = now_iso()
        title = default_title(playlist_id)
        self.store.upsert_playlist(
            self.user_id,
            {
                "playlist_id": playlist_id,
                "title": title,
                "description": BASIC_IMPORT_DESCRIPTION,
                "thumbnail": "",
                "video_count": 0,
                "imported_at": ts,
                "updated_at": ts,
            },
        )
        self.state.finish_ok()
        logger.warning(f"No API key stored; imported {playlist_id} without videos")
        return SyncResult(
            playlist_id=playlist_id, playlist_title=title, added_count=0, basic=True
        )

    def _handle_vanished(
        self, playlist_id: str, fetched_ids: Set[str], current: List[Scene]
    ) -> int:
        policy = self.settings.vanished_policy
        gone = [
            s
            for s in current
            if s.playlist_id == playlist_id
            and s.platform is Platform.YOUTUBE
            and s.video_id
            and s.video_id not in fetched_ids
        ]

        count = 0
        for scene in gone:
            if policy is VanishedVideoPolicy.REMOVE:
                self.store.delete_scene(self.user_id, scene.id)
                count += 1
            elif scene.status is not Status.UNAVAILABLE:
                self.store.update_scene(
                    self.user_id, scene.id, {"status": Status.UNAVAILABLE}
                )
                count += 1

        if count:
            logger.info(f"{playlist_id}: {policy.value} applied to {count} vanished video(s)")
        return count

    def _default_category(self, playlist_id: str) -> Category:
        for scene in self.store.list_scenes(self.user_id):
            if scene.platform is Platform.YOUTUBE and scene.playlist_id == playlist_id:
                return scene.category
        return Category.FM

    # ---- record management ----

    def list_playlists(self) -> List[PlaylistRecord]:
        return self.store.list_playlists(self.user_id)

    def delete_playlist(self, playlist_id: str) -> int:
        """Delete the owner's items of the playlist, then the record."""
        removed = self.store.delete_scenes_by_playlist(self.user_id, playlist_id)
        self.store.delete_playlist(self.user_id, playlist_id)
        logger.info(f"Deleted playlist {playlist_id} and {removed} scene(s)")
        return removed

    def rename_playlist(self, playlist_id: str, title: str) -> None:
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Playlist name cannot be empty.")
        self.store.update_playlist(self.user_id, playlist_id, {"title": cleaned})

    @staticmethod
    def playlist_url(playlist_id: str) -> str:
        return playlist_url(playlist_id)
