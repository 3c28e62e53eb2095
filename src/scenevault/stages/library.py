"""
library.py

Manual scene management over the row store: entry, edit, delete, the
sequential bulk edits, and the client-side filter / sort / stats views.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Iterable, List, Optional, Sequence

from scenevault.errors import ValidationError
from scenevault.logger import get_logger
from scenevault.models import (
    SCENE_MUTABLE_FIELDS,
    Category,
    Platform,
    Scene,
    SortOption,
    SourceType,
    Stats,
    Status,
)
from scenevault.settings import ALL, FilterState
from scenevault.store import Store

logger = get_logger(__name__)

_VIDEO_ID_PATTERNS = (
    re.compile(r"[?&]v=([A-Za-z0-9_-]{6,})"),
    re.compile(r"youtu\.be/([A-Za-z0-9_-]{6,})"),
    re.compile(r"/shorts/([A-Za-z0-9_-]{6,})"),
    re.compile(r"/embed/([A-Za-z0-9_-]{6,})"),
)


def extract_video_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    for pattern in _VIDEO_ID_PATTERNS:
        m = pattern.search(url)
        if m:
            return m.group(1)
    return None


# ----------------------------
# Views (pure)
# ----------------------------


def _matches(scene: Scene, query: str) -> bool:
    haystack = (scene.title, scene.channel_name, scene.notes, scene.timestamp)
    return any(query in (field or "").lower() for field in haystack)


def filter_and_sort(scenes: Iterable[Scene], state: FilterState) -> List[Scene]:
    out = list(scenes)

    query = state.search_query.strip().lower()
    if query:
        out = [s for s in out if _matches(s, query)]

    if state.selected_platform != ALL:
        out = [s for s in out if s.platform.value == state.selected_platform]
    if state.selected_category != ALL:
        out = [s for s in out if s.category.value == state.selected_category]
    if state.selected_status != ALL:
        out = [s for s in out if s.status.value == state.selected_status]

    if state.sort_by is SortOption.OLDEST:
        out.sort(key=lambda s: s.created_at)
    elif state.sort_by is SortOption.TITLE_ASC:
        out.sort(key=lambda s: s.title.casefold())
    elif state.sort_by is SortOption.TITLE_DESC:
        out.sort(key=lambda s: s.title.casefold(), reverse=True)
    else:
        out.sort(key=lambda s: s.created_at, reverse=True)

    return out


def calculate_stats(scenes: Iterable[Scene]) -> Stats:
    stats = Stats()
    for scene in scenes:
        stats.total += 1
        if scene.status is Status.AVAILABLE:
            stats.available += 1
        else:
            stats.unavailable += 1
        stats.by_platform[scene.platform.value] += 1
        stats.by_category[scene.category.value] += 1
    return stats


# ----------------------------
# Service
# ----------------------------


class SceneLibrary:
    def __init__(self, store: Store, user_id: str) -> None:
        self.store = store
        self.user_id = user_id

    def list_scenes(self) -> List[Scene]:
        return self.store.list_scenes(self.user_id)

    def get_scene(self, scene_id: str) -> Scene:
        for scene in self.list_scenes():
            if scene.id == scene_id:
                return scene
        raise ValidationError(f"Scene not found: {scene_id}")

    def add_scene(
        self,
        title: str,
        platform: Platform | str = Platform.YOUTUBE,
        category: Category | str = Category.FM,
        *,
        url: Optional[str] = None,
        thumbnail: Optional[str] = None,
        timestamp: Optional[str] = None,
        notes: Optional[str] = None,
        channel_name: Optional[str] = None,
        status: Status | str = Status.AVAILABLE,
    ) -> Scene:
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Title is required.")

        plat = Platform.from_string(platform)
        try:
            cat = Category.parse(category)
        except ValueError:
            raise ValidationError(f"Invalid category: {category!r}")

        scene = Scene(
            title=cleaned,
            platform=plat,
            category=cat,
            status=Status.from_string(getattr(status, "value", status)),
            source_type=SourceType.MANUAL,
            url=(url or "").strip() or None,
            thumbnail=(thumbnail or "").strip() or None,
            timestamp=(timestamp or "").strip() or None,
            notes=(notes or "").strip() or None,
            channel_name=(channel_name or "").strip() or None,
            video_id=extract_video_id(url) if plat is Platform.YOUTUBE else None,
        )
        stored = self.store.insert_scene(self.user_id, scene)
        logger.info(f"Added scene '{stored.title}' ({stored.id})")
        return stored

    def update_scene(self, scene_id: str, **changes: Any) -> Scene:
        unknown = set(changes) - SCENE_MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        normalized: dict[str, Any] = {}
        for key, value in changes.items():
            if key == "title":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("Title is required.")
            elif key == "platform":
                value = Platform.from_string(value)
            elif key == "category":
                try:
                    value = Category.parse(value)
                except ValueError:
                    raise ValidationError(f"Invalid category: {value!r}")
            elif key == "status":
                value = Status.from_string(getattr(value, "value", value))
            normalized[key] = value

        current = self.get_scene(scene_id)
        merged = replace(current, **normalized)

        # Only YouTube scenes carry a video id.
        if merged.platform is not Platform.YOUTUBE:
            merged.video_id = None
        elif "video_id" not in normalized and ("url" in normalized or "platform" in normalized):
            merged.video_id = extract_video_id(merged.url) or current.video_id

        try:
            merged.check_invariants()
        except ValueError as e:
            raise ValidationError(f"Cannot update scene {scene_id}: {e}")

        if merged.video_id != current.video_id:
            normalized["video_id"] = merged.video_id

        self.store.update_scene(self.user_id, scene_id, normalized)
        logger.debug(f"Updated scene {scene_id}: {sorted(normalized)}")
        return merged

    def delete_scene(self, scene_id: str) -> None:
        self.store.delete_scene(self.user_id, scene_id)
        logger.info(f"Deleted scene {scene_id}")

    # ---- bulk (one write per id; first failure aborts the rest) ----

    def bulk_delete(self, ids: Sequence[str]) -> int:
        for scene_id in ids:
            self.store.delete_scene(self.user_id, scene_id)
        logger.info(f"Deleted {len(ids)} scene(s)")
        return len(ids)

    def bulk_set_category(self, ids: Sequence[str], category: Category | str) -> int:
        try:
            cat = Category.parse(category)
        except ValueError:
            raise ValidationError(f"Invalid category: {category!r}")

        for scene_id in ids:
            self.store.update_scene(self.user_id, scene_id, {"category": cat})
        logger.info(f"Set category {cat.value} on {len(ids)} scene(s)")
        return len(ids)

    def bulk_mark_unavailable(self, ids: Sequence[str]) -> int:
        for scene_id in ids:
            self.store.update_scene(
                self.user_id, scene_id, {"status": Status.UNAVAILABLE}
            )
        logger.info(f"Marked {len(ids)} scene(s) unavailable")
        return len(ids)

    # ---- views ----

    def filtered(self, state: FilterState) -> List[Scene]:
        return filter_and_sort(self.list_scenes(), state)

    def stats(self) -> Stats:
        return calculate_stats(self.list_scenes())
