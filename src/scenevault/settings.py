"""
settings.py

Local, per-device state that never goes to the row store:

- the YouTube API key and the vanished-video preference (credential store)
- the persisted filter/sort state, migrated forward on load
- the last-backup timestamp written by exports

All of it lives behind a small get/set/delete key-value interface so
callers can inject an in-memory store in tests.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from scenevault.logger import get_logger
from scenevault.models import Category, Platform, SortOption, Status

logger = get_logger(__name__)

# Fixed storage keys
API_KEY_KEY = "youtube_api_key"
DELETED_VIDEOS_PREF_KEY = "youtube_deleted_playlist_videos"
FILTER_STATE_KEY = "sceneVault_filterState"
LAST_BACKUP_KEY = "sceneVault_lastBackup"

FILTER_STATE_VERSION = 1
ALL = "all"


# ============================================================
# Key-value stores
# ============================================================


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySettingsStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class LocalSettingsStore:
    """String key-value pairs in one JSON file, rewritten atomically."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Settings file unreadable, ignoring: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


# ============================================================
# Filter state
# ============================================================


@dataclass(frozen=True)
class FilterState:
    search_query: str = ""
    selected_platform: str = ALL
    selected_category: str = ALL
    selected_status: str = ALL
    sort_by: SortOption = SortOption.NEWEST

    def to_blob(self) -> Dict[str, Any]:
        return {
            "version": FILTER_STATE_VERSION,
            "searchQuery": self.search_query,
            "selectedPlatform": self.selected_platform,
            "selectedCategory": self.selected_category,
            "selectedStatus": self.selected_status,
            "sortBy": self.sort_by.value,
        }

    @classmethod
    def from_blob(cls, blob: Dict[str, Any]) -> FilterState:
        """Build from an already-migrated blob; unknown values fall back to defaults."""
        default = cls()

        def _pick(key: str, allowed: set[str], fallback: str) -> str:
            v = blob.get(key)
            return v if isinstance(v, str) and (v == ALL or v in allowed) else fallback

        try:
            sort_by = SortOption(blob.get("sortBy"))
        except ValueError:
            sort_by = default.sort_by

        query = blob.get("searchQuery")
        return cls(
            search_query=query if isinstance(query, str) else "",
            selected_platform=_pick(
                "selectedPlatform", {p.value for p in Platform}, ALL
            ),
            selected_category=_pick(
                "selectedCategory", {c.value for c in Category}, ALL
            ),
            selected_status=_pick("selectedStatus", {s.value for s in Status}, ALL),
            sort_by=sort_by,
        )


def _migrate_v0_to_v1(blob: Dict[str, Any]) -> Dict[str, Any]:
    # "private" was folded into "unavailable"; channel sort was retired.
    out = dict(blob)
    if out.get("selectedStatus") == "private":
        out["selectedStatus"] = Status.UNAVAILABLE.value
    if out.get("sortBy") == "channel-asc":
        out["sortBy"] = SortOption.NEWEST.value
    out["version"] = 1
    return out


_MIGRATIONS = {
    0: _migrate_v0_to_v1,
}


def migrate_filter_state(blob: Dict[str, Any]) -> Dict[str, Any]:
    """
    Pure, versioned forward migration of a persisted filter-state blob.

    Blobs without a version are treated as version 0. Defaults are
    merged in first so missing keys never survive a migration.
    """
    out: Dict[str, Any] = {**FilterState().to_blob(), "version": 0}
    out.update(blob)

    version = out.get("version")
    if not isinstance(version, int) or version < 0:
        version = 0
        out["version"] = 0

    while version < FILTER_STATE_VERSION:
        out = _MIGRATIONS[version](out)
        version = out["version"]

    return out


# ============================================================
# Facade
# ============================================================


class VanishedVideoPolicy(str, Enum):
    """What a playlist refresh does with videos gone from the playlist."""

    MARK = "mark"
    REMOVE = "remove"


class Settings:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # ---- credentials ----

    @property
    def api_key(self) -> Optional[str]:
        key = self.store.get(API_KEY_KEY)
        return key.strip() if key and key.strip() else None

    def set_api_key(self, key: str) -> None:
        self.store.set(API_KEY_KEY, key.strip())

    def clear_api_key(self) -> None:
        self.store.delete(API_KEY_KEY)

    @property
    def vanished_policy(self) -> VanishedVideoPolicy:
        raw = self.store.get(DELETED_VIDEOS_PREF_KEY)
        if raw == VanishedVideoPolicy.REMOVE.value:
            return VanishedVideoPolicy.REMOVE
        return VanishedVideoPolicy.MARK

    def set_vanished_policy(self, policy: VanishedVideoPolicy | str) -> None:
        self.store.set(DELETED_VIDEOS_PREF_KEY, VanishedVideoPolicy(policy).value)

    # ---- filter state ----

    def load_filter_state(self) -> FilterState:
        raw = self.store.get(FILTER_STATE_KEY)
        if not raw:
            return FilterState()
        try:
            blob = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Error loading filter state: {e}")
            return FilterState()
        if not isinstance(blob, dict):
            return FilterState()
        return FilterState.from_blob(migrate_filter_state(blob))

    def save_filter_state(self, state: FilterState) -> None:
        self.store.set(FILTER_STATE_KEY, json.dumps(state.to_blob()))

    # ---- backups ----

    def mark_backup(self, when_ms: Optional[int] = None) -> None:
        ms = when_ms if when_ms is not None else int(time.time() * 1000)
        self.store.set(LAST_BACKUP_KEY, str(ms))

    @property
    def last_backup_ms(self) -> Optional[int]:
        raw = self.store.get(LAST_BACKUP_KEY)
        try:
            return int(raw) if raw else None
        except ValueError:
            return None
