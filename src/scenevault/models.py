"""
models.py

Data model shared by stores, providers and stages.

Row shape (what stores persist and JSON exports contain) uses the
snake_case keys of the backing tables: `scenes` and `youtube_playlists`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ----------------------------
# Enums
# ----------------------------


class Platform(str, Enum):
    YOUTUBE = "YouTube"
    JIOHOTSTAR = "JioHotstar"
    ZEE5 = "Zee5"
    SONYLIV = "SonyLIV"
    OTHER = "Other"

    @classmethod
    def from_string(cls, value: Any) -> Platform:
        try:
            return cls.parse(value)
        except ValueError:
            return cls.OTHER

    @classmethod
    def parse(cls, value: Any) -> Platform:
        """Strict, case-insensitive parse; raises ValueError for unknown platforms."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        raise ValueError(f"Invalid platform: {value!r}")


class Category(str, Enum):
    FM = "F/M"
    FF = "F/F"
    MF = "M/F"
    MM = "M/M"

    @classmethod
    def parse(cls, value: Any) -> Category:
        """Strict parse; raises ValueError for anything not a category."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid category: {value!r}")
        return cls(value.strip().upper())


class Status(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"

    @classmethod
    def from_string(cls, value: Any) -> Status:
        # Anything that is not explicitly available is stored as unavailable.
        if isinstance(value, str) and value.strip().lower() == "available":
            return cls.AVAILABLE
        return cls.UNAVAILABLE


class ProviderStatus(str, Enum):
    """Availability as classified by the provider (transient, never stored)."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    PRIVATE = "private"

    def normalized(self) -> Status:
        return Status.AVAILABLE if self is ProviderStatus.AVAILABLE else Status.UNAVAILABLE


class SourceType(str, Enum):
    MANUAL = "manual"
    YOUTUBE_PLAYLIST = "youtube_playlist"

    @classmethod
    def from_string(cls, value: Any) -> SourceType:
        if isinstance(value, str) and value.strip().lower() == "youtube_playlist":
            return cls.YOUTUBE_PLAYLIST
        return cls.MANUAL


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"


# ----------------------------
# Scene (tracked item)
# ----------------------------

_ENUM_FIELDS = ("platform", "category", "status", "source_type")


@dataclass
class Scene:
    title: str
    platform: Platform
    category: Category
    status: Status = Status.AVAILABLE
    source_type: SourceType = SourceType.MANUAL
    url: Optional[str] = None
    thumbnail: Optional[str] = None
    timestamp: Optional[str] = None
    notes: Optional[str] = None
    playlist_id: Optional[str] = None
    video_id: Optional[str] = None
    channel_name: Optional[str] = None
    upload_date: Optional[str] = None
    id: str = ""
    user_id: str = ""
    created_at: str = ""
    updated_at: str = ""

    @property
    def dedup_key(self) -> Optional[tuple[str, str]]:
        if self.platform is not Platform.YOUTUBE or not self.playlist_id:
            return None
        if not self.video_id:
            return None
        return (self.playlist_id, self.video_id)

    def check_invariants(self) -> None:
        if self.source_type is SourceType.YOUTUBE_PLAYLIST:
            if self.platform is not Platform.YOUTUBE or not self.playlist_id:
                raise ValueError(
                    "youtube_playlist scenes must be on YouTube with a playlist_id"
                )
        if self.video_id and self.platform is not Platform.YOUTUBE:
            raise ValueError("only YouTube scenes carry a video_id")

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        for k in _ENUM_FIELDS:
            row[k] = getattr(self, k).value
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> Scene:
        known = {f.name for f in fields(cls)}
        data = {k: v for k, v in row.items() if k in known}

        data["platform"] = Platform.from_string(row.get("platform"))
        try:
            data["category"] = Category.parse(row.get("category"))
        except ValueError:
            data["category"] = Category.FM
        raw_status = row.get("status")
        if raw_status is None or (isinstance(raw_status, str) and not raw_status.strip()):
            data["status"] = Status.AVAILABLE
        else:
            data["status"] = Status.from_string(raw_status)
        data["source_type"] = SourceType.from_string(row.get("source_type"))
        data["title"] = str(row.get("title") or "")

        for k in ("id", "user_id", "created_at", "updated_at"):
            data[k] = str(row.get(k) or "")

        return cls(**data)


# Fields a caller may change through update-by-id.
SCENE_MUTABLE_FIELDS = frozenset(
    {
        "title",
        "platform",
        "category",
        "status",
        "url",
        "thumbnail",
        "timestamp",
        "notes",
        "channel_name",
        "upload_date",
        "video_id",
    }
)


# ----------------------------
# Playlist record
# ----------------------------


@dataclass
class PlaylistRecord:
    playlist_id: str
    title: str
    description: str = ""
    thumbnail: str = ""
    video_count: int = 0
    id: str = ""
    user_id: str = ""
    imported_at: str = ""
    updated_at: str = ""

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> PlaylistRecord:
        try:
            count = int(row.get("video_count") or 0)
        except (TypeError, ValueError):
            count = 0
        return cls(
            playlist_id=str(row.get("playlist_id") or ""),
            title=str(row.get("title") or ""),
            description=str(row.get("description") or ""),
            thumbnail=str(row.get("thumbnail") or ""),
            video_count=count,
            id=str(row.get("id") or ""),
            user_id=str(row.get("user_id") or ""),
            imported_at=str(row.get("imported_at") or ""),
            updated_at=str(row.get("updated_at") or ""),
        )


# ----------------------------
# Provider-side shapes
# ----------------------------


@dataclass(frozen=True)
class PlaylistMetadata:
    title: str
    description: str = ""
    thumbnail: str = ""
    video_count: int = 0


@dataclass(frozen=True)
class PlaylistItem:
    title: str
    video_id: str
    thumbnail: str
    channel_name: str
    upload_date: str
    url: str


@dataclass(frozen=True)
class PlaylistPage:
    items: list[PlaylistItem]
    next_page_token: Optional[str]
    total_results: int = 0


@dataclass(frozen=True)
class VideoStatusResult:
    video_id: str
    status: ProviderStatus
    error: Optional[str] = None


# ----------------------------
# Aggregates
# ----------------------------


@dataclass
class Stats:
    total: int = 0
    available: int = 0
    unavailable: int = 0
    by_platform: Dict[str, int] = field(
        default_factory=lambda: {p.value: 0 for p in Platform}
    )
    by_category: Dict[str, int] = field(
        default_factory=lambda: {c.value: 0 for c in Category}
    )
