"""
api.py

YouTube Data API access (API-key auth).

Responsibilities:
- Build the googleapiclient resource from an API key
- Retry transient failures with exponential backoff
- HTTP -> domain error translation (INVALID_API_KEY, QUOTA_EXCEEDED, ...)
- Map provider payloads to PlaylistMetadata / PlaylistPage / VideoStatusResult

Does NOT:
- Follow continuation tokens (see playlist.py)
- Pace batches (see status.py)
- Touch persistence
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from scenevault.errors import (
    CredentialError,
    NetworkError,
    NotFoundError,
    SceneVaultError,
    ValidationError,
    error_for_code,
)
from scenevault.logger import get_logger, register_secret
from scenevault.models import (
    PlaylistItem,
    PlaylistMetadata,
    PlaylistPage,
    ProviderStatus,
    VideoStatusResult,
    now_iso,
)

logger = get_logger(__name__)
T = TypeVar("T")

MAX_PAGE_SIZE = 50
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

# ============================================================
# Error detection helpers
# ============================================================

_QUOTA_REASONS = ("quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded")
_KEY_REASONS = ("keyInvalid", "keyExpired", "forbidden", "accessNotConfigured")


def _error_payload(e: HttpError) -> Dict[str, Any]:
    try:
        raw = e.content.decode("utf-8", errors="ignore") if e.content else ""
        data = json.loads(raw) if raw else {}
        return data if isinstance(data, dict) else {}
    except (ValueError, AttributeError):
        return {}


def _error_message(e: HttpError) -> str:
    err = _error_payload(e).get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    return str(getattr(e, "reason", "") or e)


def _error_reasons(e: HttpError) -> List[str]:
    err = _error_payload(e).get("error")
    if not isinstance(err, dict):
        return []
    return [
        str(item.get("reason"))
        for item in err.get("errors", [])
        if isinstance(item, dict) and item.get("reason")
    ]


def _http_status(e: HttpError) -> int:
    return int(getattr(getattr(e, "resp", None), "status", 0) or 0)


def is_transient_status(status_code: int) -> bool:
    return status_code in (429, 500, 502, 503, 504)


def classify_http_error(e: HttpError) -> str:
    """
    Returns one of: QUOTA_EXCEEDED, INVALID_API_KEY, PLAYLIST_NOT_FOUND,
    TRANSIENT, UNKNOWN.
    """
    status = _http_status(e)
    reasons = _error_reasons(e)
    message = _error_message(e).lower()

    if status == 404:
        return "PLAYLIST_NOT_FOUND"

    if status == 403:
        if any(r in _QUOTA_REASONS for r in reasons) or "quota" in message:
            return "QUOTA_EXCEEDED"
        return "INVALID_API_KEY"

    if status == 400 and (
        any(r in _KEY_REASONS for r in reasons) or "api key" in message
    ):
        return "INVALID_API_KEY"

    if is_transient_status(status):
        return "TRANSIENT"

    return "UNKNOWN"


def translate_http_error(e: HttpError) -> SceneVaultError:
    kind = classify_http_error(e)
    detail = f"HTTP {_http_status(e)}: {_error_message(e)}"

    if kind == "TRANSIENT":
        return NetworkError(detail=detail)
    if kind == "UNKNOWN":
        return SceneVaultError(_error_message(e) or None, code=kind, detail=detail)
    return error_for_code(kind, detail=detail)


# Transport-level failures (DNS, sockets, TLS, timeouts)
_NETWORK_EXCEPTIONS = (OSError, httplib2.HttpLib2Error)


# ============================================================
# Retry engine
# ============================================================


def execute_with_retry(
    operation: Callable[[], T],
    name: str = "",
    *,
    max_retries: int = 3,
    backoff_base: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run operation(), retrying transient HTTP statuses and transport errors.

    Quota, credential and not-found errors are raised immediately as
    domain errors; they never get better by retrying.
    """
    attempts = max(1, max_retries)
    last_error: Optional[SceneVaultError] = None

    for attempt in range(attempts):
        try:
            return operation()

        except HttpError as e:
            err = translate_http_error(e)
            if not isinstance(err, NetworkError):
                raise err from e
            last_error = err

        except _NETWORK_EXCEPTIONS as e:
            last_error = NetworkError(detail=f"{type(e).__name__}: {e}")

        if attempt == attempts - 1:
            break

        sleep_time = backoff_base * (2**attempt)
        logger.warning(
            f"{name} failed (attempt {attempt + 1}/{attempts}), "
            f"retrying in {sleep_time}s: {last_error.detail}"
        )
        sleep(sleep_time)

    assert last_error is not None
    logger.error(f"{name} failed after {attempts} attempt(s): {last_error.detail}")
    raise last_error


# ============================================================
# Payload mapping
# ============================================================


def _pick_thumbnail(thumbnails: Any, order: tuple[str, ...]) -> str:
    if not isinstance(thumbnails, dict):
        return ""
    for size in order:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return str(url)
    return ""


def parse_playlist_metadata(resp: Dict[str, Any]) -> PlaylistMetadata:
    items = resp.get("items") or []
    if not items:
        raise NotFoundError(detail="playlists.list returned no items")

    playlist = items[0]
    snippet = playlist.get("snippet") or {}
    content = playlist.get("contentDetails") or {}

    count = content.get("itemCount")
    return PlaylistMetadata(
        title=(snippet.get("title") or "Untitled Playlist").strip(),
        description=(snippet.get("description") or "").strip(),
        thumbnail=_pick_thumbnail(
            snippet.get("thumbnails"), ("medium", "default", "high")
        ),
        video_count=count if isinstance(count, int) else 0,
    )


def parse_playlist_item(raw: Dict[str, Any]) -> PlaylistItem:
    snippet = raw.get("snippet") or {}
    video_id = (snippet.get("resourceId") or {}).get("videoId") or ""
    return PlaylistItem(
        title=snippet.get("title") or "Untitled",
        video_id=video_id,
        thumbnail=_pick_thumbnail(snippet.get("thumbnails"), ("medium", "default")),
        channel_name=snippet.get("channelTitle") or "Unknown Channel",
        upload_date=snippet.get("publishedAt") or now_iso(),
        url=WATCH_URL.format(video_id=video_id),
    )


def parse_playlist_page(resp: Dict[str, Any]) -> PlaylistPage:
    page_info = resp.get("pageInfo") or {}
    return PlaylistPage(
        items=[parse_playlist_item(it) for it in resp.get("items") or []],
        next_page_token=resp.get("nextPageToken") or None,
        total_results=int(page_info.get("totalResults") or 0),
    )


def classify_video(video_id: str, found: Optional[Dict[str, Any]]) -> VideoStatusResult:
    if not found:
        return VideoStatusResult(video_id, ProviderStatus.UNAVAILABLE)

    status = found.get("status") or {}
    if not status.get("uploadStatus"):
        return VideoStatusResult(video_id, ProviderStatus.UNAVAILABLE)

    if (status.get("privacyStatus") or "public") == "private":
        return VideoStatusResult(video_id, ProviderStatus.PRIVATE)

    return VideoStatusResult(video_id, ProviderStatus.AVAILABLE)


# ============================================================
# Client
# ============================================================


class YouTubeDataClient:
    """
    Thin wrapper over the `youtube/v3` resource.

    `youtube` may be injected (tests); otherwise it is built lazily from
    the API key on first use.
    """

    def __init__(
        self,
        api_key: str,
        *,
        youtube: Any = None,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not api_key or not api_key.strip():
            raise CredentialError(
                "Please add your YouTube API key in Settings first.",
                code="MISSING_API_KEY",
            )
        self.api_key = api_key.strip()
        register_secret(self.api_key)
        self._youtube = youtube
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep

    @property
    def youtube(self) -> Any:
        if self._youtube is None:
            try:
                self._youtube = build(
                    "youtube",
                    "v3",
                    developerKey=self.api_key,
                    cache_discovery=False,
                )
            except _NETWORK_EXCEPTIONS as e:
                raise NetworkError(detail=f"Failed to build YouTube client: {e}") from e
            logger.debug("Built YouTube Data API client")
        return self._youtube

    def _execute(self, operation: Callable[[], T], name: str) -> T:
        return execute_with_retry(
            operation,
            name,
            max_retries=self.max_retries,
            backoff_base=self.backoff_base,
            sleep=self._sleep,
        )

    # ----------------------------
    # Metadata
    # ----------------------------

    def fetch_playlist_metadata(self, playlist_id: str) -> PlaylistMetadata:
        def _op() -> Any:
            return (
                self.youtube.playlists()
                .list(part="snippet,contentDetails", id=playlist_id)
                .execute()
            )

        resp = self._execute(_op, f"playlists.list {playlist_id}")
        meta = parse_playlist_metadata(resp)
        logger.debug(
            f"Playlist {playlist_id}: '{meta.title}' ({meta.video_count} videos)"
        )
        return meta

    # ----------------------------
    # Items (one page)
    # ----------------------------

    def fetch_playlist_page(
        self,
        playlist_id: str,
        page_size: int = MAX_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PlaylistPage:
        size = max(1, min(page_size, MAX_PAGE_SIZE))

        def _op() -> Any:
            return (
                self.youtube.playlistItems()
                .list(
                    part="snippet",
                    playlistId=playlist_id,
                    maxResults=size,
                    pageToken=page_token,
                )
                .execute()
            )

        resp = self._execute(_op, f"playlistItems.list {playlist_id}")
        return parse_playlist_page(resp)

    # ----------------------------
    # Video status (one provider call, <= 50 ids)
    # ----------------------------

    def fetch_video_statuses(self, video_ids: List[str]) -> List[VideoStatusResult]:
        """
        Classify up to 50 ids with one videos.list call.

        Never raises for provider errors: a failed call degrades every id
        of this batch to `unavailable` with the error code attached.
        """
        if len(video_ids) > MAX_PAGE_SIZE:
            raise ValueError(f"At most {MAX_PAGE_SIZE} ids per call")
        if not video_ids:
            return []

        def _op() -> Any:
            return (
                self.youtube.videos()
                .list(part="status", id=",".join(video_ids), maxResults=MAX_PAGE_SIZE)
                .execute()
            )

        try:
            resp = self._execute(_op, f"videos.list ({len(video_ids)} ids)")
        except SceneVaultError as e:
            logger.warning(f"videos.list failed; marking batch unavailable ({e.code})")
            return [
                VideoStatusResult(vid, ProviderStatus.UNAVAILABLE, error=e.code)
                for vid in video_ids
            ]

        by_id = {
            it.get("id"): it for it in resp.get("items") or [] if isinstance(it, dict)
        }
        return [classify_video(vid, by_id.get(vid)) for vid in video_ids]

    # ----------------------------
    # Key validation
    # ----------------------------

    def validate_api_key(self) -> None:
        """Cheap authenticated call; raises CredentialError for a bad key."""
        try:
            self.youtube.videos().list(part="id", id="test").execute()
        except HttpError as e:
            status = _http_status(e)
            detail = f"HTTP {status}: {_error_message(e)}"
            if status == 403:
                raise CredentialError(
                    "Invalid API key. Please check your YouTube Data API key.",
                    detail=detail,
                ) from e
            if status == 400:
                raise CredentialError("Invalid API key format.", detail=detail) from e
            raise NetworkError(
                "Failed to validate API key. Please try again.", detail=detail
            ) from e
        except _NETWORK_EXCEPTIONS as e:
            raise NetworkError(
                "Failed to validate API key. Please try again.", detail=str(e)
            ) from e
        logger.info("API key validated")


def validate_api_key(api_key: str, *, youtube: Any = None) -> None:
    if not api_key or not api_key.strip():
        raise ValidationError("API key is required.")
    YouTubeDataClient(api_key, youtube=youtube).validate_api_key()
