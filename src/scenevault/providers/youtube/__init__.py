from scenevault.providers.youtube.api import (
    YouTubeDataClient,
    classify_http_error,
    execute_with_retry,
    validate_api_key,
)
from scenevault.providers.youtube.playlist import (
    PlaylistItemFetcher,
    extract_playlist_id,
    playlist_url,
)
from scenevault.providers.youtube.status import VideoStatusChecker, require_credentials

__all__ = [
    "YouTubeDataClient",
    "classify_http_error",
    "execute_with_retry",
    "validate_api_key",
    "PlaylistItemFetcher",
    "extract_playlist_id",
    "playlist_url",
    "VideoStatusChecker",
    "require_credentials",
]
