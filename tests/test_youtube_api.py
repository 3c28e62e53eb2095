import httplib2
import pytest

from fakes import PRIVATE, PUBLIC, NO_UPLOAD, FakeYouTube, client_for, http_error
from scenevault.errors import (
    CredentialError,
    NetworkError,
    NotFoundError,
    QuotaError,
    SceneVaultError,
    ValidationError,
)
from scenevault.models import ProviderStatus
from scenevault.providers.youtube import (
    YouTubeDataClient,
    classify_http_error,
    execute_with_retry,
    validate_api_key,
)
from scenevault.providers.youtube.api import (
    parse_playlist_item,
    parse_playlist_metadata,
    translate_http_error,
)
import scenevault.logger.state as log_state


# ----------------------------
# Classification
# ----------------------------


@pytest.mark.parametrize(
    "status,reason,message,expected",
    [
        (404, "playlistNotFound", "", "PLAYLIST_NOT_FOUND"),
        (403, "quotaExceeded", "", "QUOTA_EXCEEDED"),
        (403, "", "The request cannot be completed because you have exceeded your quota.", "QUOTA_EXCEEDED"),
        (403, "forbidden", "", "INVALID_API_KEY"),
        (400, "keyInvalid", "", "INVALID_API_KEY"),
        (400, "", "API key not valid. Please pass a valid API key.", "INVALID_API_KEY"),
        (400, "invalidParameter", "bad part", "UNKNOWN"),
        (503, "backendError", "", "TRANSIENT"),
        (429, "", "", "TRANSIENT"),
    ],
)
def test_classify_http_error(status, reason, message, expected):
    assert classify_http_error(http_error(status, reason, message)) == expected


@pytest.mark.parametrize(
    "status,reason,cls,code",
    [
        (404, "playlistNotFound", NotFoundError, "PLAYLIST_NOT_FOUND"),
        (403, "quotaExceeded", QuotaError, "QUOTA_EXCEEDED"),
        (400, "keyInvalid", CredentialError, "INVALID_API_KEY"),
        (503, "backendError", NetworkError, "NETWORK_ERROR"),
    ],
)
def test_translate_http_error(status, reason, cls, code):
    err = translate_http_error(http_error(status, reason, ""))

    assert type(err) is cls
    assert err.code == code
    assert err.user_message == cls.default_message


# ----------------------------
# Retry
# ----------------------------


def test_retry_recovers_from_transient_errors():
    calls = []
    sleeps = []

    def op():
        calls.append(1)
        if len(calls) < 3:
            raise http_error(503)
        return "ok"

    out = execute_with_retry(op, "op", max_retries=3, backoff_base=0.5, sleep=sleeps.append)

    assert out == "ok"
    assert sleeps == [0.5, 1.0]


def test_retry_gives_up_with_network_error():
    def op():
        raise httplib2.ServerNotFoundError("no dns")

    with pytest.raises(NetworkError):
        execute_with_retry(op, "op", max_retries=2, sleep=lambda s: None)


def test_quota_is_not_retried():
    calls = []

    def op():
        calls.append(1)
        raise http_error(403, "quotaExceeded")

    with pytest.raises(QuotaError):
        execute_with_retry(op, "op", max_retries=5, sleep=lambda s: None)
    assert len(calls) == 1


# ----------------------------
# Payload mapping
# ----------------------------


def test_metadata_defaults_and_thumbnail_order():
    meta = parse_playlist_metadata(
        {
            "items": [
                {
                    "snippet": {
                        "thumbnails": {
                            "high": {"url": "hi.jpg"},
                            "default": {"url": "def.jpg"},
                        }
                    },
                    "contentDetails": {"itemCount": 7},
                }
            ]
        }
    )

    assert meta.title == "Untitled Playlist"
    assert meta.thumbnail == "def.jpg"
    assert meta.video_count == 7


def test_metadata_without_items_is_not_found():
    with pytest.raises(NotFoundError):
        parse_playlist_metadata({"items": []})


def test_item_defaults():
    item = parse_playlist_item({"snippet": {"resourceId": {"videoId": "abc123"}}})

    assert item.title == "Untitled"
    assert item.channel_name == "Unknown Channel"
    assert item.thumbnail == ""
    assert item.upload_date
    assert item.url == "https://www.youtube.com/watch?v=abc123"


# ----------------------------
# Client
# ----------------------------


def test_client_requires_key():
    with pytest.raises(CredentialError) as exc:
        YouTubeDataClient("  ")
    assert exc.value.code == "MISSING_API_KEY"


def test_client_registers_key_as_secret():
    client_for(FakeYouTube())

    assert "AIzaTEST-key-0123456789" in log_state.SECRETS


def test_fetch_metadata_call_shape():
    fake = FakeYouTube(playlists={"PL1": {"title": "Mix", "itemCount": 3}})

    meta = client_for(fake).fetch_playlist_metadata("PL1")

    assert meta.title == "Mix"
    assert fake.calls_to("playlists") == [{"part": "snippet,contentDetails", "id": "PL1"}]


def test_fetch_page_clamps_page_size():
    fake = FakeYouTube(items={"PL1": []})

    client_for(fake).fetch_playlist_page("PL1", page_size=500)

    assert fake.calls_to("playlistItems")[0]["maxResults"] == 50


def test_video_statuses_classification_in_input_order():
    fake = FakeYouTube(videos={"a": PUBLIC, "b": PRIVATE, "c": NO_UPLOAD})

    results = client_for(fake).fetch_video_statuses(["d", "c", "b", "a"])

    assert [r.video_id for r in results] == ["d", "c", "b", "a"]
    assert [r.status for r in results] == [
        ProviderStatus.UNAVAILABLE,
        ProviderStatus.UNAVAILABLE,
        ProviderStatus.PRIVATE,
        ProviderStatus.AVAILABLE,
    ]
    [call] = fake.calls_to("videos")
    assert call["part"] == "status"
    assert call["id"] == "d,c,b,a"


def test_video_status_failure_degrades_batch():
    fake = FakeYouTube(videos={"a": PUBLIC})
    fake.errors["videos"] = [http_error(403, "quotaExceeded")]

    results = client_for(fake).fetch_video_statuses(["a", "b"])

    assert [r.status for r in results] == [ProviderStatus.UNAVAILABLE] * 2
    assert {r.error for r in results} == {"QUOTA_EXCEEDED"}


def test_video_statuses_rejects_oversized_batch():
    with pytest.raises(ValueError):
        client_for(FakeYouTube()).fetch_video_statuses([str(i) for i in range(51)])


# ----------------------------
# Key validation
# ----------------------------


def test_validate_api_key_ok():
    fake = FakeYouTube()

    validate_api_key("AIzaGOOD-key-0123", youtube=fake)

    assert fake.calls_to("videos") == [{"part": "id", "id": "test"}]


@pytest.mark.parametrize(
    "error,cls,message",
    [
        (http_error(403, "forbidden"), CredentialError, "Invalid API key. Please check"),
        (http_error(400, "keyInvalid"), CredentialError, "Invalid API key format."),
        (http_error(500), NetworkError, "Failed to validate API key"),
        (httplib2.ServerNotFoundError("dns"), NetworkError, "Failed to validate API key"),
    ],
)
def test_validate_api_key_failures(error, cls, message):
    fake = FakeYouTube()
    fake.errors["videos"] = [error]

    with pytest.raises(cls) as exc:
        validate_api_key("AIzaBAD-key-0123", youtube=fake)
    assert exc.value.user_message.startswith(message)


def test_validate_api_key_requires_value():
    with pytest.raises(ValidationError):
        validate_api_key("")


def test_unknown_http_error_is_generic_domain_error():
    def op():
        raise http_error(400, "invalidParameter", "bad part")

    with pytest.raises(SceneVaultError) as exc:
        execute_with_retry(op, "op", sleep=lambda s: None)
    assert exc.value.code == "UNKNOWN"
