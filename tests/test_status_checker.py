import pytest

from fakes import PRIVATE, PUBLIC, FakeYouTube, client_for, http_error
from scenevault.errors import CredentialError, QuotaError
from scenevault.models import ProviderStatus, VideoStatusResult
from scenevault.pipeline import CancelToken
from scenevault.providers.youtube import VideoStatusChecker, require_credentials
from scenevault.providers.youtube.status import chunked


class CountingPacer:
    def __init__(self):
        self.waits = 0

    def wait(self):
        self.waits += 1


def test_chunked():
    assert list(chunked(["a", "b", "c"], 2)) == [["a", "b"], ["c"]]
    assert list(chunked([], 50)) == []


def test_batches_of_fifty_with_pacing_between():
    ids = [f"v{i}" for i in range(120)]
    fake = FakeYouTube(videos={i: PUBLIC for i in ids})
    pacer = CountingPacer()

    results = VideoStatusChecker(client_for(fake), pacer=pacer).check(ids)

    assert len(results) == 120
    assert [r.video_id for r in results] == ids
    assert [len(c["id"].split(",")) for c in fake.calls_to("videos")] == [50, 50, 20]
    assert pacer.waits == 2


def test_private_and_missing_videos():
    fake = FakeYouTube(videos={"a": PUBLIC, "b": PRIVATE})

    results = VideoStatusChecker(client_for(fake), pacer=CountingPacer()).check(["a", "b", "c"])

    assert [r.status for r in results] == [
        ProviderStatus.AVAILABLE,
        ProviderStatus.PRIVATE,
        ProviderStatus.UNAVAILABLE,
    ]


def test_failed_batch_does_not_stop_later_batches():
    ids = [f"v{i}" for i in range(60)]
    fake = FakeYouTube(videos={i: PUBLIC for i in ids})
    fake.errors["videos"] = [http_error(404)]

    results = VideoStatusChecker(client_for(fake), pacer=CountingPacer()).check(ids)

    assert all(r.status is ProviderStatus.UNAVAILABLE for r in results[:50])
    assert all(r.status is ProviderStatus.AVAILABLE for r in results[50:])


def test_cancel_stops_before_next_batch():
    ids = [f"v{i}" for i in range(120)]
    fake = FakeYouTube(videos={i: PUBLIC for i in ids})
    token = CancelToken()

    class CancelAfterFirst(CountingPacer):
        def wait(self):
            super().wait()
            token.cancel()

    checker = VideoStatusChecker(client_for(fake), pacer=CancelAfterFirst())
    results = checker.check(ids, cancel=token)

    assert len(results) == 100
    assert len(fake.calls_to("videos")) == 2


def test_require_credentials():
    ok = [VideoStatusResult("a", ProviderStatus.UNAVAILABLE, error="PLAYLIST_NOT_FOUND")]
    require_credentials(ok)

    with pytest.raises(QuotaError):
        require_credentials(
            ok + [VideoStatusResult("b", ProviderStatus.UNAVAILABLE, error="QUOTA_EXCEEDED")]
        )
    with pytest.raises(CredentialError):
        require_credentials(
            [VideoStatusResult("c", ProviderStatus.UNAVAILABLE, error="INVALID_API_KEY")]
        )
