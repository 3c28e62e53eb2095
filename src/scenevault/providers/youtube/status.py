"""
status.py

Batched video availability checks.

Ids are chunked into batches (<= 50, one provider call each) with a
pacing delay between consecutive batches. Results come back one per id,
in input order; a failing batch degrades to `unavailable` rather than
aborting the run.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from scenevault.errors import CredentialError, QuotaError
from scenevault.logger import get_logger
from scenevault.models import VideoStatusResult
from scenevault.pipeline import CancelToken, FixedDelayPacer, Pacer
from scenevault.providers.youtube.api import MAX_PAGE_SIZE, YouTubeDataClient

logger = get_logger(__name__)

STATUS_BATCH_SIZE = 50


def chunked(ids: Sequence[str], size: int) -> Iterator[List[str]]:
    for i in range(0, len(ids), size):
        yield list(ids[i : i + size])


class VideoStatusChecker:
    def __init__(
        self,
        client: YouTubeDataClient,
        *,
        batch_size: int = STATUS_BATCH_SIZE,
        pacer: Optional[Pacer] = None,
    ) -> None:
        self.client = client
        self.batch_size = max(1, min(batch_size, MAX_PAGE_SIZE))
        self.pacer = pacer if pacer is not None else FixedDelayPacer(0.1)

    def check(
        self, ids: Sequence[str], cancel: Optional[CancelToken] = None
    ) -> List[VideoStatusResult]:
        results: List[VideoStatusResult] = []

        for n, batch in enumerate(chunked(list(ids), self.batch_size)):
            if cancel is not None and cancel.cancelled:
                logger.info(f"Status check cancelled after {len(results)} id(s)")
                break
            if n > 0:
                self.pacer.wait()

            results.extend(self.client.fetch_video_statuses(batch))
            logger.debug(f"Checked batch {n + 1} ({len(results)}/{len(ids)})")

        return results


def require_credentials(results: Sequence[VideoStatusResult]) -> None:
    """Raise the first credential or quota failure found in the results."""
    for r in results:
        if r.error == QuotaError.default_code:
            raise QuotaError(detail=f"video {r.video_id}")
        if r.error in (CredentialError.default_code, "MISSING_API_KEY"):
            raise CredentialError(detail=f"video {r.video_id}")
