from __future__ import annotations

import re
from typing import Callable, Iterator, List, Optional

from scenevault.errors import NotFoundError, SizeLimitError, ValidationError
from scenevault.logger import get_logger
from scenevault.models import PlaylistItem
from scenevault.providers.youtube.api import MAX_PAGE_SIZE, YouTubeDataClient

logger = get_logger(__name__)

MAX_PLAYLIST_ITEMS = 500
PLAYLIST_URL = "https://www.youtube.com/playlist?list={playlist_id}"

_LIST_PARAM = re.compile(r"[?&]list=([^&#]+)")


def extract_playlist_id(url: str) -> str:
    """The `list=` query parameter of a playlist (or watch) URL."""
    match = _LIST_PARAM.search(url or "")
    if not match:
        raise ValidationError(
            "Invalid YouTube playlist URL. Please provide a valid playlist link.",
            code="INVALID_PLAYLIST_URL",
            detail=url,
        )
    return match.group(1)


def playlist_url(playlist_id: str) -> str:
    return PLAYLIST_URL.format(playlist_id=playlist_id)


class PlaylistItemFetcher:
    """
    Lazy, finite sequence of the items of one playlist.

    Iterating starts again from the first page every time. Pages are
    fetched strictly in continuation-token order; any page failure
    aborts the iteration with the provider error.
    """

    def __init__(
        self,
        client: YouTubeDataClient,
        playlist_id: str,
        *,
        page_size: int = MAX_PAGE_SIZE,
        max_items: int = MAX_PLAYLIST_ITEMS,
        on_page: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.client = client
        self.on_page = on_page
        self.playlist_id = playlist_id
        self.page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        self.max_items = max_items
        self.pages_fetched = 0

    def __iter__(self) -> Iterator[PlaylistItem]:
        page_token: Optional[str] = None
        fetched = 0
        self.pages_fetched = 0

        while True:
            page = self.client.fetch_playlist_page(
                self.playlist_id, self.page_size, page_token
            )
            self.pages_fetched += 1

            if not page.items:
                if self.pages_fetched == 1:
                    raise NotFoundError(
                        "No videos found in this playlist.",
                        code="NO_VIDEOS_FOUND",
                        detail=self.playlist_id,
                    )
                return

            fetched += len(page.items)
            if fetched > self.max_items:
                raise SizeLimitError(
                    detail=f"{self.playlist_id}: more than {self.max_items} items"
                )

            logger.debug(
                f"{self.playlist_id}: page {self.pages_fetched} "
                f"({len(page.items)} items, {fetched} so far)"
            )
            if self.on_page is not None:
                self.on_page(len(page.items))
            yield from page.items

            page_token = page.next_page_token
            if not page_token:
                return

    def fetch_all(self) -> List[PlaylistItem]:
        items = list(self)
        logger.info(
            f"Fetched {len(items)} item(s) of {self.playlist_id} "
            f"in {self.pages_fetched} page(s)"
        )
        return items
