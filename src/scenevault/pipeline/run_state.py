from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import time

from scenevault.logger import get_logger

logger = get_logger(__name__)


class SyncStage(str, Enum):
    IDLE = "idle"
    VALIDATE_URL = "validate_url"
    BASIC_IMPORT = "basic_import"
    FETCH_METADATA = "fetch_metadata"
    FETCH_PAGES = "fetch_pages"
    DEDUP = "dedup"
    PERSIST_ITEMS = "persist_items"
    UPSERT_PLAYLIST_RECORD = "upsert_playlist_record"
    HANDLE_VANISHED = "handle_vanished"
    DONE = "done"
    ERROR = "error"


@dataclass
class RunProgress:
    current: int = 0
    total: int = 0

    def reset(self, total: int) -> None:
        self.current = 0
        self.total = total

    def advance(self, step: int = 1) -> None:
        self.current += step


@dataclass
class SyncState:
    """
    Runtime state of one playlist sync invocation.

    Mutated by the syncer only; callers treat it as read-only.
    """

    playlist_id: Optional[str] = None
    stage: SyncStage = SyncStage.IDLE
    pages_fetched: int = 0
    items_fetched: int = 0
    error_code: Optional[str] = None
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    def set_stage(self, stage: SyncStage) -> None:
        logger.debug(f"sync[{self.playlist_id or '?'}] {self.stage.value} -> {stage.value}")
        self.stage = stage

    def record_page(self, item_count: int) -> None:
        self.pages_fetched += 1
        self.items_fetched += item_count

    def finish_ok(self) -> None:
        self.set_stage(SyncStage.DONE)
        self.finished_at = time.time()

    def finish_failed(self, code: str) -> None:
        self.error_code = code
        self.set_stage(SyncStage.ERROR)
        self.finished_at = time.time()

    @property
    def runtime_seconds(self) -> float:
        end = self.finished_at or time.time()
        return round(end - self.started_at, 2)
