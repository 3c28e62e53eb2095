"""
reconcile.py

Bulk re-check of YouTube availability for the owner's scenes.

The whole id list is checked first (batched + paced by the status
checker); credential and quota failures surface before any write. The
results are then applied one write at a time with progress reporting and
a cancellation point between writes. Cancelling keeps the writes already
made.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from scenevault.errors import PersistenceError
from scenevault.logger import get_logger
from scenevault.models import Platform, Scene, Status
from scenevault.pipeline import CancelToken, ProgressCallback, RunProgress, report
from scenevault.providers.youtube import (
    VideoStatusChecker,
    YouTubeDataClient,
    require_credentials,
)
from scenevault.settings import Settings
from scenevault.store import Store

logger = get_logger(__name__)

CheckerFactory = Callable[[YouTubeDataClient], VideoStatusChecker]


class ReconcileStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_VIDEOS_FOUND = "no_videos_found"
    MISSING_API_KEY = "missing_api_key"


@dataclass(frozen=True)
class ReconcileOutcome:
    status: ReconcileStatus
    total: int = 0
    checked: int = 0
    available: int = 0
    unavailable: int = 0

    @property
    def cancelled(self) -> bool:
        return self.status is ReconcileStatus.CANCELLED


def checkable(scenes: List[Scene]) -> List[Scene]:
    return [s for s in scenes if s.platform is Platform.YOUTUBE and s.video_id]


class StatusReconciler:
    def __init__(
        self,
        store: Store,
        settings: Settings,
        user_id: str,
        *,
        client_factory: Optional[Callable[[str], YouTubeDataClient]] = None,
        checker_factory: Optional[CheckerFactory] = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.user_id = user_id
        self.client_factory = client_factory or YouTubeDataClient
        self.checker_factory: CheckerFactory = checker_factory or VideoStatusChecker
        self.progress = RunProgress()

    def _checker(self) -> Optional[VideoStatusChecker]:
        key = self.settings.api_key
        if not key:
            return None
        return self.checker_factory(self.client_factory(key))

    def check_all(
        self,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ReconcileOutcome:
        scenes = checkable(self.store.list_scenes(self.user_id))
        if not scenes:
            logger.info("No YouTube videos to check")
            return ReconcileOutcome(ReconcileStatus.NO_VIDEOS_FOUND)

        checker = self._checker()
        if checker is None:
            logger.warning("No API key stored; status check skipped")
            return ReconcileOutcome(ReconcileStatus.MISSING_API_KEY, total=len(scenes))

        total = len(scenes)
        logger.info(f"Checking {total} video(s)")
        results = checker.check([s.video_id or "" for s in scenes], cancel=cancel)
        require_credentials(results)

        self.progress.reset(total)
        available = unavailable = 0

        for scene, result in zip(scenes, results):
            if cancel is not None and cancel.cancelled:
                break

            status = result.status.normalized()
            self.store.update_scene(self.user_id, scene.id, {"status": status})

            if status is Status.AVAILABLE:
                available += 1
            else:
                unavailable += 1
            self.progress.advance()
            report(progress, self.progress.current, total)

        checked = available + unavailable
        cancelled = checked < total
        logger.info(
            f"Status check {'cancelled' if cancelled else 'done'}: "
            f"{checked}/{total} checked, {available} available, {unavailable} unavailable"
        )
        return ReconcileOutcome(
            ReconcileStatus.CANCELLED if cancelled else ReconcileStatus.COMPLETED,
            total=total,
            checked=checked,
            available=available,
            unavailable=unavailable,
        )

    def check_scene(self, scene_id: str) -> ReconcileOutcome:
        """Single-scene variant of check_all (no progress reporting)."""
        scene = next(
            (s for s in self.store.list_scenes(self.user_id) if s.id == scene_id),
            None,
        )
        if scene is None:
            raise PersistenceError("Scene not found.", code="NOT_FOUND", detail=scene_id)

        if not checkable([scene]):
            return ReconcileOutcome(ReconcileStatus.NO_VIDEOS_FOUND)

        checker = self._checker()
        if checker is None:
            return ReconcileOutcome(ReconcileStatus.MISSING_API_KEY, total=1)

        results = checker.check([scene.video_id or ""])
        require_credentials(results)

        status = results[0].status.normalized()
        self.store.update_scene(self.user_id, scene.id, {"status": status})
        logger.info(f"Scene {scene_id} ({scene.video_id}) is {status.value}")

        is_available = status is Status.AVAILABLE
        return ReconcileOutcome(
            ReconcileStatus.COMPLETED,
            total=1,
            checked=1,
            available=int(is_available),
            unavailable=int(not is_available),
        )
