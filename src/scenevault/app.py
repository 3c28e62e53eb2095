"""
app.py

Wires the runtime environment into the collaborators used by the CLI:
row store, local settings, YouTube client factory, and the stage services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from scenevault.env import Environment, get_env
from scenevault.pipeline import FixedDelayPacer
from scenevault.providers.youtube import VideoStatusChecker, YouTubeDataClient
from scenevault.settings import LocalSettingsStore, Settings
from scenevault.stages.library import SceneLibrary
from scenevault.stages.reconcile import StatusReconciler
from scenevault.stages.sync import PlaylistSyncer
from scenevault.store import Store, build_store


def youtube_client_factory(env: Environment) -> Callable[[str], YouTubeDataClient]:
    def _build(api_key: str) -> YouTubeDataClient:
        return YouTubeDataClient(
            api_key,
            max_retries=env.max_retries,
            backoff_base=env.backoff_base_sec,
        )

    return _build


def status_checker_factory(
    env: Environment,
) -> Callable[[YouTubeDataClient], VideoStatusChecker]:
    def _build(client: YouTubeDataClient) -> VideoStatusChecker:
        return VideoStatusChecker(
            client,
            batch_size=env.status_batch_size,
            pacer=FixedDelayPacer(env.status_pacing_sec),
        )

    return _build


@dataclass
class AppContext:
    env: Environment
    store: Store
    settings: Settings
    library: SceneLibrary
    syncer: PlaylistSyncer
    reconciler: StatusReconciler

    @property
    def user_id(self) -> str:
        return self.env.user_id


def build_context(
    env: Optional[Environment] = None,
    *,
    store: Optional[Store] = None,
    settings: Optional[Settings] = None,
    client_factory: Optional[Callable[[str], YouTubeDataClient]] = None,
) -> AppContext:
    env = env or get_env()
    store = store or build_store(env)
    settings = settings or Settings(LocalSettingsStore(env.settings_path))
    clients = client_factory or youtube_client_factory(env)

    return AppContext(
        env=env,
        store=store,
        settings=settings,
        library=SceneLibrary(store, env.user_id),
        syncer=PlaylistSyncer(
            store,
            settings,
            env.user_id,
            client_factory=clients,
            page_size=env.page_size,
            max_items=env.max_playlist_items,
        ),
        reconciler=StatusReconciler(
            store,
            settings,
            env.user_id,
            client_factory=clients,
            checker_factory=status_checker_factory(env),
        ),
    )
