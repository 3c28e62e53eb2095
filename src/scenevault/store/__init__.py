from __future__ import annotations

from scenevault.env import Environment
from scenevault.store.base import PlaylistStore, SceneStore, Store
from scenevault.store.json_file import JsonFileStore
from scenevault.store.memory import MemoryStore
from scenevault.store.rest import RestStore


def build_store(env: Environment) -> Store:
    if env.store_kind == "memory":
        return MemoryStore()

    if env.store_kind == "rest":
        return RestStore(
            env.supabase_url,
            env.supabase_key,
            access_token=env.supabase_access_token or None,
            timeout=env.request_timeout,
        )

    return JsonFileStore(env.json_store_path)


__all__ = [
    "SceneStore",
    "PlaylistStore",
    "Store",
    "MemoryStore",
    "JsonFileStore",
    "RestStore",
    "build_store",
]
