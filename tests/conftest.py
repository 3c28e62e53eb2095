import logging
import os

import pytest


@pytest.fixture(autouse=True)
def clean_env_and_logging(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, cached env views, or logger state.
    """
    for k in list(os.environ):
        if k.startswith("SCENEVAULT_") or k.startswith("SUPABASE_") or k.startswith("YT_"):
            monkeypatch.delenv(k, raising=False)
    for k in ("LOG_LEVEL", "LOG_RETENTION"):
        monkeypatch.delenv(k, raising=False)

    monkeypatch.setenv("SCENEVAULT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SCENEVAULT_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("SCENEVAULT_ENV_FILE", str(tmp_path / "missing.env"))

    from scenevault.env import reset_env_caches

    reset_env_caches()

    import scenevault.bootstrap as bootstrap

    monkeypatch.setattr(bootstrap, "_BOOTSTRAPPED", False)

    import scenevault.logger.state as state

    state.INITIALIZED = False
    state.RUN_ID = None
    state.LOG_DIR = None
    state.LOG_FILE_PATH = None
    state.SECRETS.clear()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    yield

    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    reset_env_caches()


@pytest.fixture
def store():
    from scenevault.store import MemoryStore

    return MemoryStore()


@pytest.fixture
def settings():
    from scenevault.settings import MemorySettingsStore, Settings

    return Settings(MemorySettingsStore())


@pytest.fixture
def keyed_settings(settings):
    settings.set_api_key("AIzaTEST-key-0123456789")
    return settings
