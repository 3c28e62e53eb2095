import pytest

from scenevault.env import ConfigError, get_env, reset_env_caches


def test_env_defaults():
    env = get_env()
    assert env.verbose is False
    assert env.quiet is False
    assert env.user_id == "local"
    assert env.store_kind == "json"
    assert env.page_size == 50
    assert env.max_playlist_items == 500
    assert env.status_batch_size == 50
    assert env.status_pacing_sec == pytest.approx(0.1)


def test_env_is_cached_until_reset(monkeypatch):
    first = get_env()
    monkeypatch.setenv("SCENEVAULT_USER_ID", "alice")
    assert get_env() is first

    reset_env_caches()
    assert get_env().user_id == "alice"


def test_env_accepts_verbose_and_quiet_flags(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_VERBOSE", "1")
    monkeypatch.setenv("SCENEVAULT_QUIET", "yes")
    env = get_env()

    assert env.verbose is True
    assert env.quiet is True
    assert env.interactive is False


def test_env_clamps_batch_sizes(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_PAGE_SIZE", "500")
    monkeypatch.setenv("SCENEVAULT_STATUS_BATCH_SIZE", "0")
    env = get_env()

    assert env.page_size == 50
    assert env.status_batch_size == 1


def test_env_bad_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("YT_MAX_RETRIES", "lots")
    monkeypatch.setenv("YT_BACKOFF_BASE_SEC", "soon")
    env = get_env()

    assert env.max_retries == 3
    assert env.backoff_base_sec == 1.0


def test_unknown_store_kind_is_config_error(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_STORE", "sqlite")
    with pytest.raises(ConfigError):
        get_env()


def test_rest_store_requires_supabase(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_STORE", "rest")
    with pytest.raises(ConfigError, match="SUPABASE_URL"):
        get_env()

    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co/")
    monkeypatch.setenv("SUPABASE_KEY", "anon")
    reset_env_caches()
    env = get_env()
    assert env.supabase_url == "https://example.supabase.co"


def test_json_store_path_is_per_owner(monkeypatch, tmp_path):
    monkeypatch.setenv("SCENEVAULT_USER_ID", "bob")
    env = get_env()
    assert env.json_store_path == (tmp_path / "data" / "scenevault_bob.json").resolve()


def test_as_dict_never_leaks_supabase_key(monkeypatch):
    monkeypatch.setenv("SUPABASE_KEY", "super-secret-value")
    data = get_env().as_dict()

    assert data["Storage"]["supabase_key"] == "set"
    assert "super-secret-value" not in repr(data)
