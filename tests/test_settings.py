import json

from scenevault.models import SortOption
from scenevault.settings import (
    API_KEY_KEY,
    FILTER_STATE_KEY,
    FilterState,
    LocalSettingsStore,
    MemorySettingsStore,
    Settings,
    VanishedVideoPolicy,
    migrate_filter_state,
)


def test_api_key_roundtrip_and_blank_is_unset(settings):
    assert settings.api_key is None

    settings.set_api_key("  AIzaKEY12345  ")
    assert settings.api_key == "AIzaKEY12345"

    settings.store.set(API_KEY_KEY, "   ")
    assert settings.api_key is None

    settings.set_api_key("AIzaKEY12345")
    settings.clear_api_key()
    assert settings.api_key is None


def test_vanished_policy_defaults_to_mark(settings):
    assert settings.vanished_policy is VanishedVideoPolicy.MARK

    settings.set_vanished_policy("remove")
    assert settings.vanished_policy is VanishedVideoPolicy.REMOVE


def test_migrate_unversioned_blob():
    out = migrate_filter_state(
        {"selectedStatus": "private", "sortBy": "channel-asc", "searchQuery": "abc"}
    )

    assert out["version"] == 1
    assert out["selectedStatus"] == "unavailable"
    assert out["sortBy"] == "newest"
    assert out["searchQuery"] == "abc"
    assert out["selectedPlatform"] == "all"


def test_migrate_current_blob_is_unchanged():
    blob = FilterState(search_query="x", sort_by=SortOption.TITLE_ASC).to_blob()

    assert migrate_filter_state(blob) == blob


def test_load_migrates_stored_v0_state():
    store = MemorySettingsStore(
        {FILTER_STATE_KEY: json.dumps({"selectedStatus": "private", "sortBy": "oldest"})}
    )

    state = Settings(store).load_filter_state()

    assert state.selected_status == "unavailable"
    assert state.sort_by is SortOption.OLDEST


def test_load_falls_back_on_garbage():
    for raw in ("{not json", "[1, 2]", json.dumps({"selectedPlatform": "Netflix"})):
        state = Settings(MemorySettingsStore({FILTER_STATE_KEY: raw})).load_filter_state()
        assert state.selected_platform == "all"
        assert state.sort_by is SortOption.NEWEST


def test_save_then_load(settings):
    wanted = FilterState(
        search_query="dance",
        selected_platform="YouTube",
        selected_category="F/F",
        selected_status="available",
        sort_by=SortOption.TITLE_DESC,
    )

    settings.save_filter_state(wanted)

    assert settings.load_filter_state() == wanted


def test_mark_backup(settings):
    assert settings.last_backup_ms is None

    settings.mark_backup(1_700_000_000_000)

    assert settings.last_backup_ms == 1_700_000_000_000


def test_local_settings_file(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = LocalSettingsStore(path)

    store.set("a", "1")
    store.set("b", "2")
    store.delete("a")

    assert LocalSettingsStore(path).get("b") == "2"
    assert LocalSettingsStore(path).get("a") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {"b": "2"}


def test_local_settings_unreadable_file_is_empty(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("garbage", encoding="utf-8")

    assert LocalSettingsStore(path).get("a") is None
