import json

import pytest

from scenevault.errors import PersistenceError
from scenevault.models import Category, Platform, Scene
from scenevault.store import JsonFileStore


def _scene(title):
    return Scene(title=title, platform=Platform.OTHER, category=Category.FF)


def test_state_survives_reopen(tmp_path):
    path = tmp_path / "store.json"
    store = JsonFileStore(path)
    store.insert_scenes("u1", [_scene("A"), _scene("B")])
    store.upsert_playlist("u1", {"playlist_id": "PL1", "title": "T"})

    reopened = JsonFileStore(path)

    assert {s.title for s in reopened.list_scenes("u1")} == {"A", "B"}
    assert reopened.get_playlist("u1", "PL1").title == "T"


def test_missing_file_starts_empty(tmp_path):
    store = JsonFileStore(tmp_path / "nope.json")

    assert store.list_scenes("u1") == []
    assert not (tmp_path / "nope.json").exists()


def test_write_is_atomic_and_versioned(tmp_path):
    path = tmp_path / "store.json"
    JsonFileStore(path).insert_scene("u1", _scene("A"))

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["version"] == 1
    assert doc["scenes"][0]["title"] == "A"
    assert not path.with_suffix(".json.tmp").exists()


def test_corrupt_file_is_persistence_error(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonFileStore(path)


def test_unknown_version_is_rejected(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"version": 99, "scenes": []}), encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonFileStore(path)
