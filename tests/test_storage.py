"""Tests for session record storage backends."""

import json
from pathlib import Path

import pytest

from branchweb.core.config import StorageConfig
from branchweb.stores.storage import JsonFileStorage, MemoryStorage, create_storage


@pytest.fixture(params=["memory", "file"])
def any_storage(request, tmp_path: Path):
    if request.param == "file":
        return JsonFileStorage(tmp_path / "session.json")
    return MemoryStorage()


def test_empty_storage(any_storage):
    assert any_storage.read_all() is None
    assert any_storage.read_key("session_id") is None


def test_write_all_replaces_record(any_storage):
    any_storage.write_all({"session_id": "1", "click_id": "c"})
    any_storage.write_all({"session_id": "2"})

    assert any_storage.read_all() == {"session_id": "2"}


def test_write_key_keeps_other_keys(any_storage):
    any_storage.write_all({"session_id": "1", "identity_id": "2"})

    any_storage.write_key("click_id", "c1")

    assert any_storage.read_all() == {"session_id": "1", "identity_id": "2", "click_id": "c1"}
    assert any_storage.read_key("click_id") == "c1"


def test_read_all_returns_copy(any_storage):
    any_storage.write_all({"data": {"nested": 1}})

    record = any_storage.read_all()
    record["data"]["nested"] = 2

    assert any_storage.read_key("data") == {"nested": 1}


def test_clear(any_storage):
    any_storage.write_key("bannerShown", True)

    any_storage.clear()

    assert any_storage.read_all() is None


def test_file_storage_survives_reload(tmp_path: Path):
    path = tmp_path / "nested" / "session.json"
    JsonFileStorage(path).write_all({"session_id": "1", "identity_id": "2"})

    assert JsonFileStorage(path).read_all() == {"session_id": "1", "identity_id": "2"}
    assert not path.with_suffix(".tmp").exists()


def test_file_storage_keeps_other_records(tmp_path: Path):
    path = tmp_path / "session.json"
    JsonFileStorage(path, record_name="app_a").write_all({"session_id": "a"})
    JsonFileStorage(path, record_name="app_b").write_all({"session_id": "b"})

    JsonFileStorage(path, record_name="app_a").clear()

    data = json.loads(path.read_text())
    assert data == {"app_b": {"session_id": "b"}}


def test_file_storage_corrupted_file(tmp_path: Path):
    path = tmp_path / "session.json"
    path.write_text("{not json")

    storage = JsonFileStorage(path)

    assert storage.read_all() is None
    storage.write_key("click_id", "c1")
    assert storage.read_all() == {"click_id": "c1"}


def test_file_storage_non_mapping_record(tmp_path: Path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"branch_session": ["not", "a", "dict"]}))

    assert JsonFileStorage(path).read_all() is None


def test_create_storage(tmp_path: Path):
    assert isinstance(create_storage(StorageConfig()), MemoryStorage)

    storage = create_storage(StorageConfig(backend="file", path=tmp_path / "s.json", record_name="custom"))
    assert isinstance(storage, JsonFileStorage)
    assert storage.record_name == "custom"
