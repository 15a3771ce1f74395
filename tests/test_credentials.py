from __future__ import annotations

from pathlib import Path

from askdb.transport.credentials import FileCredentialStore


def test_load_missing_file_returns_none(tmp_path: Path) -> None:
    assert FileCredentialStore(tmp_path / "telegram.json").load() is None


def test_save_creates_directory_and_reloads(tmp_path: Path) -> None:
    path = tmp_path / "sessions" / "telegram.json"
    store = FileCredentialStore(path)

    store.save({"bot_id": 42, "username": "askdb_bot", "offset": 7})

    assert FileCredentialStore(path).load() == {"bot_id": 42, "username": "askdb_bot", "offset": 7}
    assert not path.with_suffix(".json.tmp").exists()


def test_save_replaces_previous_blob(tmp_path: Path) -> None:
    store = FileCredentialStore(tmp_path / "telegram.json")

    store.save({"offset": 1})
    store.save({"offset": 2})

    assert store.load() == {"offset": 2}


def test_corrupt_or_unexpected_content_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "telegram.json"
    store = FileCredentialStore(path)

    path.write_text("{not json", encoding="utf-8")
    assert store.load() is None

    path.write_text("[1, 2]", encoding="utf-8")
    assert store.load() is None
