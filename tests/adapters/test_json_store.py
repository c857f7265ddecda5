"""Tests for adapters/storage/json_store.py."""

from spotify_assistant.adapters.storage.json_store import JsonStorage
from spotify_assistant.ports.outbound import StoragePort


class TestJsonStorage:
    def test_implements_port(self, tmp_path):
        assert isinstance(JsonStorage(str(tmp_path)), StoragePort)

    def test_missing_key_is_empty(self, tmp_path):
        assert JsonStorage(str(tmp_path)).load("nothing") == []

    def test_save_then_load(self, tmp_path):
        storage = JsonStorage(str(tmp_path))
        storage.save("items", [{"a": 1}, {"b": "ü"}])
        assert storage.load("items") == [{"a": 1}, {"b": "ü"}]
        assert (tmp_path / "items.json").exists()

    def test_no_temp_files_left(self, tmp_path):
        storage = JsonStorage(str(tmp_path))
        storage.save("items", [1, 2])
        storage.save("items", [3])
        assert [p.name for p in tmp_path.iterdir()] == ["items.json"]

    def test_corrupt_file_loads_empty(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
        assert JsonStorage(str(tmp_path)).load("broken") == []

    def test_non_list_payload_loads_empty(self, tmp_path):
        (tmp_path / "obj.json").write_text('{"a": 1}', encoding="utf-8")
        assert JsonStorage(str(tmp_path)).load("obj") == []

    def test_defaults_to_config_data_dir(self, tmp_path, monkeypatch):
        target = tmp_path / "data"
        monkeypatch.setattr(
            "spotify_assistant.adapters.storage.json_store.CONFIG", {"data_dir": str(target)}
        )
        JsonStorage().save("k", [1])
        assert (target / "k.json").exists()
