from kioku.storage import JsonFileStorage, MemoryStorage, Storage, StorageError

import pytest


class TestMemoryStorage:
    def test_load_save_delete(self):
        storage = MemoryStorage()

        assert storage.load("deck") is None

        storage.save("deck", [{"item_id": 1}])
        assert storage.load("deck") == [{"item_id": 1}]
        assert "deck" in storage

        storage.delete("deck")
        assert storage.load("deck") is None
        # deleting twice is fine
        storage.delete("deck")

    def test_values_are_copied(self):
        storage = MemoryStorage()
        value = [{"item_id": 1}]

        storage.save("deck", value)
        value[0]["item_id"] = 2
        loaded = storage.load("deck")
        loaded.append({"item_id": 3})

        assert storage.load("deck") == [{"item_id": 1}]


class TestJsonFileStorage:
    def test_load_save_delete(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "data")

        assert storage.load("flashcard-progress") is None

        storage.save("flashcard-progress", [{"item_id": 1, "due": "2024-03-10"}])
        assert (tmp_path / "data" / "flashcard-progress.json").exists()
        assert storage.load("flashcard-progress") == [{"item_id": 1, "due": "2024-03-10"}]

        # a second store on the same directory sees the data
        assert JsonFileStorage(tmp_path / "data").load("flashcard-progress") is not None

        storage.delete("flashcard-progress")
        assert storage.load("flashcard-progress") is None
        storage.delete("flashcard-progress")

    def test_non_ascii_values(self, tmp_path):
        storage = JsonFileStorage(tmp_path)

        storage.save("memo", {"1": "사과"})

        assert storage.load("memo") == {"1": "사과"}

    def test_corrupt_file_raises(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        (tmp_path / "deck.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            storage.load("deck")

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", "with space"])
    def test_invalid_key(self, tmp_path, key):
        storage = JsonFileStorage(tmp_path)

        with pytest.raises(ValueError):
            storage.save(key, [])


def test_storage_protocol_is_documented():
    assert Storage.__doc__
    assert "load()" in Storage.__doc__
