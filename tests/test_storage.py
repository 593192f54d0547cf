"""Tests for storefront local storage"""
import json

from app.commerce.storage import (
    CART_ID_KEY,
    TOKEN_KEY,
    JsonFileStorage,
    MemoryStorage,
    storage_from_settings,
)


def test_memory_storage():
    storage = MemoryStorage({TOKEN_KEY: "tok_1"})
    storage.set(CART_ID_KEY, "cart_1")

    assert storage.get(CART_ID_KEY) == "cart_1"
    assert TOKEN_KEY in storage

    storage.remove(TOKEN_KEY)
    storage.remove(TOKEN_KEY)
    assert storage.get(TOKEN_KEY) is None


def test_json_file_storage_survives_reopen(tmp_path):
    path = tmp_path / "state" / "storefront.json"
    storage = JsonFileStorage(path)
    storage.set(CART_ID_KEY, "cart_1")
    storage.set(TOKEN_KEY, "tok_1")
    storage.remove(TOKEN_KEY)

    reopened = JsonFileStorage(path)
    assert reopened.get(CART_ID_KEY) == "cart_1"
    assert reopened.get(TOKEN_KEY) is None
    assert json.loads(path.read_text()) == {CART_ID_KEY: "cart_1"}
    assert not path.with_suffix(".json.tmp").exists()


def test_json_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "storefront.json"
    path.write_text("{not json")

    storage = JsonFileStorage(path)
    assert storage.get(CART_ID_KEY) is None

    storage.set(CART_ID_KEY, "cart_2")
    assert json.loads(path.read_text()) == {CART_ID_KEY: "cart_2"}


def test_json_file_storage_ignores_non_object(tmp_path):
    path = tmp_path / "storefront.json"
    path.write_text("[1, 2, 3]")
    assert JsonFileStorage(path).get(CART_ID_KEY) is None


def test_storage_from_settings(tmp_path):
    assert isinstance(storage_from_settings(None), MemoryStorage)
    assert isinstance(storage_from_settings(str(tmp_path / "s.json")), JsonFileStorage)
