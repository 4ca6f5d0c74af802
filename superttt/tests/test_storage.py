"""
Tests for store persistence.
"""

import json

import pytest

from ..engine_core.state import Marker
from ..session.coercion import STORAGE_VERSION
from ..session.manager import GameStore
from ..session.storage import InMemoryStorage, JsonFileStorage


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "nested" / "store.json"


class TestJsonFileStorage:
    """JSON file persistence."""

    def test_missing_file_gives_default(self, store_path):
        store = JsonFileStorage(store_path, default_size=4).load()
        assert len(store.games) == 1
        assert store.active_game.state.size == 4

    def test_save_and_load(self, store_path):
        storage = JsonFileStorage(store_path)
        store = storage.load()
        store.play(0, 4)
        store.create_game(5)
        storage.save(store)

        loaded = JsonFileStorage(store_path).load()

        assert len(loaded.games) == 2
        assert loaded.active_game_id == store.active_game_id
        assert loaded.games[0].state.boards[0].cells[4] is Marker.X
        assert loaded.games[0].state.forced_board_index == 4
        assert loaded.games[1].state.size == 5

    def test_saved_file_is_versioned_json(self, store_path):
        storage = JsonFileStorage(store_path)
        storage.save(GameStore.create_default())

        with open(store_path, encoding="utf-8") as f:
            raw = json.load(f)
        assert raw["version"] == STORAGE_VERSION
        assert len(raw["games"]) == 1
        assert not store_path.with_suffix(".json.tmp").exists()

    def test_corrupt_file_gives_default(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{not json", encoding="utf-8")

        store = JsonFileStorage(store_path).load()
        assert len(store.games) == 1
        assert store.active_game.state.move_count == 0

    def test_legacy_v1_file(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps({
            "version": 1,
            "activeGameId": "old",
            "soundEnabled": False,
            "games": [{
                "id": "old",
                "name": "Saved",
                "createdAt": 1_600_000_000_000,
                "updatedAt": 1_600_000_100_000,
                "gameState": {
                    "size": 3,
                    "currentPlayer": "O",
                    "nextBoardIndex": 4,
                    "boards": [{"cells": [None, None, None, None, "X"]}],
                },
            }],
        }), encoding="utf-8")

        store = JsonFileStorage(store_path).load()

        assert store.active_game_id == "old"
        assert store.sound_enabled is False
        game = store.active_game
        assert game.name == "Saved"
        assert game.state.current_player is Marker.O
        assert game.state.forced_board_index == 4
        assert game.state.move_count == 1

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "env.json"
        monkeypatch.setenv("SUPERTTT_STORE_PATH", str(path))
        assert JsonFileStorage().path == path

    def test_clear(self, store_path):
        storage = JsonFileStorage(store_path)
        storage.save(GameStore.create_default())
        storage.clear()
        assert not store_path.exists()
        storage.clear()


class TestInMemoryStorage:
    """In-memory persistence."""

    def test_empty_gives_default(self):
        store = InMemoryStorage(default_size=2).load()
        assert store.active_game.state.size == 2

    def test_save_then_load(self):
        storage = InMemoryStorage()
        store = storage.load()
        store.play(3, 3)
        storage.save(store)

        assert storage.record["version"] == STORAGE_VERSION
        assert storage.load().active_game.state == store.active_game.state
