import json
import logging
import random

from core import HISTORY_LIMIT, BoardEngine, grid_values
from persistence import GameSnapshot, SnapshotStore, load_or_new_game, restore_engine, snapshot_from_engine


def _played_engine(seed=11, moves=("left", "up", "right", "down", "left")):
    engine = BoardEngine(rng=random.Random(seed))
    engine.new_game()
    for direction in moves:
        engine.move(direction)
    return engine


def test_snapshot_round_trip(tmp_path):
    engine = _played_engine()
    engine.won = True
    store = SnapshotStore(tmp_path / "state.json")
    store.save(engine)

    restored = BoardEngine()
    assert load_or_new_game(restored, store) is True

    assert restored.grid == engine.grid
    assert restored.score == engine.score
    assert list(restored.history) == list(engine.history)
    assert restored.game_over == engine.game_over
    assert restored.won is True
    assert restored.tile_id_counter == engine.tile_id_counter


def test_snapshot_uses_camel_case_keys(tmp_path):
    engine = _played_engine()
    store = SnapshotStore(tmp_path / "state.json")
    store.save(engine)

    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert set(data) == {"grid", "score", "history", "gameOver", "won", "tileIdCounter"}
    tile = next(cell for row in data["grid"] for cell in row if cell is not None)
    assert set(tile) == {"value", "id", "isNew", "merged"}


def test_missing_file_loads_nothing(tmp_path):
    assert SnapshotStore(tmp_path / "absent.json").load() is None


def test_corrupt_file_starts_new_game(tmp_path, caplog):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    store = SnapshotStore(path)
    engine = BoardEngine(rng=random.Random(2))

    with caplog.at_level(logging.ERROR):
        assert load_or_new_game(engine, store) is False

    assert "Failed to load saved game" in caplog.text
    assert 1 <= sum(1 for row in engine.grid for tile in row if tile is not None) <= 3
    assert store.load() is not None


def test_undecodable_file_starts_new_game(tmp_path, caplog):
    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe{garbage")
    engine = BoardEngine(rng=random.Random(4))

    with caplog.at_level(logging.ERROR):
        assert load_or_new_game(engine, SnapshotStore(path)) is False

    assert "Failed to load saved game" in caplog.text
    assert engine.score == 0
    assert SnapshotStore(path).load() is not None


def test_long_history_is_trimmed_on_restore(tmp_path):
    empty = [[None] * 4 for _ in range(4)]
    history = [{"grid": empty, "score": score} for score in range(HISTORY_LIMIT + 1)]
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"grid": empty, "score": 20, "history": history}), encoding="utf-8")

    snapshot = SnapshotStore(path).load()
    assert snapshot is not None

    engine = BoardEngine()
    restore_engine(engine, snapshot)
    assert len(engine.history) == HISTORY_LIMIT
    assert [entry.score for entry in engine.history] == list(range(1, HISTORY_LIMIT + 1))


def test_failed_save_is_logged(tmp_path, caplog):
    engine = _played_engine()
    store = SnapshotStore(tmp_path)

    with caplog.at_level(logging.ERROR):
        assert store.save(engine) is False

    assert "Failed to save game" in caplog.text


def test_wrong_grid_shape_is_rejected(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"grid": [[None] * 4] * 3, "score": 0}), encoding="utf-8")
    assert SnapshotStore(path).load() is None


def test_bad_tile_value_is_rejected(tmp_path):
    grid = [[None] * 4 for _ in range(4)]
    grid[0][0] = {"value": 3, "id": 0, "isNew": False, "merged": False}
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"grid": grid, "score": 0}), encoding="utf-8")
    assert SnapshotStore(path).load() is None


def test_negative_score_is_rejected(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"grid": [[None] * 4 for _ in range(4)], "score": -4}), encoding="utf-8")
    assert SnapshotStore(path).load() is None


def test_older_save_gets_defaults():
    grid = [[None] * 4 for _ in range(4)]
    grid[0][0] = {"value": 2, "id": 5, "isNew": False, "merged": False}
    snapshot = GameSnapshot.model_validate_json(json.dumps({"grid": grid, "score": 4}))

    assert snapshot.history == []
    assert snapshot.game_over is False
    assert snapshot.won is False
    assert snapshot.tile_id_counter == 6


def test_snapshot_is_detached_from_engine():
    engine = _played_engine()
    snapshot = snapshot_from_engine(engine)
    before = grid_values(snapshot.grid)
    engine.new_game()
    assert grid_values(snapshot.grid) == before
