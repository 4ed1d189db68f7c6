import json
import logging
from datetime import datetime, timezone

import pytest

from leaderboard import MAX_ENTRIES, Leaderboard, LeaderboardStore, LeaderboardValidationError

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _clock():
    return NOW


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_name_is_rejected(name):
    board = Leaderboard(clock=_clock)
    board.submit("Ann", 100)
    with pytest.raises(LeaderboardValidationError):
        board.submit(name, 5000)
    assert [e.name for e in board.entries()] == ["Ann"]


def test_entries_are_ranked_and_capped():
    board = Leaderboard(clock=_clock)
    for score in range(1, MAX_ENTRIES + 3):
        board.submit(f"p{score}", score * 10)

    scores = [e.score for e in board.entries()]
    assert len(scores) == MAX_ENTRIES
    assert scores == sorted(scores, reverse=True)
    assert scores[-1] == 30


def test_equal_scores_keep_submission_order():
    board = Leaderboard(clock=_clock)
    board.submit("first", 100)
    board.submit("higher", 200)
    board.submit("second", 100)
    assert [e.name for e in board.entries()] == ["higher", "first", "second"]


def test_name_is_stripped_and_dated():
    entry = Leaderboard(clock=_clock).submit("  Ann  ", 64)
    assert entry.name == "Ann"
    assert entry.date == NOW


def test_store_round_trip(tmp_path):
    store = LeaderboardStore(tmp_path / "leaderboard.json", clock=_clock)
    store.submit("Ann", 512)
    store.submit("Bob", 1024)

    entries = LeaderboardStore(tmp_path / "leaderboard.json").load().entries()
    assert [(e.name, e.score) for e in entries] == [("Bob", 1024), ("Ann", 512)]
    assert entries[0].date == NOW

    raw = json.loads((tmp_path / "leaderboard.json").read_text(encoding="utf-8"))
    assert set(raw[0]) == {"name", "score", "date"}
    assert raw[0]["date"].startswith("2026-10-17T12:00:00")


def test_store_does_not_write_rejected_submission(tmp_path):
    store = LeaderboardStore(tmp_path / "leaderboard.json")
    with pytest.raises(LeaderboardValidationError):
        store.submit("  ", 10)
    assert not store.path.exists()


def test_corrupt_store_loads_empty(tmp_path):
    path = tmp_path / "leaderboard.json"
    path.write_text('[{"name": "x"}]', encoding="utf-8")
    assert LeaderboardStore(path).load().entries() == []


def test_failed_save_is_logged(tmp_path, caplog):
    store = LeaderboardStore(tmp_path, clock=_clock)
    board = Leaderboard(clock=_clock)
    board.submit("Ann", 64)

    with caplog.at_level(logging.ERROR):
        assert store.save(board) is False

    assert "Failed to save leaderboard" in caplog.text
