# persistence.py
# Saves and restores a game of 2048 as a JSON snapshot on disk.

from pathlib import Path
from typing import List, Optional, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from core import BoardEngine, HistoryEntry, ShapedGrid, copy_grid

logger = logging.getLogger(__name__)


class GameSnapshot(BaseModel):
    """
    Everything needed to resume a game. Serialized with camelCase keys
    (gameOver, tileIdCounter, isNew) so existing save files stay readable.
    """
    model_config = ConfigDict(populate_by_name=True)

    grid: ShapedGrid = Field(..., description="Current grid, null for empty cells.")
    score: int = Field(..., ge=0, description="Current score.")
    history: List[HistoryEntry] = Field(
        default_factory=list,
        description="Past {grid, score} states, oldest first. The engine keeps only the newest ones."
    )
    game_over: bool = Field(default=False, alias="gameOver")
    won: bool = Field(default=False)
    tile_id_counter: int = Field(default=0, ge=0, alias="tileIdCounter")

    @model_validator(mode="after")
    def _counter_past_live_ids(self) -> "GameSnapshot":
        # Older saves may lack tileIdCounter; never hand out an id already on the grid.
        ids = [tile.id for row in self.grid for tile in row if tile is not None]
        if ids and self.tile_id_counter <= max(ids):
            self.tile_id_counter = max(ids) + 1
        return self


def snapshot_from_engine(engine: BoardEngine) -> GameSnapshot:
    return GameSnapshot(
        grid=copy_grid(engine.grid),
        score=engine.score,
        history=list(engine.history),
        game_over=engine.game_over,
        won=engine.won,
        tile_id_counter=engine.tile_id_counter,
    )


def restore_engine(engine: BoardEngine, snapshot: GameSnapshot) -> None:
    engine.restore(
        grid=copy_grid(snapshot.grid),
        score=snapshot.score,
        history=snapshot.history,
        game_over=snapshot.game_over,
        won=snapshot.won,
        tile_id_counter=snapshot.tile_id_counter,
    )


class SnapshotStore:
    """Keeps the snapshot of the current game in a single JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def save(self, engine: BoardEngine) -> bool:
        """Writes the current game; a failed write is logged and reported as False."""
        payload = snapshot_from_engine(engine).model_dump_json(by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(payload.encode("utf-8"))
        except OSError:
            logger.error("Failed to save game to %s", self.path, exc_info=True)
            return False
        return True

    def load(self) -> Optional[GameSnapshot]:
        """
        Reads the saved snapshot.
        Returns:
            Optional[GameSnapshot]: The snapshot, or None when there is no usable save.
                                    A corrupt save is logged and treated as missing.
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError:
            logger.error("Failed to read saved game from %s", self.path, exc_info=True)
            return None

        try:
            return GameSnapshot.model_validate_json(raw)
        except ValidationError:
            logger.error("Failed to load saved game from %s", self.path, exc_info=True)
            return None


def load_or_new_game(engine: BoardEngine, store: SnapshotStore) -> bool:
    """
    Resumes the saved game if there is one, otherwise starts (and saves) a new game.
    Args:
        engine (BoardEngine): The engine to fill.
        store (SnapshotStore): Where the game is saved.
    Returns:
        bool: True if a saved game was restored.
    """
    snapshot = store.load()
    if snapshot is not None:
        restore_engine(engine, snapshot)
        logger.debug("Restored saved game with score %d", engine.score)
        return True

    engine.new_game()
    store.save(engine)
    return False
