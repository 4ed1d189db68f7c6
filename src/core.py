# core.py
# This file holds the board engine for the 2048 game: grid, score, undo history and tile spawning.

from collections import deque
from enum import Enum
from typing import Annotated, Callable, Deque, List, Optional, Sequence, Tuple, Union
import logging
import random

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

GRID_SIZE = 4
WIN_TILE = 2048
HISTORY_LIMIT = 10

# Spawn odds: value 2 vs 4, and one vs two tiles after a successful move.
TWO_TILE_PROBABILITY = 0.9
SINGLE_SPAWN_PROBABILITY = 0.9


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3


class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Tile(BaseModel):
    """A single numbered piece on the grid."""
    model_config = ConfigDict(populate_by_name=True)

    value: int = Field(..., ge=2, description="Power-of-two face value of the tile.")
    id: int = Field(..., ge=0, description="Unique id, assigned once when the tile is created.")
    is_new: bool = Field(default=False, alias="isNew", description="Tile was spawned by the last move.")
    merged: bool = Field(default=False, description="Tile was produced by a merge in the last move.")

    @field_validator("value")
    @classmethod
    def _power_of_two(cls, value: int) -> int:
        if value & (value - 1):
            raise ValueError(f"Tile value must be a power of two, got {value}.")
        return value


Grid = List[List[Optional[Tile]]]


def check_grid_shape(grid: Grid) -> Grid:
    """
    Validates that a grid is a GRID_SIZE x GRID_SIZE matrix.
    Args:
        grid (Grid): The grid to check.
    Returns:
        Grid: The same grid, unchanged.
    Raises:
        ValueError: If the grid is not square or has the wrong size.
    """
    if len(grid) != GRID_SIZE or not all(len(row) == GRID_SIZE for row in grid):
        raise ValueError(f"Grid must be a {GRID_SIZE}x{GRID_SIZE} matrix.")
    return grid


# A grid that is checked to be GRID_SIZE x GRID_SIZE when validated.
ShapedGrid = Annotated[Grid, AfterValidator(check_grid_shape)]


class HistoryEntry(BaseModel):
    """A point-in-time copy of the grid and score, used by undo."""
    model_config = ConfigDict(frozen=True)

    grid: ShapedGrid
    score: int = Field(..., ge=0)


class MoveOutcome(BaseModel):
    """What a single move did to the game."""
    moved: bool = Field(..., description="True if any tile slid or merged.")
    score_gained: int = Field(default=0, ge=0, description="Sum of the values of all tiles merged by the move.")
    won_now: bool = Field(default=False, description="The move produced the first winning tile of this game.")
    game_over: bool = Field(default=False, description="No move is possible after this move.")


# --- Grid Helper Functions ---

def create_empty_grid() -> Grid:
    """Returns a fresh GRID_SIZE x GRID_SIZE grid with every cell empty."""
    return [[None] * GRID_SIZE for _ in range(GRID_SIZE)]


def copy_grid(grid: Grid) -> Grid:
    """
    Deep-copies a grid so later flag resets and merges cannot leak into the copy.
    Args:
        grid (Grid): The grid to copy.
    Returns:
        Grid: A new grid holding copies of every tile.
    """
    return [[tile.model_copy() if tile is not None else None for tile in row] for row in grid]


def get_empty_cells(grid: Grid) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty cells in the given grid.
    Args:
        grid (Grid): The grid to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells, in row-major order.
    """
    return [
        (row, col)
        for row in range(GRID_SIZE)
        for col in range(GRID_SIZE)
        if grid[row][col] is None
    ]


def grid_values(grid: Grid) -> List[List[int]]:
    """Returns the face values of a grid, with 0 for empty cells."""
    return [[tile.value if tile is not None else 0 for tile in row] for row in grid]


def grid_from_values(values: Sequence[Sequence[int]], first_id: int = 0) -> Grid:
    """
    Builds a grid from face values, with 0 meaning empty.
    Args:
        values (Sequence[Sequence[int]]): GRID_SIZE rows of GRID_SIZE values.
        first_id (int): Id given to the first tile; the rest follow in row-major order.
    Returns:
        Grid: The new grid.
    Raises:
        ValueError: If the shape is wrong or a value is not a power of two.
    """
    next_id = first_id
    grid: Grid = []
    for row_values in values:
        row: List[Optional[Tile]] = []
        for value in row_values:
            if value:
                row.append(Tile(value=value, id=next_id))
                next_id += 1
            else:
                row.append(None)
        grid.append(row)
    return check_grid_shape(grid)


def count_tiles(grid: Grid) -> int:
    """Number of non-empty cells in the grid."""
    return sum(1 for row in grid for tile in row if tile is not None)


def has_tile_at_least(grid: Grid, target: int) -> bool:
    """True if any tile on the grid is worth `target` or more."""
    return any(tile is not None and tile.value >= target for row in grid for tile in row)


def can_move(grid: Grid) -> bool:
    """
    Checks if any move is possible on the grid.
    A move is possible while a cell is empty or two orthogonal neighbours share a value.
    Each pair is checked once, looking right and down only.
    Args:
        grid (Grid): The game grid.
    Returns:
        bool: False only for a full grid with no equal neighbours.
    """
    if get_empty_cells(grid):
        return True

    for row in range(GRID_SIZE):
        for col in range(GRID_SIZE):
            current = grid[row][col]
            if col < GRID_SIZE - 1 and grid[row][col + 1].value == current.value:
                return True
            if row < GRID_SIZE - 1 and grid[row + 1][col].value == current.value:
                return True
    return False


# --- Line Manipulation (Core Move Logic) ---

def _cell_value(cell: Optional[Tile]) -> Optional[int]:
    return cell.value if cell is not None else None


def resolve_line(line: List[Optional[Tile]], allocate_id: Callable[[], int]) -> Tuple[List[Optional[Tile]], int, bool]:
    """
    Slides and merges a single line toward index 0.
    Empty cells are dropped, then one left-to-right pass merges equal neighbours.
    A tile produced by a merge is flagged and takes no part in a second merge this move.
    Args:
        line (List[Optional[Tile]]): The cells of one row or column, oriented toward index 0.
        allocate_id (Callable[[], int]): Hands out the id for each merged tile.
    Returns:
        Tuple[List[Optional[Tile]], int, bool]: The resolved line padded with empties,
                                                the score gained from merges, and whether
                                                the line changed.
    """
    compacted = [tile for tile in line if tile is not None]
    score_gained = 0
    merged_any = False

    i = 0
    while i < len(compacted) - 1:
        current, following = compacted[i], compacted[i + 1]
        if current.value == following.value and not current.merged and not following.merged:
            merged_tile = Tile(value=current.value * 2, id=allocate_id(), merged=True)
            compacted[i:i + 2] = [merged_tile]
            score_gained += merged_tile.value
            merged_any = True
        i += 1

    resolved = compacted + [None] * (len(line) - len(compacted))
    moved = merged_any or any(
        _cell_value(before) != _cell_value(after) for before, after in zip(line, resolved)
    )
    return resolved, score_gained, moved


def _read_line(grid: Grid, index: int, direction: DIRECTION) -> List[Optional[Tile]]:
    if direction in (DIRECTION.LEFT, DIRECTION.RIGHT):
        line = list(grid[index])
    else:
        line = [grid[row][index] for row in range(GRID_SIZE)]
    if direction in (DIRECTION.RIGHT, DIRECTION.DOWN):
        line.reverse()
    return line


def _write_line(grid: Grid, index: int, direction: DIRECTION, line: List[Optional[Tile]]) -> None:
    if direction in (DIRECTION.RIGHT, DIRECTION.DOWN):
        line = line[::-1]
    if direction in (DIRECTION.LEFT, DIRECTION.RIGHT):
        grid[index] = line
    else:
        for row in range(GRID_SIZE):
            grid[row][index] = line[row]


# --- Board Engine ---

class BoardEngine:
    """
    Owns one game of 2048: the grid, score, win/loss flags, undo history and tile ids.

    All randomness goes through `rng`, so a seeded `random.Random` makes a game reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()
        self.grid: Grid = create_empty_grid()
        self.score = 0
        self.game_over = False
        self.won = False
        self.history: Deque[HistoryEntry] = deque(maxlen=HISTORY_LIMIT)
        self.tile_id_counter = 0

    @property
    def progress(self) -> GameProgressState:
        if self.game_over:
            return GameProgressState.GAME_OVER
        if self.won:
            return GameProgressState.GAME_WON
        return GameProgressState.IN_PROGRESS

    def _allocate_tile_id(self) -> int:
        tile_id = self.tile_id_counter
        self.tile_id_counter += 1
        return tile_id

    def new_game(self) -> None:
        """Discards the current game and places 1 to 3 random tiles on an empty grid."""
        self.grid = create_empty_grid()
        self.score = 0
        self.game_over = False
        self.won = False
        self.history.clear()
        self.tile_id_counter = 0

        initial_tiles = self.rng.randint(1, 3)
        for _ in range(initial_tiles):
            self.spawn_tile()
        logger.debug("New game started with %d tile(s)", initial_tiles)

    def restore(self, grid: Grid, score: int, history: Sequence[HistoryEntry],
                game_over: bool, won: bool, tile_id_counter: int) -> None:
        """
        Replaces the whole game state, e.g. from a persisted snapshot.
        Args:
            grid (Grid): The grid to play on. It is used as-is, not copied.
            score (int): Current score.
            history (Sequence[HistoryEntry]): Past states, oldest first. Only the newest
                                              HISTORY_LIMIT entries are kept.
            game_over (bool): Whether the game has already ended.
            won (bool): Whether the win notification has already fired.
            tile_id_counter (int): Next id to hand out.
        Raises:
            ValueError: If the grid has the wrong shape.
        """
        self.grid = check_grid_shape(grid)
        self.score = score
        self.history = deque(history, maxlen=HISTORY_LIMIT)
        self.game_over = game_over
        self.won = won
        self.tile_id_counter = tile_id_counter

    def spawn_tile(self) -> Optional[Tile]:
        """
        Places a 2 (90%) or a 4 (10%) on a uniformly chosen empty cell.
        Returns:
            Optional[Tile]: The new tile, or None when the grid is full.
        """
        empty_cells = get_empty_cells(self.grid)
        if not empty_cells:
            return None

        row, col = self.rng.choice(empty_cells)
        value = 2 if self.rng.random() < TWO_TILE_PROBABILITY else 4
        tile = Tile(value=value, id=self._allocate_tile_id(), is_new=True, merged=False)
        self.grid[row][col] = tile
        return tile

    def _reset_tile_flags(self) -> None:
        for row in self.grid:
            for tile in row:
                if tile is not None:
                    tile.is_new = False
                    tile.merged = False

    def move(self, direction: Union[DIRECTION, str]) -> MoveOutcome:
        """
        Slides every line of the grid in `direction`, then spawns new tiles if anything moved.
        Args:
            direction (Union[DIRECTION, str]): A DIRECTION or one of "up", "down", "left", "right".
        Returns:
            MoveOutcome: Whether the grid changed, the score gained and the resulting win/loss signals.
        Raises:
            ValueError: If `direction` is not a known direction token.
        """
        direction = DIRECTION(direction)
        if self.game_over:
            return MoveOutcome(moved=False, game_over=True)

        # Taken before the flags are cleared, so undo restores what the player last saw.
        snapshot = HistoryEntry(grid=copy_grid(self.grid), score=self.score)
        self._reset_tile_flags()

        moved = False
        score_gained = 0
        for index in range(GRID_SIZE):
            line = _read_line(self.grid, index, direction)
            resolved, line_score, line_moved = resolve_line(line, self._allocate_tile_id)
            _write_line(self.grid, index, direction, resolved)
            score_gained += line_score
            moved = moved or line_moved

        if not moved:
            return MoveOutcome(moved=False)

        self.history.append(snapshot)
        self.score += score_gained

        won_now = False
        if not self.won and has_tile_at_least(self.grid, WIN_TILE):
            self.won = True
            won_now = True
            logger.info("Reached %d with score %d", WIN_TILE, self.score)

        spawn_count = 1 if self.rng.random() < SINGLE_SPAWN_PROBABILITY else 2
        for _ in range(spawn_count):
            self.spawn_tile()

        if not can_move(self.grid):
            self.game_over = True
            logger.info("Game over with score %d", self.score)

        return MoveOutcome(moved=True, score_gained=score_gained, won_now=won_now, game_over=self.game_over)

    def can_move(self) -> bool:
        """True while at least one direction would change the grid."""
        return can_move(self.grid)

    def can_undo(self) -> bool:
        return bool(self.history) and not self.game_over

    def undo(self) -> bool:
        """
        Restores the grid and score from before the last successful move.
        The game_over and won flags are left as they are.
        Returns:
            bool: True if a previous state was restored.
        """
        if not self.can_undo():
            return False

        previous = self.history.pop()
        self.grid = copy_grid(previous.grid)
        self.score = previous.score
        return True
