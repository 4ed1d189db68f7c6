# session.py
# One player's game: the board engine plus its save file and the leaderboard.

from typing import List, Union
import logging

from core import DIRECTION, BoardEngine, MoveOutcome
from leaderboard import LeaderboardEntry, LeaderboardStore
from persistence import SnapshotStore, load_or_new_game

logger = logging.getLogger(__name__)


class GameSession:
    """
    Front ends talk to this class instead of the engine so that every state
    change is written to disk exactly when it should be.
    """

    def __init__(self, engine: BoardEngine, snapshots: SnapshotStore, leaderboard: LeaderboardStore):
        self.engine = engine
        self.snapshots = snapshots
        self.leaderboard = leaderboard

    def start(self) -> bool:
        """
        Resumes the saved game or starts a new one.
        Returns:
            bool: True if the resumed game has already ended, so the game-over dialog should show.
        """
        restored = load_or_new_game(self.engine, self.snapshots)
        return restored and self.engine.game_over

    def new_game(self) -> None:
        self.engine.new_game()
        self.snapshots.save(self.engine)

    def move(self, direction: Union[DIRECTION, str]) -> MoveOutcome:
        outcome = self.engine.move(direction)
        if outcome.moved:
            self.snapshots.save(self.engine)
        return outcome

    def undo(self) -> bool:
        undone = self.engine.undo()
        if undone:
            self.snapshots.save(self.engine)
        return undone

    @property
    def can_undo(self) -> bool:
        return self.engine.can_undo()

    def submit_score(self, name: str) -> LeaderboardEntry:
        """
        Adds the current score to the leaderboard.
        Raises:
            LeaderboardValidationError: If the name is blank.
        """
        entry = self.leaderboard.submit(name, self.engine.score)
        logger.info("Saved score %d for %s", entry.score, entry.name)
        return entry

    def top_scores(self) -> List[LeaderboardEntry]:
        return self.leaderboard.load().entries()
