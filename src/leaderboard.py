# leaderboard.py
# Top-10 list of finished games, kept in a JSON file next to the saved game.

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union
import logging

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

MAX_ENTRIES = 10


class LeaderboardValidationError(ValueError):
    """Raised when a score submission is rejected before touching the list."""


class LeaderboardEntry(BaseModel):
    name: str = Field(..., min_length=1, description="Player name, stripped of surrounding whitespace.")
    score: int = Field(..., ge=0)
    date: datetime = Field(..., description="When the score was submitted.")


_ENTRIES = TypeAdapter(List[LeaderboardEntry])


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Leaderboard:
    """Entries ranked by score, highest first; equal scores keep submission order."""

    def __init__(self, entries: Iterable[LeaderboardEntry] = (),
                 clock: Callable[[], datetime] = _utcnow):
        self._entries = list(entries)
        self._clock = clock

    def entries(self) -> List[LeaderboardEntry]:
        return list(self._entries)

    def submit(self, name: str, score: int) -> LeaderboardEntry:
        """
        Records a score under `name` and trims the list to the top MAX_ENTRIES.
        Args:
            name (str): Player name; surrounding whitespace is dropped.
            score (int): Final score of the game.
        Returns:
            LeaderboardEntry: The new entry, which may already have been trimmed away.
        Raises:
            LeaderboardValidationError: If the name is blank.
        """
        name = name.strip()
        if not name:
            raise LeaderboardValidationError("Please enter your name.")

        entry = LeaderboardEntry(name=name, score=score, date=self._clock())
        ranked = sorted(self._entries + [entry], key=lambda e: e.score, reverse=True)
        self._entries = ranked[:MAX_ENTRIES]
        return entry


class LeaderboardStore:
    def __init__(self, path: Union[str, Path], clock: Optional[Callable[[], datetime]] = None):
        self.path = Path(path)
        self._clock = clock or _utcnow

    def load(self) -> Leaderboard:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return Leaderboard(clock=self._clock)
        except OSError:
            logger.warning("Could not read leaderboard at %s", self.path, exc_info=True)
            return Leaderboard(clock=self._clock)

        try:
            entries = _ENTRIES.validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring corrupt leaderboard at %s", self.path, exc_info=True)
            return Leaderboard(clock=self._clock)
        return Leaderboard(entries, clock=self._clock)

    def save(self, leaderboard: Leaderboard) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(_ENTRIES.dump_json(leaderboard.entries()))
        except OSError:
            logger.error("Failed to save leaderboard to %s", self.path, exc_info=True)
            return False
        return True

    def submit(self, name: str, score: int) -> LeaderboardEntry:
        """Loads the list, records the score and writes it back. Nothing is written if the name is blank."""
        leaderboard = self.load()
        entry = leaderboard.submit(name, score)
        self.save(leaderboard)
        return entry
