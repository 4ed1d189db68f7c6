# config.py
# Runtime settings for the 2048 game, read from the environment.

from dataclasses import dataclass
from pathlib import Path
import os

DEFAULT_DATA_DIR = Path.home() / ".game2048"
STATE_FILE_NAME = "game_state.json"
LEADERBOARD_FILE_NAME = "leaderboard.json"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    log_level: str = "WARNING"

    @property
    def state_path(self) -> Path:
        return self.data_dir / STATE_FILE_NAME

    @property
    def leaderboard_path(self) -> Path:
        return self.data_dir / LEADERBOARD_FILE_NAME


def settings_from_env() -> Settings:
    """Builds Settings from GAME2048_DATA_DIR and GAME2048_LOG_LEVEL."""
    data_dir = os.environ.get("GAME2048_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        log_level=os.environ.get("GAME2048_LOG_LEVEL", "WARNING").upper(),
    )
