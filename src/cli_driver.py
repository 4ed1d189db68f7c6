# cli_driver.py
# This file is intended to be run to play 2048 in a terminal.

from typing import List, Optional
import logging

from config import Settings, settings_from_env
from controls import direction_from_key
from core import BoardEngine, GameProgressState, Grid, grid_values
from leaderboard import LeaderboardEntry, LeaderboardStore, LeaderboardValidationError
from persistence import SnapshotStore
from session import GameSession

logger = logging.getLogger(__name__)

HELP_TEXT = "Moves: W/A/S/D or up/down/left/right. U undo, N new game, L leaderboard, Q quit."


def build_session(settings: Settings) -> GameSession:
    return GameSession(
        engine=BoardEngine(),
        snapshots=SnapshotStore(settings.state_path),
        leaderboard=LeaderboardStore(settings.leaderboard_path),
    )


def main(settings: Optional[Settings] = None):
    settings = settings or settings_from_env()
    logging.basicConfig(level=settings.log_level)

    session = build_session(settings)
    already_over = session.start()
    display_board_state(session.engine.grid, session.engine.score, session.engine.progress)
    if already_over:
        prompt_for_score(session)

    while True:
        command = input(f"Enter move ({HELP_TEXT}): ").strip()
        lowered = command.lower()

        if lowered == "q":
            print("Quitting game.")
            break
        if lowered == "n":
            session.new_game()
        elif lowered == "u":
            if not session.undo():
                print("Nothing to undo.")
                continue
        elif lowered == "l":
            display_leaderboard(session.top_scores())
            continue
        else:
            direction = direction_from_key(command)
            if direction is None:
                print(f"Invalid input. {HELP_TEXT}")
                continue

            outcome = session.move(direction)
            if not outcome.moved:
                if outcome.game_over:
                    print("The game is over. Press N to start a new one.")
                else:
                    print("Move did not change the board. Try a different direction.")
                continue
            if outcome.won_now:
                print("Congratulations! You reached 2048! Keep going for a higher score.")
            if outcome.game_over:
                display_board_state(session.engine.grid, session.engine.score, session.engine.progress)
                print("No more moves possible.")
                prompt_for_score(session)
                continue

        display_board_state(session.engine.grid, session.engine.score, session.engine.progress)


def prompt_for_score(session: GameSession):
    """Offers to put the final score on the leaderboard."""
    print(f"Final score: {session.engine.score}")
    name = input("Enter your name to save the score: ")
    try:
        session.submit_score(name)
    except LeaderboardValidationError as e:
        print(f"{e} Score not saved. Press N for a new game.")
        return
    print("Score saved!")
    display_leaderboard(session.top_scores())


# --- Display Functions ---

def display_board_state(grid: Grid, score: int, progress: GameProgressState):
    """Prints the board, score, and game status to the console."""
    print(f"\nScore: {score}")
    status_message = {
        GameProgressState.IN_PROGRESS: f"Status: {progress.name}",
        GameProgressState.GAME_WON: "YOU WON! (keep playing)",
        GameProgressState.GAME_OVER: "GAME OVER!"
    }
    print(status_message.get(progress, f"Status: {progress.name} (Unknown)"))

    for row in grid_values(grid):
        print("\t".join(str(value) if value else "." for value in row))
    print("-" * (len(grid) * 6))


def display_leaderboard(entries: List[LeaderboardEntry]):
    if not entries:
        print("No scores yet.")
        return
    print("#\tName\tScore\tDate")
    for rank, entry in enumerate(entries, start=1):
        print(f"{rank}\t{entry.name}\t{entry.score}\t{entry.date.strftime('%d.%m.%Y')}")


if __name__ == "__main__":
    main()
