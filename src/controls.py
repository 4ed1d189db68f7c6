# controls.py
# Turns key presses and swipe gestures into move directions.

from typing import Dict, Optional, Tuple

from core import DIRECTION

MIN_SWIPE_DISTANCE = 30

KEY_MAP: Dict[str, DIRECTION] = {
    "ArrowUp": DIRECTION.UP,
    "ArrowDown": DIRECTION.DOWN,
    "ArrowLeft": DIRECTION.LEFT,
    "ArrowRight": DIRECTION.RIGHT,
    "up": DIRECTION.UP,
    "down": DIRECTION.DOWN,
    "left": DIRECTION.LEFT,
    "right": DIRECTION.RIGHT,
    "w": DIRECTION.UP,
    "s": DIRECTION.DOWN,
    "a": DIRECTION.LEFT,
    "d": DIRECTION.RIGHT,
}


def direction_from_key(key: str) -> Optional[DIRECTION]:
    """Maps a key name (arrow key, arrow word or W/A/S/D) to a direction, or None."""
    key = key.strip()
    if key in KEY_MAP:
        return KEY_MAP[key]
    return KEY_MAP.get(key.lower())


def direction_from_swipe(start: Tuple[float, float], end: Tuple[float, float],
                         min_distance: float = MIN_SWIPE_DISTANCE) -> Optional[DIRECTION]:
    """
    Works out which way a swipe went.
    Args:
        start (Tuple[float, float]): (x, y) where the touch began.
        end (Tuple[float, float]): (x, y) where the touch ended. y grows downwards.
        min_distance (float): Shorter swipes are ignored.
    Returns:
        Optional[DIRECTION]: The direction along the axis with the larger travel
                             (vertical on a tie), or None for a short swipe.
    """
    diff_x = end[0] - start[0]
    diff_y = end[1] - start[1]

    if max(abs(diff_x), abs(diff_y)) < min_distance:
        return None

    if abs(diff_x) > abs(diff_y):
        return DIRECTION.RIGHT if diff_x > 0 else DIRECTION.LEFT
    return DIRECTION.DOWN if diff_y > 0 else DIRECTION.UP
