import random

import pytest

from core import BoardEngine, grid_from_values


class FixedRandom(random.Random):
    """random() always returns `fixed`; at 0.0, choice and randint always pick the first option."""

    fixed = 0.0

    def random(self):
        return self.fixed


@pytest.fixture()
def fixed_rng() -> FixedRandom:
    return FixedRandom()


@pytest.fixture()
def engine_with():
    """Builds an engine positioned on the given face values."""

    def _build(values, rng=None, score=0, won=False) -> BoardEngine:
        engine = BoardEngine(rng=rng if rng is not None else random.Random(1234))
        grid = grid_from_values(values)
        engine.restore(
            grid=grid,
            score=score,
            history=[],
            game_over=False,
            won=won,
            tile_id_counter=len(values) * len(values[0]),
        )
        return engine

    return _build
