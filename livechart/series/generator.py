from __future__ import annotations

import random
from typing import List, Optional, Protocol

from livechart.models.market import Bar

VOLUME_MIN = 500
VOLUME_MAX = 1500  # exclusive


class RandomSource(Protocol):
    """The slice of random.Random the generator consumes."""

    def uniform(self, a: float, b: float) -> float: ...

    def randrange(self, start: int, stop: int) -> int: ...


def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)


def _build_bar(time: int, open_: float, rng: RandomSource) -> Bar:
    """
    One random-walk step starting at open_.

    high/low bracket open/close by construction, so no clamping is needed.
    Rounding is monotonic, so the bracket still holds after rounding.
    """
    close = open_ + rng.uniform(-1.0, 1.0)
    high = max(open_, close) + rng.uniform(0.0, 1.0)
    low = min(open_, close) - rng.uniform(0.0, 1.0)
    volume = rng.randrange(VOLUME_MIN, VOLUME_MAX)

    return Bar(
        time=time,
        open=round(open_, 2),
        high=round(high, 2),
        low=round(low, 2),
        close=round(close, 2),
        volume=int(volume),
    )


def generate_next_bar(previous: Bar, rng: RandomSource) -> Bar:
    """
    Next bar after `previous`.

    time = previous.time + 1
    open = previous.close (copied, so the path has no gaps)
    """
    return _build_bar(previous.time + 1, previous.close, rng)


def generate_initial_window(
    count: int,
    start_time: int,
    start_price: float,
    rng: RandomSource,
) -> List[Bar]:
    """
    Returns `count` bars with times start_time .. start_time + count - 1.

    The first bar opens at start_price; every later bar opens at the previous close.
    """
    if count <= 0:
        return []

    bars = [_build_bar(start_time, round(float(start_price), 2), rng)]
    for _ in range(count - 1):
        bars.append(generate_next_bar(bars[-1], rng))
    return bars
