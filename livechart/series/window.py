from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional, Tuple

from livechart.errors import InvalidStateError
from livechart.models.market import Bar


@dataclass
class BarWindow:
    """
    Fixed-capacity ring of bars, oldest first.

    fill()  -> replaces the contents with an initial run of bars
    push()  -> appends one bar and evicts the oldest once full
    Consecutive bars must be exactly 1 second apart.
    """
    capacity: int = 100
    bars: Deque[Bar] = field(default_factory=deque)

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {self.capacity}")
        self.bars = deque(self.bars, maxlen=self.capacity)

    def __len__(self) -> int:
        return len(self.bars)

    def __iter__(self):
        return iter(self.bars)

    @property
    def is_full(self) -> bool:
        return len(self.bars) == self.capacity

    def last(self) -> Bar:
        if not self.bars:
            raise InvalidStateError("window is empty")
        return self.bars[-1]

    def fill(self, bars: Iterable[Bar]) -> None:
        bars = list(bars)
        if len(bars) > self.capacity:
            raise ValueError(f"got {len(bars)} bars for a window of {self.capacity}")
        for prev, curr in zip(bars, bars[1:]):
            if curr.time != prev.time + 1:
                raise ValueError(f"bar time {curr.time} does not follow {prev.time}")
        self.bars.clear()
        self.bars.extend(bars)

    def push(self, bar: Bar) -> Tuple[Bar, Optional[Bar]]:
        """Append `bar`; returns (bar, evicted) where evicted is None until full."""
        if self.bars and bar.time != self.bars[-1].time + 1:
            raise ValueError(f"bar time {bar.time} does not follow {self.bars[-1].time}")

        evicted = self.bars[0] if self.is_full else None
        self.bars.append(bar)
        return bar, evicted

    def snapshot(self) -> List[Bar]:
        return list(self.bars)
