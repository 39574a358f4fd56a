from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from livechart.models.market import Bar, VolumePoint


class ChartSink(ABC):
    """
    Rendering collaborator contract (interface).

    The controller pushes:
    - the full window once, when it starts (set_initial_*)
    - one bar per tick afterwards (append_or_update_latest*)
    """

    @abstractmethod
    def set_initial_series(self, bars: Sequence[Bar]) -> None:
        raise NotImplementedError

    @abstractmethod
    def append_or_update_latest(self, bar: Bar) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_initial_volume(self, points: Sequence[VolumePoint]) -> None:
        raise NotImplementedError

    @abstractmethod
    def append_or_update_latest_volume(self, point: VolumePoint) -> None:
        raise NotImplementedError
