from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Bar:
    """
    Bar (OHLCV) for one 1-second step of the synthetic series.

    time: epoch seconds, +1 per step
    open/high/low/close: prices rounded to 2 decimals when the bar is built
    volume: synthetic traded volume in [500, 1500)
    """
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int

    @property
    def is_up(self) -> bool:
        return self.close > self.open


@dataclass(frozen=True)
class VolumePoint:
    """
    One histogram point derived from a Bar.

    color_class: "up" when the bar closed above its open, else "down"
    """
    time: int
    value: int
    color_class: str


def volume_point(bar: Bar) -> VolumePoint:
    """Project a bar onto the volume histogram. Recomputed on demand, never stored."""
    return VolumePoint(
        time=bar.time,
        value=bar.volume,
        color_class="up" if bar.is_up else "down",
    )
