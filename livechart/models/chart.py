from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel

from livechart.models.market import Bar, VolumePoint


class BarOut(BaseModel):
    """Wire shape of a Bar (matches what the candlestick series expects)."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int

    @classmethod
    def from_bar(cls, bar: Bar) -> "BarOut":
        return cls(
            time=bar.time,
            open=bar.open,
            high=bar.high,
            low=bar.low,
            close=bar.close,
            volume=bar.volume,
        )


class VolumeOut(BaseModel):
    """
    Wire shape of a histogram point.

    color: "up" or "down"; the page maps it to an actual color.
    """

    time: int
    value: int
    color: str

    @classmethod
    def from_point(cls, point: VolumePoint) -> "VolumeOut":
        return cls(time=point.time, value=point.value, color=point.color_class)


class SeriesSnapshot(BaseModel):
    bars: List[BarOut] = []
    volume: List[VolumeOut] = []


# WebSocket messages, one per sink call
class SeriesMessage(BaseModel):
    type: Literal["series"] = "series"
    bars: List[BarOut]


class VolumeSeriesMessage(BaseModel):
    type: Literal["volume_series"] = "volume_series"
    volume: List[VolumeOut]


class BarMessage(BaseModel):
    type: Literal["bar"] = "bar"
    bar: BarOut


class VolumeMessage(BaseModel):
    type: Literal["volume"] = "volume"
    volume: VolumeOut
