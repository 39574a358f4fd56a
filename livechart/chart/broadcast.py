from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Sequence, Set

from livechart.chart.sink import ChartSink
from livechart.models.chart import (
    BarMessage,
    BarOut,
    SeriesMessage,
    VolumeMessage,
    VolumeOut,
    VolumeSeriesMessage,
)
from livechart.models.market import Bar, VolumePoint

log = logging.getLogger("broadcast_sink")


class BroadcastSink(ChartSink):
    """
    Fans sink calls out to connected WebSocket clients.

    Each client gets its own bounded queue of JSON-ready dicts.
    A client that stops reading (queue full) is dropped instead of blocking the tick;
    its reader then gets None and should close the connection.
    Must be called from the event loop thread.
    """

    def __init__(self, max_queue: int = 256) -> None:
        self.max_queue = max_queue
        self._subscribers: Set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue)
        self._subscribers.add(q)
        log.info("client subscribed (clients=%d)", len(self._subscribers))
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        if q in self._subscribers:
            self._subscribers.discard(q)
            log.info("client unsubscribed (clients=%d)", len(self._subscribers))

    def _publish(self, payload: Dict[str, Any]) -> None:
        for q in list(self._subscribers):
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                log.warning("client queue full, dropping client")
                self._subscribers.discard(q)
                self._close(q)

    @staticmethod
    def _close(q: asyncio.Queue) -> None:
        """Empty a dropped client's queue and leave a None sentinel for its reader."""
        while not q.empty():
            q.get_nowait()
        q.put_nowait(None)

    # -------------------------
    # ChartSink
    # -------------------------
    def set_initial_series(self, bars: Sequence[Bar]) -> None:
        msg = SeriesMessage(bars=[BarOut.from_bar(b) for b in bars])
        self._publish(msg.model_dump())

    def append_or_update_latest(self, bar: Bar) -> None:
        self._publish(BarMessage(bar=BarOut.from_bar(bar)).model_dump())

    def set_initial_volume(self, points: Sequence[VolumePoint]) -> None:
        msg = VolumeSeriesMessage(volume=[VolumeOut.from_point(p) for p in points])
        self._publish(msg.model_dump())

    def append_or_update_latest_volume(self, point: VolumePoint) -> None:
        self._publish(VolumeMessage(volume=VolumeOut.from_point(point)).model_dump())
