from __future__ import annotations

import asyncio
import enum
import logging
import time
from typing import List, Optional

from livechart.chart.sink import ChartSink
from livechart.errors import InvalidStateError
from livechart.models.market import Bar, volume_point
from livechart.series.generator import (
    RandomSource,
    generate_initial_window,
    generate_next_bar,
    make_rng,
)
from livechart.series.window import BarWindow

log = logging.getLogger("window_controller")


class ControllerState(str, enum.Enum):
    UNINITIALIZED = "UNINITIALIZED"
    RUNNING = "RUNNING"
    DISPOSED = "DISPOSED"


class WindowController:
    """
    Owns the live bar window and drives it on a fixed cadence.

    UNINITIALIZED -> RUNNING   initialize(): fill window, push full set, start timer
    RUNNING       -> RUNNING   advance(): one new bar in, oldest out, push the new bar
    *             -> DISPOSED  dispose(): stop timer; terminal

    The timer is an asyncio task on the running loop. Every fire re-checks the
    state before touching the window, so nothing is mutated or emitted after
    dispose() even if a fire was already scheduled. A tick that raises is logged
    at ERROR and ends the timer, which also moves the controller to DISPOSED.
    """

    def __init__(
        self,
        sink: ChartSink,
        rng: Optional[RandomSource] = None,
        start_price: float = 100.0,
    ) -> None:
        self.sink = sink
        self.rng = rng if rng is not None else make_rng()
        self.start_price = start_price

        self.state = ControllerState.UNINITIALIZED
        self.window: Optional[BarWindow] = None
        self.tick_interval_ms: Optional[int] = None
        self._timer: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.state is ControllerState.RUNNING

    def initialize(
        self,
        capacity: int = 100,
        tick_interval_ms: int = 1000,
        start_time: Optional[int] = None,
    ) -> None:
        """
        Fill the window and push it to the sink, then start ticking.

        start_time defaults to now - capacity seconds, so the newest bar is "now".
        Must be called with a running event loop.
        """
        if self.state is ControllerState.DISPOSED:
            raise InvalidStateError("initialize() called after dispose()")
        if self.state is ControllerState.RUNNING:
            log.warning("initialize() called while running; ignored")
            return
        if tick_interval_ms <= 0:
            raise ValueError(f"tick_interval_ms must be > 0, got {tick_interval_ms}")

        # Raises before any state or sink change when there is no running loop.
        loop = asyncio.get_running_loop()

        if start_time is None:
            start_time = int(time.time()) - capacity

        window = BarWindow(capacity=capacity)
        window.fill(generate_initial_window(capacity, start_time, self.start_price, self.rng))

        self.window = window
        self.tick_interval_ms = tick_interval_ms
        self.state = ControllerState.RUNNING

        bars = window.snapshot()
        self.sink.set_initial_series(bars)
        self.sink.set_initial_volume([volume_point(b) for b in bars])

        self._timer = loop.create_task(self._tick_loop())
        self._timer.add_done_callback(self._on_timer_done)
        log.info(
            "window initialized capacity=%d interval_ms=%d first_time=%d last_time=%d",
            capacity,
            tick_interval_ms,
            bars[0].time,
            bars[-1].time,
        )

    def advance(self) -> Bar:
        """Append one generated bar, evict the oldest, and push the new bar."""
        if self.state is not ControllerState.RUNNING or self.window is None:
            raise InvalidStateError(f"advance() not allowed in state {self.state.value}")
        if len(self.window) == 0:
            raise InvalidStateError("advance() on an empty window")

        bar = generate_next_bar(self.window.last(), self.rng)
        self.window.push(bar)

        self.sink.append_or_update_latest(bar)
        self.sink.append_or_update_latest_volume(volume_point(bar))

        log.debug("tick time=%d close=%.2f volume=%d", bar.time, bar.close, bar.volume)
        return bar

    def snapshot(self) -> List[Bar]:
        if self.window is None:
            return []
        return self.window.snapshot()

    def dispose(self) -> None:
        """Stop ticking. Safe to call any number of times, in any state."""
        if self.state is ControllerState.DISPOSED:
            return

        was_running = self.state is ControllerState.RUNNING
        self.state = ControllerState.DISPOSED

        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()

        if was_running:
            log.info("window controller disposed")

    async def _tick_loop(self) -> None:
        interval_s = self.tick_interval_ms / 1000.0
        while True:
            await asyncio.sleep(interval_s)
            if self.state is not ControllerState.RUNNING:
                return
            self.advance()

    def _on_timer_done(self, task: asyncio.Task) -> None:
        """A timer that died on an error takes the controller down with it."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        log.error("tick failed; stopping timer", exc_info=exc)
        if self._timer is task:
            self._timer = None
        self.state = ControllerState.DISPOSED
