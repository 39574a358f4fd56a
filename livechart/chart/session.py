from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from livechart.chart.broadcast import BroadcastSink
from livechart.chart.controller import WindowController
from livechart.chart.sink import ChartSink
from livechart.config import Settings
from livechart.series.generator import make_rng


@asynccontextmanager
async def chart_session(
    settings: Settings,
    sink: Optional[ChartSink] = None,
) -> AsyncIterator[WindowController]:
    """
    Acquire the chart resources in one step and release them in one step.

    Yields a running WindowController; the controller is disposed on exit,
    even if the body raises.
    """
    controller = WindowController(
        sink=sink if sink is not None else BroadcastSink(),
        rng=make_rng(settings.random_seed),
        start_price=settings.start_price,
    )
    try:
        controller.initialize(
            capacity=settings.window_capacity,
            tick_interval_ms=settings.tick_interval_ms,
        )
        yield controller
    finally:
        controller.dispose()
