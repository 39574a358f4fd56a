from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse

from livechart.api.page import INDEX_HTML
from livechart.chart.broadcast import BroadcastSink
from livechart.chart.controller import WindowController
from livechart.errors import InvalidStateError
from livechart.models.chart import (
    BarMessage,
    BarOut,
    SeriesMessage,
    SeriesSnapshot,
    VolumeOut,
    VolumeSeriesMessage,
)
from livechart.models.market import volume_point

router = APIRouter()
log = logging.getLogger("routes")


def _controller(request_or_ws) -> WindowController:
    return request_or_ws.app.state.controller


@router.get("/", response_class=HTMLResponse)
def index():
    return HTMLResponse(INDEX_HTML)


@router.get("/health")
def health(request: Request):
    controller = _controller(request)
    settings = request.app.state.settings
    return {
        "status": "ok",
        "app_env": settings.app_env,
        "state": controller.state.value,
        "capacity": settings.window_capacity,
        "tick_interval_ms": settings.tick_interval_ms,
        "bars": len(controller.snapshot()),
    }


@router.get("/series", response_model=SeriesSnapshot)
def series(request: Request):
    """
    Full current window plus its volume projection, oldest first.
    """
    bars = _controller(request).snapshot()
    return SeriesSnapshot(
        bars=[BarOut.from_bar(b) for b in bars],
        volume=[VolumeOut.from_point(volume_point(b)) for b in bars],
    )


@router.post("/dev/advance", response_model=BarMessage)
async def dev_advance(request: Request):
    """
    Dev-only helper:
    Advances the window by one bar right now, outside the timer.
    """
    try:
        bar = _controller(request).advance()
    except InvalidStateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return BarMessage(bar=BarOut.from_bar(bar))


async def _forward(websocket: WebSocket, queue: asyncio.Queue) -> None:
    """Push queued sink messages to one client until the sink drops it."""
    while True:
        msg = await queue.get()
        if msg is None:
            # dropped by the sink for falling behind
            await websocket.close(code=1013)
            return
        await websocket.send_json(msg)


def _stop_sender(sender: asyncio.Task) -> None:
    """Cancel a running sender, or collect the error of one that already failed."""
    if not sender.done():
        sender.cancel()
        return
    if sender.cancelled():
        return
    exc = sender.exception()
    if exc is not None:
        log.warning("sending to client failed: %r", exc)


@router.websocket("/ws")
async def ws_stream(websocket: WebSocket):
    """
    Live chart feed:
    - "series" + "volume_series" with the current window on connect
    - then one "bar" + one "volume" message per tick
    """
    await websocket.accept()

    controller = _controller(websocket)
    sink: BroadcastSink = websocket.app.state.sink

    # Snapshot and subscribe without awaiting in between, so no tick can slip past.
    bars = controller.snapshot()
    queue = sink.subscribe()
    sender = None
    try:
        await websocket.send_json(SeriesMessage(bars=[BarOut.from_bar(b) for b in bars]).model_dump())
        await websocket.send_json(
            VolumeSeriesMessage(volume=[VolumeOut.from_point(volume_point(b)) for b in bars]).model_dump()
        )

        sender = asyncio.create_task(_forward(websocket, queue))

        # Clients never send anything we use; this only waits for them to leave.
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
        log.info("client disconnected")
    except WebSocketDisconnect:
        log.info("client disconnected")
    finally:
        if sender is not None:
            _stop_sender(sender)
        sink.unsubscribe(queue)
