import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from livechart.api.routes import router as api_router
from livechart.chart.broadcast import BroadcastSink
from livechart.chart.session import chart_session
from livechart.config import Settings, get_settings


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One chart session for the process: window + timer + WS fan-out
        sink = BroadcastSink()
        async with chart_session(settings, sink=sink) as controller:
            app.state.sink = sink
            app.state.controller = controller
            yield

    app = FastAPI(title="Live Chart API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, reload=False)
