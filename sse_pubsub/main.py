"""SSE PubSub FastAPI application entrypoint."""
from __future__ import annotations

from fastapi import FastAPI

from .api.broadcast import router as broadcast_router
from .api.stream import router as stream_router
from .core.bus import Bus, PubSub
from .core.streams import StreamGroup
from .util.logging_config import setup_logging
from .util.settings import Settings


def create_app(bus: Bus | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the HTTP adapter around ``bus``."""

    settings = settings or Settings.from_env()
    app = FastAPI(title="SSE PubSub", version="0.1.0")
    app.state.settings = settings
    app.state.bus = bus if bus is not None else PubSub()
    app.state.streams = StreamGroup(mailbox_size=settings.mailbox_size)

    @app.on_event("startup")
    def _startup() -> None:
        setup_logging(settings.log_level)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.streams.drain(settings.drain_timeout)
        close = getattr(app.state.bus, "close", None)
        if close is not None:
            await close()

    app.include_router(stream_router, prefix="/api")
    app.include_router(broadcast_router, prefix="/api")

    @app.get("/healthz")
    def healthcheck() -> dict[str, str]:
        """Basic health endpoint for readiness probes."""
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=4000)
