from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, configure_logging, get_settings
from .routers import clients as clients_router
from .routers import rooms as rooms_router
from .routers import websockets as ws_router
from .state import RelayState


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.relay = RelayState.create()
        try:
            yield
        finally:
            await app.state.relay.shutdown()

    app = FastAPI(title="Room Relay", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(clients_router.router)
    app.include_router(rooms_router.router)
    app.include_router(ws_router.router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
