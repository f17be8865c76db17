# roomchat/main.py

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roomchat.core.config import Settings, settings as default_settings
from roomchat.core.logging import setup_logging, get_logger
from roomchat.core.state import init_state
from roomchat.api.routes import root, health, metrics, rooms
from roomchat.api import websocket as websocket_module

logger = get_logger(__name__)


def create_app(settings: Settings = default_settings) -> FastAPI:
    # Configure logging first
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Room Chat Hub")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    init_state(app, settings)

    # REST routes
    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(rooms.router)

    # WebSocket routes
    app.include_router(websocket_module.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("🚀 Room chat hub starting - rooms: %s", ", ".join(app.state.hub.available_rooms()))

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.connection_manager.close_all()
        logger.info("Room chat hub stopped")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("roomchat.main:app", host=default_settings.HOST, port=default_settings.PORT)
