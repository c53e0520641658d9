"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Initialize shared resources (source store, notifier, playback manager)
- Register routes
- Stop playback on shutdown
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.publish.base import ChannelFactory
from adapters.publish.zmq_publisher import ZmqPublishChannel
from config import AppConfig
from observability.logger import log_event
from playback.manager import PlaybackSessionManager
from services.source_store import SourceStore
from session.status_notifier import StatusNotifier

from server.routes import register_routes


def create_app(
    config: AppConfig | None = None,
    *,
    channel_factory: ChannelFactory | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    This is the app factory pattern that allows:
    - Testing with different configurations and fake channels
    - Environment-specific setup
    - ASGI server compatibility
    """
    config = config or AppConfig.load_from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log_event({
            "event_type": "SERVER_STARTED",
            "env": config.env,
            "upload_dir": str(config.upload_dir),
            "publish_address": config.publish_address,
        })
        yield
        await app.state.playback.shutdown()
        log_event({"event_type": "SERVER_STOPPED"})

    app = FastAPI(title="Radio TX Studio API", lifespan=lifespan)

    app.state.config = config

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = SourceStore(config.upload_dir)
    app.state.notifier = StatusNotifier()
    app.state.playback = PlaybackSessionManager(
        store=app.state.store,
        channel_factory=channel_factory or build_channel_factory(config),
        notifier=app.state.notifier,
    )
    app.state.notifier.bind_snapshot(app.state.playback.status_event)

    # Routes
    register_routes(app)

    return app


def build_channel_factory(config: AppConfig) -> ChannelFactory:
    """One ZeroMQ PUB channel per playback session."""
    def factory() -> ZmqPublishChannel:
        return ZmqPublishChannel(
            address=config.publish_address,
            bind=config.publish_bind,
        )

    return factory
