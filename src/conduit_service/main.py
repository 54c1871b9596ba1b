"""
Conduit Control Service - Main FastAPI Application

On startup the service acquires an application token, discovers or creates
the EventSub conduit and subscribes it to the configured broadcasters' chat.
Only then does it start serving the control endpoint, which lets an external
process point a shard at a new websocket session.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI

from . import __version__
from .api import router
from .core.config import Settings
from .provider import ProviderClient, acquire_credential, build_provider
from .services import ConduitBootstrapper, ControlState

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Bootstrap runs to completion before the first request is accepted. Any
    error raised here is fatal: the server never starts serving.
    """
    settings: Settings = app.state.settings
    provider: ProviderClient = app.state.provider or build_provider(settings)

    logger.info(f"Starting Conduit Control Service with {provider.name}")

    try:
        credential = await acquire_credential(
            provider,
            settings.twitch_client_id,
            settings.twitch_client_secret,
            settings.scopes,
        )

        bootstrapper = ConduitBootstrapper(provider, credential)
        conduit = await bootstrapper.bootstrap(
            shard_count=settings.conduit_shard_count,
            user_login=settings.twitch_user_login,
            targets=settings.broadcaster_logins,
        )

        app.state.control_state = ControlState(
            provider=provider,
            credential=credential,
            conduit=conduit,
            control_secret=settings.control_hardcoded_token,
            default_shard_id=settings.control_shard_id,
            report=bootstrapper.report,
        )
        logger.info(f"Control endpoint ready on port {settings.control_port}")

        yield
    finally:
        logger.info("Shutting down Conduit Control Service")
        await provider.close()


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[ProviderClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted
        provider: Provider override; built from settings when omitted
    """
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="Conduit Control Service",
        description="EventSub conduit bootstrap and shard transport control",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.provider = provider
    app.state.control_state = None

    app.include_router(router)

    @app.get("/", tags=["Info"])
    async def root() -> Dict[str, str]:
        """Root endpoint with service info."""
        return {
            "service": settings.service_name,
            "version": __version__,
        }

    return app


def run(settings: Optional[Settings] = None) -> None:
    """Load settings and serve the control endpoint."""
    import uvicorn

    settings = settings or Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.control_host,
        port=settings.control_port,
    )


if __name__ == "__main__":
    run()
