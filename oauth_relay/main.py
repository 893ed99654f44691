"""
FastAPI application entrypoint for the OAuth callback relay.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from oauth_relay.api.routes import debug_router, router as api_router
from oauth_relay.core.config import get_settings
from oauth_relay.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="OAuth Callback Relay",
        version="0.1.0",
        description="Receives identity provider callbacks and forwards them to backends.",
    )
    app.include_router(api_router)
    if settings.debug:
        logger.warning("Debug endpoint enabled; do not run with DEBUG=true in production")
        app.include_router(debug_router)

    logger.info(
        "Relay configured: mode=%s state_scheme=%s provider=%s",
        settings.relay_mode.value,
        settings.state.scheme.value,
        settings.provider.name,
    )
    if settings.provider.redirect_uri:
        logger.info("Redirect URL: %s", settings.provider.redirect_uri)
    return app


app = create_app()


def run() -> None:
    """Serve the app; in-flight callbacks get a bounded grace period on shutdown."""
    settings = get_settings()
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    run()


__all__ = ["app", "create_app", "run"]
