"""
FastAPI application entrypoint for the identity card service.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from badgecard import __version__
from badgecard.api.routes import router
from badgecard.core.config import get_settings
from badgecard.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Factory for the FastAPI application. Raises ``ValidationError`` on missing settings."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Discord Badge Card",
        version=__version__,
        description="Render a Discord account's name, avatar and badges as a PNG.",
    )
    app.include_router(router)
    return app


def run() -> None:
    """Console entry point: validate configuration, then serve."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging()
        logger.critical("Invalid or missing configuration, refusing to start:\n%s", exc)
        sys.exit(1)

    app = create_app()
    logger.info("Serving on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()
