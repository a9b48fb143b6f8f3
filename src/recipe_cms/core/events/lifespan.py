"""Application lifespan event handlers.

The runtime (compiled schema, database engine, item service) is built by the
application factory before the app starts serving, so a broken configuration
aborts the process before the server binds. The lifespan only announces
startup and releases the database on shutdown.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from recipe_cms.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings = app.state.settings
    logger.info(
        "Application startup complete",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        lists=sorted(app.state.runtime.config.lists),
    )
    yield
    logger.info("Shutting down application")
    app.state.runtime.close()
    logger.info("Application shutdown complete")
