"""Application factory for creating FastAPI instances.

This module provides the create_app factory function that:
- Assembles and validates the system configuration
- Compiles the lists and opens the database
- Registers exception handlers and routers
- Serves locally stored images
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from recipe_cms.api.router import router as api_router
from recipe_cms.assembly import SystemConfig, build_config
from recipe_cms.core.config import Settings, get_settings
from recipe_cms.core.events import lifespan
from recipe_cms.core.exceptions import setup_exception_handlers
from recipe_cms.engine import bootstrap
from recipe_cms.observability.logging import get_logger, setup_logging
from recipe_cms.storage import LocalStorageConfig


logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    system: SystemConfig | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    The configuration is assembled and the database prepared here rather than
    in the lifespan, so an invalid schema fails before the server starts.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().
        system: Optional assembled configuration. If not provided, it is
            built from ``settings``.

    Returns:
        Configured FastAPI application instance.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(
        settings.logging.level,
        settings.logging.format,
        is_development=settings.is_development,
    )

    if system is None:
        system = build_config(settings)
    runtime = bootstrap(system)

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Headless content API for recipes and articles",
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url=None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        debug=settings.app.debug,
    )

    app.state.settings = settings
    app.state.runtime = runtime

    setup_exception_handlers(app)
    app.include_router(api_router)
    _mount_images(app, system)

    return app


def _mount_images(app: FastAPI, system: SystemConfig) -> None:
    """Serve every local storage target from its server route."""
    for name, target in system.storage.items():
        if not isinstance(target, LocalStorageConfig) or target.server_route is None:
            continue
        directory = Path(target.storage_path)
        directory.mkdir(parents=True, exist_ok=True)
        route = target.server_route.path.rstrip("/")
        app.mount(
            route,
            StaticFiles(directory=directory, check_dir=False),
            name=f"storage-{name}",
        )
        logger.debug("Mounted storage route", storage=name, route=route, directory=str(directory))
