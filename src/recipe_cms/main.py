"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn recipe_cms.main:app --reload
"""

from recipe_cms.factory import create_app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from recipe_cms.core.config import get_settings

    settings = get_settings()

    uvicorn.run(
        "recipe_cms.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )
