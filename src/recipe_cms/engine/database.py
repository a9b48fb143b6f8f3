"""Database engine creation and schema synchronisation."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from recipe_cms.core.config import DatabaseProvider
from recipe_cms.observability.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from recipe_cms.assembly import DatabaseConfig

    from .compiler import CompiledSchema


logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database(db: DatabaseConfig) -> Engine:
    """Create the SQLAlchemy engine for the configured database.

    SQLite connections are shareable across threads (sync endpoints run in a
    threadpool) and enforce foreign keys. In-memory SQLite uses a single
    static connection so every session sees the same database.
    """
    url = make_url(db.url)
    kwargs: dict[str, Any] = {"echo": db.echo}

    if db.provider == DatabaseProvider.SQLITE:
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    if db.provider == DatabaseProvider.SQLITE:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.info("Database engine created", provider=db.provider.value, database=url.database)
    return engine


def sync_schema(engine: Engine, schema: CompiledSchema) -> None:
    """Create any missing tables; existing tables are left untouched."""
    schema.metadata.create_all(engine)
    logger.info("Database schema synchronised", tables=sorted(schema.metadata.tables))


def check_database_health(engine: Engine) -> bool:
    """Check if the database is available and responding.

    Returns:
        bool: True if database is healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.debug("Database health check failed: {} ({})", str(e), type(e).__name__)
        return False
    return True
