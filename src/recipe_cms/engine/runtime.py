"""One-time bootstrap: compile the configuration and open the database."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from recipe_cms.observability.logging import get_logger

from .compiler import CompiledSchema, compile_schema
from .database import create_database, sync_schema
from .items import ItemService

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from recipe_cms.assembly import SystemConfig


logger = get_logger(__name__)


@dataclass(frozen=True)
class Runtime:
    config: SystemConfig
    schema: CompiledSchema
    engine: Engine
    items: ItemService

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def bootstrap(config: SystemConfig) -> Runtime:
    """Compile ``config``, open the database and create missing tables.

    Raises:
        SchemaValidationError: If the lists do not compile.
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached.
    """
    schema = compile_schema(config.lists)
    engine = create_database(config.db)
    try:
        sync_schema(engine, schema)
    except Exception:
        engine.dispose()
        raise
    return Runtime(
        config=config,
        schema=schema,
        engine=engine,
        items=ItemService(engine, schema, config),
    )
