"""Reference engine: compiles the assembled configuration and serves items."""

from .compiler import CompiledList, CompiledSchema, RelationshipBinding, compile_schema
from .database import check_database_health, create_database, sync_schema
from .items import ItemService
from .runtime import Runtime, bootstrap
from .values import ImageRef


__all__ = [
    "CompiledList",
    "CompiledSchema",
    "ImageRef",
    "ItemService",
    "RelationshipBinding",
    "Runtime",
    "bootstrap",
    "check_database_health",
    "compile_schema",
    "create_database",
    "sync_schema",
]
