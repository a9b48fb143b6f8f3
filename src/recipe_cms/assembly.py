"""Top-level assembly.

Merges the database section, storage targets, lists and session into one
``SystemConfig``, attaches the identity rules and validates the result. This
is the single object the engine reads at bootstrap; any error here is fatal.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from recipe_cms.auth.config import AuthConfig, with_auth
from recipe_cms.auth.session import SessionConfig, build_session
from recipe_cms.core.config import DatabaseProvider, Settings, get_settings
from recipe_cms.observability.logging import get_logger
from recipe_cms.schema import ListConfig, Lists, validate_lists
from recipe_cms.schema import lists as default_lists
from recipe_cms.storage import StorageConfig, build_storage


logger = get_logger(__name__)


class DatabaseConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    provider: DatabaseProvider
    url: str
    echo: bool = False


class SystemConfig(BaseModel):
    """Everything the engine needs, in one immutable object."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    db: DatabaseConfig
    storage: dict[str, StorageConfig]
    lists: dict[str, ListConfig]
    session: SessionConfig
    auth: AuthConfig | None = None
    password_rounds: int = Field(default=10, ge=4, le=31)


def config(
    *,
    db: DatabaseConfig,
    storage: dict[str, StorageConfig],
    lists: Lists,
    session: SessionConfig,
    password_rounds: int = 10,
) -> SystemConfig:
    """Assemble and validate a configuration.

    Raises:
        SchemaValidationError: If the lists are inconsistent or name unknown storage.
    """
    validate_lists(lists, storage)
    return SystemConfig(
        db=db,
        storage=storage,
        lists=dict(lists),
        session=session,
        password_rounds=password_rounds,
    )


def build_config(
    settings: Settings | None = None,
    *,
    lists: Lists | None = None,
) -> SystemConfig:
    """Build the application configuration from settings.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().
        lists: Optional schema override. If not provided, uses the declared lists.

    Raises:
        ConfigurationError: On any storage, session, auth or schema problem.
    """
    if settings is None:
        settings = get_settings()

    system = with_auth(
        config(
            db=DatabaseConfig(
                provider=settings.database.provider,
                url=settings.database.url,
                echo=settings.database.echo,
            ),
            storage=build_storage(settings),
            lists=default_lists if lists is None else lists,
            session=build_session(settings),
            password_rounds=settings.auth.bcrypt_rounds,
        )
    )

    logger.info(
        "Configuration assembled",
        lists=len(system.lists),
        storage=sorted(system.storage),
        database=system.db.provider.value,
    )
    return system
