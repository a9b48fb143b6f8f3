"""Stateless session configuration.

Sessions are sealed by the serving layer with ``secret``; issuing and
unsealing tokens is not done here. This module only decides the secret and
lifetime and describes what a session carries.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from recipe_cms.core.exceptions import ConfigurationError
from recipe_cms.observability.logging import get_logger

if TYPE_CHECKING:
    from recipe_cms.core.config import Settings


logger = get_logger(__name__)

MIN_SECRET_LENGTH = 32


class SessionConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["stateless"] = "stateless"
    max_age: int = Field(gt=0)
    secret: SecretStr


class SessionData(BaseModel):
    """What an authenticated session identifies."""

    model_config = ConfigDict(frozen=True)

    list_key: str
    item_id: str
    data: dict[str, Any] = {}


def build_session(settings: Settings) -> SessionConfig:
    """Build the session config from settings.

    Outside production a random secret is generated when ``SESSION_SECRET``
    is not set, which invalidates sessions on every restart.

    Raises:
        ConfigurationError: If the secret is missing in production or too short.
    """
    secret = settings.SESSION_SECRET.get_secret_value() if settings.SESSION_SECRET else ""

    if not secret:
        if settings.is_production:
            msg = "SESSION_SECRET must be set in production"
            raise ConfigurationError(msg)
        logger.warning("SESSION_SECRET not set, generating a temporary secret")
        secret = secrets.token_hex(MIN_SECRET_LENGTH)

    if len(secret) < MIN_SECRET_LENGTH:
        msg = f"SESSION_SECRET must be at least {MIN_SECRET_LENGTH} characters"
        raise ConfigurationError(msg)

    return SessionConfig(max_age=settings.session.max_age, secret=SecretStr(secret))
