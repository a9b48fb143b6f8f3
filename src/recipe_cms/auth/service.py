"""Password sign-in against the identity list."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from recipe_cms.core.exceptions import (
    ConfigurationError,
    ErrorDetail,
    ValidationFailedException,
)
from recipe_cms.observability.logging import get_logger

from .passwords import hash_password, verify_password
from .session import SessionData

if TYPE_CHECKING:
    from recipe_cms.engine import ItemService

    from .config import AuthConfig


logger = get_logger(__name__)

# Checked when the identity is unknown so both paths cost one bcrypt round
_TIMING_HASH = hash_password("simulated-password-to-counter-timing-attack", rounds=4)


class PasswordAuthenticator:
    """Authenticate items of the identity list by identity field and password."""

    def __init__(self, items: ItemService, auth: AuthConfig | None) -> None:
        if auth is None:
            msg = "Authentication is not configured; wrap the config with with_auth()"
            raise ConfigurationError(msg)
        self._items = items
        self._auth = auth

    def authenticate(self, identity: str, secret: str) -> SessionData | None:
        """Return session data when the credentials match, otherwise ``None``."""
        auth = self._auth
        found = self._items.find_secret(
            auth.list_key, auth.identity_field, identity, auth.secret_field
        )
        if found is None:
            verify_password(secret, _TIMING_HASH)
            logger.info("Authentication failed", list_key=auth.list_key, reason="unknown")
            return None

        item_id, secret_hash = found
        if not secret_hash or not verify_password(secret, secret_hash):
            logger.info("Authentication failed", list_key=auth.list_key, reason="secret")
            return None

        item = self._items.get_one(auth.list_key, item_id)
        logger.info("Authentication succeeded", list_key=auth.list_key, item_id=item_id)
        return SessionData(
            list_key=auth.list_key,
            item_id=item_id,
            data={name: item[name] for name in auth.session_data},
        )

    def can_init_first_item(self) -> bool:
        """True while no identity exists yet."""
        return self._items.count(self._auth.list_key) == 0

    def init_first_item(self, data: dict[str, Any]) -> SessionData:
        """Create the first identity and sign it in.

        Raises:
            ValidationFailedException: If an identity already exists or data
                has fields outside ``init_first_item_fields``.
        """
        auth = self._auth
        if not self.can_init_first_item():
            raise ValidationFailedException(
                auth.list_key,
                [ErrorDetail(code="INIT_FIRST_ITEM", message="An item already exists")],
            )

        extra = sorted(set(data) - set(auth.init_first_item_fields))
        if extra:
            raise ValidationFailedException(
                auth.list_key,
                [
                    ErrorDetail(code="UNKNOWN_FIELD", message=f"{name} is not allowed", field=name)
                    for name in extra
                ],
            )

        item = self._items.create_one(auth.list_key, data)
        logger.info("First item initialised", list_key=auth.list_key, item_id=item["id"])
        return SessionData(
            list_key=auth.list_key,
            item_id=item["id"],
            data={name: item[name] for name in auth.session_data},
        )
