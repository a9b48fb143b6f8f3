"""Identity wiring for the assembled configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from recipe_cms.core.exceptions import ConfigurationError
from recipe_cms.schema.fields import PasswordField, TextField

if TYPE_CHECKING:
    from recipe_cms.assembly import SystemConfig


class AuthConfig(BaseModel):
    """Which list holds identities and how they sign in.

    Attributes:
        list_key: List whose items can authenticate.
        identity_field: Unique text field used to look the item up.
        secret_field: Password field checked on sign-in.
        session_data: Fields copied into the session when signing in.
        init_first_item_fields: Fields asked for when creating the first item.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    list_key: str = "User"
    identity_field: str = "email"
    secret_field: str = "password"
    session_data: tuple[str, ...] = ("name", "createdAt")
    init_first_item_fields: tuple[str, ...] = ("name", "email", "password")


def _auth_problems(config: SystemConfig, auth: AuthConfig) -> list[str]:
    identity_list = config.lists.get(auth.list_key)
    if identity_list is None:
        return [f"Auth list '{auth.list_key}' is not declared"]

    problems: list[str] = []
    identity = identity_list.fields.get(auth.identity_field)
    if not isinstance(identity, TextField) or not identity.is_unique:
        problems.append(
            f"{auth.list_key}.{auth.identity_field} must be a unique text field"
        )
    if not isinstance(identity_list.fields.get(auth.secret_field), PasswordField):
        problems.append(f"{auth.list_key}.{auth.secret_field} must be a password field")

    for name in (*auth.session_data, *auth.init_first_item_fields):
        if name not in identity_list.fields:
            problems.append(f"{auth.list_key}.{name} is not a field")
    return problems


def with_auth(config: SystemConfig, auth: AuthConfig | None = None) -> SystemConfig:
    """Return ``config`` with identity rules attached.

    The result has the same shape as the input; only ``auth`` is filled in.

    Raises:
        ConfigurationError: If the identity list or its fields do not fit.
    """
    auth = auth or AuthConfig()
    problems = _auth_problems(config, auth)
    if problems:
        msg = "Invalid auth configuration: " + "; ".join(problems)
        raise ConfigurationError(msg)
    return config.model_copy(update={"auth": auth})
