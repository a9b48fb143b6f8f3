"""Unit tests for with_auth and the assembled configuration."""

from __future__ import annotations

import pytest

from recipe_cms.assembly import SystemConfig, build_config
from recipe_cms.auth import AuthConfig, with_auth
from recipe_cms.core.exceptions import ConfigurationError, SchemaValidationError
from recipe_cms.schema import list_, lists, password, relationship, text


pytestmark = pytest.mark.unit


class TestWithAuth:
    """Tests for with_auth."""

    def test_defaults(self, system: SystemConfig):
        """Should attach the default identity rules."""
        assert system.auth == AuthConfig()
        assert system.auth.list_key == "User"
        assert system.auth.identity_field == "email"
        assert system.auth.secret_field == "password"
        assert system.auth.session_data == ("name", "createdAt")
        assert system.auth.init_first_item_fields == ("name", "email", "password")

    def test_keeps_the_rest_of_the_config(self, system: SystemConfig):
        """Should return the same shape with only auth filled in."""
        bare = system.model_copy(update={"auth": None})

        wrapped = with_auth(bare)

        assert wrapped.auth is not None
        assert wrapped.db == bare.db
        assert wrapped.storage == bare.storage
        assert wrapped.lists == bare.lists
        assert wrapped.session == bare.session
        assert bare.auth is None

    def test_unknown_identity_list(self, system: SystemConfig):
        """Should reject an identity list that is not declared."""
        with pytest.raises(ConfigurationError, match="not declared"):
            with_auth(system, AuthConfig(list_key="Member"))

    def test_identity_must_be_unique_text(self, system: SystemConfig):
        """Should reject a non-unique identity field."""
        with pytest.raises(ConfigurationError, match="unique text field"):
            with_auth(system, AuthConfig(identity_field="name"))

    def test_secret_must_be_password(self, system: SystemConfig):
        """Should reject a secret field that is not a password."""
        with pytest.raises(ConfigurationError, match="password field"):
            with_auth(system, AuthConfig(secret_field="email"))

    def test_session_fields_must_exist(self, system: SystemConfig):
        """Should reject session data naming a missing field."""
        with pytest.raises(ConfigurationError, match="User.avatar is not a field"):
            with_auth(system, AuthConfig(session_data=("name", "avatar")))


class TestBuildConfig:
    """Tests for build_config."""

    def test_assembles_every_section(self, system: SystemConfig, test_settings):
        """Should merge database, storage, lists, session and auth."""
        assert system.db.url == test_settings.database.url
        assert set(system.storage) == {"s3", "local"}
        assert set(system.lists) == set(lists)
        assert system.session.max_age == 60 * 60 * 24 * 30
        assert system.password_rounds == 4

    def test_is_immutable(self, system: SystemConfig):
        """Should not allow mutating the assembled configuration."""
        with pytest.raises(ValueError, match="frozen"):
            system.password_rounds = 12

    def test_invalid_schema_is_fatal(self, test_settings):
        """Should raise before anything is compiled."""
        broken = {
            "User": list_(
                fields={
                    "name": text(is_required=True),
                    "email": text(is_indexed="unique"),
                    "password": password(),
                    "createdAt": text(),
                    "posts": relationship(ref="Post.author", many=True),
                }
            )
        }

        with pytest.raises(SchemaValidationError):
            build_config(test_settings, lists=broken)

    def test_schema_without_identity_list_fails_auth(self, test_settings):
        """Should reject a schema that has no User list."""
        with pytest.raises(ConfigurationError, match="Auth list 'User'"):
            build_config(test_settings, lists={"Tag": list_(fields={"name": text()})})
