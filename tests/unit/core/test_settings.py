"""Unit tests for application configuration.

Tests cover:
- Settings defaults from the base YAML layer
- Environment-specific YAML overrides
- Environment variable overrides (flat and nested)
- YAML deep merge
"""

from __future__ import annotations

import pytest

from recipe_cms.core.config import DatabaseProvider, Settings, get_settings
from recipe_cms.core.config.yaml_source import MultiYamlConfigSettingsSource, deep_merge


pytestmark = pytest.mark.unit


# =============================================================================
# deep_merge Tests
# =============================================================================


class TestDeepMerge:
    """Tests for deep_merge helper function."""

    def test_merges_nested_dicts(self):
        """Should merge nested keys instead of replacing the section."""
        base = {"logging": {"level": "INFO", "format": "json"}}
        override = {"logging": {"level": "DEBUG"}}

        result = deep_merge(base, override)

        assert result == {"logging": {"level": "DEBUG", "format": "json"}}

    def test_replaces_non_dict_values(self):
        """Should replace scalar and list values wholesale."""
        result = deep_merge({"a": [1, 2], "b": 1}, {"a": [3], "b": {"c": 2}})

        assert result == {"a": [3], "b": {"c": 2}}

    def test_does_not_mutate_inputs(self):
        """Should leave both inputs untouched."""
        base = {"server": {"port": 3000}}
        override = {"server": {"port": 4000}}

        deep_merge(base, override)

        assert base == {"server": {"port": 3000}}
        assert override == {"server": {"port": 4000}}


# =============================================================================
# YAML Source Tests
# =============================================================================


class TestMultiYamlConfigSettingsSource:
    """Tests for the layered YAML settings source."""

    def test_reads_config_dir_override(self, tmp_path, monkeypatch: pytest.MonkeyPatch):
        """Should load from RECIPE_CMS_CONFIG_DIR and merge the environment layer."""
        (tmp_path / "base").mkdir()
        (tmp_path / "environments" / "test").mkdir(parents=True)
        (tmp_path / "base" / "server.yaml").write_text("server:\n  host: 0.0.0.0\n  port: 3000\n")
        (tmp_path / "environments" / "test" / "server.yaml").write_text("server:\n  port: 4000\n")
        monkeypatch.setenv("RECIPE_CMS_CONFIG_DIR", str(tmp_path))

        data = MultiYamlConfigSettingsSource(Settings)()

        assert data == {"server": {"host": "0.0.0.0", "port": 4000}}

    def test_missing_directories_yield_empty_config(self, tmp_path, monkeypatch: pytest.MonkeyPatch):
        """Should tolerate a config directory without base or environment files."""
        monkeypatch.setenv("RECIPE_CMS_CONFIG_DIR", str(tmp_path))

        assert MultiYamlConfigSettingsSource(Settings)() == {}


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch):
        """Should load defaults from the base YAML files."""
        monkeypatch.setenv("APP_ENV", "development")
        settings = Settings()

        assert settings.app.name == "Recipe CMS"
        assert settings.server.port == 3000
        assert settings.database.provider == DatabaseProvider.SQLITE
        assert settings.database.url == "sqlite:///./keystone.db"
        assert settings.storage.local.server_route == "/images/"
        assert settings.session.max_age == 60 * 60 * 24 * 30
        assert settings.auth.bcrypt_rounds == 10

    def test_s3_defaults(self, monkeypatch: pytest.MonkeyPatch):
        """Should fall back to the documented S3 defaults."""
        for name in ("S3_BUCKET_NAME", "S3_REGION", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)

        assert settings.S3_BUCKET_NAME == "keystone-test"
        assert settings.S3_REGION == "ap-southeast-2"
        assert settings.S3_ACCESS_KEY_ID == "keystone"
        assert settings.S3_SECRET_ACCESS_KEY.get_secret_value() == "keystone"

    def test_test_environment_overrides(self):
        """Should apply the test environment YAML layer."""
        settings = Settings()

        assert settings.APP_ENV == "test"
        assert settings.auth.bcrypt_rounds == 4
        assert settings.logging.level == "DEBUG"
        assert settings.is_testing is True

    def test_environment_variable_overrides(self, monkeypatch: pytest.MonkeyPatch):
        """Should let environment variables override YAML values."""
        monkeypatch.setenv("S3_BUCKET_NAME", "recipes-prod")
        monkeypatch.setenv("DATABASE__URL", "sqlite:///./other.db")
        monkeypatch.setenv("SESSION_SECRET", "x" * 40)

        settings = Settings()

        assert settings.S3_BUCKET_NAME == "recipes-prod"
        assert settings.database.url == "sqlite:///./other.db"
        assert settings.SESSION_SECRET is not None
        assert settings.SESSION_SECRET.get_secret_value() == "x" * 40

    def test_init_values_take_precedence(self, monkeypatch: pytest.MonkeyPatch):
        """Should prefer explicit values over environment variables."""
        monkeypatch.setenv("S3_REGION", "us-east-1")

        settings = Settings(S3_REGION="eu-west-1")

        assert settings.S3_REGION == "eu-west-1"

    def test_environment_helpers(self):
        """Should expose one helper per environment."""
        assert Settings(APP_ENV="production").is_production is True
        assert Settings(APP_ENV="development").is_development is True
        assert Settings(APP_ENV="production").is_development is False


class TestGetSettings:
    """Tests for get_settings function."""

    def test_returns_cached_instance(self):
        """Should return the same instance on repeated calls."""
        assert get_settings() is get_settings()
