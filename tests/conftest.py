"""Shared test fixtures.

Every test gets its own SQLite file under ``tmp_path`` and an image
directory next to it, so tests never touch ``./keystone.db``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from recipe_cms.assembly import SystemConfig, build_config
from recipe_cms.core.config import Settings, get_settings
from recipe_cms.core.config.settings import (
    AuthSettings,
    DatabaseSettings,
    LocalStorageSettings,
    StorageSettings,
)
from recipe_cms.engine import Runtime, bootstrap


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path

    from recipe_cms.engine import ItemService


TEST_SESSION_SECRET = "test-session-secret-with-at-least-32-chars"


@pytest.fixture(autouse=True)
def _test_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Run every test against the test YAML layer with a clean settings cache."""
    monkeypatch.setenv("APP_ENV", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings backed by a throwaway SQLite file."""
    return Settings(
        APP_ENV="test",
        SESSION_SECRET=TEST_SESSION_SECRET,
        database=DatabaseSettings(url=f"sqlite:///{tmp_path / 'test.db'}"),
        storage=StorageSettings(
            local=LocalStorageSettings(storage_path=str(tmp_path / "images")),
        ),
        auth=AuthSettings(bcrypt_rounds=4),
    )


@pytest.fixture
def system(test_settings: Settings) -> SystemConfig:
    """Assemble the declared lists with the test settings."""
    return build_config(test_settings)


@pytest.fixture
def runtime(system: SystemConfig) -> Generator[Runtime]:
    """Compile the schema and create the tables."""
    runtime = bootstrap(system)
    try:
        yield runtime
    finally:
        runtime.close()


@pytest.fixture
def items(runtime: Runtime) -> ItemService:
    return runtime.items
