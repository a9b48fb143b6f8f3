"""Unit tests for Loguru logging setup and helpers."""

from __future__ import annotations

import logging as pylogging
from typing import TYPE_CHECKING

import orjson
import pytest
from loguru import logger

from recipe_cms.observability import logging as logging_mod


if TYPE_CHECKING:
    from collections.abc import Generator


pytestmark = pytest.mark.unit


@pytest.fixture
def records() -> Generator[list[dict]]:
    captured: list[dict] = []
    handler_id = logger.add(lambda message: captured.append(message.record), format="{message}")
    yield captured
    logger.remove(handler_id)


class TestGetLogger:
    """Tests for get_logger."""

    def test_binds_name(self, records: list[dict]):
        """Should bind the module name into extra."""
        logging_mod.get_logger("recipe_cms.test").info("hello")

        assert records[-1]["extra"]["name"] == "recipe_cms.test"

    def test_keyword_arguments_land_in_extra(self, records: list[dict]):
        """Should capture keyword arguments as structured context."""
        logging_mod.get_logger("recipe_cms.test").info("Item created", list_key="User")

        assert records[-1]["extra"]["list_key"] == "User"


class TestFormatRecord:
    """Tests for the JSON formatter."""

    def test_produces_json_line_with_escaped_braces(self, records: list[dict]):
        """Should serialise extras and escape braces for Loguru."""
        logging_mod.get_logger("recipe_cms.test").info("done", payload={"a": 1})

        line = logging_mod._format_record(records[-1])  # noqa: SLF001

        assert line.endswith("\n")
        parsed = orjson.loads(line.replace("{{", "{").replace("}}", "}"))
        assert parsed["message"] == "done"
        assert parsed["logger"] == "recipe_cms.test"
        assert parsed["level"] == "INFO"
        assert parsed["payload"] == {"a": 1}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_intercepts_standard_logging(self):
        """Should route the standard library root logger through Loguru."""
        logging_mod.setup_logging("DEBUG", "text", is_development=True)

        handlers = pylogging.getLogger().handlers
        assert any(isinstance(h, logging_mod.InterceptHandler) for h in handlers)

    def test_quietens_noisy_libraries(self):
        """Should raise third-party loggers to WARNING."""
        logging_mod.setup_logging("INFO", "json")

        assert pylogging.getLogger("sqlalchemy.engine").level == pylogging.WARNING
