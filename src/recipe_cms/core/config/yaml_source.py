"""YAML settings source that layers environment overrides over base files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import PydanticBaseSettingsSource


if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge override into base dict.

    Args:
        base: Base dictionary to merge into.
        override: Dictionary with values to override.

    Returns:
        New dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class MultiYamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load and merge multiple YAML files based on APP_ENV.

    Files are read in two stages:
    1. Every ``*.yaml`` in ``config/base/``, in name order
    2. Every ``*.yaml`` in ``config/environments/{APP_ENV}/``, deep-merged on top

    ``RECIPE_CMS_CONFIG_DIR`` points the source at a different config directory.
    """

    def __init__(self, settings_cls: type[Any]) -> None:
        super().__init__(settings_cls)
        self._config_dir = self._find_config_dir()
        self._app_env = os.getenv("APP_ENV", "development")
        self._yaml_data: dict[str, Any] = {}
        self._load_yaml_files()

    def _find_config_dir(self) -> Path:
        """Find the config directory.

        Returns:
            Path to the config directory.
        """
        override = os.getenv("RECIPE_CMS_CONFIG_DIR")
        if override:
            return Path(override).expanduser().resolve()

        # src/recipe_cms/core/config/yaml_source.py -> project root
        project_root = Path(__file__).resolve().parents[4]
        return project_root / "config"

    @staticmethod
    def _read_dir(directory: Path, merged: dict[str, Any]) -> dict[str, Any]:
        if not directory.exists():
            return merged
        for yaml_file in sorted(directory.glob("*.yaml")):
            with yaml_file.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            merged = deep_merge(merged, data)
        return merged

    def _load_yaml_files(self) -> None:
        """Load base configs, then merge environment-specific overrides."""
        merged = self._read_dir(self._config_dir / "base", {})
        merged = self._read_dir(
            self._config_dir / "environments" / self._app_env, merged
        )
        self._yaml_data = merged

    def get_field_value(
        self,
        _field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        """Get the value for a specific field from YAML data.

        Returns:
            Tuple of (value, field_name, is_complex).
        """
        value = self._yaml_data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, Any]:
        """Return all YAML configuration data."""
        return self._yaml_data
