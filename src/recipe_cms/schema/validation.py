"""Static validation of list declarations, run once at bootstrap."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from recipe_cms.core.exceptions import SchemaValidationError
from recipe_cms.observability.logging import get_logger

from .fields import DocumentField, ImageField
from .lists import Lists, list_path
from .relationships import collect_relationships


logger = get_logger(__name__)

_LIST_KEY = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_FIELD_NAME = re.compile(r"^[a-z][A-Za-z0-9]*$")
RESERVED_FIELDS = frozenset({"id"})


def _naming_problems(lists: Lists) -> list[str]:
    problems: list[str] = []
    seen_paths: dict[str, str] = {}

    for list_key, config in lists.items():
        if not _LIST_KEY.match(list_key):
            problems.append(f"List key '{list_key}' must be PascalCase")

        path = list_path(list_key)
        if path in seen_paths:
            problems.append(
                f"Lists '{seen_paths[path]}' and '{list_key}' map to the same name '{path}'"
            )
        seen_paths.setdefault(path, list_key)

        if not config.fields:
            problems.append(f"{list_key} declares no fields")

        seen_fields: dict[str, str] = {}
        for field_name in config.fields:
            if field_name in RESERVED_FIELDS:
                problems.append(f"{list_key}.{field_name} uses a reserved field name")
            elif not _FIELD_NAME.match(field_name):
                problems.append(f"{list_key}.{field_name} must be camelCase")

            folded = field_name.lower()
            if folded in seen_fields:
                problems.append(
                    f"{list_key} declares both '{seen_fields[folded]}' and '{field_name}'"
                )
            seen_fields.setdefault(folded, field_name)

    return problems


def _field_problems(lists: Lists, storage: Mapping[str, Any]) -> list[str]:
    problems: list[str] = []
    for list_key, config in lists.items():
        for field_name, field in config.fields.items():
            here = f"{list_key}.{field_name}"
            if isinstance(field, ImageField) and field.storage not in storage:
                problems.append(
                    f"{here} uses storage '{field.storage}' which is not configured"
                )
            if isinstance(field, DocumentField):
                for layout in field.layouts:
                    if not layout or any(column < 1 for column in layout):
                        problems.append(
                            f"{here} has layout {list(layout)}; columns must be positive"
                        )
    return problems


def validate_lists(lists: Lists, storage: Mapping[str, Any]) -> None:
    """Validate names, relationships and storage references.

    Every problem is collected before raising, so one failed startup reports
    the whole set.

    Raises:
        SchemaValidationError: If the declarations are inconsistent.
    """
    problems = _naming_problems(lists)
    edges, relationship_problems = collect_relationships(lists)
    problems.extend(relationship_problems)
    problems.extend(_field_problems(lists, storage))

    if problems:
        logger.error("Schema validation failed", problem_count=len(problems))
        raise SchemaValidationError(problems)

    logger.debug(
        "Schema validated",
        lists=len(lists),
        relationships=len(edges),
    )
