"""List declarations.

A list is a named record type: its fields, its access rules and how the
admin UI presents it. The mapping of list key to ``ListConfig`` is the schema.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from .access import ListAccess, allow_all
from .fields import FieldConfig, FieldKind, RelationshipField


_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class ListUI(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str | None = None
    is_hidden: bool = False


class ListConfig(BaseModel):
    """Immutable declaration of a single list."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fields: dict[str, FieldConfig]
    access: ListAccess = allow_all
    ui: ListUI = ListUI()

    def scalar_fields(self) -> dict[str, FieldConfig]:
        return {
            name: field
            for name, field in self.fields.items()
            if field.kind != FieldKind.RELATIONSHIP
        }

    def relationship_fields(self) -> dict[str, RelationshipField]:
        return {
            name: field
            for name, field in self.fields.items()
            if isinstance(field, RelationshipField)
        }


Lists = Mapping[str, ListConfig]


def list_(
    *,
    fields: dict[str, FieldConfig],
    access: ListAccess = allow_all,
    ui: ListUI | None = None,
) -> ListConfig:
    return ListConfig(fields=fields, access=access, ui=ui or ListUI())


def humanize(key: str) -> str:
    """``NutritionalInformation`` -> ``Nutritional Information``."""
    return _WORD_BOUNDARY.sub(" ", key)


def list_path(key: str) -> str:
    """``NutritionalInformation`` -> ``nutritional-information``."""
    return _WORD_BOUNDARY.sub("-", key).lower()


def list_label(key: str, config: ListConfig) -> str:
    return config.ui.label or humanize(key)
