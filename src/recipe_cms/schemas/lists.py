"""List metadata served to admin clients."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import Field

from recipe_cms.schema import ImageField, RelationshipField, TextField, list_label

from .base import APIResponse

if TYPE_CHECKING:
    from recipe_cms.engine import CompiledList


class FieldMeta(APIResponse):
    name: str
    kind: str
    is_required: bool = False
    is_unique: bool = False
    ref: str | None = None
    many: bool | None = None
    storage: str | None = None


class ListMeta(APIResponse):
    key: str
    label: str
    path: str
    fields: list[FieldMeta] = Field(default_factory=list)

    @classmethod
    def from_compiled(cls, compiled: CompiledList) -> ListMeta:
        fields = []
        for name, field_config in compiled.config.fields.items():
            extra: dict[str, Any] = {}
            if isinstance(field_config, TextField):
                extra["is_unique"] = field_config.is_unique
            elif isinstance(field_config, RelationshipField):
                extra.update(ref=field_config.ref, many=field_config.many)
            elif isinstance(field_config, ImageField):
                extra["storage"] = field_config.storage
            fields.append(
                FieldMeta(
                    name=name,
                    kind=field_config.kind,
                    is_required=field_config.is_required,
                    **extra,
                )
            )
        return cls(
            key=compiled.key,
            label=list_label(compiled.key, compiled.config),
            path=compiled.path,
            fields=fields,
        )


class ListsResponse(APIResponse):
    lists: list[ListMeta]
