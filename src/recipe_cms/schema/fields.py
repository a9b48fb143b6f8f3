"""Field declarations.

Each field kind is an immutable Pydantic model with only the options that kind
recognises, so a typo in an option name fails at declaration time. The small
factory functions at the bottom are what list declarations use.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class FieldKind(StrEnum):
    """Kinds of field a list can declare."""

    TEXT = "text"
    PASSWORD = "password"
    TIMESTAMP = "timestamp"
    IMAGE = "image"
    DOCUMENT = "document"
    RELATIONSHIP = "relationship"


class IndexKind(StrEnum):
    """Index requested for a scalar field."""

    INDEX = "index"
    UNIQUE = "unique"


class Validation(BaseModel):
    """Write-time validation rules shared by scalar fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_required: bool = False


class _FieldBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def is_required(self) -> bool:
        validation = getattr(self, "validation", None)
        return bool(validation and validation.is_required)


class TextField(_FieldBase):
    """Plain string; stored NOT NULL with an empty-string default."""

    kind: Literal[FieldKind.TEXT] = FieldKind.TEXT
    validation: Validation = Validation()
    is_indexed: IndexKind | None = None
    default_value: str = ""

    @property
    def is_unique(self) -> bool:
        return self.is_indexed == IndexKind.UNIQUE


class PasswordField(_FieldBase):
    """Credential stored as a bcrypt hash and never read back."""

    kind: Literal[FieldKind.PASSWORD] = FieldKind.PASSWORD
    validation: Validation = Validation()


class TimestampDefault(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["now"] = "now"


class TimestampField(_FieldBase):
    kind: Literal[FieldKind.TIMESTAMP] = FieldKind.TIMESTAMP
    validation: Validation = Validation()
    default_value: TimestampDefault | None = None


class ImageField(_FieldBase):
    """Image reference; bytes live in the named storage target."""

    kind: Literal[FieldKind.IMAGE] = FieldKind.IMAGE
    storage: str


class DocumentField(_FieldBase):
    """Rich document with opt-in editor capabilities."""

    kind: Literal[FieldKind.DOCUMENT] = FieldKind.DOCUMENT
    formatting: bool = False
    layouts: tuple[tuple[int, ...], ...] = ()
    links: bool = False
    dividers: bool = False


class DisplayMode(StrEnum):
    SELECT = "select"
    CARDS = "cards"
    COUNT = "count"


class RelationshipUI(BaseModel):
    """Admin UI presentation of a relationship; no effect on storage."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    display_mode: DisplayMode = DisplayMode.SELECT
    card_fields: tuple[str, ...] = ()
    inline_edit_fields: tuple[str, ...] | None = None
    inline_create_fields: tuple[str, ...] | None = None
    link_to_item: bool = False
    inline_connect: bool = False


class RelationshipField(_FieldBase):
    """One end of a relationship. ``ref`` names the opposite end as ``List.field``."""

    kind: Literal[FieldKind.RELATIONSHIP] = FieldKind.RELATIONSHIP
    ref: str
    many: bool = False
    ui: RelationshipUI = RelationshipUI()

    @property
    def ref_list(self) -> str:
        return self.ref.split(".", 1)[0]

    @property
    def ref_field(self) -> str | None:
        _, sep, field_name = self.ref.partition(".")
        return field_name if sep else None


FieldConfig = Annotated[
    TextField
    | PasswordField
    | TimestampField
    | ImageField
    | DocumentField
    | RelationshipField,
    Field(discriminator="kind"),
]


# =============================================================================
# Declaration helpers
# =============================================================================


def text(
    *,
    is_required: bool = False,
    is_indexed: IndexKind | str | None = None,
    default_value: str = "",
) -> TextField:
    return TextField(
        validation=Validation(is_required=is_required),
        is_indexed=is_indexed,
        default_value=default_value,
    )


def password(*, is_required: bool = False) -> PasswordField:
    return PasswordField(validation=Validation(is_required=is_required))


def timestamp(*, is_required: bool = False, default_now: bool = False) -> TimestampField:
    return TimestampField(
        validation=Validation(is_required=is_required),
        default_value=TimestampDefault() if default_now else None,
    )


def image(*, storage: str) -> ImageField:
    return ImageField(storage=storage)


def document(
    *,
    formatting: bool = False,
    layouts: list[list[int]] | None = None,
    links: bool = False,
    dividers: bool = False,
) -> DocumentField:
    return DocumentField(
        formatting=formatting,
        layouts=tuple(tuple(layout) for layout in layouts or ()),
        links=links,
        dividers=dividers,
    )


def relationship(
    *,
    ref: str,
    many: bool = False,
    ui: RelationshipUI | None = None,
) -> RelationshipField:
    return RelationshipField(ref=ref, many=many, ui=ui or RelationshipUI())
