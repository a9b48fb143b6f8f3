"""Unit tests for field and list declarations."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from recipe_cms.schema import (
    FieldKind,
    IndexKind,
    ListUI,
    document,
    image,
    list_,
    list_label,
    list_path,
    password,
    relationship,
    text,
    timestamp,
)
from recipe_cms.schema.fields import TextField
from recipe_cms.schema.lists import humanize


pytestmark = pytest.mark.unit


# =============================================================================
# Field Tests
# =============================================================================


class TestFieldDeclarations:
    """Tests for the field declaration helpers."""

    def test_text_defaults(self):
        """Should default to optional, unindexed, empty string."""
        field = text()

        assert field.kind == FieldKind.TEXT
        assert field.is_required is False
        assert field.is_unique is False
        assert field.default_value == ""

    def test_unique_text(self):
        """Should report uniqueness only for the unique index."""
        assert text(is_indexed=IndexKind.UNIQUE).is_unique is True
        assert text(is_indexed="index").is_unique is False

    def test_required_flags(self):
        """Should surface validation.is_required as is_required."""
        assert text(is_required=True).is_required is True
        assert password(is_required=True).is_required is True
        assert timestamp(is_required=True).is_required is True

    def test_fields_without_validation_are_optional(self):
        """Should treat image, document and relationship fields as optional."""
        assert image(storage="local").is_required is False
        assert document().is_required is False
        assert relationship(ref="User.articles").is_required is False

    def test_timestamp_default_now(self):
        """Should record a 'now' default when requested."""
        assert timestamp(default_now=True).default_value is not None
        assert timestamp().default_value is None

    def test_document_layouts_become_tuples(self):
        """Should freeze layout lists into tuples."""
        field = document(layouts=[[1, 1], [2, 1]])

        assert field.layouts == ((1, 1), (2, 1))

    def test_relationship_ref_parts(self):
        """Should split the ref into list and field."""
        field = relationship(ref="User.articles", many=True)

        assert field.ref_list == "User"
        assert field.ref_field == "articles"
        assert relationship(ref="User").ref_field is None

    def test_unknown_option_rejected(self):
        """Should reject options the kind does not recognise."""
        with pytest.raises(ValidationError):
            TextField(is_unique=True)

    def test_declarations_are_frozen(self):
        """Should not allow mutating a declared field."""
        field = text()

        with pytest.raises(ValidationError):
            field.default_value = "changed"


# =============================================================================
# List Tests
# =============================================================================


class TestListDeclarations:
    """Tests for list helpers."""

    def test_splits_scalar_and_relationship_fields(self):
        """Should separate relationship fields from scalar fields."""
        config = list_(
            fields={
                "title": text(),
                "author": relationship(ref="User.articles"),
            }
        )

        assert list(config.scalar_fields()) == ["title"]
        assert list(config.relationship_fields()) == ["author"]

    @pytest.mark.parametrize(
        ("key", "path", "label"),
        [
            ("User", "user", "User"),
            ("NutritionalInformation", "nutritional-information", "Nutritional Information"),
        ],
    )
    def test_path_and_label(self, key: str, path: str, label: str):
        """Should derive kebab-case paths and spaced labels from list keys."""
        assert list_path(key) == path
        assert humanize(key) == label

    def test_explicit_label_wins(self):
        """Should prefer the UI label over the humanized key."""
        config = list_(fields={"name": text()}, ui=ListUI(label="People"))

        assert list_label("User", config) == "People"
