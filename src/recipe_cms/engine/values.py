"""Conversion and checks for non-trivial field values.

Timestamps are stored as naive UTC and handed back timezone-aware. Image
values are references to files held by a storage target. Documents are node
trees whose node types must be enabled on the field.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from recipe_cms.schema.fields import DocumentField


DEFAULT_DOCUMENT: list[dict[str, Any]] = [{"type": "paragraph", "children": [{"text": ""}]}]

FORMATTING_NODE_TYPES = frozenset(
    {"heading", "blockquote", "code", "ordered-list", "unordered-list", "list-item"}
)
FORMATTING_MARKS = frozenset(
    {"bold", "italic", "underline", "strikethrough", "code", "superscript", "subscript", "keyboard"}
)

_datetime_adapter = TypeAdapter(datetime)


class ImageRef(BaseModel):
    """An image already placed in a storage target."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    extension: str = Field(pattern=r"^(jpg|png|webp|gif)$")
    filesize: int = Field(ge=0)
    width: int = Field(ge=0)
    height: int = Field(ge=0)

    @property
    def path(self) -> str:
        return f"{self.id}.{self.extension}"


def parse_timestamp(value: Any) -> datetime:
    """Accept a datetime or ISO-8601 string; return naive UTC for storage.

    Raises:
        ValueError: If the value is not a timestamp.
    """
    try:
        parsed = _datetime_adapter.validate_python(value)
    except ValidationError as e:
        msg = f"'{value}' is not a valid timestamp"
        raise ValueError(msg) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def load_timestamp(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def now_utc() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def parse_image(value: Any) -> dict[str, Any] | None:
    """Validate an image reference.

    Raises:
        ValueError: If the reference is malformed.
    """
    if value is None:
        return None
    try:
        return ImageRef.model_validate(value).model_dump()
    except ValidationError as e:
        msg = f"invalid image reference: {e.error_count()} problem(s)"
        raise ValueError(msg) from e


def document_problems(field: DocumentField, value: Any) -> list[str]:
    """List the ways ``value`` breaks the capabilities enabled on ``field``."""
    if not isinstance(value, list) or not all(isinstance(node, dict) for node in value):
        return ["must be a list of nodes"]

    problems: list[str] = []

    def walk(nodes: list[Any]) -> None:
        for node in nodes:
            if not isinstance(node, dict):
                problems.append("contains a node that is not an object")
                continue

            node_type = node.get("type")
            if node_type is not None and not isinstance(node_type, str):
                problems.append("node type must be a string")
                continue
            if node_type == "layout":
                layout = node.get("layout")
                if not isinstance(layout, list) or not all(
                    isinstance(column, int) and not isinstance(column, bool) for column in layout
                ):
                    problems.append("layout must be a list of column widths")
                elif tuple(layout) not in field.layouts:
                    problems.append(f"layout {layout} is not enabled")
            elif node_type == "divider" and not field.dividers:
                problems.append("dividers are not enabled")
            elif node_type == "link" and not field.links:
                problems.append("links are not enabled")
            elif node_type in FORMATTING_NODE_TYPES and not field.formatting:
                problems.append(f"'{node_type}' requires formatting")

            if "text" in node and not field.formatting:
                marks = FORMATTING_MARKS.intersection(k for k, v in node.items() if v)
                if marks:
                    problems.append(f"marks {sorted(marks)} require formatting")

            children = node.get("children")
            if isinstance(children, list):
                walk(children)

    walk(value)
    return problems
