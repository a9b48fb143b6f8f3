"""Declarative data schema: lists, fields, relationships and access rules."""

from .access import ListAccess, Operation, allow_all, deny_all
from .definitions import lists
from .fields import (
    DocumentField,
    FieldKind,
    ImageField,
    IndexKind,
    PasswordField,
    RelationshipField,
    RelationshipUI,
    TextField,
    TimestampField,
    document,
    image,
    password,
    relationship,
    text,
    timestamp,
)
from .lists import ListConfig, Lists, ListUI, list_, list_label, list_path
from .relationships import (
    Cardinality,
    RelationshipEdge,
    RelationshipEnd,
    resolve_relationships,
)
from .validation import validate_lists


__all__ = [
    "Cardinality",
    "DocumentField",
    "FieldKind",
    "ImageField",
    "IndexKind",
    "ListAccess",
    "ListConfig",
    "ListUI",
    "Lists",
    "Operation",
    "PasswordField",
    "RelationshipEdge",
    "RelationshipEnd",
    "RelationshipField",
    "RelationshipUI",
    "TextField",
    "TimestampField",
    "allow_all",
    "deny_all",
    "document",
    "image",
    "list_",
    "list_label",
    "list_path",
    "lists",
    "password",
    "relationship",
    "resolve_relationships",
    "text",
    "timestamp",
    "validate_lists",
]
