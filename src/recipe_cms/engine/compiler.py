"""Compile list declarations into SQLAlchemy tables.

One table per list, named after the list key, with a string ``id`` primary
key. Relationship edges decide where links live:

- one-to-many: a nullable foreign key column on the ``many=False`` end
- one-to-one: a unique nullable foreign key column on the edge's left end
- many-to-many: a join table ``_<List>_<field>`` with columns ``A`` (left) and
  ``B`` (right)

Foreign key columns are named after their relationship field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    MetaData,
    String,
    Table,
    Text,
)

from recipe_cms.observability.logging import get_logger
from recipe_cms.schema import (
    Cardinality,
    DocumentField,
    ImageField,
    ListConfig,
    Lists,
    PasswordField,
    RelationshipEdge,
    RelationshipEnd,
    TextField,
    TimestampField,
    list_path,
    resolve_relationships,
)
from recipe_cms.schema.fields import IndexKind

from .values import DEFAULT_DOCUMENT


logger = get_logger(__name__)

ID_LENGTH = 36
JOIN_LEFT = "A"
JOIN_RIGHT = "B"


@dataclass(frozen=True)
class RelationshipBinding:
    """One list's view of a relationship edge."""

    edge: RelationshipEdge
    end: RelationshipEnd
    target: RelationshipEnd
    join_table: Table | None = None

    @property
    def many(self) -> bool:
        return self.end.many

    @property
    def stores_foreign_key(self) -> bool:
        """The foreign key column lives on this list's table."""
        return self.edge.foreign_key_end == self.end

    @property
    def target_stores_foreign_key(self) -> bool:
        return self.edge.foreign_key_end == self.target

    @property
    def join_columns(self) -> tuple[str, str]:
        """(column holding this list's id, column holding the target's id)."""
        if self.end == self.edge.left:
            return JOIN_LEFT, JOIN_RIGHT
        return JOIN_RIGHT, JOIN_LEFT


@dataclass(frozen=True)
class CompiledList:
    key: str
    config: ListConfig
    table: Table
    relationships: dict[str, RelationshipBinding] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return list_path(self.key)


@dataclass(frozen=True)
class CompiledSchema:
    metadata: MetaData
    lists: dict[str, CompiledList]
    edges: list[RelationshipEdge]

    def get(self, key: str) -> CompiledList | None:
        return self.lists.get(key)

    def by_path(self, path: str) -> CompiledList | None:
        for compiled in self.lists.values():
            if compiled.path == path:
                return compiled
        return None


def _scalar_column(name: str, field_config: Any) -> Column[Any]:
    if isinstance(field_config, TextField):
        return Column(
            name,
            Text,
            nullable=False,
            default=field_config.default_value,
            unique=field_config.is_unique,
            index=field_config.is_indexed == IndexKind.INDEX,
        )
    if isinstance(field_config, PasswordField):
        return Column(name, String(255), nullable=not field_config.is_required)
    if isinstance(field_config, TimestampField):
        return Column(name, DateTime(timezone=True), nullable=not field_config.is_required)
    if isinstance(field_config, ImageField):
        return Column(name, JSON, nullable=True)
    if isinstance(field_config, DocumentField):
        return Column(name, JSON, nullable=False, default=DEFAULT_DOCUMENT)
    msg = f"No column mapping for field '{name}' ({type(field_config).__name__})"
    raise TypeError(msg)


def _foreign_key_column(binding: RelationshipBinding) -> Column[Any]:
    return Column(
        binding.end.field,
        String(ID_LENGTH),
        ForeignKey(f"{binding.target.list_key}.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        unique=binding.edge.cardinality == Cardinality.ONE_TO_ONE,
    )


def _join_table(metadata: MetaData, edge: RelationshipEdge) -> Table:
    return Table(
        edge.join_table_name,
        metadata,
        Column(
            JOIN_LEFT,
            String(ID_LENGTH),
            ForeignKey(f"{edge.left.list_key}.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        Column(
            JOIN_RIGHT,
            String(ID_LENGTH),
            ForeignKey(f"{edge.right.list_key}.id", ondelete="CASCADE"),
            primary_key=True,
            index=True,
        ),
    )


def compile_schema(lists: Lists) -> CompiledSchema:
    """Compile validated list declarations into tables.

    Raises:
        SchemaValidationError: If a relationship does not resolve.
    """
    edges = resolve_relationships(lists)
    metadata = MetaData()

    join_tables = {
        edge: _join_table(metadata, edge)
        for edge in edges
        if edge.cardinality == Cardinality.MANY_TO_MANY
    }

    bindings: dict[str, dict[str, RelationshipBinding]] = {key: {} for key in lists}
    for edge in edges:
        for end in (edge.left, edge.right):
            bindings[end.list_key][end.field] = RelationshipBinding(
                edge=edge,
                end=end,
                target=edge.opposite(end),
                join_table=join_tables.get(edge),
            )

    compiled: dict[str, CompiledList] = {}
    for key, list_config in lists.items():
        columns: list[Column[Any]] = [Column("id", String(ID_LENGTH), primary_key=True)]
        columns.extend(
            _scalar_column(name, field_config)
            for name, field_config in list_config.scalar_fields().items()
        )
        columns.extend(
            _foreign_key_column(binding)
            for binding in bindings[key].values()
            if binding.stores_foreign_key
        )
        compiled[key] = CompiledList(
            key=key,
            config=list_config,
            table=Table(key, metadata, *columns),
            relationships=bindings[key],
        )

    logger.info(
        "Schema compiled",
        tables=len(metadata.tables),
        join_tables=len(join_tables),
    )
    return CompiledSchema(metadata=metadata, lists=compiled, edges=edges)
