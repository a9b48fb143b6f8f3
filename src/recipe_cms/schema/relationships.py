"""Relationship edges.

Relationships are declared from both ends, one field on each list. At
compile time the two declarations are folded into a single
``RelationshipEdge`` so storage and query code only ever deal with one record
per relationship, and a mismatch between the two ends is caught once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from recipe_cms.core.exceptions import SchemaValidationError

from .lists import Lists


class Cardinality(StrEnum):
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"


@dataclass(frozen=True, order=True)
class RelationshipEnd:
    list_key: str
    field: str
    many: bool

    def __str__(self) -> str:
        return f"{self.list_key}.{self.field}"


@dataclass(frozen=True)
class RelationshipEdge:
    """A relationship with its two named ends.

    ``left`` is always the lexically smaller end, so the same pair of
    declarations produces the same edge whichever side is read first.
    """

    left: RelationshipEnd
    right: RelationshipEnd

    @property
    def cardinality(self) -> Cardinality:
        if self.left.many and self.right.many:
            return Cardinality.MANY_TO_MANY
        if self.left.many or self.right.many:
            return Cardinality.ONE_TO_MANY
        return Cardinality.ONE_TO_ONE

    @property
    def foreign_key_end(self) -> RelationshipEnd | None:
        """End whose table stores the foreign key; ``None`` for many-to-many."""
        match self.cardinality:
            case Cardinality.MANY_TO_MANY:
                return None
            case Cardinality.ONE_TO_MANY:
                return self.right if self.left.many else self.left
            case _:
                return self.left

    @property
    def join_table_name(self) -> str | None:
        if self.cardinality != Cardinality.MANY_TO_MANY:
            return None
        return f"_{self.left.list_key}_{self.left.field}"

    def end(self, list_key: str, field: str) -> RelationshipEnd:
        for candidate in (self.left, self.right):
            if candidate.list_key == list_key and candidate.field == field:
                return candidate
        raise KeyError(f"{list_key}.{field}")

    def opposite(self, end: RelationshipEnd) -> RelationshipEnd:
        return self.right if end == self.left else self.left

    def __str__(self) -> str:
        return f"{self.left} <-> {self.right} ({self.cardinality})"


def collect_relationships(lists: Lists) -> tuple[list[RelationshipEdge], list[str]]:
    """Fold relationship declarations into edges.

    Returns:
        The edges that resolved cleanly and a description of every problem.
    """
    edges: dict[tuple[RelationshipEnd, RelationshipEnd], RelationshipEdge] = {}
    problems: list[str] = []

    for list_key, config in lists.items():
        for field_name, field in config.relationship_fields().items():
            here = f"{list_key}.{field_name}"
            target_list, target_field = field.ref_list, field.ref_field

            if target_list not in lists:
                problems.append(f"{here} refers to unknown list '{target_list}'")
                continue
            if not target_field:
                problems.append(
                    f"{here} must name the opposite field as '{target_list}.<field>'"
                )
                continue

            opposite = lists[target_list].fields.get(target_field)
            if opposite is None:
                problems.append(f"{here} refers to missing field '{field.ref}'")
                continue
            if opposite.kind != "relationship":
                problems.append(f"{here} refers to '{field.ref}' which is not a relationship")
                continue
            if opposite.ref != here:
                problems.append(
                    f"{here} refers to '{field.ref}' but '{field.ref}' refers to "
                    f"'{opposite.ref}'"
                )
                continue

            first = RelationshipEnd(list_key, field_name, field.many)
            second = RelationshipEnd(target_list, target_field, opposite.many)
            left, right = sorted((first, second))
            edges.setdefault((left, right), RelationshipEdge(left=left, right=right))

    return list(edges.values()), problems


def resolve_relationships(lists: Lists) -> list[RelationshipEdge]:
    """Resolve every relationship declaration into an edge.

    Raises:
        SchemaValidationError: If any reference is broken or asymmetric.
    """
    edges, problems = collect_relationships(lists)
    if problems:
        raise SchemaValidationError(problems)
    return edges
