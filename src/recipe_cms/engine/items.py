"""Create, read, update and delete list items.

Writes are validated against the field declarations before anything touches
the database: required values, value shapes, document capabilities and the
existence of every referenced item. Each write runs in one transaction.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError

from recipe_cms.auth.passwords import MAX_PASSWORD_BYTES, hash_password
from recipe_cms.core.exceptions import (
    AccessDeniedException,
    ErrorDetail,
    NotFoundException,
    ReferenceNotFoundException,
    UniqueConstraintException,
    ValidationFailedException,
)
from recipe_cms.observability.logging import get_logger
from recipe_cms.schema import (
    Cardinality,
    DocumentField,
    ImageField,
    Operation,
    PasswordField,
    TextField,
    TimestampField,
)

from .values import (
    DEFAULT_DOCUMENT,
    ImageRef,
    document_problems,
    load_timestamp,
    now_utc,
    parse_image,
    parse_timestamp,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine, RowMapping

    from recipe_cms.assembly import SystemConfig

    from .compiler import CompiledList, CompiledSchema, RelationshipBinding


logger = get_logger(__name__)

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
_POSTGRES_UNIQUE = re.compile(r"Key \((\w+)\)=")


@dataclass
class RelationshipWrite:
    """Normalised relationship input for one field."""

    binding: RelationshipBinding
    connect: list[str] = field(default_factory=list)
    disconnect: list[str] = field(default_factory=list)
    replace: bool = False
    clear: bool = False


@dataclass
class PreparedWrite:
    values: dict[str, Any] = field(default_factory=dict)
    relationships: list[RelationshipWrite] = field(default_factory=list)


def _ids(value: Any, field_name: str, errors: list[ErrorDetail]) -> list[str]:
    items = value if isinstance(value, list) else [value]
    ids: list[str] = []
    for item in items:
        if isinstance(item, Mapping) and isinstance(item.get("id"), str):
            ids.append(item["id"])
        else:
            errors.append(
                ErrorDetail(
                    code="INVALID_RELATIONSHIP",
                    message="expected {'id': <string>}",
                    field=field_name,
                )
            )
    return ids


def _parse_relationship(
    binding: RelationshipBinding,
    name: str,
    value: Any,
    errors: list[ErrorDetail],
) -> RelationshipWrite | None:
    write = RelationshipWrite(binding=binding)

    if value is None:
        write.clear = True
        return write
    if not isinstance(value, Mapping):
        errors.append(
            ErrorDetail(code="INVALID_RELATIONSHIP", message="expected an object", field=name)
        )
        return None

    allowed = {"connect", "disconnect", "set"} if binding.many else {"connect", "disconnect"}
    unknown = set(value) - allowed
    if unknown:
        errors.append(
            ErrorDetail(
                code="INVALID_RELATIONSHIP",
                message=f"unsupported operations {sorted(unknown)}",
                field=name,
            )
        )
        return None

    if binding.many:
        if "set" in value and "disconnect" in value:
            errors.append(
                ErrorDetail(
                    code="INVALID_RELATIONSHIP",
                    message="'set' cannot be combined with 'disconnect'",
                    field=name,
                )
            )
            return None
        for key in value:
            if not isinstance(value[key], list):
                errors.append(
                    ErrorDetail(
                        code="INVALID_RELATIONSHIP",
                        message=f"'{key}' expects a list",
                        field=name,
                    )
                )
                return None
        if "set" in value:
            write.replace = True
            write.connect.extend(_ids(value["set"], name, errors))
        write.connect.extend(_ids(value.get("connect", []), name, errors))
        write.disconnect.extend(_ids(value.get("disconnect", []), name, errors))
        return write

    if "connect" in value and "disconnect" in value:
        errors.append(
            ErrorDetail(
                code="INVALID_RELATIONSHIP",
                message="'connect' cannot be combined with 'disconnect'",
                field=name,
            )
        )
        return None
    if "connect" in value:
        if not isinstance(value["connect"], Mapping):
            errors.append(
                ErrorDetail(
                    code="INVALID_RELATIONSHIP",
                    message="'connect' expects a single {'id': <string>}",
                    field=name,
                )
            )
            return None
        connect = _ids(value["connect"], name, errors)
        if not connect:
            return None
        write.connect.extend(connect)
        write.replace = True
    elif value.get("disconnect") is True:
        write.clear = True
    else:
        errors.append(
            ErrorDetail(
                code="INVALID_RELATIONSHIP",
                message="expected 'connect' or 'disconnect: true'",
                field=name,
            )
        )
        return None
    return write


class ItemService:
    """Item operations over a compiled schema.

    Every operation is checked against the list's access rules with the
    caller's ``session`` (``None`` when anonymous).
    """

    def __init__(self, engine: Engine, schema: CompiledSchema, system: SystemConfig) -> None:
        self._engine = engine
        self._schema = schema
        self._system = system

    # =========================================================================
    # Lookup and access
    # =========================================================================

    def _list(self, list_key: str) -> CompiledList:
        compiled = self._schema.get(list_key)
        if compiled is None:
            raise NotFoundException("List", list_key)
        return compiled

    def _authorize(self, compiled: CompiledList, operation: Operation, session: Any) -> None:
        if not compiled.config.access.permits(operation, session=session, list_key=compiled.key):
            logger.warning(
                "Access denied",
                list_key=compiled.key,
                operation=operation.value,
            )
            raise AccessDeniedException(compiled.key, operation.value)

    # =========================================================================
    # Input preparation
    # =========================================================================

    def _prepare_scalar(
        self,
        name: str,
        field_config: Any,
        value: Any,
        errors: list[ErrorDetail],
    ) -> Any:
        def fail(code: str, message: str) -> None:
            errors.append(ErrorDetail(code=code, message=message, field=name))

        if isinstance(field_config, TextField):
            if value is None or value == "":
                if field_config.is_required:
                    fail("REQUIRED", f"{name} is required")
                return field_config.default_value if value is None else value
            if not isinstance(value, str):
                fail("INVALID_TYPE", f"{name} must be a string")
            return value

        if isinstance(field_config, PasswordField):
            if value is None or value == "":
                if field_config.is_required:
                    fail("REQUIRED", f"{name} is required")
                return None
            if not isinstance(value, str):
                fail("INVALID_TYPE", f"{name} must be a string")
                return None
            if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
                fail("INVALID_LENGTH", f"{name} must be at most {MAX_PASSWORD_BYTES} bytes")
                return None
            return hash_password(value, rounds=self._system.password_rounds)

        if isinstance(field_config, TimestampField):
            if value is None:
                if field_config.is_required:
                    fail("REQUIRED", f"{name} is required")
                return None
            try:
                return parse_timestamp(value)
            except ValueError as e:
                fail("INVALID_TYPE", str(e))
                return None

        if isinstance(field_config, ImageField):
            try:
                return parse_image(value)
            except ValueError as e:
                fail("INVALID_IMAGE", str(e))
                return None

        if isinstance(field_config, DocumentField):
            if value is None:
                return DEFAULT_DOCUMENT
            for problem in document_problems(field_config, value):
                fail("INVALID_DOCUMENT", problem)
            return value

        fail("UNSUPPORTED_FIELD", f"{name} cannot be written")
        return None

    def _defaults(self, compiled: CompiledList) -> dict[str, Any]:
        defaults: dict[str, Any] = {}
        for name, field_config in compiled.config.scalar_fields().items():
            if isinstance(field_config, TimestampField) and field_config.default_value:
                defaults[name] = now_utc()
            elif isinstance(field_config, DocumentField):
                defaults[name] = DEFAULT_DOCUMENT
            elif isinstance(field_config, TextField):
                defaults[name] = field_config.default_value
        return defaults

    def _prepare(
        self,
        compiled: CompiledList,
        data: Mapping[str, Any],
        *,
        creating: bool,
    ) -> PreparedWrite:
        errors: list[ErrorDetail] = []
        prepared = PreparedWrite()
        fields = compiled.config.fields

        for name in data:
            if name not in fields:
                errors.append(
                    ErrorDetail(code="UNKNOWN_FIELD", message=f"{name} is not a field", field=name)
                )

        if creating:
            prepared.values.update(self._defaults(compiled))

        for name, field_config in compiled.config.scalar_fields().items():
            if name in data:
                prepared.values[name] = self._prepare_scalar(name, field_config, data[name], errors)
            elif creating and field_config.is_required:
                errors.append(
                    ErrorDetail(code="REQUIRED", message=f"{name} is required", field=name)
                )

        for name, binding in compiled.relationships.items():
            if name in data:
                write = _parse_relationship(binding, name, data[name], errors)
                if write is not None:
                    prepared.relationships.append(write)

        if errors:
            raise ValidationFailedException(compiled.key, errors)
        return prepared

    # =========================================================================
    # Relationship persistence
    # =========================================================================

    def _check_references(
        self,
        conn: Connection,
        compiled: CompiledList,
        prepared: PreparedWrite,
    ) -> None:
        for write in prepared.relationships:
            if not write.connect:
                continue
            target_table = self._schema.lists[write.binding.target.list_key].table
            found = set(
                conn.execute(
                    select(target_table.c.id).where(target_table.c.id.in_(write.connect))
                ).scalars()
            )
            missing = [item_id for item_id in write.connect if item_id not in found]
            if missing:
                raise ReferenceNotFoundException(compiled.key, write.binding.end.field, missing[0])

    def _release_one_to_one(
        self,
        conn: Connection,
        compiled: CompiledList,
        item_id: str,
        prepared: PreparedWrite,
    ) -> None:
        """Unlink one-to-one targets from their current owner before relinking."""
        for write in prepared.relationships:
            binding = write.binding
            if (
                write.connect
                and binding.stores_foreign_key
                and binding.edge.cardinality == Cardinality.ONE_TO_ONE
            ):
                column = compiled.table.c[binding.end.field]
                conn.execute(
                    update(compiled.table)
                    .where(column == write.connect[0], compiled.table.c.id != item_id)
                    .values({column.name: None})
                )

    def _foreign_key_values(self, prepared: PreparedWrite) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for write in prepared.relationships:
            if write.binding.stores_foreign_key:
                values[write.binding.end.field] = write.connect[0] if write.connect else None
        return values

    def _apply_relationship(
        self,
        conn: Connection,
        item_id: str,
        write: RelationshipWrite,
    ) -> None:
        binding = write.binding

        if binding.stores_foreign_key:
            return

        if binding.join_table is not None:
            own, other = binding.join_columns
            join = binding.join_table
            if write.replace or write.clear:
                conn.execute(delete(join).where(join.c[own] == item_id))
            if write.disconnect:
                conn.execute(
                    delete(join).where(join.c[own] == item_id, join.c[other].in_(write.disconnect))
                )
            existing = set(
                conn.execute(select(join.c[other]).where(join.c[own] == item_id)).scalars()
            )
            new_ids = [target for target in dict.fromkeys(write.connect) if target not in existing]
            if new_ids:
                conn.execute(insert(join), [{own: item_id, other: target} for target in new_ids])
            return

        # foreign key lives on the target's table
        target_table = self._schema.lists[binding.target.list_key].table
        fk = target_table.c[binding.target.field]
        if write.replace or write.clear:
            conn.execute(update(target_table).where(fk == item_id).values({fk.name: None}))
        if write.disconnect:
            conn.execute(
                update(target_table)
                .where(fk == item_id, target_table.c.id.in_(write.disconnect))
                .values({fk.name: None})
            )
        if write.connect:
            conn.execute(
                update(target_table)
                .where(target_table.c.id.in_(write.connect))
                .values({fk.name: item_id})
            )

    # =========================================================================
    # Output
    # =========================================================================

    def _serialize(
        self,
        conn: Connection,
        compiled: CompiledList,
        row: RowMapping,
    ) -> dict[str, Any]:
        item: dict[str, Any] = {"id": row["id"]}

        for name, field_config in compiled.config.scalar_fields().items():
            value = row[name]
            if isinstance(field_config, PasswordField):
                item[name] = {"isSet": bool(value)}
            elif isinstance(field_config, TimestampField):
                item[name] = load_timestamp(value)
            elif isinstance(field_config, ImageField) and value is not None:
                storage = self._system.storage[field_config.storage]
                path = ImageRef.model_validate(value).path
                item[name] = {**value, "url": storage.generate_url(path)}
            else:
                item[name] = value

        for name, binding in compiled.relationships.items():
            item[name] = self._related(conn, binding, row)

        return item

    def _related(
        self,
        conn: Connection,
        binding: RelationshipBinding,
        row: RowMapping,
    ) -> dict[str, str] | list[dict[str, str]] | None:
        if binding.stores_foreign_key:
            target_id = row[binding.end.field]
            return {"id": target_id} if target_id is not None else None

        if binding.join_table is not None:
            own, other = binding.join_columns
            join = binding.join_table
            ids = conn.execute(
                select(join.c[other]).where(join.c[own] == row["id"]).order_by(join.c[other])
            ).scalars()
        else:
            target_table = self._schema.lists[binding.target.list_key].table
            fk = target_table.c[binding.target.field]
            ids = conn.execute(
                select(target_table.c.id).where(fk == row["id"]).order_by(target_table.c.id)
            ).scalars()

        related = [{"id": target_id} for target_id in ids]
        if binding.many:
            return related
        return related[0] if related else None

    def _fetch(
        self,
        conn: Connection,
        compiled: CompiledList,
        item_id: str,
    ) -> dict[str, Any]:
        row = conn.execute(
            select(compiled.table).where(compiled.table.c.id == item_id)
        ).mappings().first()
        if row is None:
            raise NotFoundException(compiled.key, item_id)
        return self._serialize(conn, compiled, row)

    @staticmethod
    def _unique_violation(
        compiled: CompiledList,
        error: IntegrityError,
    ) -> UniqueConstraintException | None:
        message = str(error.orig)
        if "unique" not in message.lower():
            return None
        # sqlite: "UNIQUE constraint failed: User.email"; postgres: "Key (email)=(...)"
        match = _SQLITE_UNIQUE.search(message) or _POSTGRES_UNIQUE.search(message)
        return UniqueConstraintException(compiled.key, match.group(1) if match else None)

    # =========================================================================
    # Operations
    # =========================================================================

    def create_one(
        self,
        list_key: str,
        data: Mapping[str, Any],
        *,
        session: Any = None,
    ) -> dict[str, Any]:
        """Create an item and return it as read back from the database.

        Raises:
            ValidationFailedException: If a field value is missing or malformed.
            ReferenceNotFoundException: If a relationship points at a missing item.
            UniqueConstraintException: If a unique value is already taken.
        """
        compiled = self._list(list_key)
        self._authorize(compiled, Operation.CREATE, session)
        prepared = self._prepare(compiled, data, creating=True)
        item_id = str(uuid.uuid4())

        try:
            with self._engine.begin() as conn:
                self._check_references(conn, compiled, prepared)
                self._release_one_to_one(conn, compiled, item_id, prepared)
                conn.execute(
                    insert(compiled.table).values(
                        id=item_id,
                        **prepared.values,
                        **self._foreign_key_values(prepared),
                    )
                )
                for write in prepared.relationships:
                    self._apply_relationship(conn, item_id, write)
                item = self._fetch(conn, compiled, item_id)
        except IntegrityError as e:
            violation = self._unique_violation(compiled, e)
            if violation is None:
                raise
            raise violation from e

        logger.info("Item created", list_key=list_key, item_id=item_id)
        return item

    def get_one(self, list_key: str, item_id: str, *, session: Any = None) -> dict[str, Any]:
        compiled = self._list(list_key)
        self._authorize(compiled, Operation.QUERY, session)
        with self._engine.connect() as conn:
            return self._fetch(conn, compiled, item_id)

    def find_many(
        self,
        list_key: str,
        *,
        skip: int = 0,
        take: int | None = None,
        session: Any = None,
    ) -> list[dict[str, Any]]:
        compiled = self._list(list_key)
        self._authorize(compiled, Operation.QUERY, session)
        query = select(compiled.table).order_by(compiled.table.c.id).offset(skip)
        if take is not None:
            query = query.limit(take)
        with self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
            return [self._serialize(conn, compiled, row) for row in rows]

    def count(self, list_key: str, *, session: Any = None) -> int:
        compiled = self._list(list_key)
        self._authorize(compiled, Operation.QUERY, session)
        with self._engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(compiled.table)).scalar_one()

    def update_one(
        self,
        list_key: str,
        item_id: str,
        data: Mapping[str, Any],
        *,
        session: Any = None,
    ) -> dict[str, Any]:
        """Update the given fields of an item; omitted fields keep their value.

        Raises:
            NotFoundException: If the item does not exist.
            ValidationFailedException: If a value is blanked or malformed.
            ReferenceNotFoundException: If a relationship points at a missing item.
            UniqueConstraintException: If a unique value is already taken.
        """
        compiled = self._list(list_key)
        self._authorize(compiled, Operation.UPDATE, session)
        prepared = self._prepare(compiled, data, creating=False)

        try:
            with self._engine.begin() as conn:
                self._fetch(conn, compiled, item_id)
                self._check_references(conn, compiled, prepared)
                self._release_one_to_one(conn, compiled, item_id, prepared)
                values = {**prepared.values, **self._foreign_key_values(prepared)}
                if values:
                    conn.execute(
                        update(compiled.table)
                        .where(compiled.table.c.id == item_id)
                        .values(values)
                    )
                for write in prepared.relationships:
                    self._apply_relationship(conn, item_id, write)
                item = self._fetch(conn, compiled, item_id)
        except IntegrityError as e:
            violation = self._unique_violation(compiled, e)
            if violation is None:
                raise
            raise violation from e

        logger.info("Item updated", list_key=list_key, item_id=item_id, fields=sorted(data))
        return item

    def delete_one(
        self,
        list_key: str,
        item_id: str,
        *,
        session: Any = None,
    ) -> dict[str, Any]:
        """Delete an item and return its last state.

        Links pointing at the item are cleared by the database.
        """
        compiled = self._list(list_key)
        self._authorize(compiled, Operation.DELETE, session)
        with self._engine.begin() as conn:
            item = self._fetch(conn, compiled, item_id)
            conn.execute(delete(compiled.table).where(compiled.table.c.id == item_id))

        logger.info("Item deleted", list_key=list_key, item_id=item_id)
        return item

    def find_secret(
        self,
        list_key: str,
        identity_field: str,
        identity: str,
        secret_field: str,
    ) -> tuple[str, str | None] | None:
        """Return ``(id, secret hash)`` of the item matching ``identity``.

        Bypasses access rules; only the auth layer calls this.
        """
        table = self._list(list_key).table
        with self._engine.connect() as conn:
            row = conn.execute(
                select(table.c.id, table.c[secret_field]).where(
                    table.c[identity_field] == identity
                )
            ).first()
        if row is None:
            return None
        return row[0], row[1]
