"""List-level access rules.

A rule receives the caller's session (or ``None``), the list key and the
operation, and returns whether the operation may proceed. ``allow_all`` is an
explicit, intentionally permissive default: anyone can query, create, update
and delete anything. Replace it per list before exposing the API publicly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class Operation(StrEnum):
    QUERY = "query"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class AccessArgs:
    session: Any
    list_key: str
    operation: Operation


AccessRule = Callable[[AccessArgs], bool]


def _allow(_args: AccessArgs) -> bool:
    return True


def _deny(_args: AccessArgs) -> bool:
    return False


class ListAccess(BaseModel):
    """Access rules for the four list operations."""

    model_config = ConfigDict(frozen=True)

    query: AccessRule = _allow
    create: AccessRule = _allow
    update: AccessRule = _allow
    delete: AccessRule = _allow

    def permits(self, operation: Operation, *, session: Any, list_key: str) -> bool:
        rule: AccessRule = getattr(self, operation.value)
        return bool(rule(AccessArgs(session=session, list_key=list_key, operation=operation)))


allow_all = ListAccess()
deny_all = ListAccess(query=_deny, create=_deny, update=_deny, delete=_deny)
