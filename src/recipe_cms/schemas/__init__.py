"""Pydantic schemas for the HTTP API."""

from .base import APIResponse
from .lists import FieldMeta, ListMeta, ListsResponse
from .items import ItemsPage


__all__ = [
    "APIResponse",
    "FieldMeta",
    "ItemsPage",
    "ListMeta",
    "ListsResponse",
]
