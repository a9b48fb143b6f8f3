"""Item collection responses."""

from __future__ import annotations

from typing import Any

from .base import APIResponse


class ItemsPage(APIResponse):
    items: list[dict[str, Any]]
    count: int
