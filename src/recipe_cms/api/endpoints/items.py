"""Generic item endpoints derived from the declared lists.

Every list is served under its kebab-case path, e.g.
``/api/nutritional-information/{id}`` for ``NutritionalInformation``.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, status

from recipe_cms.api.dependencies import ListDep, RuntimeDep
from recipe_cms.schemas import ItemsPage, ListMeta, ListsResponse


router = APIRouter(prefix="/api", tags=["items"])

ItemBody = Annotated[dict[str, Any], Body()]


@router.get(
    "/lists",
    response_model=ListsResponse,
    summary="List metadata",
    description="Lists shown in the admin UI with their fields. Hidden lists are omitted.",
)
def get_lists(runtime: RuntimeDep) -> ListsResponse:
    return ListsResponse(
        lists=[
            ListMeta.from_compiled(compiled)
            for compiled in runtime.schema.lists.values()
            if not compiled.config.ui.is_hidden
        ]
    )


@router.get(
    "/{list_path}",
    response_model=ItemsPage,
    summary="Find items",
)
def find_items(
    compiled: ListDep,
    runtime: RuntimeDep,
    skip: Annotated[int, Query(ge=0)] = 0,
    take: Annotated[int | None, Query(ge=1, le=1000)] = None,
) -> ItemsPage:
    items = runtime.items.find_many(compiled.key, skip=skip, take=take)
    return ItemsPage(items=items, count=runtime.items.count(compiled.key))


@router.post(
    "/{list_path}",
    status_code=status.HTTP_201_CREATED,
    summary="Create an item",
    responses={
        400: {"description": "Invalid field value or missing related item"},
        409: {"description": "Unique value already taken"},
    },
)
def create_item(compiled: ListDep, runtime: RuntimeDep, data: ItemBody) -> dict[str, Any]:
    return runtime.items.create_one(compiled.key, data)


@router.get(
    "/{list_path}/{item_id}",
    summary="Get an item",
    responses={404: {"description": "Item not found"}},
)
def get_item(compiled: ListDep, runtime: RuntimeDep, item_id: str) -> dict[str, Any]:
    return runtime.items.get_one(compiled.key, item_id)


@router.patch(
    "/{list_path}/{item_id}",
    summary="Update an item",
    responses={
        400: {"description": "Invalid field value or missing related item"},
        404: {"description": "Item not found"},
        409: {"description": "Unique value already taken"},
    },
)
def update_item(
    compiled: ListDep,
    runtime: RuntimeDep,
    item_id: str,
    data: ItemBody,
) -> dict[str, Any]:
    return runtime.items.update_one(compiled.key, item_id, data)


@router.delete(
    "/{list_path}/{item_id}",
    summary="Delete an item",
    responses={404: {"description": "Item not found"}},
)
def delete_item(compiled: ListDep, runtime: RuntimeDep, item_id: str) -> dict[str, Any]:
    return runtime.items.delete_one(compiled.key, item_id)
