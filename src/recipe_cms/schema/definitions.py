"""The lists served by this backend.

Every list uses ``allow_all``: anyone can create, query, update and delete
anything. Tighten the access rules before exposing the API to the internet.
"""

from __future__ import annotations

from .access import allow_all
from .fields import (
    DisplayMode,
    IndexKind,
    RelationshipUI,
    document,
    image,
    password,
    relationship,
    text,
    timestamp,
)
from .lists import ListConfig, ListUI, list_


NUTRIENT_FIELDS = (
    "calories",
    "carbohydrates",
    "cholesterol",
    "fat",
    "protein",
    "saturatedFat",
    "sodium",
    "sugars",
    "totalFat",
    "totalSaturatedFat",
    "totalSodium",
    "totalSugars",
    "totalTransFat",
)

ARTICLE_LAYOUTS = [
    [1, 1],
    [1, 1, 1],
    [2, 1],
    [1, 2],
    [1, 2, 1],
]


lists: dict[str, ListConfig] = {
    "User": list_(
        access=allow_all,
        fields={
            "name": text(is_required=True),
            # no two users can share an email address
            "email": text(is_required=True, is_indexed=IndexKind.UNIQUE),
            "password": password(is_required=True),
            "articles": relationship(ref="Article.author", many=True),
            "recipes": relationship(ref="Recipe.author", many=True),
            "createdAt": timestamp(default_now=True),
        },
    ),
    "Recipe": list_(
        access=allow_all,
        fields={
            "title": text(is_required=True),
            "images": image(storage="local"),
            "description": document(formatting=True),
            "nutritionalInformation": relationship(
                ref="NutritionalInformation.recipe",
                many=True,
            ),
            "ingredients": relationship(ref="Ingredient.recipe", many=True),
            "collections": relationship(ref="Collection.recipes", many=True),
            "directions": document(formatting=True),
            "author": relationship(ref="User.recipes", many=False),
        },
    ),
    "Ingredient": list_(
        access=allow_all,
        fields={
            "name": text(is_required=True),
            "quantity": text(is_required=True),
            "unit": text(is_required=True),
            "imperialQuantity": text(is_required=True),
            "imperialUnit": text(is_required=True),
            "recipe": relationship(ref="Recipe.ingredients", many=False),
        },
    ),
    "NutritionalInformation": list_(
        access=allow_all,
        ui=ListUI(label="Nutritional Information"),
        fields={
            **{name: text(is_required=True) for name in NUTRIENT_FIELDS},
            "recipe": relationship(ref="Recipe.nutritionalInformation", many=False),
        },
    ),
    "Collection": list_(
        access=allow_all,
        fields={
            "name": text(is_required=True),
            "description": text(is_required=True),
            "recipes": relationship(ref="Recipe.collections", many=True),
        },
    ),
    "Article": list_(
        access=allow_all,
        fields={
            "title": text(is_required=True),
            "content": document(
                formatting=True,
                layouts=ARTICLE_LAYOUTS,
                links=True,
                dividers=True,
            ),
            "author": relationship(
                ref="User.articles",
                many=False,
                ui=RelationshipUI(
                    display_mode=DisplayMode.CARDS,
                    card_fields=("name", "email"),
                    inline_edit_fields=("name", "email"),
                    link_to_item=True,
                    inline_connect=True,
                ),
            ),
            "tags": relationship(
                ref="Tag.articles",
                many=True,
                ui=RelationshipUI(
                    display_mode=DisplayMode.CARDS,
                    card_fields=("name",),
                    inline_edit_fields=("name",),
                    link_to_item=True,
                    inline_connect=True,
                    inline_create_fields=("name",),
                ),
            ),
        },
    ),
    # Tags only appear inline on articles
    "Tag": list_(
        access=allow_all,
        ui=ListUI(is_hidden=True),
        fields={
            "name": text(),
            "articles": relationship(ref="Article.tags", many=True),
        },
    ),
}
