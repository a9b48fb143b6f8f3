"""Router aggregating all endpoint routers."""

from fastapi import APIRouter

from recipe_cms.api.endpoints import health, items


router = APIRouter()

router.include_router(health.router)
router.include_router(items.router)
