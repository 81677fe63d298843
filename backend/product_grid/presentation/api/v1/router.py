"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from product_grid.presentation.api.v1.endpoints.health import router as health_router
from product_grid.presentation.api.v1.endpoints.products import router as products_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(products_router)
