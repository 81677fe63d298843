"""Health check endpoint — no dependencies, always available."""

from fastapi import APIRouter, Depends

from product_grid.application.interfaces import ProductRepository
from product_grid.config import get_settings
from product_grid.infrastructure.dependencies import get_product_repository

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    repository: ProductRepository = Depends(get_product_repository),
) -> dict:
    """Returns the application health status and the current store size."""
    settings = get_settings()
    products = await repository.get_all()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "products": len(products),
    }
