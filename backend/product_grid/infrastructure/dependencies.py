"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends

from product_grid.config import get_settings
from product_grid.application.interfaces import ProductRepository, TableRenderer
from product_grid.application.services import (
    FieldRules,
    ProductMutationService,
    ProductTableService,
)
from product_grid.infrastructure.rendering.html_table_renderer import HtmlTableRenderer
from product_grid.infrastructure.store.in_memory_product_repository import (
    InMemoryProductRepository,
)
from product_grid.infrastructure.store.seed import seed_products


@lru_cache
def get_product_repository() -> ProductRepository:
    """Process-wide record store, seeded on first use."""
    settings = get_settings()
    return InMemoryProductRepository(
        seed_products(settings.seed_product_count, settings.seed_random_seed)
    )


@lru_cache
def get_table_renderer() -> TableRenderer:
    return HtmlTableRenderer(title=get_settings().app_title)


async def get_product_table_service(
    repository: ProductRepository = Depends(get_product_repository),
) -> AsyncGenerator[ProductTableService, None]:
    """Provides a ProductTableService bound to the record store."""
    yield ProductTableService(repository)


async def get_product_mutation_service(
    repository: ProductRepository = Depends(get_product_repository),
) -> AsyncGenerator[ProductMutationService, None]:
    """Provides a ProductMutationService with bounds taken from settings."""
    settings = get_settings()
    rules = FieldRules(
        min_price=settings.min_price,
        max_price=settings.max_price,
        max_quantity=settings.max_quantity,
        simulated_failure_price=settings.simulated_failure_price,
    )
    yield ProductMutationService(repository, rules)
