"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from product_grid.config import get_settings
from product_grid.infrastructure.dependencies import get_product_repository
from product_grid.infrastructure.logging.log_config import setup_logging
from product_grid.presentation.api.router import router as api_router
from product_grid.presentation.middleware.user_context import UserContextMiddleware
from product_grid.presentation.web.pages import router as pages_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging and seed the record store."""
    setup_logging()

    repository = get_product_repository()
    products = await repository.get_all()
    logger.info("Record store ready: %d products", len(products))

    yield

    logger.info("Shutting down")


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(UserContextMiddleware)

    # Mount API routes, then the page route
    app.include_router(api_router)
    app.include_router(pages_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "product_grid.main:app",
        host="0.0.0.0",
        port=8030,
        reload=True,
    )
