"""Full-page render — GET / serves the table page for any view URL."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from product_grid.application.interfaces import TableRenderer
from product_grid.application.services import ProductTableService
from product_grid.domain.entities import QueryParams
from product_grid.infrastructure.dependencies import (
    get_product_table_service,
    get_table_renderer,
)
from product_grid.presentation.api.v1.endpoints.products import table_params

router = APIRouter(tags=["Pages"])


@router.get("/", response_class=HTMLResponse)
async def table_page(
    request: Request,
    params: QueryParams = Depends(table_params),
    service: ProductTableService = Depends(get_product_table_service),
    renderer: TableRenderer = Depends(get_table_renderer),
) -> HTMLResponse:
    """Serve the page for a bookmarked view; the URL alone reproduces it."""
    view = await service.load_table(params)
    user = getattr(request.state, "user", None)
    return HTMLResponse(renderer.render_page(view, user=user))
