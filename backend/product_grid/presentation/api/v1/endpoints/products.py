"""Product table endpoints — every response is an HTML fragment."""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse

from product_grid.application.interfaces import TableRenderer
from product_grid.application.schemas import FieldUpdate
from product_grid.application.services import ProductMutationService, ProductTableService
from product_grid.config import get_settings
from product_grid.domain.entities import EditableField, ProductField, QueryParams, SortField, SortOrder
from product_grid.domain.exceptions import (
    EntityNotFoundError,
    ProductValidationError,
    SimulatedServerError,
)
from product_grid.infrastructure.dependencies import (
    get_product_mutation_service,
    get_product_table_service,
    get_table_renderer,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


def table_params(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, description="Page size; clamped to the configured maximum"),
    sort_by: SortField = Query(SortField.ID, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
    search_field: ProductField = Query(ProductField.NAME, alias="searchField"),
    search_term: str = Query("", alias="searchTerm", max_length=200),
) -> QueryParams:
    """Rebuild the current view's QueryParams from the query string."""
    settings = get_settings()
    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    return QueryParams(
        page=page,
        page_size=page_size,
        sort_field=sort_by,
        sort_dir=sort_order,
        search_field=search_field,
        search_term=search_term if search_term.strip() else "",
    )


def _error(renderer: TableRenderer, status_code: int, message: str) -> HTMLResponse:
    return HTMLResponse(renderer.render_error(message), status_code=status_code)


@router.get("", response_class=HTMLResponse)
async def get_table(
    params: QueryParams = Depends(table_params),
    service: ProductTableService = Depends(get_product_table_service),
    renderer: TableRenderer = Depends(get_table_renderer),
) -> HTMLResponse:
    """Filtered, sorted, paginated table fragment with totals over the filtered set."""
    view = await service.load_table(params)
    return HTMLResponse(renderer.render_table(view))


@router.get("/totals", response_class=HTMLResponse)
async def get_totals(
    params: QueryParams = Depends(table_params),
    service: ProductTableService = Depends(get_product_table_service),
    renderer: TableRenderer = Depends(get_table_renderer),
) -> HTMLResponse:
    """Totals footer for the filtered set; paging parameters are ignored."""
    totals = await service.load_totals(params)
    return HTMLResponse(renderer.render_totals(totals))


@router.get("/{product_id}/row", response_class=HTMLResponse)
async def get_row(
    product_id: int,
    params: QueryParams = Depends(table_params),
    service: ProductTableService = Depends(get_product_table_service),
    renderer: TableRenderer = Depends(get_table_renderer),
) -> HTMLResponse:
    """A single row fragment."""
    try:
        product = await service.get_product(product_id)
    except EntityNotFoundError as e:
        return _error(renderer, status.HTTP_404_NOT_FOUND, str(e))
    return HTMLResponse(renderer.render_row(product, params))


@router.patch("/{product_id}/{field}", response_class=HTMLResponse)
async def update_field(
    product_id: int,
    field: EditableField,
    data: FieldUpdate,
    params: QueryParams = Depends(table_params),
    mutations: ProductMutationService = Depends(get_product_mutation_service),
    service: ProductTableService = Depends(get_product_table_service),
    renderer: TableRenderer = Depends(get_table_renderer),
) -> HTMLResponse:
    """Apply one field edit; respond with the fresh row plus out-of-band totals."""
    try:
        product = await mutations.update_field(product_id, field, data.value)
    except EntityNotFoundError as e:
        return _error(renderer, status.HTTP_404_NOT_FOUND, str(e))
    except ProductValidationError as e:
        return _error(renderer, status.HTTP_400_BAD_REQUEST, f"Error: {e}")
    except SimulatedServerError:
        logger.warning("Simulated failure for product %d %s", product_id, field.value)
        return _error(renderer, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    totals = await service.load_totals(params)
    return HTMLResponse(
        renderer.render_row(product, params)
        + "\n"
        + renderer.render_totals(totals, out_of_band=True)
    )


@router.delete("/{product_id}", response_class=HTMLResponse)
async def delete_product(
    product_id: int,
    params: QueryParams = Depends(table_params),
    mutations: ProductMutationService = Depends(get_product_mutation_service),
    service: ProductTableService = Depends(get_product_table_service),
    renderer: TableRenderer = Depends(get_table_renderer),
) -> HTMLResponse:
    """Delete permanently and return the refreshed table for the same view."""
    try:
        await mutations.delete_product(product_id)
    except EntityNotFoundError as e:
        return _error(renderer, status.HTTP_404_NOT_FOUND, str(e))
    view = await service.load_table_clamped(params)
    return HTMLResponse(renderer.render_table(view))
