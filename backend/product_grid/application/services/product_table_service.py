"""Application service (use case) for reading the product table."""

import logging

from product_grid.application.interfaces import ProductRepository
from product_grid.application.services import query_engine
from product_grid.domain.entities import AggregateTotals, Product, QueryParams, TableView
from product_grid.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class ProductTableService:
    """Composes the query engine over a store snapshot. Depends on the repository port (DI)."""

    def __init__(self, repository: ProductRepository):
        self._repository = repository

    async def get_product(self, product_id: int) -> Product:
        product = await self._repository.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError("Product", product_id)
        return product

    async def load_table(self, params: QueryParams) -> TableView:
        """Rows for the requested page plus paging and totals over the filtered set."""
        snapshot = await self._repository.get_all()
        filtered = query_engine.filter_products(
            snapshot, params.search_field, params.search_term
        )
        ordered = query_engine.sort_products(filtered, params.sort_field, params.sort_dir)
        rows = query_engine.paginate(ordered, params.page, params.page_size)
        page_info = query_engine.build_page_info(params.page, params.page_size, len(filtered))

        logger.debug(
            "Table query page=%d size=%d sort=%s/%s search=%s:%r -> %d of %d",
            params.page,
            params.page_size,
            params.sort_field.value,
            params.sort_dir.value,
            params.search_field.value,
            params.search_term,
            len(rows),
            page_info.total,
        )
        return TableView(
            params=params,
            rows=rows,
            page_info=page_info,
            totals=query_engine.compute_totals(filtered),
        )

    async def load_totals(self, params: QueryParams) -> AggregateTotals:
        """Totals over the filtered set described by ``params``; paging is ignored."""
        snapshot = await self._repository.get_all()
        filtered = query_engine.filter_products(
            snapshot, params.search_field, params.search_term
        )
        return query_engine.compute_totals(filtered)

    async def load_table_clamped(self, params: QueryParams) -> TableView:
        """Like ``load_table`` but steps back to the last page when the requested one is empty.

        Used after a deletion removed the only row of the last page.
        """
        view = await self.load_table(params)
        last_page = max(view.page_info.total_pages, 1)
        if not view.rows and params.page > last_page:
            return await self.load_table(params.evolve(page=last_page))
        return view
