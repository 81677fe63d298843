"""Abstract markup renderer (port) — turns table views into HTML fragments."""

from abc import ABC, abstractmethod
from typing import Any

from product_grid.domain.entities import AggregateTotals, Product, QueryParams, TableView


class TableRenderer(ABC):
    """Port for markup rendering — implemented in the infrastructure layer."""

    @abstractmethod
    def render_page(self, view: TableView, user: dict[str, Any] | None = None) -> str:
        """Full HTML document embedding the table fragment."""
        ...

    @abstractmethod
    def render_table(self, view: TableView) -> str:
        """The swappable table wrapper: header, rows, totals and pagination."""
        ...

    @abstractmethod
    def render_row(self, product: Product, params: QueryParams) -> str:
        """A single table row."""
        ...

    @abstractmethod
    def render_totals(self, totals: AggregateTotals, *, out_of_band: bool = False) -> str:
        """The totals footer, optionally marked for out-of-band swapping."""
        ...

    @abstractmethod
    def render_error(self, message: str) -> str:
        """A short error fragment for non-2xx responses."""
        ...
