"""Domain entities for table queries — parameters, pages and totals."""

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from product_grid.domain.entities.product import Product, ProductField

CENTS = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents, half-up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class SortField(str, Enum):
    """Sort keys: every stored field plus the computed subtotal."""

    ID = "id"
    NAME = "name"
    PRICE = "price"
    QUANTITY = "quantity"
    CATEGORY = "category"
    DESCRIPTION = "description"
    SUBTOTAL = "subtotal"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortOrder":
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


@dataclass(frozen=True)
class QueryParams:
    """View parameters for one table request.

    Reconstructed per request and echoed back into every link and form,
    so a view can always be reproduced from its URL.
    """

    page: int = 1
    page_size: int = 10
    sort_field: SortField = SortField.ID
    sort_dir: SortOrder = SortOrder.ASC
    search_field: ProductField = ProductField.NAME
    search_term: str = ""

    def evolve(self, **changes) -> "QueryParams":
        return replace(self, **changes)

    def to_query(self) -> dict[str, str]:
        """Query-string form used by links, forms and the API client."""
        return {
            "page": str(self.page),
            "limit": str(self.page_size),
            "sortBy": self.sort_field.value,
            "sortOrder": self.sort_dir.value,
            "searchField": self.search_field.value,
            "searchTerm": self.search_term,
        }


@dataclass
class QueryResult:
    """Rows of the requested page plus the full filtered count."""

    rows: list[Product] = field(default_factory=list)
    total: int = 0


@dataclass(frozen=True)
class AggregateTotals:
    """Summary figures over a full filtered row set, never a single page."""

    total_quantity: int = 0
    total_price: Decimal = Decimal("0.00")
    grand_total: Decimal = Decimal("0.00")
    average_price: Decimal = Decimal("0.00")
    count: int = 0


@dataclass(frozen=True)
class PageInfo:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


@dataclass
class TableView:
    """Everything a table fragment needs: page rows, paging and totals."""

    params: QueryParams
    rows: list[Product]
    page_info: PageInfo
    totals: AggregateTotals
