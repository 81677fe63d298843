"""Query engine — filter → sort → paginate → aggregate over a product set.

Every function here is pure: it takes a row list and returns new values
without touching the store. Full-page renders, fragment responses and the
mutation endpoints all go through the same functions.
"""

import math
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

from product_grid.domain.entities import (
    AggregateTotals,
    PageInfo,
    Product,
    ProductField,
    QueryParams,
    QueryResult,
    SortField,
    SortOrder,
    round_money,
)


def filter_products(
    products: Iterable[Product], field: ProductField, term: str
) -> list[Product]:
    """Case-insensitive substring match of ``term`` against ``field``.

    An empty term keeps every row. A row whose field is undefined never
    matches a non-empty term.
    """
    rows = list(products)
    if not term:
        return rows
    needle = term.casefold()
    matched = []
    for product in rows:
        value = product.value_of(field.value)
        if value is None:
            continue
        if needle in str(value).casefold():
            matched.append(product)
    return matched


def _sort_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    return value


def sort_products(
    products: Iterable[Product], field: SortField, order: SortOrder
) -> list[Product]:
    """Total order over ``field``.

    Undefined values come first in both directions; the direction only flips
    the comparison between defined values. Ties fall back to ascending id.
    """
    undefined: list[Product] = []
    defined: list[Product] = []
    for product in products:
        if product.value_of(field.value) is None:
            undefined.append(product)
        else:
            defined.append(product)

    undefined.sort(key=lambda p: p.id)
    # Two stable passes: id ascending first, then the key in the requested direction
    defined.sort(key=lambda p: p.id)
    defined.sort(
        key=lambda p: _sort_key(p.value_of(field.value)),
        reverse=order is SortOrder.DESC,
    )
    return undefined + defined


def paginate(rows: Sequence[Product], page: int, page_size: int) -> list[Product]:
    """Slice one page. A page past the end is empty, not an error."""
    start = (page - 1) * page_size
    return list(rows[start : start + page_size])


def query(products: Iterable[Product], params: QueryParams) -> QueryResult:
    """Filter, sort and paginate; ``total`` is the full filtered count."""
    filtered = filter_products(products, params.search_field, params.search_term)
    ordered = sort_products(filtered, params.sort_field, params.sort_dir)
    return QueryResult(
        rows=paginate(ordered, params.page, params.page_size),
        total=len(filtered),
    )


def compute_totals(rows: Iterable[Product]) -> AggregateTotals:
    """Aggregate figures over an arbitrary row set.

    Sums are carried at full precision and rounded only on output.
    """
    total_quantity = 0
    total_price = Decimal("0")
    grand_total = Decimal("0")
    count = 0
    for product in rows:
        total_quantity += product.quantity
        total_price += product.price
        grand_total += product.price * product.quantity
        count += 1

    average = total_price / count if count else Decimal("0")
    return AggregateTotals(
        total_quantity=total_quantity,
        total_price=round_money(total_price),
        grand_total=round_money(grand_total),
        average_price=round_money(average),
        count=count,
    )


def build_page_info(page: int, page_size: int, total: int) -> PageInfo:
    total_pages = math.ceil(total / page_size) if total else 0
    return PageInfo(
        page=page,
        limit=page_size,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
