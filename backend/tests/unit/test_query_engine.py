"""Unit tests for the query engine and ProductTableService."""

from decimal import Decimal

import pytest

from product_grid.application.services import ProductTableService, query_engine
from product_grid.domain.entities import (
    Product,
    ProductField,
    QueryParams,
    SortField,
    SortOrder,
)
from product_grid.infrastructure.store.in_memory_product_repository import (
    InMemoryProductRepository,
)
from product_grid.infrastructure.store.seed import seed_products


def _product(pid: int, name: str = "Item", price: str = "10.00", quantity: int = 1, **kw) -> Product:
    return Product(
        id=pid,
        name=name,
        price=Decimal(price),
        quantity=quantity,
        category=kw.pop("category", "Misc"),
        description=kw.pop("description", None),
    )


@pytest.fixture
def seeded() -> list[Product]:
    return seed_products(50, seed=1337)


@pytest.fixture
def service(seeded) -> ProductTableService:
    return ProductTableService(InMemoryProductRepository(seeded))


# ── Pagination ──


@pytest.mark.asyncio
async def test_third_page_of_fifty_by_default_sort(service: ProductTableService):
    view = await service.load_table(QueryParams(page=3, page_size=10))

    assert [p.id for p in view.rows] == list(range(21, 31))
    assert view.page_info.total == 50
    assert view.page_info.total_pages == 5
    assert view.page_info.has_prev is True
    assert view.page_info.has_next is True


@pytest.mark.parametrize(
    "total,size,page,pages,has_next,has_prev",
    [
        (50, 10, 1, 5, True, False),
        (50, 10, 5, 5, False, True),
        (51, 10, 6, 6, False, True),
        (9, 10, 1, 1, False, False),
        (0, 10, 1, 0, False, False),
    ],
)
def test_page_info_arithmetic(total, size, page, pages, has_next, has_prev):
    info = query_engine.build_page_info(page, size, total)
    assert info.total_pages == pages
    assert info.has_next is has_next
    assert info.has_prev is has_prev


def test_page_past_end_is_empty(seeded):
    assert query_engine.paginate(seeded, 99, 10) == []


@pytest.mark.asyncio
async def test_pages_partition_the_filtered_set(service: ProductTableService):
    seen: list[int] = []
    for page in range(1, 9):
        view = await service.load_table(QueryParams(page=page, page_size=7))
        seen.extend(p.id for p in view.rows)
    assert sorted(seen) == list(range(1, 51))
    assert len(seen) == len(set(seen))


# ── Sorting ──


def test_desc_is_reverse_of_asc_for_distinct_keys(seeded):
    asc = query_engine.sort_products(seeded, SortField.ID, SortOrder.ASC)
    desc = query_engine.sort_products(seeded, SortField.ID, SortOrder.DESC)
    assert [p.id for p in desc] == [p.id for p in reversed(asc)]


def test_ties_break_on_ascending_id_in_both_directions():
    rows = [_product(3, price="5.00"), _product(1, price="5.00"), _product(2, price="9.00")]
    asc = query_engine.sort_products(rows, SortField.PRICE, SortOrder.ASC)
    desc = query_engine.sort_products(rows, SortField.PRICE, SortOrder.DESC)
    assert [p.id for p in asc] == [1, 3, 2]
    assert [p.id for p in desc] == [2, 1, 3]


def test_undefined_values_sort_first_in_both_directions():
    rows = [
        _product(1, description="beta"),
        _product(2, description=None),
        _product(3, description="alpha"),
    ]
    asc = query_engine.sort_products(rows, SortField.DESCRIPTION, SortOrder.ASC)
    desc = query_engine.sort_products(rows, SortField.DESCRIPTION, SortOrder.DESC)
    assert [p.id for p in asc] == [2, 3, 1]
    assert [p.id for p in desc] == [2, 1, 3]


def test_string_sort_ignores_case():
    rows = [_product(1, name="banana"), _product(2, name="Apple"), _product(3, name="cherry")]
    ordered = query_engine.sort_products(rows, SortField.NAME, SortOrder.ASC)
    assert [p.name for p in ordered] == ["Apple", "banana", "cherry"]


def test_sort_by_subtotal():
    rows = [
        _product(1, price="10.00", quantity=5),
        _product(2, price="100.00", quantity=1),
        _product(3, price="1.00", quantity=3),
    ]
    ordered = query_engine.sort_products(rows, SortField.SUBTOTAL, SortOrder.DESC)
    assert [p.id for p in ordered] == [2, 1, 3]


# ── Filtering ──


def test_empty_term_keeps_every_row(seeded):
    assert query_engine.filter_products(seeded, ProductField.NAME, "") == seeded


def test_filter_is_case_insensitive_substring(seeded):
    matched = query_engine.filter_products(seeded, ProductField.NAME, "LAMP")
    assert matched
    assert all("lamp" in p.name.lower() for p in matched)
    assert set(matched) <= set(seeded)


def test_longer_term_matches_a_subset():
    rows = [_product(1, name="Desk Lamp"), _product(2, name="Lamp"), _product(3, name="Lava")]
    broad = query_engine.filter_products(rows, ProductField.NAME, "la")
    narrow = query_engine.filter_products(rows, ProductField.NAME, "lamp")
    assert set(narrow) <= set(broad)
    assert [p.id for p in narrow] == [1, 2]


def test_undefined_field_never_matches_non_empty_term():
    rows = [_product(1, description=None), _product(2, description="none of these")]
    matched = query_engine.filter_products(rows, ProductField.DESCRIPTION, "none")
    assert [p.id for p in matched] == [2]


# ── Totals ──


def test_totals_over_rows():
    rows = [_product(1, price="10.005", quantity=2), _product(2, price="20.00", quantity=3)]
    totals = query_engine.compute_totals(rows)
    assert totals.count == 2
    assert totals.total_quantity == 5
    assert totals.total_price == Decimal("30.01")
    assert totals.grand_total == Decimal("80.01")
    assert totals.average_price == Decimal("15.00")


def test_totals_of_empty_set_are_zero():
    totals = query_engine.compute_totals([])
    assert totals.count == 0
    assert totals.average_price == Decimal("0.00")


@pytest.mark.asyncio
async def test_totals_do_not_depend_on_page_size(service: ProductTableService):
    small = await service.load_table(QueryParams(page=2, page_size=5, search_term="a"))
    large = await service.load_table(QueryParams(page=1, page_size=50, search_term="a"))
    assert small.totals == large.totals
    assert small.totals.count == small.page_info.total


@pytest.mark.asyncio
async def test_load_table_clamped_steps_back_to_last_page(service: ProductTableService):
    view = await service.load_table_clamped(QueryParams(page=9, page_size=10))
    assert view.params.page == 5
    assert [p.id for p in view.rows] == list(range(41, 51))
