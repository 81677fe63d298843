"""Integration tests for the product table endpoints (ASGI, in-memory store)."""

from decimal import Decimal

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from product_grid.client.fragments import (
    extract_text,
    parse_row_fragment,
    parse_table_fragment,
)
from product_grid.infrastructure.dependencies import get_product_repository
from product_grid.infrastructure.store.in_memory_product_repository import (
    InMemoryProductRepository,
)
from product_grid.infrastructure.store.seed import seed_products
from product_grid.main import app


@pytest.fixture
def repo():
    """Fresh seeded store per test, swapped in for the process-wide one."""
    repository = InMemoryProductRepository(seed_products(50))
    app.dependency_overrides[get_product_repository] = lambda: repository
    yield repository
    app.dependency_overrides.clear()


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


# ── GET /api/v1/products ──


@pytest.mark.asyncio
async def test_table_fragment_for_third_page(repo):
    async with _client() as client:
        response = await client.get("/api/v1/products", params={"page": 3, "limit": 10})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    fragment = parse_table_fragment(response.text)
    assert [p.id for p in fragment.rows] == list(range(21, 31))
    assert fragment.page_info.has_prev is True
    assert fragment.page_info.has_next is True
    assert fragment.totals.count == 50


@pytest.mark.asyncio
async def test_page_size_is_clamped_to_maximum(repo):
    async with _client() as client:
        response = await client.get("/api/v1/products", params={"limit": 500})

    fragment = parse_table_fragment(response.text)
    assert fragment.page_info.limit == 100
    assert len(fragment.rows) == 50


@pytest.mark.asyncio
async def test_search_filters_rows_and_totals(repo):
    async with _client() as client:
        response = await client.get(
            "/api/v1/products",
            params={"searchField": "name", "searchTerm": "LAMP", "limit": 100},
        )

    fragment = parse_table_fragment(response.text)
    assert fragment.rows
    assert all("lamp" in p.name.lower() for p in fragment.rows)
    assert fragment.totals.count == fragment.page_info.total == len(fragment.rows)
    assert fragment.params.search_term == "LAMP"


@pytest.mark.asyncio
async def test_search_term_keeps_its_whitespace(repo):
    async with _client() as client:
        padded = await client.get(
            "/api/v1/products", params={"searchTerm": "#1 ", "limit": 100}
        )
        blank = await client.get("/api/v1/products", params={"searchTerm": "   "})

    fragment = parse_table_fragment(padded.text)
    assert fragment.rows == []
    assert fragment.params.search_term == "#1 "
    blank_fragment = parse_table_fragment(blank.text)
    assert blank_fragment.params.search_term == ""
    assert blank_fragment.page_info.total == 50


@pytest.mark.asyncio
async def test_sort_by_price_descending(repo):
    async with _client() as client:
        response = await client.get(
            "/api/v1/products", params={"sortBy": "price", "sortOrder": "desc", "limit": 50}
        )

    prices = [p.price for p in parse_table_fragment(response.text).rows]
    assert prices == sorted(prices, reverse=True)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [{"sortBy": "colour"}, {"sortOrder": "sideways"}, {"page": 0}, {"searchField": "weight"}],
)
async def test_invalid_view_parameters_are_rejected(repo, params):
    async with _client() as client:
        response = await client.get("/api/v1/products", params=params)
    assert response.status_code == 422


# ── PATCH /api/v1/products/{id}/{field} ──


@pytest.mark.asyncio
async def test_price_edit_returns_row_and_out_of_band_totals(repo):
    async with _client() as client:
        response = await client.patch("/api/v1/products/1/price", json={"value": "150.005"})

    assert response.status_code == 200
    assert 'hx-swap-oob="true"' in response.text
    fragment = parse_row_fragment(response.text)
    assert fragment.row.id == 1
    assert fragment.row.price == Decimal("150.01")
    assert fragment.totals is not None
    assert (await repo.get_by_id(1)).price == Decimal("150.01")


@pytest.mark.asyncio
async def test_edit_totals_follow_the_current_search(repo):
    async with _client() as client:
        response = await client.patch(
            "/api/v1/products/2/quantity",
            params={"searchField": "name", "searchTerm": "lamp"},
            json={"value": 3},
        )

    fragment = parse_row_fragment(response.text)
    lamps = [p for p in await repo.get_all() if "lamp" in p.name.lower()]
    assert fragment.totals.count == len(lamps)
    assert fragment.totals.total_quantity == sum(p.quantity for p in lamps)


@pytest.mark.asyncio
async def test_sentinel_price_returns_500_and_leaves_store_unchanged(repo):
    before = await repo.get_by_id(1)
    async with _client() as client:
        response = await client.patch("/api/v1/products/1/price", json={"value": "99.99"})

    assert response.status_code == 500
    assert extract_text(response.text) == "Internal server error"
    assert await repo.get_by_id(1) == before


@pytest.mark.asyncio
async def test_negative_quantity_returns_400(repo):
    async with _client() as client:
        response = await client.patch("/api/v1/products/1/quantity", json={"value": "-1"})

    assert response.status_code == 400
    assert "quantity cannot be negative" in extract_text(response.text)


@pytest.mark.asyncio
async def test_out_of_range_price_returns_400(repo):
    async with _client() as client:
        response = await client.patch("/api/v1/products/1/price", json={"value": "1e30"})

    assert response.status_code == 400
    assert "price is out of range" in extract_text(response.text)
    assert (await repo.get_by_id(1)).price != Decimal("1e30")


@pytest.mark.asyncio
async def test_edit_unknown_product_returns_404(repo):
    async with _client() as client:
        response = await client.patch("/api/v1/products/999/price", json={"value": "10"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_non_editable_field_is_rejected(repo):
    async with _client() as client:
        response = await client.patch("/api/v1/products/1/name", json={"value": "x"})
    assert response.status_code == 422


# ── DELETE /api/v1/products/{id} ──


@pytest.mark.asyncio
async def test_delete_returns_refreshed_table(repo):
    async with _client() as client:
        response = await client.delete("/api/v1/products/50", params={"page": 5, "limit": 10})
        again = await client.delete("/api/v1/products/50")

    fragment = parse_table_fragment(response.text)
    assert fragment.page_info.total == 49
    assert [p.id for p in fragment.rows] == list(range(41, 50))
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_delete_last_row_on_last_page_clamps_the_page(repo):
    async with _client() as client:
        response = await client.delete("/api/v1/products/11", params={"page": 2, "limit": 10, "searchTerm": "#11"})

    fragment = parse_table_fragment(response.text)
    assert fragment.params.page == 1
    assert fragment.page_info.total == 0
    assert fragment.rows == []


# ── Row, totals and page ──


@pytest.mark.asyncio
async def test_row_and_totals_fragments(repo):
    async with _client() as client:
        row = await client.get("/api/v1/products/7/row")
        missing = await client.get("/api/v1/products/999/row")
        totals = await client.get("/api/v1/products/totals", params={"page": 4})

    assert parse_row_fragment(row.text).row.id == 7
    assert missing.status_code == 404
    assert 'id="table-totals"' in totals.text
    assert 'data-count="50"' in totals.text


@pytest.mark.asyncio
async def test_full_page_shows_user_from_bearer_token(repo):
    token = jwt.encode({"username": "ada"}, "unverified-test-secret-0123456789abcdef", algorithm="HS256")
    async with _client() as client:
        signed_in = await client.get("/", headers={"Authorization": f"Bearer {token}"})
        anonymous = await client.get("/?page=2")

    assert "Signed in as ada" in signed_in.text
    assert "Signed in as Guest" in anonymous.text
    assert parse_table_fragment(anonymous.text).page_info.page == 2
