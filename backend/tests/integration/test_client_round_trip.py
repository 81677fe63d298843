"""Client engine against the real application over ASGI."""

import asyncio
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from product_grid.client.api_client import TableApiClient
from product_grid.client.cell_machine import CellState
from product_grid.client.controller import TableController
from product_grid.client.synchronizer import ClientStateSynchronizer
from product_grid.client.view_model import CellKey
from product_grid.domain.entities import EditableField, QueryParams
from product_grid.infrastructure.dependencies import get_product_repository
from product_grid.infrastructure.store.in_memory_product_repository import (
    InMemoryProductRepository,
)
from product_grid.infrastructure.store.seed import seed_products
from product_grid.main import app
from tests.unit.fakes.table_surface import FakeTableSurface


@pytest.fixture
def repo():
    repository = InMemoryProductRepository(seed_products(50))
    app.dependency_overrides[get_product_repository] = lambda: repository
    yield repository
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_search_then_edit_then_failed_edit(repo):
    http_client = AsyncClient(transport=ASGITransport(app=app))
    api = TableApiClient(base_url="http://test", http_client=http_client)
    surface = FakeTableSurface()
    sync = ClientStateSynchronizer(api, surface, revert_delay=0.01, clear_delay=0.01)
    controller = TableController(
        api, surface, synchronizer=sync, debounce_delay=0.01, params=QueryParams()
    )

    for term in ("l", "la", "lam", "lamp"):
        controller.type_search("name", term)
    await asyncio.sleep(0.05)
    await controller.wait()
    assert list(sync.table.rows) == [1, 11, 21, 31, 41]

    sync.begin_edit(11, EditableField.QUANTITY)
    await sync.commit(11, EditableField.QUANTITY, "25")
    assert surface.cells[CellKey(11, EditableField.QUANTITY)] == ("25", False)
    assert (await repo.get_by_id(11)).quantity == 25

    original = (await repo.get_by_id(21)).price
    sync.begin_edit(21, EditableField.PRICE)
    await sync.commit(21, EditableField.PRICE, "99.99")
    await sync.wait_idle()

    assert sync.state_of(21, EditableField.PRICE) is CellState.VIEWING
    assert sync.table.row(21).authoritative.price == original
    assert surface.cells[CellKey(21, EditableField.PRICE)] == (f"${original:,.2f}", False)
    assert (await repo.get_by_id(21)).price != Decimal("99.99")

    await controller.aclose()
    await http_client.aclose()
