"""Unit tests for the in-memory record store and its seed data."""

from decimal import Decimal

import pytest

from product_grid.domain.entities import EditableField, Product
from product_grid.infrastructure.store.in_memory_product_repository import (
    InMemoryProductRepository,
)
from product_grid.infrastructure.store.seed import PRODUCT_LINES, seed_products


class TestSeedProducts:
    def test_seed_is_deterministic(self):
        assert seed_products(50, seed=7) == seed_products(50, seed=7)

    def test_ids_are_one_based_and_contiguous(self):
        products = seed_products(50)
        assert [p.id for p in products] == list(range(1, 51))

    def test_values_fall_within_seed_ranges(self):
        for product in seed_products(50):
            assert Decimal("50") <= product.price < Decimal("1000")
            assert product.price == product.price.quantize(Decimal("0.01"))
            assert 1 <= product.quantity <= 20
            assert product.category in {category for _, category in PRODUCT_LINES}

    def test_every_third_product_has_no_description(self):
        products = seed_products(12)
        assert [p.id for p in products if p.description is None] == [3, 6, 9, 12]


class TestInMemoryProductRepository:
    @pytest.fixture
    def repo(self) -> InMemoryProductRepository:
        return InMemoryProductRepository(seed_products(5))

    @pytest.mark.asyncio
    async def test_get_all_returns_a_snapshot(self, repo):
        snapshot = await repo.get_all()
        await repo.delete(1)
        assert len(snapshot) == 5
        assert len(await repo.get_all()) == 4

    @pytest.mark.asyncio
    async def test_update_swaps_in_a_new_instance(self, repo):
        before = await repo.get_by_id(2)
        after = await repo.update(before.with_value(EditableField.PRICE, Decimal("1.50")))
        assert (await repo.get_by_id(2)).price == Decimal("1.50")
        assert before.price != after.price

    @pytest.mark.asyncio
    async def test_update_unknown_product_raises(self, repo):
        ghost = Product(id=99, name="Ghost", price=Decimal("1.00"), quantity=1, category="None")
        with pytest.raises(ValueError):
            await repo.update(ghost)

    @pytest.mark.asyncio
    async def test_delete_reports_whether_anything_was_removed(self, repo):
        assert await repo.delete(3) is True
        assert await repo.delete(3) is False
        assert await repo.get_by_id(3) is None
        assert len(repo) == 4

    def test_duplicate_ids_are_rejected(self):
        product = seed_products(1)[0]
        with pytest.raises(ValueError):
            InMemoryProductRepository([product, product])
