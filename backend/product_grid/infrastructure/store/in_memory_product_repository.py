"""In-memory record store — the authoritative product collection."""

import logging
import threading
from collections.abc import Iterable

from product_grid.application.interfaces import ProductRepository
from product_grid.domain.entities import Product

logger = logging.getLogger(__name__)


class InMemoryProductRepository(ProductRepository):
    """Dict-backed store keyed by id, insertion-ordered.

    A single lock guards every read and write. Products are immutable, so
    a snapshot returned by ``get_all`` can never show a half-applied update.
    """

    def __init__(self, products: Iterable[Product] = ()):
        self._lock = threading.RLock()
        self._products: dict[int, Product] = {}
        for product in products:
            if product.id in self._products:
                raise ValueError(f"Duplicate product id {product.id}")
            self._products[product.id] = product
        logger.info("Record store initialised with %d products", len(self._products))

    async def get_by_id(self, product_id: int) -> Product | None:
        with self._lock:
            return self._products.get(product_id)

    async def get_all(self) -> list[Product]:
        with self._lock:
            return list(self._products.values())

    async def update(self, product: Product) -> Product:
        with self._lock:
            if product.id not in self._products:
                raise ValueError(f"Product {product.id} not found")
            self._products[product.id] = product
        return product

    async def delete(self, product_id: int) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)
