"""Abstract repository interface (port) for Product persistence."""

from abc import ABC, abstractmethod

from product_grid.domain.entities import Product


class ProductRepository(ABC):
    """Port for the record store — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, product_id: int) -> Product | None:
        """Retrieve a single product by id."""
        ...

    @abstractmethod
    async def get_all(self) -> list[Product]:
        """Return a consistent snapshot of every product."""
        ...

    @abstractmethod
    async def update(self, product: Product) -> Product:
        """Replace the stored product that has the same id."""
        ...

    @abstractmethod
    async def delete(self, product_id: int) -> bool:
        """Delete a product. Returns True if deleted, False if not found."""
        ...
