from .product_repository import ProductRepository
from .table_renderer import TableRenderer

__all__ = [
    "ProductRepository",
    "TableRenderer",
]
