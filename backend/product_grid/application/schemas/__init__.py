from .product import FieldUpdate

__all__ = [
    "FieldUpdate",
]
