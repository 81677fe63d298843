"""Domain entity — a single product row in the record store."""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any


class ProductField(str, Enum):
    """Stored product attributes that can be searched and sorted."""

    ID = "id"
    NAME = "name"
    PRICE = "price"
    QUANTITY = "quantity"
    CATEGORY = "category"
    DESCRIPTION = "description"


class EditableField(str, Enum):
    """Fields that accept inline edits."""

    PRICE = "price"
    QUANTITY = "quantity"


@dataclass(frozen=True)
class Product:
    """Core domain entity.

    Instances are never modified in place: an update produces a new instance
    via ``with_value`` and the store swaps it in, so a reader always holds a
    complete before- or after-image.
    """

    id: int
    name: str
    price: Decimal
    quantity: int
    category: str
    description: str | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def value_of(self, field: str) -> Any:
        if field == "subtotal":
            return self.subtotal
        return getattr(self, field)

    def with_value(self, field: EditableField, value: Decimal | int) -> "Product":
        return replace(self, **{field.value: value})
