"""Application service (use case) for single-field writes and deletions."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from product_grid.application.interfaces import ProductRepository
from product_grid.domain.entities import EditableField, Product
from product_grid.domain.exceptions import (
    EntityNotFoundError,
    ProductValidationError,
    SimulatedServerError,
)
from product_grid.domain.numbers import normalize, parse_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldRules:
    """Closed bounds for editable fields plus the reserved failure sentinel."""

    min_price: Decimal = Decimal("0")
    max_price: Decimal = Decimal("999999.99")
    max_quantity: int = 999999
    simulated_failure_price: Decimal = Decimal("99.99")


class ProductMutationService:
    """Validates and applies writes against the record store."""

    def __init__(self, repository: ProductRepository, rules: FieldRules | None = None):
        self._repository = repository
        self._rules = rules or FieldRules()

    def validate(self, field: EditableField, raw_value: object) -> Decimal | int:
        """Return the normalised value for ``field`` or raise.

        Numeric validation runs first; the failure sentinel is only checked
        once the value is otherwise acceptable.
        """
        number = parse_number(field.value, raw_value)
        rules = self._rules

        if field is EditableField.PRICE:
            price = normalize(field, number)
            if price < rules.min_price:
                raise ProductValidationError(
                    field.value, raw_value, f"must be at least {rules.min_price}"
                )
            if price > rules.max_price:
                raise ProductValidationError(
                    field.value, raw_value, f"must be at most {rules.max_price}"
                )
            if price == rules.simulated_failure_price:
                raise SimulatedServerError(field.value, price)
            return price

        if number < 0:
            raise ProductValidationError(field.value, raw_value, "cannot be negative")
        quantity = normalize(field, number)
        if quantity > rules.max_quantity:
            raise ProductValidationError(
                field.value, raw_value, f"must be at most {rules.max_quantity}"
            )
        return quantity

    async def update_field(
        self, product_id: int, field: EditableField, raw_value: object
    ) -> Product:
        product = await self._repository.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError("Product", product_id)

        try:
            value = self.validate(field, raw_value)
        except (ProductValidationError, SimulatedServerError) as exc:
            logger.info("Rejected %s update on product %d: %s", field.value, product_id, exc)
            raise

        updated = await self._repository.update(product.with_value(field, value))
        logger.info("Product %d %s set to %s", product_id, field.value, value)
        return updated

    async def delete_product(self, product_id: int) -> None:
        deleted = await self._repository.delete(product_id)
        if not deleted:
            raise EntityNotFoundError("Product", product_id)
        logger.info("Product %d deleted", product_id)
