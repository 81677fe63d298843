"""Numeric parsing and formatting shared by the server and the client."""

import math
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from product_grid.domain.entities import EditableField, round_money
from product_grid.domain.exceptions import ProductValidationError


def parse_number(field: str, raw_value: object) -> Decimal:
    """Parse a raw edit into a finite Decimal or raise ``ProductValidationError``.

    Thousands separators and surrounding whitespace are ignored.
    """
    if isinstance(raw_value, bool):
        raise ProductValidationError(field, raw_value, "must be a number")
    if isinstance(raw_value, float):
        if not math.isfinite(raw_value):
            raise ProductValidationError(field, raw_value, "must be a number")
        raw_value = repr(raw_value)
    text = str(raw_value).strip().replace(",", "")
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise ProductValidationError(field, raw_value, "must be a number")
    if not number.is_finite():
        raise ProductValidationError(field, raw_value, "must be a number")
    return number


def normalize(field: EditableField, number: Decimal) -> Decimal | int:
    """Price to cents, quantity floored to a whole number.

    Raises ``ProductValidationError`` for magnitudes the decimal context
    cannot represent at that precision.
    """
    try:
        if field is EditableField.PRICE:
            return round_money(number)
        return int(number.to_integral_value(rounding=ROUND_FLOOR))
    except InvalidOperation:
        raise ProductValidationError(field.value, number, "is out of range")


def try_normalize(field: EditableField, raw_value: object) -> Decimal | int | None:
    """``normalize(parse_number(...))`` or None when the input is not a number."""
    try:
        return normalize(field, parse_number(field.value, raw_value))
    except ProductValidationError:
        return None


def format_currency(value: Decimal) -> str:
    return f"${value:,.2f}"


def format_value(field: EditableField, value: Decimal | int) -> str:
    if field is EditableField.PRICE:
        return format_currency(Decimal(value))
    return str(value)


def plain_value(field: EditableField, value: Decimal | int) -> str:
    """Unformatted text as it appears in an edit input."""
    if field is EditableField.PRICE:
        return f"{Decimal(value):.2f}"
    return str(value)
