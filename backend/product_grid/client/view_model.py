"""Client view-model — authoritative rows overlaid with pending edits.

The server's rows and totals are kept exactly as last received. Speculative
values live in per-cell overlays on top of them, so discarding a failed edit
never has to reconstruct anything: the overlay is dropped and the
authoritative value shows through again.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from product_grid.client.fragments import TableFragment
from product_grid.domain.entities import (
    AggregateTotals,
    EditableField,
    PageInfo,
    Product,
    round_money,
)
from product_grid.domain.numbers import format_currency, format_value, plain_value, try_normalize


@dataclass(frozen=True)
class CellKey:
    row_id: int
    field: EditableField

    def __str__(self) -> str:
        return f"row-{self.row_id}/{self.field.value}"


class EditStatus(str, Enum):
    EDITING = "editing"
    PENDING = "pending"
    REVERTING = "reverting"


@dataclass
class PendingEdit:
    """A speculative value for one cell, awaiting the server's answer."""

    row_id: int
    field: EditableField
    original_value: Decimal | int
    candidate_value: str
    status: EditStatus = EditStatus.PENDING


@dataclass
class RowViewModel:
    authoritative: Product
    overlays: dict[EditableField, PendingEdit] = field(default_factory=dict)

    def numeric(self, field: EditableField) -> Decimal | int:
        """Displayed numeric value; an unparsable candidate falls back to the server's."""
        overlay = self.overlays.get(field)
        if overlay is not None:
            value = try_normalize(field, overlay.candidate_value)
            if value is not None:
                return value
        return self.authoritative.value_of(field.value)

    def display_text(self, field: EditableField) -> str:
        return format_value(field, self.numeric(field))

    def edit_text(self, field: EditableField) -> str:
        return plain_value(field, self.numeric(field))

    def display_subtotal(self) -> Decimal:
        price = self.numeric(EditableField.PRICE)
        quantity = self.numeric(EditableField.QUANTITY)
        return round_money(Decimal(price) * quantity)

    def is_unchanged(self, field: EditableField, raw_value: str) -> bool:
        """True when ``raw_value`` normalises to what the cell already shows."""
        value = try_normalize(field, raw_value)
        return value is not None and value == self.numeric(field)


class TableViewModel:
    """Rows of the current page plus the server's totals and paging."""

    def __init__(self) -> None:
        self.rows: dict[int, RowViewModel] = {}
        self.base_totals = AggregateTotals()
        self.page_info: PageInfo | None = None

    def load(self, fragment: TableFragment) -> set[int]:
        """Replace the page from a table fragment.

        Overlays survive for rows that are still on the page. Returns the
        ids of rows that dropped out.
        """
        previous = self.rows
        rows: dict[int, RowViewModel] = {}
        for product in fragment.rows:
            kept = previous.get(product.id)
            overlays = kept.overlays if kept is not None else {}
            rows[product.id] = RowViewModel(product, overlays)
        self.rows = rows
        self.base_totals = fragment.totals
        self.page_info = fragment.page_info
        return set(previous) - set(rows)

    def row(self, row_id: int) -> RowViewModel | None:
        return self.rows.get(row_id)

    def apply_row(self, product: Product) -> None:
        """Install a fresh authoritative row, keeping its overlays."""
        current = self.rows.get(product.id)
        if current is None:
            return
        current.authoritative = product

    def set_totals(self, totals: AggregateTotals) -> None:
        self.base_totals = totals

    def displayed_totals(self) -> AggregateTotals:
        """Server totals adjusted by every live overlay, recomputed from scratch."""
        base = self.base_totals
        quantity_delta = 0
        price_delta = Decimal("0")
        grand_delta = Decimal("0")
        for row in self.rows.values():
            if not row.overlays:
                continue
            product = row.authoritative
            shown_price = Decimal(row.numeric(EditableField.PRICE))
            shown_quantity = int(row.numeric(EditableField.QUANTITY))
            quantity_delta += shown_quantity - product.quantity
            price_delta += shown_price - product.price
            grand_delta += shown_price * shown_quantity - product.subtotal

        total_price = base.total_price + price_delta
        average = total_price / base.count if base.count else Decimal("0")
        return AggregateTotals(
            total_quantity=base.total_quantity + quantity_delta,
            total_price=round_money(total_price),
            grand_total=round_money(base.grand_total + grand_delta),
            average_price=round_money(average),
            count=base.count,
        )

    def totals_text(self) -> dict[str, str]:
        totals = self.displayed_totals()
        return {
            "total_quantity": str(totals.total_quantity),
            "total_price": format_currency(totals.total_price),
            "grand_total": format_currency(totals.grand_total),
            "average_price": format_currency(totals.average_price),
            "count": str(totals.count),
        }
