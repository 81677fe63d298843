"""Client state synchronizer — keeps the displayed table in step with the server.

Owns the table view-model and a registry of editable cells keyed by
``CellKey``. Edits are written through the table API client with the
current view parameters so that the returned totals describe the same
filtered set the user is looking at.
"""

import asyncio
import logging

from product_grid.client.api_client import TableApiClient
from product_grid.client.cell_machine import CellState, EditableCell
from product_grid.client.fragments import RowFragment, TableFragment, parse_row_fragment
from product_grid.client.surface import TableSurface
from product_grid.client.view_model import CellKey, TableViewModel
from product_grid.config import get_settings
from product_grid.domain.entities import EditableField, QueryParams
from product_grid.domain.numbers import format_currency
from product_grid.infrastructure.logging.colored_logger import TransitionLogger

logger = logging.getLogger(__name__)


class ClientStateSynchronizer:
    def __init__(
        self,
        api: TableApiClient,
        surface: TableSurface,
        *,
        revert_delay: float | None = None,
        clear_delay: float | None = None,
        transitions: TransitionLogger | None = None,
    ):
        settings = get_settings()
        self._api = api
        self._surface = surface
        self._revert_delay = (
            settings.error_revert_delay if revert_delay is None else revert_delay
        )
        self._clear_delay = settings.error_clear_delay if clear_delay is None else clear_delay
        self._log = transitions or TransitionLogger()

        self.table = TableViewModel()
        self.params = QueryParams()
        self._cells: dict[CellKey, EditableCell] = {}

    # ── Table loads ──

    def load_table(self, fragment: TableFragment) -> None:
        """Adopt a freshly inserted table fragment.

        Cells of rows that left the page are disposed; cells of rows that
        stayed keep their state and pending writes.
        """
        self.params = fragment.params
        removed = self.table.load(fragment)
        for key in [k for k in self._cells if k.row_id in removed]:
            self._cells.pop(key).dispose()
        if removed:
            logger.debug("Dropped cells for rows %s", sorted(removed))
        for row_id in self.table.rows:
            self._redraw_row(row_id)
        self._render_totals()

    # ── Cells ──

    def cell(self, row_id: int, field: EditableField | str) -> EditableCell:
        """Return the cell for (row, field), creating it on first use."""
        key = CellKey(row_id, EditableField(field))
        cell = self._cells.get(key)
        if cell is None:
            if self.table.row(row_id) is None:
                raise KeyError(f"row {row_id} is not on the current page")
            cell = EditableCell(
                key,
                self.table,
                dispatch=self._dispatch,
                surface=self._surface,
                redraw=self._redraw,
                revert_delay=self._revert_delay,
                clear_delay=self._clear_delay,
                transitions=self._log,
            )
            self._cells[key] = cell
        return cell

    def begin_edit(self, row_id: int, field: EditableField | str) -> None:
        self.cell(row_id, field).begin_edit()

    def commit(self, row_id: int, field: EditableField | str, raw_value: str) -> asyncio.Task | None:
        return self.cell(row_id, field).commit(raw_value)

    def cancel(self, row_id: int, field: EditableField | str) -> None:
        self.cell(row_id, field).cancel()

    def state_of(self, row_id: int, field: EditableField | str) -> CellState:
        key = CellKey(row_id, EditableField(field))
        cell = self._cells.get(key)
        return cell.state if cell is not None else CellState.VIEWING

    async def wait_idle(self) -> None:
        for cell in list(self._cells.values()):
            await cell.wait_idle()

    async def aclose(self) -> None:
        cells = list(self._cells.values())
        self._cells.clear()
        for cell in cells:
            cell.dispose()

    # ── Internals ──

    async def _dispatch(self, key: CellKey, raw_value: str) -> RowFragment:
        html = await self._api.update_field(key.row_id, key.field, raw_value, self.params)
        return parse_row_fragment(html)

    def _redraw(self, row_id: int) -> None:
        self._redraw_row(row_id)
        self._render_totals()

    def _redraw_row(self, row_id: int) -> None:
        row = self.table.row(row_id)
        if row is None:
            return
        self._surface.render_subtotal(row_id, format_currency(row.display_subtotal()))
        for field in EditableField:
            cell = self._cells.get(CellKey(row_id, field))
            if cell is not None:
                cell.render()
            else:
                self._surface.render_cell(
                    CellKey(row_id, field), row.display_text(field), speculative=False
                )

    def _render_totals(self) -> None:
        self._surface.render_totals(self.table.totals_text())
