"""Recording TableSurface used by the client engine tests."""

from product_grid.client.fragments import parse_table_fragment
from product_grid.client.surface import TableSurface
from product_grid.client.view_model import CellKey


class FakeTableSurface(TableSurface):
    """Keeps the last value drawn into every slot plus an ordered event log."""

    def __init__(self):
        self.cells: dict[CellKey, tuple[str, bool]] = {}
        self.subtotals: dict[int, str] = {}
        self.totals: dict[str, str] = {}
        self.editors: dict[CellKey, str] = {}
        self.errors: dict[CellKey, str] = {}
        self.tables: list[str] = []
        self.table_errors: list[str] = []
        self.inputs: dict[str, str] = {}
        self.focused_input: tuple[str, int] | None = None
        self.focused_displays: list[CellKey] = []
        self.events: list[tuple] = []

    def replace_table(self, html: str) -> None:
        self.tables.append(html)
        self.inputs = dict(parse_table_fragment(html).search_inputs)
        self.focused_input = None
        self.events.append(("table",))

    def show_table_error(self, message: str) -> None:
        self.table_errors.append(message)
        self.events.append(("table-error", message))

    def input_value(self, field: str) -> str | None:
        return self.inputs.get(field)

    def focus_input(self, field: str, caret: int) -> None:
        self.focused_input = (field, caret)

    def render_cell(self, key: CellKey, text: str, *, speculative: bool) -> None:
        self.cells[key] = (text, speculative)
        self.events.append(("cell", str(key), text, speculative))

    def render_subtotal(self, row_id: int, text: str) -> None:
        self.subtotals[row_id] = text

    def render_totals(self, totals: dict[str, str]) -> None:
        self.totals = dict(totals)

    def open_editor(self, key: CellKey, text: str) -> None:
        self.editors[key] = text
        self.events.append(("editor", str(key), text))

    def close_editor(self, key: CellKey) -> None:
        self.editors.pop(key, None)

    def show_error(self, key: CellKey, message: str) -> None:
        self.errors[key] = message
        self.events.append(("error", str(key), message))

    def clear_error(self, key: CellKey) -> None:
        self.errors.pop(key, None)
        self.events.append(("clear-error", str(key)))

    def focus_display(self, key: CellKey) -> None:
        self.focused_displays.append(key)

    def cell_events(self, key: str) -> list[tuple]:
        return [e for e in self.events if len(e) > 1 and e[1] == key]
